"""Input validation helpers for stashctl."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlparse

from stashctl.core.exceptions import (
    ConfigurationError,
    InvalidURLError,
    MissingFieldError,
)
from stashctl.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS

# Separators accepted for list-valued options (labels, architectures)
LIST_SEPARATOR_PATTERN = re.compile(r"[,\r\n]+")

# =============================================================================
# URL Validation
# =============================================================================


def validate_server_url(url: str) -> str:
    """Validate and normalize an API base URL.

    Args:
        url: URL to validate.

    Returns:
        URL without surrounding whitespace or trailing slashes.

    Raises:
        InvalidURLError: If the URL is empty or not http(s) with a hostname.
    """
    if not url or not isinstance(url, str):
        raise InvalidURLError(str(url), "URL is required")

    url = url.strip().rstrip("/")
    parsed = urlparse(url)

    if not parsed.scheme:
        raise InvalidURLError(url, "URL must include scheme (http:// or https://)")
    if parsed.scheme not in ("http", "https"):
        raise InvalidURLError(url, f"Unsupported scheme: {parsed.scheme}")
    if not parsed.netloc:
        raise InvalidURLError(url, "URL must include hostname")

    return url


def validate_timeout(value: Any, default: int = DEFAULT_HTTP_TIMEOUT_SECONDS) -> int:
    """Validate a timeout in seconds.

    Raises:
        ConfigurationError: If the value is not an integer >= 1.
    """
    if value is None:
        return default
    try:
        timeout = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"Timeout must be a valid integer: {value}", field="timeout", value=value
        )
    if timeout < 1:
        raise ConfigurationError("Timeout must be at least 1 second", field="timeout", value=value)
    return timeout


# =============================================================================
# Field Validation
# =============================================================================


def is_blank(value: str | None) -> bool:
    """Return True for None, empty or whitespace-only strings."""
    return value is None or not value.strip()


def require_text(value: str | None, field: str, label: str | None = None) -> str:
    """Return value if it is non-blank.

    Raises:
        MissingFieldError: If the value is absent or blank.
    """
    if is_blank(value):
        raise MissingFieldError(field, label)
    return value  # type: ignore[return-value]


def parse_list(value: str | None) -> list[str] | None:
    """Split a comma- or newline-separated option into trimmed items.

    Returns None when nothing remains, so absent lists stay absent.
    """
    if is_blank(value):
        return None
    items = [item.strip() for item in LIST_SEPARATOR_PATTERN.split(value or "")]
    items = [item for item in items if item]
    return items or None
