"""HTTP client for the artifact-service API and presigned storage URLs.

This is the only module that performs network I/O. It never interprets
status codes and never retries: callers decide what a response means.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import h11
import httpx

from stashctl.core.exceptions import TransportError, TransportTimeoutError
from stashctl.core.logging import get_logger
from stashctl.core.timeouts import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_TRANSFER_TIMEOUT_SECONDS,
)
from stashctl.core.validation import validate_server_url

logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

JSON_CONTENT_TYPE = "application/json"
OCTET_STREAM_CONTENT_TYPE = "application/octet-stream"
USER_AGENT = "stashctl"

RequestBody = bytes | Iterable[bytes]


# =============================================================================
# TransportResponse
# =============================================================================


@dataclass(frozen=True)
class TransportResponse:
    """Status, headers and body of a completed HTTP exchange."""

    status_code: int
    headers: Mapping[str, str]
    body: str
    url: str = ""

    @property
    def content_type(self) -> str:
        """Declared content type, or "unknown" when the server sent none."""
        return self.headers.get("content-type", "unknown")

    @property
    def is_json(self) -> bool:
        return "json" in self.content_type.lower()

    @property
    def ok(self) -> bool:
        """True only for HTTP 200, the sole success status of the protocol."""
        return self.status_code == 200


# =============================================================================
# StashClient
# =============================================================================


@dataclass
class StashClient:
    """HTTP client shared by every phase of an upload.

    Safe to share between concurrent uploads: the underlying ``httpx.Client``
    is thread-safe and holds no per-call state.
    """

    base_url: str
    api_key: str | None = None
    timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS
    transfer_timeout: int = DEFAULT_TRANSFER_TIMEOUT_SECONDS
    verify_ssl: bool = True
    transport: httpx.BaseTransport | None = field(default=None, repr=False)
    _client: httpx.Client | None = field(init=False, default=None, repr=False)
    _lock: threading.Lock = field(init=False, default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        """Validate and normalize URL."""
        self.base_url = validate_server_url(self.base_url)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        with self._lock:
            if self._client is None:
                self._client = httpx.Client(
                    timeout=self.timeout,
                    verify=self.verify_ssl,
                    follow_redirects=True,
                    headers={"User-Agent": USER_AGENT},
                    transport=self.transport,
                )
            return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def __enter__(self) -> StashClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def url_for(self, path: str) -> str:
        """Resolve an API path against the base URL; absolute URLs pass through."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        json: Any | None = None,
        content: RequestBody | None = None,
        timeout: float | None = None,
    ) -> TransportResponse:
        """Execute one HTTP request.

        Args:
            method: HTTP method.
            url: Absolute URL or API path.
            headers: Request headers, sent exactly as given.
            json: JSON body.
            content: Raw body, either bytes or an iterator of byte blocks.
            timeout: Timeout override in seconds.

        Returns:
            TransportResponse with status, headers and decoded body.

        Raises:
            TransportTimeoutError: If the request timed out.
            TransportError: On connection, redirect or malformed-response failures.
        """
        full_url = self.url_for(url)
        request_timeout = timeout or self.timeout
        client = self._get_client()

        logger.debug("%s %s", method, _redact(full_url))
        try:
            resp = client.request(
                method,
                full_url,
                headers=dict(headers) if headers else None,
                json=json,
                content=content,
                timeout=request_timeout,
            )
            body = resp.text
        except httpx.TimeoutException as e:
            raise TransportTimeoutError(_redact(full_url), request_timeout) from e
        except (httpx.HTTPError, httpx.StreamError, h11.ProtocolError) as e:
            # h11 raises directly when a body disagrees with its Content-Length
            raise TransportError(_redact(full_url), f"{type(e).__name__}: {e}") from e

        logger.debug("%s %s -> HTTP %d", method, _redact(full_url), resp.status_code)
        return TransportResponse(
            status_code=resp.status_code,
            headers=resp.headers,
            body=body,
            url=full_url,
        )

    def post_json(self, path: str, payload: Mapping[str, Any]) -> TransportResponse:
        """POST a JSON body to the API with bearer-token authorization."""
        headers = {
            "Content-Type": JSON_CONTENT_TYPE,
            "Accept": JSON_CONTENT_TYPE,
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return self.send("POST", path, headers=headers, json=dict(payload))

    def put(
        self,
        url: str,
        content: RequestBody,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        """PUT a raw body to a presigned URL without API credentials."""
        return self.send(
            "PUT",
            url,
            headers=headers,
            content=content,
            timeout=self.transfer_timeout,
        )


def _redact(url: str) -> str:
    """Drop the query string, which carries presigned credentials."""
    return url.split("?", 1)[0]
