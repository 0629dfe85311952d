"""Exception hierarchy for stashctl.

Provides typed exceptions for each failure mode of an upload with the
status, body and file details an operator needs to diagnose it.
"""

from __future__ import annotations

from typing import Any


class StashCtlError(Exception):
    """Base exception for all stashctl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(StashCtlError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """Requested profile does not exist."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(StashCtlError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class MissingFieldError(ValidationError):
    """A required upload field is absent or blank."""

    def __init__(self, field: str, label: str | None = None):
        super().__init__(f"{label or field} is required", field=field)


class InvalidURLError(ValidationError):
    """Invalid URL format."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(StashCtlError):
    """Network-level failure (DNS, TCP, TLS, redirects, malformed HTTP)."""

    def __init__(self, url: str, cause: str | None = None):
        msg = f"Transport error calling {url}"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg, {"url": url})
        self.url = url
        self.cause = cause


class TransportTimeoutError(TransportError):
    """Request timed out."""

    def __init__(self, url: str, timeout: float | None):
        super().__init__(url, f"timed out after {timeout}s")
        self.timeout = timeout


# =============================================================================
# API Errors
# =============================================================================


class ApiError(StashCtlError):
    """Base class for artifact-service API response errors."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        full_details: dict[str, Any] = {}
        if endpoint:
            full_details["endpoint"] = endpoint
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.endpoint = endpoint


class ProtocolError(ApiError):
    """The artifact-service API answered with a non-200 status."""

    def __init__(self, operation: str, status_code: int, body: str, endpoint: str | None = None):
        super().__init__(
            f"Failed to {operation}: {status_code} - {body}",
            endpoint,
            {"status_code": status_code},
        )
        self.operation = operation
        self.status_code = status_code
        self.body = body


class UnexpectedContentTypeError(ApiError):
    """The artifact-service API returned something other than JSON.

    Almost always an HTML login or proxy page: bad API key or wrong base URL.
    """

    def __init__(self, content_type: str, status_code: int, body: str, endpoint: str | None = None):
        super().__init__(
            "Server returned a non-JSON response. This usually indicates an "
            "authentication error or an incorrect API URL. "
            f"Response content-type: {content_type}",
            endpoint,
            {"status_code": status_code},
        )
        self.content_type = content_type
        self.status_code = status_code
        self.body = body


class MalformedResponseError(ApiError):
    """JSON response could not be parsed into the expected shape."""

    def __init__(self, reason: str, endpoint: str | None = None):
        super().__init__(f"Failed to parse JSON response: {reason}", endpoint)
        self.reason = reason


# =============================================================================
# Transfer Errors
# =============================================================================


class IntegrityError(StashCtlError):
    """Local file bytes do not match what the transfer requires."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        expected: int | None = None,
        actual: int | None = None,
    ):
        details: dict[str, Any] = {}
        if file_path:
            details["file"] = file_path
        if expected is not None:
            details["expected"] = expected
        if actual is not None:
            details["actual"] = actual
        super().__init__(message, details)
        self.file_path = file_path
        self.expected = expected
        self.actual = actual


class StorageTransferError(StashCtlError):
    """A presigned storage PUT answered with a non-200 status."""

    def __init__(
        self,
        status_code: int,
        body: str,
        *,
        role: str,
        part_number: int | None = None,
    ):
        if part_number is None:
            msg = f"Failed to upload {role} file: {status_code} - {body}"
        else:
            msg = f"Failed to upload {role} file part {part_number}: {status_code} - {body}"
        details: dict[str, Any] = {"status_code": status_code, "role": role}
        if part_number is not None:
            details["part_number"] = part_number
        super().__init__(msg, details)
        self.status_code = status_code
        self.body = body
        self.role = role
        self.part_number = part_number
