"""Core modules for stashctl."""

from stashctl.core.client import StashClient, TransportResponse
from stashctl.core.config import CONFIG_DIR, CONFIG_FILE, Config, Profile, get_api_key
from stashctl.core.exceptions import (
    ApiError,
    ConfigurationError,
    IntegrityError,
    InvalidURLError,
    MalformedResponseError,
    MissingFieldError,
    ProfileNotFoundError,
    ProtocolError,
    StashCtlError,
    StorageTransferError,
    TransportError,
    TransportTimeoutError,
    UnexpectedContentTypeError,
    ValidationError,
)
from stashctl.core.logging import LogContext, get_logger, setup_logging
from stashctl.core.output import (
    OutputFormat,
    console,
    print_error,
    print_json,
    print_output,
    print_success,
    print_warning,
)
from stashctl.core.validation import (
    parse_list,
    require_text,
    validate_server_url,
    validate_timeout,
)

__all__ = [
    # Exceptions
    "StashCtlError",
    "ConfigurationError",
    "ProfileNotFoundError",
    "ValidationError",
    "MissingFieldError",
    "InvalidURLError",
    "TransportError",
    "TransportTimeoutError",
    "ApiError",
    "ProtocolError",
    "UnexpectedContentTypeError",
    "MalformedResponseError",
    "IntegrityError",
    "StorageTransferError",
    # Validation
    "validate_server_url",
    "validate_timeout",
    "require_text",
    "parse_list",
    # Config
    "Config",
    "Profile",
    "CONFIG_DIR",
    "CONFIG_FILE",
    "get_api_key",
    # Client
    "StashClient",
    "TransportResponse",
    # Output
    "OutputFormat",
    "print_output",
    "print_json",
    "print_error",
    "print_warning",
    "print_success",
    "console",
    # Logging
    "get_logger",
    "setup_logging",
    "LogContext",
]
