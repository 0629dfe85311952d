"""stashctl - A CLI and library for uploading build artifacts.

This package uploads build artifacts to a Buildstash-style artifact service:
- Request an upload plan with presigned storage destinations
- Transfer files directly or in fixed-size chunked parts
- Verify the pending upload and report the stored build
"""

__version__ = "0.1.0"

from stashctl.core.client import StashClient
from stashctl.core.config import Config, Profile
from stashctl.core.exceptions import (
    ApiError,
    ConfigurationError,
    IntegrityError,
    ProtocolError,
    StashCtlError,
    StorageTransferError,
    TransportError,
    ValidationError,
)
from stashctl.models.metadata import UploadMetadata
from stashctl.services.uploads import UploadService

__all__ = [
    "__version__",
    "StashClient",
    "Config",
    "Profile",
    "UploadMetadata",
    "UploadService",
    "StashCtlError",
    "ApiError",
    "ConfigurationError",
    "IntegrityError",
    "ProtocolError",
    "StorageTransferError",
    "TransportError",
    "ValidationError",
]
