"""Shared constants for the upload protocol.

API paths are relative to the profile's base URL.
"""

from stashctl.models.plan import FileRole

# =============================================================================
# API Endpoints
# =============================================================================

UPLOAD_REQUEST_PATH = "/upload/request"
MULTIPART_REQUEST_PATH = "/upload/request/multipart"
MULTIPART_EXPANSION_REQUEST_PATH = "/upload/request/multipart/expansion"
UPLOAD_VERIFY_PATH = "/upload/verify"

# Expansion-file parts are tracked separately from primary-file parts
PART_ENDPOINTS = {
    FileRole.PRIMARY: MULTIPART_REQUEST_PATH,
    FileRole.EXPANSION: MULTIPART_EXPANSION_REQUEST_PATH,
}

# =============================================================================
# Transfer Defaults
# =============================================================================

# Content type of every chunked part PUT
PART_CONTENT_TYPE = "application/octet-stream"

# Block size when streaming a byte range; bounds memory per part transfer
DEFAULT_READ_SIZE = 64 * 1024


def part_endpoint_for(role: FileRole) -> str:
    """Multipart ticket endpoint for the given file role."""
    return PART_ENDPOINTS[FileRole(role)]
