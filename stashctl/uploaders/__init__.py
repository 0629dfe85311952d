"""Upload transports for stashctl.

This package provides the byte-level side of an upload:
- Byte range reading with exact-length guarantees
- Presigned direct and chunked file transfers

These are internal implementation details. Use `UploadService` from
`stashctl.services.uploads` as the public API.
"""

from stashctl.uploaders.constants import (
    DEFAULT_READ_SIZE,
    MULTIPART_EXPANSION_REQUEST_PATH,
    MULTIPART_REQUEST_PATH,
    PART_CONTENT_TYPE,
    UPLOAD_REQUEST_PATH,
    UPLOAD_VERIFY_PATH,
    part_endpoint_for,
)
from stashctl.uploaders.presigned import FileTransferExecutor
from stashctl.uploaders.ranges import (
    ByteRange,
    ByteRangeStream,
    compute_part_ranges,
    expected_part_count,
    open_range,
    read_whole_file,
)

__all__ = [
    # Constants
    "DEFAULT_READ_SIZE",
    "MULTIPART_EXPANSION_REQUEST_PATH",
    "MULTIPART_REQUEST_PATH",
    "PART_CONTENT_TYPE",
    "UPLOAD_REQUEST_PATH",
    "UPLOAD_VERIFY_PATH",
    "part_endpoint_for",
    # Byte ranges
    "ByteRange",
    "ByteRangeStream",
    "compute_part_ranges",
    "expected_part_count",
    "open_range",
    "read_whole_file",
    # Transfers
    "FileTransferExecutor",
]
