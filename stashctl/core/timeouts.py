"""Default timeouts shared across stashctl."""

# Connect/read timeout for artifact-service API calls
DEFAULT_HTTP_TIMEOUT_SECONDS = 30

# Read timeout for presigned storage PUTs (large parts on slow links)
DEFAULT_TRANSFER_TIMEOUT_SECONDS = 600
