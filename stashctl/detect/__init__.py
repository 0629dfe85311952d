"""Best-effort detection of CI and version-control metadata."""

from stashctl.detect.ci import CiInfo, detect_ci, format_build_duration, populate_ci
from stashctl.detect.vcs import (
    detect_host_from_url,
    detect_repository,
    extract_repo_name_from_url,
    generate_commit_url,
    populate_version_control,
)

__all__ = [
    "CiInfo",
    "detect_ci",
    "format_build_duration",
    "populate_ci",
    "detect_host_from_url",
    "detect_repository",
    "extract_repo_name_from_url",
    "generate_commit_url",
    "populate_version_control",
]
