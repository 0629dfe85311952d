"""Pydantic models for stashctl requests, plans and results."""

from stashctl.models.artifact import ArtifactRecord, BuildInfo, PlatformInfo
from stashctl.models.base import BaseModel
from stashctl.models.metadata import DEFAULT_STRUCTURE, UploadMetadata
from stashctl.models.plan import (
    BYTES_PER_MB,
    FileRole,
    FileTransferPlan,
    FinishedPartReceipt,
    PartTransferTicket,
    PresignedData,
    UploadPlan,
)
from stashctl.models.progress import UploadEvent, UploadPhase

__all__ = [
    "BaseModel",
    # Request
    "DEFAULT_STRUCTURE",
    "UploadMetadata",
    # Plan
    "BYTES_PER_MB",
    "FileRole",
    "FileTransferPlan",
    "FinishedPartReceipt",
    "PartTransferTicket",
    "PresignedData",
    "UploadPlan",
    # Result
    "ArtifactRecord",
    "BuildInfo",
    "PlatformInfo",
    # Progress
    "UploadEvent",
    "UploadPhase",
]
