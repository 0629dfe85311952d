"""Upload plan models returned by the artifact-service API."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from stashctl.models.base import BaseModel

BYTES_PER_MB = 1024 * 1024

# Headers a direct transfer forwards, and only when the server supplied them
DIRECT_TRANSFER_HEADERS = ("Content-Type", "Content-Disposition", "x-amz-acl")


class FileRole(str, Enum):
    """Which file of an upload a transfer concerns."""

    PRIMARY = "primary"
    EXPANSION = "expansion"


class PresignedData(BaseModel):
    """Destination URL and signed headers for a direct transfer."""

    url: str | None = None
    headers: dict[str, Any] = Field(default_factory=dict)

    @field_validator("headers", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    def header(self, name: str) -> str | None:
        """Look up a signed header case-insensitively.

        Presigners sometimes return multi-valued headers as lists; the first
        value is the signed one.
        """
        for key, value in self.headers.items():
            if key.lower() != name.lower():
                continue
            if isinstance(value, (list, tuple)):
                value = value[0] if value else None
            if value is None:
                return None
            return str(value)
        return None

    def transfer_headers(self) -> dict[str, str]:
        """Headers to send with the PUT, omitting any the server did not supply."""
        headers: dict[str, str] = {}
        for name in DIRECT_TRANSFER_HEADERS:
            value = self.header(name)
            if value is not None:
                headers[name] = value
        return headers


class FileTransferPlan(BaseModel):
    """How one file is to be transferred: directly or in chunks."""

    chunked: bool = Field(False, validation_alias=AliasChoices("chunked", "chunked_upload"))
    presigned_data: PresignedData | None = None
    chunked_part_size_mb: int | None = None
    chunked_number_parts: int | None = None

    @model_validator(mode="after")
    def _check_chunk_parameters(self) -> FileTransferPlan:
        if self.chunked:
            if not self.chunked_part_size_mb or self.chunked_part_size_mb < 1:
                raise ValueError("chunked plan requires a positive chunked_part_size_mb")
            if not self.chunked_number_parts or self.chunked_number_parts < 1:
                raise ValueError("chunked plan requires a positive chunked_number_parts")
        return self

    @property
    def part_size_bytes(self) -> int:
        return (self.chunked_part_size_mb or 0) * BYTES_PER_MB


class UploadPlan(BaseModel):
    """Server-issued plan for a pending upload."""

    pending_upload_id: str
    primary_file: FileTransferPlan
    expansion_files: list[FileTransferPlan] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_expansion(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        single = data.pop("expansion_file", None)
        if data.get("expansion_files") is None:
            data["expansion_files"] = [single] if single else []
        return data

    @field_validator("pending_upload_id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @property
    def expansion_file(self) -> FileTransferPlan | None:
        """The expansion-file plan, if the server issued one."""
        return self.expansion_files[0] if self.expansion_files else None


class PartTransferTicket(BaseModel):
    """Single-use destination for one part of a chunked transfer."""

    part_number: int
    content_length: int
    url: str = Field(validation_alias=AliasChoices("url", "part_presigned_url"))


class FinishedPartReceipt(BaseModel):
    """Proof that one part reached storage: its number and ETag."""

    part_number: int
    etag: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return {"PartNumber": self.part_number, "ETag": self.etag}
