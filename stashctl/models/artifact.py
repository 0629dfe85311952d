"""Artifact record returned once an upload has been verified."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from stashctl.models.base import BaseModel


class PlatformInfo(BaseModel):
    """Platform the build was filed under."""

    short_name: str | None = None


class BuildInfo(BaseModel):
    """Subset of the build object embedded in the verify response."""

    platform: PlatformInfo | None = None


class ArtifactRecord(BaseModel):
    """Terminal result of a successful upload."""

    message: str | None = None
    build_id: str | None = None
    pending_processing: bool = False
    build_info_url: str | None = None
    download_url: str | None = None
    build: BuildInfo | None = None

    @field_validator("build_id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("pending_processing", mode="before")
    @classmethod
    def _none_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def platform_short_name(self) -> str | None:
        if self.build is None or self.build.platform is None:
            return None
        return self.build.platform.short_name

    def to_row(self) -> dict[str, Any]:
        """Flat view used for console and JSON output."""
        return {
            "build_id": self.build_id,
            "platform": self.platform_short_name,
            "pending_processing": self.pending_processing,
            "build_info_url": self.build_info_url,
            "download_url": self.download_url,
            "message": self.message,
        }
