"""Upload metadata model: what is being uploaded and how it is described."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, ValidationInfo, field_validator

from stashctl.core.exceptions import ValidationError
from stashctl.core.validation import require_text
from stashctl.models.base import BaseModel

DEFAULT_STRUCTURE = "file"

# (field, label) pairs checked before any network call
REQUIRED_FIELDS = (
    ("major", "Major version component"),
    ("minor", "Minor version component"),
    ("patch", "Patch version component"),
    ("platform", "Platform"),
    ("stream", "Stream"),
)

# Fields that describe local files rather than being sent verbatim
FILE_FIELDS = {"primary_file_path", "expansion_file_path"}


class UploadMetadata(BaseModel):
    """Immutable description of one artifact upload.

    Absent optional values stay absent and are omitted from the request
    payload; only ``structure`` has a default.
    """

    primary_file_path: Path | None = None
    expansion_file_path: Path | None = None
    structure: str = DEFAULT_STRUCTURE

    major: str | None = Field(None, serialization_alias="version_component_1_major")
    minor: str | None = Field(None, serialization_alias="version_component_2_minor")
    patch: str | None = Field(None, serialization_alias="version_component_3_patch")
    extra: str | None = Field(None, serialization_alias="version_component_extra")
    meta: str | None = Field(None, serialization_alias="version_component_meta")
    custom_build_number: str | None = None

    platform: str | None = None
    stream: str | None = None
    notes: str | None = None
    labels: tuple[str, ...] | None = None
    architectures: tuple[str, ...] | None = None

    source: str | None = None
    ci_pipeline: str | None = None
    ci_run_id: str | None = None
    ci_run_url: str | None = None
    ci_pipeline_url: str | None = None
    ci_build_duration: str | None = None

    vc_host_type: str | None = None
    vc_host: str | None = None
    vc_repo_name: str | None = None
    vc_repo_url: str | None = None
    vc_branch: str | None = None
    vc_commit_sha: str | None = None
    vc_commit_url: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_STRUCTURE if info.field_name == "structure" else None
        return value

    @field_validator("labels", "architectures", mode="before")
    @classmethod
    def _empty_list_is_absent(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            items = tuple(str(item).strip() for item in value if str(item).strip())
            return items or None
        return value

    # =========================================================================
    # Validation
    # =========================================================================

    def check_required(self) -> UploadMetadata:
        """Verify required fields and local files before any request is made.

        Returns:
            self, for chaining.

        Raises:
            ValidationError: If a required field is absent or blank, or a
                named file does not exist.
        """
        require_text(
            str(self.primary_file_path) if self.primary_file_path else None,
            "primary_file_path",
            "Primary file path",
        )
        for field_name, label in REQUIRED_FIELDS:
            require_text(getattr(self, field_name), field_name, label)

        for field_name in ("primary_file_path", "expansion_file_path"):
            path = getattr(self, field_name)
            if path is not None and not path.is_file():
                raise ValidationError(f"File not found: {path}", field=field_name, value=str(path))
        return self

    # =========================================================================
    # Serialization
    # =========================================================================

    @staticmethod
    def describe_file(path: Path) -> dict[str, Any]:
        """Wire descriptor for a local file."""
        return {"filename": path.name, "size_bytes": path.stat().st_size}

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body of an upload request.

        Scalars are emitted under snake_case keys, lists as arrays, and each
        file as a ``{filename, size_bytes}`` descriptor.
        """
        payload = self.model_dump(by_alias=True, exclude_none=True, exclude=FILE_FIELDS)
        for key in ("labels", "architectures"):
            if key in payload:
                payload[key] = list(payload[key])

        if self.primary_file_path is not None:
            payload["primary_file"] = self.describe_file(self.primary_file_path)
        if self.expansion_file_path is not None:
            payload["expansion_files"] = [self.describe_file(self.expansion_file_path)]
        return payload
