"""Verify service: completes a pending upload."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from stashctl.models.artifact import ArtifactRecord
from stashctl.models.plan import FinishedPartReceipt
from stashctl.uploaders.constants import UPLOAD_VERIFY_PATH

from .base import BaseService

logger = logging.getLogger(__name__)


class VerifyService(BaseService):
    """Service for the final verification step."""

    def verify(
        self,
        pending_upload_id: str,
        *,
        primary_parts: Sequence[FinishedPartReceipt] | None = None,
        expansion_parts: Sequence[FinishedPartReceipt] | None = None,
    ) -> ArtifactRecord:
        """Tell the API all files are transferred and fetch the artifact record.

        Part receipts are only included when given, for backends that need
        the ordered ETag list to finalize a multipart upload.

        Args:
            pending_upload_id: Pending upload to complete
            primary_parts: Receipts of the primary file's parts
            expansion_parts: Receipts of the expansion file's parts

        Returns:
            ArtifactRecord for the stored build
        """
        payload: dict[str, Any] = {"pending_upload_id": pending_upload_id}
        if primary_parts:
            payload["multipart_chunks"] = [r.to_wire() for r in primary_parts]
        if expansion_parts:
            payload["expansion_multipart_chunks"] = [r.to_wire() for r in expansion_parts]

        data = self._post(UPLOAD_VERIFY_PATH, payload, operation="verify upload")
        record = self._parse(ArtifactRecord, data, endpoint=UPLOAD_VERIFY_PATH)
        logger.info("Upload %s verified as build %s", pending_upload_id, record.build_id)
        return record
