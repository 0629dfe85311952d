"""Upload plan service: negotiates presigned destinations with the API."""

from __future__ import annotations

import logging

from stashctl.core.exceptions import MalformedResponseError
from stashctl.models.metadata import UploadMetadata
from stashctl.models.plan import PartTransferTicket, UploadPlan
from stashctl.uploaders.constants import UPLOAD_REQUEST_PATH

from .base import BaseService

logger = logging.getLogger(__name__)


class PlanService(BaseService):
    """Service for upload plans and per-part transfer tickets."""

    def request_plan(self, metadata: UploadMetadata) -> UploadPlan:
        """Ask the API how the files of an upload should be transferred.

        Required metadata is checked before anything is sent.

        Args:
            metadata: Description of the upload

        Returns:
            UploadPlan with the pending upload id and per-file plans

        Raises:
            ValidationError: Required metadata is absent or blank
            ProtocolError: API answered with a non-200 status
            UnexpectedContentTypeError: API answered with non-JSON
            MalformedResponseError: Plan could not be parsed
        """
        metadata.check_required()
        payload = metadata.to_payload()

        logger.info("Requesting upload URLs (%s)", payload["primary_file"]["filename"])
        data = self._post(UPLOAD_REQUEST_PATH, payload, operation="request upload URLs")
        plan = self._parse(UploadPlan, data, endpoint=UPLOAD_REQUEST_PATH)

        logger.debug(
            "Pending upload %s: primary %s, %d expansion plan(s)",
            plan.pending_upload_id,
            "chunked" if plan.primary_file.chunked else "direct",
            len(plan.expansion_files),
        )
        return plan

    def request_part_ticket(
        self,
        endpoint: str,
        pending_upload_id: str,
        part_number: int,
        content_length: int,
    ) -> PartTransferTicket:
        """Request the presigned URL for one part of a chunked transfer.

        Args:
            endpoint: Multipart endpoint for the file's role
            pending_upload_id: Pending upload the part belongs to
            part_number: 1-based part number
            content_length: Exact byte length of the part

        Returns:
            Single-use PartTransferTicket

        Raises:
            ProtocolError: API answered with a non-200 status
            UnexpectedContentTypeError: API answered with non-JSON
            MalformedResponseError: No presigned URL in the response
        """
        payload = {
            "pending_upload_id": pending_upload_id,
            "part_number": part_number,
            "content_length": content_length,
        }
        data = self._post(endpoint, payload, operation="get presigned URL")

        url = data.get("part_presigned_url")
        if not isinstance(url, str) or not url.strip():
            raise MalformedResponseError(
                f"no part_presigned_url for part {part_number}", endpoint=endpoint
            )

        return PartTransferTicket(
            part_number=part_number,
            content_length=content_length,
            url=url.strip(),
        )
