"""Upload service: runs a whole artifact upload.

Sequences the three protocol phases for one invocation:

1. Request an upload plan (pending upload id plus per-file plans).
2. Transfer the primary file, then the expansion file if there is one.
3. Verify the pending upload and return the artifact record.

Every failure is fatal: the service moves to ``FAILED`` and re-raises. No
phase is retried and nothing is resumed across invocations.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from stashctl.core.exceptions import MissingFieldError
from stashctl.core.logging import LogContext
from stashctl.models.artifact import ArtifactRecord
from stashctl.models.metadata import UploadMetadata
from stashctl.models.plan import FileRole, FinishedPartReceipt
from stashctl.models.progress import UploadEvent, UploadPhase
from stashctl.uploaders.constants import DEFAULT_READ_SIZE
from stashctl.uploaders.presigned import FileTransferExecutor

from .base import BaseService
from .plans import PlanService
from .verify import VerifyService

if TYPE_CHECKING:
    from stashctl.core.client import StashClient

logger = logging.getLogger(__name__)


class UploadService(BaseService):
    """Orchestrates plan, transfer and verify for one upload at a time.

    Use one instance per concurrent upload; instances may share a client.
    """

    def __init__(
        self,
        client: "StashClient",
        *,
        send_part_receipts: bool = False,
        read_size: int = DEFAULT_READ_SIZE,
        progress_callback: Callable[[UploadEvent], None] | None = None,
    ) -> None:
        """Initialize the upload service.

        Args:
            client: StashClient carrying the API key
            send_part_receipts: Include chunked-part ETags in verification
            read_size: Block size for streamed parts
            progress_callback: Optional callback for progress events
        """
        super().__init__(client)
        self.send_part_receipts = send_part_receipts
        self.progress_callback = progress_callback
        self.plans = PlanService(client)
        self.verifier = VerifyService(client)
        self.executor = FileTransferExecutor(
            client,
            self.plans,
            read_size=read_size,
            progress_callback=progress_callback,
        )
        self.state = UploadPhase.PENDING

    def _enter(self, phase: UploadPhase, message: str) -> None:
        self.state = phase
        logger.info("%s", message)
        if self.progress_callback:
            self.progress_callback(UploadEvent(phase, message))

    def upload(self, metadata: UploadMetadata) -> ArtifactRecord:
        """Upload the files described by metadata and verify the result.

        Args:
            metadata: Description of the upload

        Returns:
            ArtifactRecord of the stored build

        Raises:
            ValidationError: Required metadata missing (before any request)
            TransportError: Network failure
            ProtocolError: API rejected a request
            UnexpectedContentTypeError: API answered with non-JSON
            MalformedResponseError: API response could not be parsed
            IntegrityError: Local file bytes could not be read exactly
            StorageTransferError: Storage rejected a PUT
        """
        self.state = UploadPhase.PENDING
        try:
            record = self._run(metadata)
        except Exception as e:
            self._enter(UploadPhase.FAILED, f"Upload failed: {e}")
            raise

        self._enter(UploadPhase.DONE, "Upload completed successfully")
        return record

    def _run(self, metadata: UploadMetadata) -> ArtifactRecord:
        self._enter(UploadPhase.PLANNING, "Requesting upload URLs...")
        primary_path = metadata.primary_file_path
        if primary_path is None:
            raise MissingFieldError("primary_file_path", "Primary file path")

        with LogContext("request plan", logger, file=primary_path):
            plan = self.plans.request_plan(metadata)

        self._enter(UploadPhase.TRANSFERRING_PRIMARY, "Uploading files...")
        with LogContext("primary transfer", logger, pending_upload_id=plan.pending_upload_id):
            primary_parts = self.executor.transfer(
                primary_path, plan.primary_file, plan.pending_upload_id, FileRole.PRIMARY
            )

        expansion_parts: list[FinishedPartReceipt] = []
        expansion_path = metadata.expansion_file_path
        if expansion_path is not None and plan.expansion_file is not None:
            self._enter(UploadPhase.TRANSFERRING_EXPANSION, "Uploading expansion file...")
            with LogContext("expansion transfer", logger, pending_upload_id=plan.pending_upload_id):
                expansion_parts = self.executor.transfer(
                    expansion_path, plan.expansion_file, plan.pending_upload_id, FileRole.EXPANSION
                )
        elif expansion_path is not None:
            logger.warning(
                "No expansion upload plan issued for %s; is structure '%s' correct?",
                expansion_path,
                metadata.structure,
            )

        self._enter(UploadPhase.VERIFYING, "Verifying upload...")
        with LogContext("verify", logger, pending_upload_id=plan.pending_upload_id):
            if self.send_part_receipts:
                return self.verifier.verify(
                    plan.pending_upload_id,
                    primary_parts=primary_parts,
                    expansion_parts=expansion_parts,
                )
            return self.verifier.verify(plan.pending_upload_id)
