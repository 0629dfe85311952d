"""Presigned-URL file transfers.

A file is sent either as one direct PUT of its whole contents, or as a
strictly sequential series of part PUTs, each to a URL requested just
before the part is sent.

This is an internal implementation detail. Use `UploadService` from
`stashctl.services.uploads` as the public API.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from stashctl.core.client import StashClient
from stashctl.core.exceptions import MalformedResponseError, StorageTransferError
from stashctl.models.plan import FileRole, FileTransferPlan, FinishedPartReceipt, PresignedData
from stashctl.models.progress import UploadEvent, UploadPhase
from stashctl.uploaders.constants import DEFAULT_READ_SIZE, PART_CONTENT_TYPE, part_endpoint_for
from stashctl.uploaders.ranges import compute_part_ranges, open_range, read_whole_file

if TYPE_CHECKING:
    from stashctl.services.plans import PlanService

logger = logging.getLogger(__name__)

PHASE_FOR_ROLE = {
    FileRole.PRIMARY: UploadPhase.TRANSFERRING_PRIMARY,
    FileRole.EXPANSION: UploadPhase.TRANSFERRING_EXPANSION,
}


class FileTransferExecutor:
    """Moves one file's bytes to storage according to its transfer plan."""

    def __init__(
        self,
        client: StashClient,
        plans: "PlanService",
        *,
        read_size: int = DEFAULT_READ_SIZE,
        progress_callback: Callable[[UploadEvent], None] | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            client: Transport used for storage PUTs.
            plans: Service that issues per-part tickets.
            read_size: Block size for streamed parts.
            progress_callback: Optional callback for progress events.
        """
        self.client = client
        self.plans = plans
        self.read_size = read_size
        self.progress_callback = progress_callback

    def _report(self, event: UploadEvent) -> None:
        logger.info("%s", event.message)
        if self.progress_callback:
            self.progress_callback(event)

    # =========================================================================
    # Entry Point
    # =========================================================================

    def transfer(
        self,
        path: Path,
        plan: FileTransferPlan,
        pending_upload_id: str,
        role: FileRole = FileRole.PRIMARY,
    ) -> list[FinishedPartReceipt]:
        """Transfer one file.

        Args:
            path: Local file.
            plan: Server plan for this file.
            pending_upload_id: Id of the pending upload.
            role: Whether this is the primary or the expansion file.

        Returns:
            Receipts for each part of a chunked transfer; empty for direct.

        Raises:
            IntegrityError: If the file bytes cannot be read exactly.
            StorageTransferError: If storage rejects a PUT.
            TransportError: On network failure.
        """
        role = FileRole(role)
        if plan.chunked:
            return self.transfer_chunked(path, plan, pending_upload_id, role)
        self.transfer_direct(path, plan.presigned_data, role)
        return []

    # =========================================================================
    # Direct Transfer
    # =========================================================================

    def transfer_direct(
        self,
        path: Path,
        presigned: PresignedData | None,
        role: FileRole = FileRole.PRIMARY,
    ) -> None:
        """PUT the whole file to its presigned URL.

        The body is read fully into memory so its length matches the signed
        size exactly.
        """
        if presigned is None or not presigned.url or not presigned.url.strip():
            raise MalformedResponseError(f"Presigned URL for {role.value} file is null or empty")

        phase = PHASE_FOR_ROLE[role]
        self._report(
            UploadEvent(phase, f"Uploading {role.value} file using direct upload...", 0, 1, role.value)
        )

        body = read_whole_file(path)
        resp = self.client.put(presigned.url, body, headers=presigned.transfer_headers())
        if not resp.ok:
            raise StorageTransferError(resp.status_code, resp.body, role=role.value)

        self._report(
            UploadEvent(phase, f"Uploaded {role.value} file ({len(body)} bytes)", 1, 1, role.value)
        )

    # =========================================================================
    # Chunked Transfer
    # =========================================================================

    def transfer_chunked(
        self,
        path: Path,
        plan: FileTransferPlan,
        pending_upload_id: str,
        role: FileRole = FileRole.PRIMARY,
    ) -> list[FinishedPartReceipt]:
        """Upload the file part by part, in order, stopping at the first failure."""
        endpoint = part_endpoint_for(role)
        file_size = path.stat().st_size
        part_count = plan.chunked_number_parts or 0
        ranges = compute_part_ranges(file_size, plan.part_size_bytes, part_count)
        phase = PHASE_FOR_ROLE[role]

        self._report(
            UploadEvent(
                phase, f"Uploading {role.value} file using chunked upload...", 0, part_count, role.value
            )
        )

        receipts: list[FinishedPartReceipt] = []
        for byte_range in ranges:
            self._report(
                UploadEvent(
                    phase,
                    f"Uploading chunked upload, part: {byte_range.part_number} of {part_count}",
                    byte_range.part_number - 1,
                    part_count,
                    role.value,
                )
            )

            ticket = self.plans.request_part_ticket(
                endpoint, pending_upload_id, byte_range.part_number, byte_range.length
            )

            headers = {
                "Content-Type": PART_CONTENT_TYPE,
                "Content-Length": str(byte_range.length),
            }
            with open_range(
                path, byte_range.start, byte_range.length, read_size=self.read_size
            ) as stream:
                resp = self.client.put(ticket.url, stream, headers=headers)

            if not resp.ok:
                raise StorageTransferError(
                    resp.status_code,
                    resp.body,
                    role=role.value,
                    part_number=byte_range.part_number,
                )

            receipts.append(
                FinishedPartReceipt(
                    part_number=byte_range.part_number,
                    etag=resp.headers.get("etag"),
                )
            )

        self._report(
            UploadEvent(
                phase, f"Uploaded {role.value} file in {part_count} parts", part_count, part_count, role.value
            )
        )
        return receipts
