"""Progress models for tracking upload status.

Provides the orchestrator's phases and the discrete events it emits so a
caller can render progress without the engine owning any UI.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class UploadPhase(Enum):
    """States of one upload invocation."""

    PENDING = "pending"
    PLANNING = "planning"
    TRANSFERRING_PRIMARY = "transferring_primary"
    TRANSFERRING_EXPANSION = "transferring_expansion"
    VERIFYING = "verifying"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (UploadPhase.DONE, UploadPhase.FAILED)


@dataclass(frozen=True)
class UploadEvent:
    """A progress line emitted by the upload engine."""

    phase: UploadPhase
    message: str
    current: int = 0
    total: int = 0
    role: Optional[str] = None

    @property
    def percent(self) -> float:
        """Calculate completion percentage."""
        if self.total == 0:
            return 0.0
        return (self.current / self.total) * 100
