"""Logging utilities for stashctl.

Configures stderr logging for the CLI and times each upload phase.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import Any, Optional

# =============================================================================
# Constants
# =============================================================================

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# =============================================================================
# Logger Setup
# =============================================================================


def setup_logging(
    level: int = logging.WARNING,
    *,
    quiet: bool = False,
    verbose: bool = False,
) -> None:
    """Configure logging for stashctl.

    Args:
        level: Base logging level.
        quiet: If True, only show errors.
        verbose: If True, show debug messages.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stderr,
    )

    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("h11").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


# =============================================================================
# Phase Logging
# =============================================================================


class LogContext:
    """Times one upload phase and logs how it ended.

    Once the pending upload id is known it prefixes every line, so output
    from concurrent uploads sharing a logger stays attributable. Exceptions
    are logged and then propagate unchanged.
    """

    def __init__(
        self,
        phase: str,
        logger: Optional[logging.Logger] = None,
        *,
        pending_upload_id: Optional[str] = None,
        **fields: Any,
    ):
        self.phase = phase
        self.logger = logger or get_logger(__name__)
        self.pending_upload_id = pending_upload_id
        self.fields = fields
        self.started: Optional[float] = None
        self.elapsed: Optional[float] = None

    @property
    def prefix(self) -> str:
        return f"[{self.pending_upload_id}] " if self.pending_upload_id else ""

    def __enter__(self) -> "LogContext":
        self.started = time.monotonic()
        detail = ", ".join(f"{k}={v}" for k, v in self.fields.items())
        if detail:
            self.logger.info("%s%s started (%s)", self.prefix, self.phase, detail)
        else:
            self.logger.info("%s%s started", self.prefix, self.phase)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.elapsed = time.monotonic() - self.started if self.started is not None else 0.0

        if exc_type is None:
            self.logger.info("%s%s finished in %.2fs", self.prefix, self.phase, self.elapsed)
            return

        self.logger.error(
            "%s%s failed after %.2fs: %s: %s",
            self.prefix,
            self.phase,
            self.elapsed,
            exc_type.__name__,
            exc_val,
        )
