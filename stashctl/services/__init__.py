"""Service layer for stashctl.

Provides service classes that encapsulate the artifact-service upload API.
"""

from __future__ import annotations

from .base import BaseService
from .plans import PlanService
from .uploads import UploadService
from .verify import VerifyService

__all__ = [
    "BaseService",
    "PlanService",
    "VerifyService",
    "UploadService",
]
