"""Sync domain - push/pull of composer subtrees.

This domain handles:
- Copying a composer with its works and recordings between stores
- Transcoding asset files between local files and remote object storage
- Progress reporting and per-step results
"""

from .engine import (
    DEFAULT_COPY_SUFFIX,
    ProgressCallback,
    ProgressTracker,
    SyncOrchestrator,
    progress_percent,
)
from .exceptions import RemoteFetchError, SyncError
from .models import (
    StepKind,
    StepOutcome,
    StepResult,
    SyncDirection,
    SyncReport,
)

__all__ = [
    # Engine
    "DEFAULT_COPY_SUFFIX",
    "ProgressCallback",
    "ProgressTracker",
    "SyncOrchestrator",
    "progress_percent",
    # Exceptions
    "RemoteFetchError",
    "SyncError",
    # Models
    "StepKind",
    "StepOutcome",
    "StepResult",
    "SyncDirection",
    "SyncReport",
]
