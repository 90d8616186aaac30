"""
trainer_batch.domain -- Pure types for batch runs.

ZERO I/O.  All types are frozen dataclasses.
"""

from trainer_batch.domain.types import (
    BatchItemResult,
    BatchItemStatus,
    BatchRunResult,
    BatchRunStatus,
    ResyncSummary,
)

__all__ = [
    "BatchItemResult",
    "BatchItemStatus",
    "BatchRunResult",
    "BatchRunStatus",
    "ResyncSummary",
]
