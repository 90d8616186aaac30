"""
trainer_batch.domain.types -- Pure frozen dataclasses for batch runs.

ZERO I/O.  Frozen dataclasses with enum status fields and tuples for
immutable collections.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID


# =============================================================================
# Status enums
# =============================================================================


class BatchRunStatus(str, Enum):
    """Run-level outcome."""

    COMPLETED = "completed"  # No item failed
    PARTIALLY_COMPLETED = "partially_completed"  # Some items failed
    FAILED = "failed"  # Every item failed, or prepare_items failed


class BatchItemStatus(str, Enum):
    """Per-item outcome within a batch run."""

    SUCCEEDED = "succeeded"  # Processed, SAVEPOINT released
    FAILED = "failed"  # SAVEPOINT rolled back
    SKIPPED = "skipped"  # Not due yet (e.g., training day in the future)


# =============================================================================
# Result DTOs
# =============================================================================


@dataclass(frozen=True)
class BatchItemResult:
    """Immutable result of processing a single batch item.

    Each item runs in its own SAVEPOINT -- failure of one item does not
    abort the run.
    """

    item_index: int  # 0-indexed position in the run
    item_key: str  # Business identifier, e.g. "12:2026-W10:7"
    status: BatchItemStatus
    error_code: str | None = None
    error_message: str | None = None
    result_data: dict[str, Any] | None = None
    duration_ms: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True)
class BatchRunResult:
    """Immutable result of one ``BatchExecutor.run()``."""

    run_id: UUID
    task_type: str
    status: BatchRunStatus
    total_items: int
    succeeded: int
    failed: int
    skipped: int
    item_results: tuple[BatchItemResult, ...] = ()
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0
    error_summary: str | None = None

    @property
    def failed_items(self) -> tuple[BatchItemResult, ...]:
        return tuple(r for r in self.item_results if r.status == BatchItemStatus.FAILED)


@dataclass(frozen=True)
class ResyncSummary:
    """Outcome of a bulk resync of past training days.

    ``synced`` counts assignments whose training day has been reached
    (whether the row was refreshed or removed), ``skipped`` those still in
    the future, ``failed`` those whose per-item transaction rolled back.
    """

    synced: int
    skipped: int
    failed: int = 0
    total: int = 0

    @classmethod
    def from_run(cls, run: BatchRunResult) -> ResyncSummary:
        return cls(
            synced=run.succeeded,
            skipped=run.skipped,
            failed=run.failed,
            total=run.total_items,
        )

    def as_dict(self) -> dict[str, int]:
        return {
            "synced": self.synced,
            "skipped": self.skipped,
            "failed": self.failed,
            "total": self.total,
        }
