"""
trainer_batch.tasks -- Task protocol, registry, and ledger task implementations.
"""

from trainer_batch.tasks.base import (
    BatchItemInput,
    BatchTask,
    BatchTaskResult,
    TaskRegistry,
)
from trainer_batch.tasks.ledger_tasks import ReconcileWeekTask, ResyncPastDaysTask

__all__ = [
    "BatchItemInput",
    "BatchTask",
    "BatchTaskResult",
    "ReconcileWeekTask",
    "ResyncPastDaysTask",
    "TaskRegistry",
]
