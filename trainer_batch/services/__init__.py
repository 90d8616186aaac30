"""trainer_batch.services -- Batch execution."""

from trainer_batch.services.executor import BatchExecutor

__all__ = ["BatchExecutor"]
