"""
BatchExecutor -- drives one ledger job over its items.

Each item runs inside its own SAVEPOINT.  An item that fails (raises, or
returns FAILED) is rolled back to that savepoint and recorded; the loop
moves on.  SKIPPED items are rolled back too, since they were not due.

With ``auto_commit=True`` the session is committed after every item, so a
crash half-way through keeps the ledger rows already written.  Otherwise
the caller owns the outer transaction.

Every log record of a run carries ``correlation_id=<run_id>`` and
``job_name=<task_type>``.
"""

from __future__ import annotations

import time
from collections import Counter
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from trainer_kernel.domain.clock import Clock, SystemClock
from trainer_kernel.logging_config import LogContext, get_logger

from trainer_batch.domain.types import (
    BatchItemResult,
    BatchItemStatus,
    BatchRunResult,
    BatchRunStatus,
)
from trainer_batch.tasks.base import BatchItemInput, BatchTask, BatchTaskResult, TaskRegistry

logger = get_logger("batch.executor")

UNHANDLED_EXCEPTION = "UNHANDLED_EXCEPTION"


def _elapsed_ms(since: float) -> int:
    return int((time.monotonic() - since) * 1000)


def _run_status(counts: Counter[BatchItemStatus]) -> BatchRunStatus:
    failed = counts[BatchItemStatus.FAILED]
    if not failed:
        return BatchRunStatus.COMPLETED
    if failed == sum(counts.values()):
        return BatchRunStatus.FAILED
    return BatchRunStatus.PARTIALLY_COMPLETED


class BatchExecutor:
    """Runs jobs from a TaskRegistry against one session."""

    def __init__(
        self,
        session: Session,
        task_registry: TaskRegistry,
        clock: Clock | None = None,
        auto_commit: bool = False,
    ):
        self._session = session
        self._task_registry = task_registry
        self._clock = clock or SystemClock()
        self._auto_commit = auto_commit

    def run(self, task_type: str, parameters: dict[str, Any] | None = None) -> BatchRunResult:
        """
        Prepare and execute every item of ``task_type``.

        Raises:
            TaskNotRegisteredError: If task_type is not in the registry.
        """
        task = self._task_registry.get(task_type)
        run_id = uuid4()
        with LogContext.bind(correlation_id=str(run_id), job_name=task.task_type):
            return self._run(task, parameters or {}, run_id)

    def _run(self, task: BatchTask, parameters: dict[str, Any], run_id: UUID) -> BatchRunResult:
        started = time.monotonic()
        as_of = self._clock.now()
        logger.info("batch_run_started", extra={"task_type": task.task_type, "parameters": parameters})

        try:
            items = task.prepare_items(parameters=parameters, session=self._session, as_of=as_of)
        except Exception as exc:
            if self._auto_commit:
                self._session.rollback()
            logger.error(
                "batch_prepare_failed",
                extra={"task_type": task.task_type, "error": str(exc)},
                exc_info=True,
            )
            return BatchRunResult(
                run_id=run_id,
                task_type=task.task_type,
                status=BatchRunStatus.FAILED,
                total_items=0,
                succeeded=0,
                failed=0,
                skipped=0,
                started_at=as_of,
                completed_at=self._clock.now(),
                duration_ms=_elapsed_ms(started),
                error_summary=f"prepare_items failed: {exc}",
            )

        results: list[BatchItemResult] = []
        for item in items:
            results.append(self._execute_one(task, item, parameters, as_of))
            if self._auto_commit:
                self._session.commit()

        counts = Counter(r.status for r in results)
        status = _run_status(counts)
        failed = counts[BatchItemStatus.FAILED]
        duration_ms = _elapsed_ms(started)
        logger.info(
            "batch_run_completed",
            extra={
                "task_type": task.task_type,
                "status": status.value,
                "total_items": len(results),
                "succeeded": counts[BatchItemStatus.SUCCEEDED],
                "failed": failed,
                "skipped": counts[BatchItemStatus.SKIPPED],
                "duration_ms": duration_ms,
            },
        )
        return BatchRunResult(
            run_id=run_id,
            task_type=task.task_type,
            status=status,
            total_items=len(results),
            succeeded=counts[BatchItemStatus.SUCCEEDED],
            failed=failed,
            skipped=counts[BatchItemStatus.SKIPPED],
            item_results=tuple(results),
            started_at=as_of,
            completed_at=self._clock.now(),
            duration_ms=duration_ms,
            error_summary=f"{failed} item(s) failed" if failed else None,
        )

    def _execute_one(
        self,
        task: BatchTask,
        item: BatchItemInput,
        parameters: dict[str, Any],
        as_of: datetime,
    ) -> BatchItemResult:
        started = time.monotonic()
        item_started_at = self._clock.now()

        savepoint = self._session.begin_nested()
        try:
            outcome = task.execute_item(item=item, parameters=parameters, session=self._session, as_of=as_of)
        except Exception as exc:
            savepoint.rollback()
            outcome = BatchTaskResult(
                status=BatchItemStatus.FAILED,
                error_code=getattr(exc, "code", UNHANDLED_EXCEPTION),
                error_message=str(exc),
            )
            logger.warning(
                "batch_item_failed",
                extra={
                    "item_key": item.item_key,
                    "error_code": outcome.error_code,
                    "error_message": outcome.error_message,
                },
                exc_info=True,
            )
        else:
            if outcome.status is BatchItemStatus.SUCCEEDED:
                savepoint.commit()
            else:
                savepoint.rollback()
            if outcome.status is BatchItemStatus.FAILED:
                logger.warning(
                    "batch_item_failed",
                    extra={
                        "item_key": item.item_key,
                        "error_code": outcome.error_code,
                        "error_message": outcome.error_message,
                    },
                )

        return BatchItemResult(
            item_index=item.item_index,
            item_key=item.item_key,
            status=outcome.status,
            error_code=outcome.error_code,
            error_message=outcome.error_message,
            result_data=outcome.result_data,
            duration_ms=_elapsed_ms(started),
            started_at=item_started_at,
            completed_at=self._clock.now(),
        )
