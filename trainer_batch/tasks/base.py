"""
Contract between the batch executor and the ledger jobs.

A job is anything with a ``task_type`` and the two phases the executor
drives: ``prepare_items`` (read-only, picks the work) and ``execute_item``
(mutates the ledger for one item, inside a SAVEPOINT the executor owns).
Jobs never commit, roll back or retry; a failed item is reported and the
next scheduled run picks it up again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Iterator, Protocol, runtime_checkable

from sqlalchemy.orm import Session

from trainer_batch.domain.types import BatchItemStatus
from trainer_kernel.exceptions import TaskNotRegisteredError


@dataclass(frozen=True)
class BatchItemInput:
    """One unit of work, e.g. a single (course, week, trainer) assignment."""

    item_index: int
    item_key: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BatchTaskResult:
    """What ``execute_item`` reports back; errors are normally raised instead."""

    status: BatchItemStatus
    result_data: dict[str, Any] | None = None
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def done(cls, **result_data: Any) -> BatchTaskResult:
        return cls(status=BatchItemStatus.SUCCEEDED, result_data=result_data or None)

    @classmethod
    def not_due(cls, **result_data: Any) -> BatchTaskResult:
        return cls(status=BatchItemStatus.SKIPPED, result_data=result_data or None)


@runtime_checkable
class BatchTask(Protocol):
    """Structural type of a ledger job."""

    @property
    def task_type(self) -> str: ...

    @property
    def description(self) -> str: ...

    def prepare_items(
        self,
        parameters: dict[str, Any],
        session: Session,
        as_of: datetime,
    ) -> tuple[BatchItemInput, ...]:
        """Select the items for this run as of the executor's clock."""
        ...

    def execute_item(
        self,
        item: BatchItemInput,
        parameters: dict[str, Any],
        session: Session,
        as_of: datetime,
    ) -> BatchTaskResult:
        ...


class TaskRegistry:
    """Jobs by ``task_type``; a type can be registered once."""

    def __init__(self, tasks: Iterable[BatchTask] = ()) -> None:
        self._by_type: dict[str, BatchTask] = {}
        for task in tasks:
            self.register(task)

    def register(self, task: BatchTask) -> None:
        """
        Raises:
            ValueError: If ``task.task_type`` is taken.
        """
        if task.task_type in self._by_type:
            raise ValueError(f"Task type '{task.task_type}' is already registered")
        self._by_type[task.task_type] = task

    def get(self, task_type: str) -> BatchTask:
        """
        Raises:
            TaskNotRegisteredError: If nothing is registered under ``task_type``.
        """
        task = self._by_type.get(task_type)
        if task is None:
            raise TaskNotRegisteredError(task_type, self.list_tasks())
        return task

    def list_tasks(self) -> tuple[str, ...]:
        return tuple(sorted(self._by_type))

    def __contains__(self, task_type: object) -> bool:
        return task_type in self._by_type

    def __iter__(self) -> Iterator[BatchTask]:
        return iter(self._by_type[name] for name in self.list_tasks())

    def __len__(self) -> int:
        return len(self._by_type)
