"""
Logging -- one JSON object per line for everything under ``trainer_kernel``.

Every ledger mutation, batch item and fact change is logged as an event
name (``ledger_entry_added``, ``batch_item_failed``, ...) plus structured
fields.  Fields that describe *where* the code is running (which batch run,
which course/week, which actor) live in :class:`LogContext` so callers do
not have to repeat them on every call.

The trainer_batch and trainer_config packages log through the same
hierarchy via ``get_logger``.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Iterator, Mapping

ROOT_LOGGER_NAME = "trainer_kernel"

CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "actor",
    "job_name",
    "course_id",
    "week",
    "year",
)

_EMPTY: Mapping[str, Any] = MappingProxyType({})
_context: ContextVar[Mapping[str, Any]] = ContextVar("trainer_log_context", default=_EMPTY)


def _merged(fields: dict[str, Any]) -> Mapping[str, Any]:
    unknown = sorted(set(fields) - set(CONTEXT_FIELDS))
    if unknown:
        raise KeyError(f"Unknown log context field: {', '.join(unknown)}")
    current = dict(_context.get())
    current.update({k: v for k, v in fields.items() if v is not None})
    return MappingProxyType(current)


class LogContext:
    """
    Per-task log fields shared by every record emitted in that task.

    Backed by a single ContextVar holding a read-only mapping, so threads
    and asyncio tasks each see their own copy.  ``None`` values are ignored
    on both ``set`` and ``bind``.
    """

    @staticmethod
    def set(**fields: Any) -> None:
        _context.set(_merged(fields))

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[type["LogContext"]]:
        """Overlay ``fields`` for the duration of the ``with`` block."""
        token = _context.set(_merged(fields))
        try:
            yield LogContext
        finally:
            _context.reset(token)

    @staticmethod
    def get_all() -> dict[str, Any]:
        ctx = _context.get()
        return {name: ctx[name] for name in CONTEXT_FIELDS if name in ctx}

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)


# Attributes every LogRecord carries; anything else came in via ``extra=``.
_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        # hours keep their two decimal places
        return str(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # TrainerKernelError subclasses keep their inputs as public attributes
    for attr, value in vars(exc).items():
        if attr.startswith("_") or attr in ("args", "code"):
            continue
        fields[f"exc_{attr}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Render a record as ``{"ts", "level", "logger", "message", ...}``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and key not in payload
        }
        payload.update(extras)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


def get_logger(name: str) -> logging.Logger:
    """Child logger of ``trainer_kernel``, e.g. ``get_logger("services.ledger")``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


_configure_lock = threading.Lock()
_installed_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one JSON handler to the ``trainer_kernel`` logger.

    Only the first call has an effect until ``reset_logging()`` runs, so
    the CLI and test fixtures can both call it safely.

    Args:
        level: Threshold for the whole hierarchy (name or number).
        stream: Target stream when no handler is given (default stderr).
        handler: Pre-built handler; its formatter is replaced.
    """
    global _installed_handler
    with _configure_lock:
        if _installed_handler is not None:
            return
        target = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
        target.setFormatter(StructuredFormatter())

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(level)
        root.propagate = False
        root.addHandler(target)
        _installed_handler = target


def reset_logging() -> None:
    """Detach the handler installed by ``configure_logging`` (tests only)."""
    global _installed_handler
    with _configure_lock:
        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.handlers.clear()
        root.setLevel(logging.WARNING)
        root.propagate = True
        _installed_handler = None
