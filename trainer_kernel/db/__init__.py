"""Database layer - engine, base classes, column types and conflict-safe writes."""

from trainer_kernel.db.base import Base, TrackedBase
from trainer_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)
from trainer_kernel.db.statements import insert_ignore
from trainer_kernel.db.types import round_hours

__all__ = [
    "Base",
    "TrackedBase",
    "create_tables",
    "drop_tables",
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "session_scope",
    "insert_ignore",
    "round_hours",
]
