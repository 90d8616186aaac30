"""
Database engine and sessions for the ledger.

One process-wide engine is installed by ``init_engine_from_url()``; the CLI
does this from ``LedgerSettings.database_url`` and tests do it per test.
Everything else asks for sessions through ``get_session()``,
``get_session_factory()`` or ``session_scope()``.

PostgreSQL runs at READ COMMITTED.  Reconciliation serializes work on one
(course, week, year) key itself by locking the course row FOR UPDATE.

SQLite is used for tests and single-user installs.  The pysqlite driver
normally issues its own BEGIN lazily, which breaks SAVEPOINT nesting, so
driver transaction handling is switched off and SQLAlchemy emits BEGIN.
Foreign keys are enforced with ``PRAGMA foreign_keys=ON``.

Calling any accessor before ``init_engine_from_url()`` raises RuntimeError.
"""

import atexit
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from trainer_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_NOT_INITIALIZED = "Engine not initialized. Call init_engine_from_url() first."

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _install_sqlite_hooks(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create (but do not install) an engine for ``database_url``.

    In-memory SQLite URLs get a StaticPool so that every session sees the
    same database; pool options only apply to server databases.
    """
    url = make_url(database_url)

    if url.get_backend_name() != "sqlite":
        return create_engine(
            url,
            echo=echo,
            poolclass=QueuePool,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=pool_pre_ping,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            isolation_level="READ COMMITTED",
        )

    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    engine = create_engine(url, echo=echo, **options)
    _install_sqlite_hooks(engine)
    return engine


def init_engine_from_url(database_url: str, echo: bool = False, **pool_options: Any) -> Engine:
    """
    Install the process-wide engine, disposing any previous one.

    Sessions from the new factory keep attribute values after commit
    (``expire_on_commit=False``), so result DTOs can be built after the
    unit of work has ended.
    """
    global _engine, _session_factory

    reset_engine()
    _engine = build_engine(database_url, echo=echo, **pool_options)
    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info("engine_initialized", extra={"dialect": _engine.dialect.name, "echo": echo})
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Factory for callers that need one session per thread."""
    if _session_factory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _session_factory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Commit on success, roll back and re-raise on error, always close.

    Services used inside the block should run with ``auto_commit=False``::

        with session_scope() as session:
            ReconciliationService(session, clock, auto_commit=False).reconcile(12, 10, 2026)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def _metadata() -> MetaData:
    from trainer_kernel.db.base import Base
    import trainer_kernel.models  # noqa: F401  (registers all tables)

    return Base.metadata


def create_tables() -> None:
    """Create every ledger table that does not exist yet."""
    _metadata().create_all(get_engine())


def drop_tables() -> None:
    """Drop every ledger table."""
    _metadata().drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the installed engine, if any, and forget it."""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


atexit.register(reset_engine)
