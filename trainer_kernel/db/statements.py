"""
Module: trainer_kernel.db.statements
Responsibility: Dialect-aware write statements the ledger relies on for
    conflict safety.
Architecture position: Kernel > DB.  May import from db/base.py only.

Invariants enforced:
    - insert_ignore() never raises on a unique-key conflict: the existing
      row wins and the new row is dropped.  This is what keeps two
      concurrent reconcilers from producing duplicate ledger rows.

Failure modes:
    - Any error other than a uniqueness conflict propagates unchanged.
"""

from typing import Any

from sqlalchemy import insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from trainer_kernel.db.base import Base
from trainer_kernel.logging_config import get_logger

logger = get_logger("db.statements")


def insert_ignore(session: Session, model: type[Base], values: dict[str, Any]) -> bool:
    """
    INSERT a row unless it would violate a unique constraint.

    PostgreSQL and SQLite use ``ON CONFLICT DO NOTHING``; MySQL uses
    ``INSERT IGNORE``.  Other dialects fall back to a SAVEPOINT around a
    plain INSERT and swallow only the ``IntegrityError``.

    Returns:
        True if a row was inserted, False if it already existed.
    """
    dialect = session.get_bind().dialect.name

    if dialect == "postgresql":
        stmt = postgresql.insert(model).values(**values).on_conflict_do_nothing()
    elif dialect == "sqlite":
        stmt = sqlite.insert(model).values(**values).on_conflict_do_nothing()
    elif dialect in ("mysql", "mariadb"):
        stmt = insert(model).values(**values).prefix_with("IGNORE")
    else:
        savepoint = session.begin_nested()
        try:
            session.execute(insert(model).values(**values))
            savepoint.commit()
            return True
        except IntegrityError:
            savepoint.rollback()
            logger.debug(
                "insert_ignored_conflict",
                extra={"table": model.__tablename__},
            )
            return False

    result = session.execute(stmt)
    inserted = result.rowcount == 1
    if not inserted:
        logger.debug(
            "insert_ignored_conflict",
            extra={"table": model.__tablename__},
        )
    return inserted
