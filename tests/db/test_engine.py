"""
Tests for trainer_kernel.db.engine: module-level engine lifecycle and the
SQLite transaction handling the ledger relies on.
"""

import pytest
from sqlalchemy import text

from trainer_kernel.db import engine as engine_module
from trainer_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from trainer_kernel.models.schedule import HolidayWeek


@pytest.fixture
def memory_engine():
    init_engine_from_url("sqlite://")
    create_tables()
    yield get_engine()
    drop_tables()
    reset_engine()


class TestLifecycle:

    def test_uninitialized(self):
        reset_engine()
        with pytest.raises(RuntimeError):
            get_engine()
        with pytest.raises(RuntimeError):
            get_session()
        with pytest.raises(RuntimeError):
            get_session_factory()

    def test_reinit_replaces_engine(self, memory_engine):
        second = init_engine_from_url("sqlite://")
        assert get_engine() is second
        assert second is not memory_engine

    def test_session_factory_binds_engine(self, memory_engine):
        session = get_session_factory()()
        try:
            assert session.get_bind() is memory_engine
        finally:
            session.close()


class TestSessionScope:

    def test_commits_on_success(self, memory_engine):
        with session_scope() as session:
            session.add(HolidayWeek(week_number=1, year=2026))

        with session_scope() as session:
            assert session.query(HolidayWeek).count() == 1

    def test_rolls_back_on_error(self, memory_engine):
        with pytest.raises(RuntimeError):
            with session_scope() as session:
                session.add(HolidayWeek(week_number=1, year=2026))
                session.flush()
                raise RuntimeError("abort")

        with session_scope() as session:
            assert session.query(HolidayWeek).count() == 0


class TestSqliteTransactions:

    def test_savepoint_rollback_keeps_outer_work(self, memory_engine):
        session = get_session()
        try:
            session.add(HolidayWeek(week_number=1, year=2026))
            session.flush()
            savepoint = session.begin_nested()
            session.add(HolidayWeek(week_number=2, year=2026))
            session.flush()
            savepoint.rollback()
            session.commit()

            assert [h.week_number for h in session.query(HolidayWeek).all()] == [1]
        finally:
            session.close()

    def test_foreign_keys_enforced(self, memory_engine):
        with get_engine().connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_module_state_reset(self, memory_engine):
        reset_engine()
        assert engine_module._engine is None
        init_engine_from_url("sqlite://")
        create_tables()
