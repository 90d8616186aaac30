"""
Tests for trainer_batch.orchestrator: wiring and week-wide reconciliation.
"""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from trainer_kernel.exceptions import InvalidWeekError
from trainer_kernel.models.schedule import WeeklyAssignment

from trainer_batch.domain.types import BatchItemStatus, BatchRunStatus
from trainer_batch.orchestrator import LedgerBatchOrchestrator
from trainer_batch.services.executor import BatchExecutor
from trainer_config.schema import LedgerSettings


def _assign(session, course_id, week, trainer_id, year=2026):
    session.add(WeeklyAssignment(
        course_id=course_id, week_number=week, year=year, trainer_id=trainer_id,
    ))
    session.commit()


@pytest.fixture
def orchestrator(session, clock) -> LedgerBatchOrchestrator:
    return LedgerBatchOrchestrator.from_session(session, clock=clock)


class TestWiring:

    def test_from_session_registers_ledger_tasks(self, orchestrator, session):
        assert orchestrator.session is session
        assert orchestrator.task_registry.list_tasks() == (
            "ledger.reconcile_week", "ledger.resync_past_days",
        )
        assert isinstance(orchestrator.create_executor(), BatchExecutor)

    def test_settings_actor_reaches_tasks(self, session, clock, ledger_selector, make_course, make_trainer):
        settings = LedgerSettings(database_url="sqlite://", synchronizer_actor="nightly")
        orchestrator = LedgerBatchOrchestrator.from_session(session, clock=clock, settings=settings)
        course_id, trainer_id = make_course(), make_trainer()
        _assign(session, course_id, 10, trainer_id)

        orchestrator.resync_past_days()

        assert ledger_selector.entry_for_key(course_id, 10, 2026, trainer_id).recorded_by == "nightly"

    def test_settings_activation_date(self, session, clock, make_course, make_trainer):
        settings = LedgerSettings(database_url="sqlite://", activation_date=date(2026, 3, 4))
        orchestrator = LedgerBatchOrchestrator.from_session(session, clock=clock, settings=settings)
        _assign(session, make_course(), 10, make_trainer())

        summary = orchestrator.resync_past_days()

        assert summary.skipped == 1


class TestReconcileWeek:

    def test_reconciles_every_course(self, session, orchestrator, ledger_selector, make_course, make_trainer):
        c1 = make_course()
        c2 = make_course(weekday="Montag", name="Yoga")
        trainer_id = make_trainer()
        _assign(session, c1, 10, trainer_id)
        _assign(session, c2, 10, trainer_id)

        run = orchestrator.reconcile_week(10, 2026)

        assert run.status is BatchRunStatus.COMPLETED
        assert run.succeeded == 2
        assert [r.item_key for r in run.item_results] == [f"{c1}:2026-W10", f"{c2}:2026-W10"]
        assert run.item_results[0].result_data == {"added": [trainer_id], "removed": []}
        assert ledger_selector.course_ids_in_week(10, 2026) == {c1, c2}

    def test_future_courses_skipped(self, session, orchestrator, make_course, make_trainer):
        tuesday = make_course()
        thursday = make_course(weekday="Donnerstag", name="Volleyball")
        trainer_id = make_trainer()
        _assign(session, tuesday, 10, trainer_id)
        _assign(session, thursday, 10, trainer_id)

        run = orchestrator.reconcile_week(10, 2026)

        assert (run.succeeded, run.skipped) == (1, 1)
        assert run.item_results[1].status is BatchItemStatus.SKIPPED

    def test_failure_isolated_per_course(self, session, orchestrator, ledger_selector, make_course, make_trainer, monkeypatch):
        import trainer_kernel.services.reconciliation_service as module

        c1 = make_course()
        c2 = make_course(weekday="Montag", name="Yoga")
        trainer_id = make_trainer()
        _assign(session, c1, 10, trainer_id)
        _assign(session, c2, 10, trainer_id)
        original = module.insert_ignore

        def _flaky(sess, model, values):
            if values["course_id"] == c1:
                raise OperationalError("INSERT", {}, Exception("deadlock"))
            return original(sess, model, values)

        monkeypatch.setattr(module, "insert_ignore", _flaky)

        run = orchestrator.reconcile_week(10, 2026)

        assert run.status is BatchRunStatus.PARTIALLY_COMPLETED
        assert run.failed_items[0].error_code == "RECONCILIATION_FAILED"
        assert ledger_selector.course_ids_in_week(10, 2026) == {c2}

    def test_invalid_week(self, orchestrator):
        with pytest.raises(InvalidWeekError):
            orchestrator.reconcile_week(53, 2025)
