#!/usr/bin/env python3
"""
ledgerctl -- operator command line for the training-hours ledger.

Usage:
  python -m scripts.ledgerctl [--config PATH] init-db
  python -m scripts.ledgerctl reconcile COURSE_ID WEEK YEAR
  python -m scripts.ledgerctl reconcile-week WEEK YEAR
  python -m scripts.ledgerctl resync
  python -m scripts.ledgerctl report YEAR [--from-week N] [--to-week M]

Settings come from --config, $TRAINER_LEDGER_CONFIG or the shipped
defaults; $TRAINER_LEDGER_DATABASE_URL overrides the database.  Typical
cron line for the nightly resync:

  5 0 * * *  python -m scripts.ledgerctl resync

Output: one JSON document on stdout.  Structured logs go to stderr.
Exit codes: 0 success, 1 reconciliation failure, 2 invalid input.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Sequence

from trainer_batch.orchestrator import LedgerBatchOrchestrator
from trainer_config import LedgerSettings, get_active_settings
from trainer_kernel.db.engine import create_tables, get_session, init_engine_from_url
from trainer_kernel.domain.calendar import validate_iso_week
from trainer_kernel.domain.clock import Clock, SystemClock
from trainer_kernel.exceptions import CalendarError, ReconciliationError, TrainerKernelError
from trainer_kernel.logging_config import configure_logging
from trainer_kernel.selectors.ledger_selector import LedgerSelector
from trainer_kernel.services.reconciliation_service import ReconciliationService

EXIT_OK = 0
EXIT_RECONCILE_FAILED = 1
EXIT_INVALID_INPUT = 2


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _error(code: str, message: str) -> None:
    print(json.dumps({"error": code, "message": message}), file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledgerctl",
        description="Reconcile and report the training-hours ledger.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", default=None, help="YAML settings file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create all tables")

    p = sub.add_parser("reconcile", help="Reconcile one course for one ISO week")
    p.add_argument("course_id", type=int)
    p.add_argument("week", type=int)
    p.add_argument("year", type=int)

    p = sub.add_parser("reconcile-week", help="Reconcile every course of one ISO week")
    p.add_argument("week", type=int)
    p.add_argument("year", type=int)

    sub.add_parser("resync", help="Bring ledger rows of past training days up to date")

    p = sub.add_parser("report", help="Hours per trainer for one ISO year")
    p.add_argument("year", type=int)
    p.add_argument("--from-week", type=int, default=1)
    p.add_argument("--to-week", type=int, default=53)

    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_init_db(args: argparse.Namespace, settings: LedgerSettings, clock: Clock) -> int:
    create_tables()
    _emit({"status": "ok"})
    return EXIT_OK


def cmd_reconcile(args: argparse.Namespace, settings: LedgerSettings, clock: Clock) -> int:
    session = get_session()
    try:
        service = ReconciliationService(
            session,
            clock=clock,
            activation_date=settings.activation_date,
            reconciler_actor=settings.reconciler_actor,
            synchronizer_actor=settings.synchronizer_actor,
        )
        result = service.reconcile(args.course_id, args.week, args.year)
    finally:
        session.close()
    _emit({
        "course_id": result.course_id,
        "week": result.week,
        "year": result.year,
        "gate_open": result.gate_open,
        **result.as_dict(),
    })
    return EXIT_OK


def cmd_reconcile_week(args: argparse.Namespace, settings: LedgerSettings, clock: Clock) -> int:
    session = get_session()
    try:
        orchestrator = LedgerBatchOrchestrator.from_session(session, clock=clock, settings=settings)
        run = orchestrator.reconcile_week(args.week, args.year)
    finally:
        session.close()
    _emit({
        "week": args.week,
        "year": args.year,
        "status": run.status.value,
        "succeeded": run.succeeded,
        "skipped": run.skipped,
        "failed": run.failed,
        "items": [
            {
                "item_key": item.item_key,
                "status": item.status.value,
                "result": item.result_data,
                "error_code": item.error_code,
            }
            for item in run.item_results
        ],
    })
    return EXIT_RECONCILE_FAILED if run.failed else EXIT_OK


def cmd_resync(args: argparse.Namespace, settings: LedgerSettings, clock: Clock) -> int:
    session = get_session()
    try:
        orchestrator = LedgerBatchOrchestrator.from_session(session, clock=clock, settings=settings)
        summary = orchestrator.resync_past_days()
    finally:
        session.close()
    # Best effort: item failures are reported in the summary, not the exit code.
    _emit(summary.as_dict())
    return EXIT_OK


def cmd_report(args: argparse.Namespace, settings: LedgerSettings, clock: Clock) -> int:
    validate_iso_week(1, args.year)
    if not 1 <= args.from_week <= args.to_week <= 53:
        raise ValueError(f"invalid week range {args.from_week}..{args.to_week}")
    session = get_session()
    try:
        rows = LedgerSelector(session).hours_by_trainer(args.year, args.from_week, args.to_week)
    finally:
        session.close()
    _emit([
        {
            "trainer_id": row.trainer_id,
            "session_count": row.session_count,
            "total_hours": str(row.total_hours),
        }
        for row in rows
    ])
    return EXIT_OK


COMMANDS = {
    "init-db": cmd_init_db,
    "reconcile": cmd_reconcile,
    "reconcile-week": cmd_reconcile_week,
    "resync": cmd_resync,
    "report": cmd_report,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_active_settings(args.config)
    except (FileNotFoundError, ValueError) as exc:
        _error("INVALID_SETTINGS", str(exc))
        return EXIT_INVALID_INPUT

    configure_logging(level=settings.log_level)
    init_engine_from_url(settings.database_url, echo=settings.echo_sql)
    clock = SystemClock(settings.tz)

    try:
        return COMMANDS[args.command](args, settings, clock)
    except ReconciliationError as exc:
        _error(exc.code, str(exc))
        return EXIT_RECONCILE_FAILED
    except (CalendarError, ValueError) as exc:
        _error(getattr(exc, "code", "INVALID_INPUT"), str(exc))
        return EXIT_INVALID_INPUT
    except TrainerKernelError as exc:
        _error(exc.code, str(exc))
        return EXIT_INVALID_INPUT


if __name__ == "__main__":
    raise SystemExit(main())
