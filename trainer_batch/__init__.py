"""
trainer_batch -- Batch runs over the training-hours ledger.

Provides a batch executor with per-item SAVEPOINT isolation and the two
ledger tasks built on it: the bulk resync of past training days and the
per-week reconciliation.  A failing item is rolled back, logged and
counted; the remaining items still run.

Architecture:
    trainer_batch/ is a top-level package.  Nothing in trainer_kernel/
    imports from trainer_batch.  Scheduling the runs (cron, a job
    runner) is left to the caller; ``scripts/ledgerctl.py resync`` is the
    operator entry point.
"""
