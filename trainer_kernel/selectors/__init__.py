"""Selectors for the trainer kernel (read side)."""

from trainer_kernel.selectors.ledger_selector import LedgerSelector
from trainer_kernel.selectors.schedule_selector import ScheduleSelector

__all__ = [
    "LedgerSelector",
    "ScheduleSelector",
]
