"""Services for the trainer kernel (write side)."""

from trainer_kernel.services.ledger_service import LedgerService
from trainer_kernel.services.master_data_service import MasterDataService
from trainer_kernel.services.reconciliation_service import ReconciliationService
from trainer_kernel.services.schedule_service import ScheduleService

__all__ = [
    "LedgerService",
    "MasterDataService",
    "ReconciliationService",
    "ScheduleService",
]
