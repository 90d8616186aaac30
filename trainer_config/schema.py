"""
Settings schema (``trainer_config.schema``).

Frozen dataclass describing everything the ledger needs at runtime.  Built
only by ``trainer_config.loader``; consumed by the CLI and the batch
orchestrator.  ZERO I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, tzinfo
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class LedgerSettings:
    """Runtime settings for the ledger engine and its tooling."""

    database_url: str
    activation_date: date | None = None
    local_timezone: str = "Europe/Berlin"
    reconciler_actor: str = "reconciler"
    synchronizer_actor: str = "auto-sync"
    log_level: str = "INFO"
    echo_sql: bool = False

    def __post_init__(self) -> None:
        if not self.database_url:
            raise ValueError("database_url must not be empty")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log_level: {self.log_level!r}")
        if not self.reconciler_actor or not self.synchronizer_actor:
            raise ValueError("actor tags must not be empty")

    @property
    def tz(self) -> tzinfo:
        return ZoneInfo(self.local_timezone)

    def with_database_url(self, database_url: str) -> LedgerSettings:
        return LedgerSettings(
            database_url=database_url,
            activation_date=self.activation_date,
            local_timezone=self.local_timezone,
            reconciler_actor=self.reconciler_actor,
            synchronizer_actor=self.synchronizer_actor,
            log_level=self.log_level,
            echo_sql=self.echo_sql,
        )
