"""
trainer_config -- single public entrypoint for ledger settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``.  No other component reads settings files or
    environment variables directly.

Architecture position:
    Configuration.  Sits above ``trainer_kernel``; the kernel never
    imports from ``trainer_config`` -- services receive plain values
    (activation date, actor tags, clock) from their callers.

Environment:
    TRAINER_LEDGER_CONFIG        path to a YAML settings file
    TRAINER_LEDGER_DATABASE_URL  overrides ``database_url``

Audit relevance:
    Every call emits a ``ledger_settings_loaded`` log entry naming the
    source file, activation date and time zone in effect.
"""

from __future__ import annotations

import os
from pathlib import Path

from trainer_kernel.logging_config import get_logger

from trainer_config.loader import load_settings
from trainer_config.schema import LedgerSettings

CONFIG_ENV_VAR = "TRAINER_LEDGER_CONFIG"
DATABASE_URL_ENV_VAR = "TRAINER_LEDGER_DATABASE_URL"

_logger = get_logger("config")


def get_active_settings(config_path: Path | str | None = None) -> LedgerSettings:
    """The ONLY public settings entrypoint.

    Args:
        config_path: Explicit YAML file.  Falls back to
            ``$TRAINER_LEDGER_CONFIG``, then to the shipped defaults.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        ValueError: If the settings are invalid.
    """
    source = config_path or os.environ.get(CONFIG_ENV_VAR) or None
    settings = load_settings(Path(source) if source else None)

    database_url = os.environ.get(DATABASE_URL_ENV_VAR)
    if database_url:
        settings = settings.with_database_url(database_url)

    _logger.info(
        "ledger_settings_loaded",
        extra={
            "source": str(source) if source else "defaults",
            "activation_date": settings.activation_date,
            "local_timezone": settings.local_timezone,
            "database_url_overridden": bool(database_url),
        },
    )
    return settings


__all__ = [
    "CONFIG_ENV_VAR",
    "DATABASE_URL_ENV_VAR",
    "LedgerSettings",
    "get_active_settings",
    "load_settings",
]
