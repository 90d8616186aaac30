"""
Configuration Loader (``trainer_config.loader``).

Responsibility
--------------
Loads a YAML settings file, layers it over the shipped
``defaults.yaml`` and parses the result into a frozen
``LedgerSettings``.  Runtime code does not call this directly; the single
entry point is ``trainer_config.get_active_settings()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys, wrong types, invalid dates or time zones -> ``ValueError``.
"""

from __future__ import annotations

from dataclasses import fields
from datetime import date
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfoNotFoundError

import yaml

from trainer_config.schema import LedgerSettings

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

_KNOWN_KEYS = frozenset(f.name for f in fields(LedgerSettings))


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level, got {type(data).__name__}")
    return data


def parse_date(value: Any) -> date | None:
    """
    Parse an optional date from YAML (string, date object or null).

    Raises:
        ValueError: if ``value`` is not a valid date representation.
    """
    if value is None:
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_settings(data: dict[str, Any]) -> LedgerSettings:
    """Build LedgerSettings from a merged mapping."""
    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        raise ValueError(f"Unknown settings keys: {sorted(unknown)}")

    echo_sql = data.get("echo_sql", False)
    if not isinstance(echo_sql, bool):
        raise ValueError(f"echo_sql must be true or false, got {echo_sql!r}")

    settings = LedgerSettings(
        database_url=str(data["database_url"]),
        activation_date=parse_date(data.get("activation_date")),
        local_timezone=str(data.get("local_timezone", "Europe/Berlin")),
        reconciler_actor=str(data.get("reconciler_actor", "reconciler")),
        synchronizer_actor=str(data.get("synchronizer_actor", "auto-sync")),
        log_level=str(data.get("log_level", "INFO")).upper(),
        echo_sql=echo_sql,
    )
    try:
        settings.tz
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown local_timezone: {settings.local_timezone!r}") from None
    return settings


def load_settings(path: Path | None = None) -> LedgerSettings:
    """
    Load settings from ``path`` layered over the shipped defaults.

    Args:
        path: YAML file with overrides.  None loads the defaults only.
    """
    data = load_yaml_file(DEFAULTS_PATH)
    if path is not None:
        data.update(load_yaml_file(Path(path)))
    return parse_settings(data)
