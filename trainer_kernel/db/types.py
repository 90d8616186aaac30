"""
Module: trainer_kernel.db.types
Responsibility: Precision and rounding helpers for ledger hours.
    Centralizes hours precision so that models, the duration calculator and
    the ledger service round identically.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - Hours are Decimal, never float, stored with HOURS_DECIMAL_PLACES.
    - round_hours() is the only sanctioned rounding function for hours.
"""

from decimal import ROUND_HALF_UP, Decimal

HOURS_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP


def round_hours(value: Decimal, rounding: str = DEFAULT_ROUNDING) -> Decimal:
    """
    Round an hours value to the ledger's stored precision.

    Args:
        value: Hours as Decimal.
        rounding: Rounding mode (default: ROUND_HALF_UP).

    Returns:
        Decimal quantized to two decimal places.
    """
    quantum = Decimal(1).scaleb(-HOURS_DECIMAL_PLACES)
    return value.quantize(quantum, rounding=rounding)
