# bizflow/services/money.py
"""Conversion boundary between kobo (internal ints) and naira (stored Numeric)."""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

Q = Decimal("0.01")
KOBO_PER_NAIRA = 100


def _money(v) -> Decimal:
    """Convert anything to a 2dp Decimal safely."""
    return Decimal(str(v or 0)).quantize(Q, rounding=ROUND_HALF_UP)


def naira_to_kobo(v) -> int:
    try:
        return int(_money(v) * KOBO_PER_NAIRA)
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {v!r}") from e


def kobo_to_naira(kobo: int) -> Decimal:
    return (Decimal(int(kobo)) / KOBO_PER_NAIRA).quantize(Q, rounding=ROUND_HALF_UP)


def percent_of(kobo: int, pct) -> int:
    """``kobo * pct`` rounded half up to a whole kobo."""
    share = Decimal(int(kobo)) * Decimal(str(pct))
    return int(share.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_naira(kobo: int) -> str:
    return f"₦{kobo_to_naira(kobo):,.2f}"
