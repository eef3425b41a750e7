# bizflow/services/prorata.py
import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from bizflow.models.enums import PlanTier
from bizflow.services.plans import parse_tier, period_days_of, price_of

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class UpgradeQuote:
    current_tier: PlanTier | None
    target_tier: PlanTier
    remaining_days: int
    daily_rate: Decimal  # kobo per day, for display only
    credit: int  # kobo
    original_amount: int  # kobo
    amount_due: int  # kobo

    def to_dict(self) -> dict:
        return {
            "current_tier": self.current_tier.value if self.current_tier else None,
            "target_tier": self.target_tier.value,
            "remaining_days": self.remaining_days,
            "daily_rate": str(self.daily_rate),
            "pro_rata_credit": self.credit,
            "original_amount": self.original_amount,
            "amount_due": self.amount_due,
        }


def remaining_days(end_date: datetime | None, now: datetime) -> int:
    """Whole days left until ``end_date``, rounded up; 0 once it has passed."""
    if end_date is None:
        return 0
    seconds = (end_date - now).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))


def quote_upgrade(current, target, now: datetime) -> UpgradeQuote:
    """Price a switch from ``current`` (a Subscription or None) to ``target``.

    Unused days of the current period are credited at the current plan's
    daily rate. The credit is floored so it never exceeds what remains, and
    the amount due never drops below zero.
    """
    target_tier = parse_tier(target)
    original = price_of(target_tier)

    current_tier = None
    days = 0
    rate = Decimal(0)
    credit = 0

    if current is not None:
        current_tier = parse_tier(current.tier)
        period = period_days_of(current_tier)
        days = remaining_days(current.end_date, now)
        if period:
            price = price_of(current_tier)
            rate = Decimal(price) / Decimal(period)
            # floor(price / period * days) without float error
            credit = (price * days) // period

    amount_due = max(0, original - credit)

    return UpgradeQuote(
        current_tier=current_tier,
        target_tier=target_tier,
        remaining_days=days,
        daily_rate=rate.quantize(Decimal("0.01")),
        credit=credit,
        original_amount=original,
        amount_due=amount_due,
    )
