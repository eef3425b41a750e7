# bizflow/services/plans.py
from dataclasses import dataclass

from bizflow.errors import UnknownTierError
from bizflow.models.enums import PlanTier


@dataclass(frozen=True)
class Plan:
    tier: PlanTier
    price: int  # kobo
    period_days: int | None


# Prices in kobo (Paystack charges in kobo)
PLANS = {
    PlanTier.FREE: Plan(PlanTier.FREE, 0, None),
    PlanTier.WEEKLY: Plan(PlanTier.WEEKLY, 140_000, 7),  # ₦1,400
    PlanTier.MONTHLY: Plan(PlanTier.MONTHLY, 450_000, 30),  # ₦4,500
    PlanTier.YEARLY: Plan(PlanTier.YEARLY, 5_000_000, 365),  # ₦50,000
}


def parse_tier(name) -> PlanTier:
    if isinstance(name, PlanTier):
        return name
    try:
        return PlanTier(str(name).strip())
    except ValueError:
        raise UnknownTierError(f"Unknown subscription tier: {name!r}") from None


def get_plan(tier) -> Plan:
    return PLANS[parse_tier(tier)]


def price_of(tier) -> int:
    return get_plan(tier).price


def period_days_of(tier) -> int | None:
    return get_plan(tier).period_days


def catalog() -> list[dict]:
    return [
        {
            "tier": plan.tier.value,
            "price": plan.price,
            "period_days": plan.period_days,
        }
        for plan in PLANS.values()
    ]
