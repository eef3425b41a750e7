from .enums import (
    EarningStatus,
    PaymentStatus,
    PlanTier,
    ReferralStatus,
    SubscriptionStatus,
    WithdrawalStatus,
)
from .user import User
from .subscription import Subscription, SubscriptionPayment
from .referral import Referral
from .referral_earning import ReferralEarning
from .withdrawal import WithdrawalRequest

__all__ = [
    "EarningStatus",
    "PaymentStatus",
    "PlanTier",
    "ReferralStatus",
    "SubscriptionStatus",
    "WithdrawalStatus",
    "User",
    "Subscription",
    "SubscriptionPayment",
    "Referral",
    "ReferralEarning",
    "WithdrawalRequest",
]
