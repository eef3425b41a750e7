# bizflow/models/enums.py
"""Closed value sets for tiers and status columns.

Members compare equal to their stored literals ("Active", "pending", ...)
so rows written before these types existed keep loading.
"""
import enum

from bizflow.extensions import db


class PlanTier(str, enum.Enum):
    FREE = "Free"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "Active"
    EXPIRED = "Expired"
    TRIAL = "Trial"


class ReferralStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class EarningStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"


class WithdrawalStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


def literal_enum(enum_cls, length: int = 20):
    """Column type storing an enum as its literal value in a plain string column."""
    return db.Enum(
        enum_cls,
        native_enum=False,
        create_constraint=False,
        length=length,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )
