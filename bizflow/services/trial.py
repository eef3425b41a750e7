# bizflow/services/trial.py
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from bizflow.errors import ExternalServiceError
from bizflow.extensions import db
from bizflow.models import PlanTier, Subscription, SubscriptionStatus
from bizflow.services.plans import parse_tier
from bizflow.services.prorata import remaining_days
from bizflow.services.subscriptions import is_lapsed, lock_user
from bizflow.utils import utcnow


def start_trial(user_id: str, now: datetime | None = None) -> Subscription | None:
    """Open the signup trial. Returns None when the user already has any subscription row."""
    now = now or utcnow()
    days = current_app.config.get("TRIAL_DAYS", 7)

    try:
        user = lock_user(user_id)

        if Subscription.query.filter_by(user_id=user_id).first() is not None:
            db.session.rollback()
            current_app.logger.info("Trial already initialized for user %s", user_id)
            return None

        end = now + timedelta(days=days)
        sub = Subscription(
            user_id=user_id,
            # billing label stays Free; feature access comes from TRIAL_ACCESS_TIER
            tier=PlanTier.FREE,
            status=SubscriptionStatus.TRIAL,
            start_date=now,
            end_date=end,
            amount_paid=0,
            created_at=now,
            updated_at=now,
        )
        db.session.add(sub)

        user.subscription_tier = PlanTier.FREE
        user.is_trial = True
        user.trial_end_date = end

        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ExternalServiceError(str(e)) from e

    current_app.logger.info("Started %d-day trial for user %s (ends %s)", days, user_id, end)
    return sub


def days_left(subscription: Subscription | None, now: datetime | None = None) -> int:
    if subscription is None:
        return 0
    return remaining_days(subscription.end_date, now or utcnow())


def feature_access_tier(subscription: Subscription | None, now: datetime | None = None) -> PlanTier:
    """Feature level the user currently gets, separate from the billing label."""
    now = now or utcnow()
    if subscription is None or is_lapsed(subscription, now):
        return PlanTier.FREE

    if subscription.status == SubscriptionStatus.TRIAL:
        return parse_tier(current_app.config.get("TRIAL_ACCESS_TIER", "Weekly"))

    if subscription.status == SubscriptionStatus.ACTIVE:
        return subscription.tier

    return PlanTier.FREE
