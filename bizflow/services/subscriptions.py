# bizflow/services/subscriptions.py
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from bizflow.errors import ExternalServiceError, InvalidRequestError, NoActiveSubscriptionError
from bizflow.extensions import db
from bizflow.models import PlanTier, Subscription, SubscriptionStatus, User
from bizflow.services.money import kobo_to_naira, naira_to_kobo
from bizflow.services.plans import parse_tier, period_days_of

CURRENT_STATUSES = (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIAL)


def get_current_subscription(user_id: str) -> Subscription | None:
    return (
        Subscription.query
        .filter(
            Subscription.user_id == user_id,
            Subscription.status.in_(CURRENT_STATUSES),
        )
        .order_by(Subscription.start_date.desc(), Subscription.id.desc())
        .first()
    )


def require_current_subscription(user_id: str) -> Subscription:
    sub = get_current_subscription(user_id)
    if sub is None:
        raise NoActiveSubscriptionError()
    return sub


def is_lapsed(subscription: Subscription, now: datetime) -> bool:
    return (
        subscription.status in CURRENT_STATUSES
        and subscription.end_date is not None
        and now > subscription.end_date
    )


def lock_user(user_id: str) -> User:
    """Row-lock the owner so concurrent tier changes for one user serialize."""
    user = (
        db.session.query(User)
        .filter(User.id == user_id)
        .with_for_update()
        .one_or_none()
    )
    if user is None:
        raise InvalidRequestError(f"Unknown user: {user_id}")
    return user


def activate_subscription(user_id: str, tier, now: datetime, amount_paid: int = 0) -> Subscription:
    """Expire the user's current row and insert the new ``Active`` one.

    Runs inside the caller's transaction; nothing is committed here, so a
    failure before the caller commits leaves the previous row current.
    """
    tier = parse_tier(tier)
    user = lock_user(user_id)

    expired = (
        Subscription.query
        .filter(
            Subscription.user_id == user_id,
            Subscription.status.in_(CURRENT_STATUSES),
        )
        .update(
            {Subscription.status: SubscriptionStatus.EXPIRED, Subscription.updated_at: now},
            synchronize_session="fetch",
        )
    )

    period = period_days_of(tier)
    sub = Subscription(
        user_id=user_id,
        tier=tier,
        status=SubscriptionStatus.ACTIVE,
        start_date=now,
        end_date=now + timedelta(days=period) if period else None,
        amount_paid=kobo_to_naira(amount_paid),
        created_at=now,
        updated_at=now,
    )
    db.session.add(sub)

    user.subscription_tier = tier
    user.is_trial = False
    db.session.flush()

    current_app.logger.info(
        "Subscription %s activated for user %s: tier=%s end=%s (expired %d prior)",
        sub.id, user_id, tier.value, sub.end_date, expired,
    )
    return sub


def expire_lapsed_subscriptions(now: datetime) -> int:
    """Flip every ``Active``/``Trial`` row whose end date has passed to ``Expired``.

    Called by the external scheduler; returns the number of rows expired.
    """
    try:
        lapsed = (
            Subscription.query
            .filter(
                Subscription.status.in_(CURRENT_STATUSES),
                Subscription.end_date.isnot(None),
                Subscription.end_date < now,
            )
            .with_for_update()
            .all()
        )
        user_ids = set()
        for sub in lapsed:
            sub.status = SubscriptionStatus.EXPIRED
            sub.updated_at = now
            user_ids.add(sub.user_id)

        if user_ids:
            (
                User.query
                .filter(User.id.in_(user_ids))
                .update(
                    {User.subscription_tier: PlanTier.FREE, User.is_trial: False},
                    synchronize_session="fetch",
                )
            )

        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ExternalServiceError(str(e)) from e

    current_app.logger.info("Expired %d lapsed subscription(s)", len(lapsed))
    return len(lapsed)


def serialize_subscription(sub: Subscription) -> dict:
    return {
        "id": sub.id,
        "tier": sub.tier.value,
        "status": sub.status.value,
        "start_date": sub.start_date.isoformat() if sub.start_date else None,
        "end_date": sub.end_date.isoformat() if sub.end_date else None,
        "amount_paid": naira_to_kobo(sub.amount_paid),
    }
