from datetime import timedelta

from bizflow.models import PlanTier, Subscription, SubscriptionStatus, User
from bizflow.services.subscriptions import activate_subscription
from bizflow.services.trial import days_left, feature_access_tier, start_trial


def test_start_trial_creates_seven_day_trial(db, make_user, now):
    user = make_user("u1")
    sub = start_trial(user.id, now)

    assert sub.status == SubscriptionStatus.TRIAL
    assert sub.tier == PlanTier.FREE
    assert sub.end_date == now + timedelta(days=7)

    refreshed = db.session.get(User, user.id)
    assert refreshed.is_trial is True
    assert refreshed.trial_end_date == now + timedelta(days=7)


def test_start_trial_is_idempotent(db, make_user, now):
    user = make_user("u1")
    assert start_trial(user.id, now) is not None
    assert start_trial(user.id, now + timedelta(days=1)) is None

    rows = Subscription.query.filter_by(user_id=user.id).all()
    assert len(rows) == 1
    assert rows[0].status == SubscriptionStatus.TRIAL


def test_no_trial_after_any_subscription(db, make_user, now):
    user = make_user("u1")
    activate_subscription(user.id, "Weekly", now)
    db.session.commit()

    assert start_trial(user.id, now) is None
    assert Subscription.query.filter_by(user_id=user.id, status=SubscriptionStatus.TRIAL).count() == 0


def test_days_left(db, make_user, now):
    user = make_user("u1")
    sub = start_trial(user.id, now)

    assert days_left(sub, now) == 7
    assert days_left(sub, now + timedelta(days=2, hours=1)) == 5
    assert days_left(sub, now + timedelta(days=8)) == 0
    assert days_left(None, now) == 0


def test_days_left_without_end_date(db, make_user, now):
    user = make_user("u1")
    sub = activate_subscription(user.id, "Free", now)
    assert days_left(sub, now) == 0


def test_trial_grants_weekly_features(db, make_user, now):
    user = make_user("u1")
    sub = start_trial(user.id, now)

    assert sub.tier == PlanTier.FREE
    assert feature_access_tier(sub, now) == PlanTier.WEEKLY
    assert feature_access_tier(sub, now + timedelta(days=8)) == PlanTier.FREE


def test_feature_access_for_paid_and_missing(db, make_user, now):
    user = make_user("u1")
    assert feature_access_tier(None, now) == PlanTier.FREE

    sub = activate_subscription(user.id, "Yearly", now)
    assert feature_access_tier(sub, now) == PlanTier.YEARLY
    assert feature_access_tier(sub, now + timedelta(days=400)) == PlanTier.FREE


def test_trial_access_ends_with_the_trial(db, make_user, now):
    user = make_user("u1")
    sub = start_trial(user.id, now)

    assert feature_access_tier(sub, sub.end_date) == PlanTier.WEEKLY
    assert feature_access_tier(sub, sub.end_date + timedelta(seconds=1)) == PlanTier.FREE
