from datetime import timedelta

from bizflow.models import PlanTier, Referral, ReferralStatus, Subscription, SubscriptionStatus, User
from bizflow.services.accounts import ensure_user_setup


def test_setup_creates_profile_and_trial(db, now):
    user, created = ensure_user_setup("u1", "owner@bola.ng", business_name="Bola Foods", now=now)

    assert created is True
    assert user.referral_code.startswith("BOL")
    assert user.subscription_tier == PlanTier.FREE
    assert user.is_trial is True
    assert user.trial_end_date == now + timedelta(days=7)

    sub = Subscription.query.filter_by(user_id="u1").one()
    assert sub.status == SubscriptionStatus.TRIAL


def test_setup_links_referrer(db, make_user, now):
    referrer = make_user("alice", business_name="Alice Fabrics")

    user, _ = ensure_user_setup("u1", "owner@bola.ng", referral_code=referrer.referral_code, now=now)

    referral = Referral.query.filter_by(referred_id=user.id).one()
    assert referral.referrer_id == referrer.id
    assert referral.status == ReferralStatus.PENDING


def test_setup_is_idempotent(db, now):
    first, created = ensure_user_setup("u1", "owner@bola.ng", business_name="Bola Foods", now=now)
    code = first.referral_code

    again, created_again = ensure_user_setup("u1", "owner@bola.ng", business_name="Other", now=now + timedelta(days=1))

    assert created is True
    assert created_again is False
    assert again.referral_code == code
    assert again.business_name == "Bola Foods"
    assert Subscription.query.filter_by(user_id="u1").count() == 1


def test_unknown_referral_code_is_ignored(db, now):
    user, created = ensure_user_setup("u1", "owner@bola.ng", referral_code="MISSING1", now=now)
    assert created is True
    assert Referral.query.count() == 0


def test_setup_issues_missing_referral_code(db, now):
    db.session.add(User(id="legacy", email="legacy@example.com", business_name="Legacy Traders", referral_code=None))
    db.session.commit()

    user, created = ensure_user_setup("legacy", "legacy@example.com", now=now)

    assert created is False
    assert user.referral_code is not None
    assert user.referral_code.startswith("LEG")
    assert db.session.get(User, "legacy").referral_code == user.referral_code


def test_existing_referral_code_is_kept(db, make_user, now):
    user = make_user("alice", business_name="Alice Fabrics")
    code = user.referral_code

    again, _ = ensure_user_setup("alice", "alice@example.com", now=now)

    assert again.referral_code == code
