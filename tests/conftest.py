from datetime import datetime

import pytest
from flask import g

from bizflow import create_app
from bizflow.extensions import db as _db
from bizflow.models import PlanTier, Referral, ReferralStatus, User
from bizflow.services.referral import generate_referral_code


@pytest.fixture()
def app():
    app = create_app("config.TestingConfig")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def db(app):
    return _db


@pytest.fixture()
def client(app):
    # Requests share the fixture's app context, so drop the identity Flask-Login caches on g
    @app.before_request
    def _reset_identity():
        g.pop("_login_user", None)

    return app.test_client()


@pytest.fixture()
def now():
    return datetime(2026, 1, 10, 12, 0, 0)


@pytest.fixture()
def make_user(db):
    def _make_user(user_id, business_name="Acme Stores", is_admin=False, email=None):
        user = User(
            id=user_id,
            email=email or f"{user_id}@example.com",
            business_name=business_name,
            subscription_tier=PlanTier.FREE,
            is_admin=is_admin,
        )
        user.referral_code = generate_referral_code(business_name)
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture()
def make_referral(db):
    def _make_referral(referrer, referred, status=ReferralStatus.PENDING):
        referral = Referral(referrer_id=referrer.id, referred_id=referred.id, status=status)
        db.session.add(referral)
        db.session.commit()
        return referral
    return _make_referral


@pytest.fixture()
def auth_headers():
    def _auth_headers(user_id, email=None):
        headers = {"X-User-Id": user_id}
        if email:
            headers["X-User-Email"] = email
        return headers
    return _auth_headers
