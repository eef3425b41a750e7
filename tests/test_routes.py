from datetime import timedelta
from decimal import Decimal

import pytest

from bizflow.models import ReferralEarning, PlanTier, WithdrawalStatus
from bizflow.services import paystack
from bizflow.services.subscriptions import activate_subscription
from bizflow.services.trial import start_trial
from bizflow.utils import utcnow


@pytest.fixture()
def stub_paystack(monkeypatch):
    charges = {}

    def fake_initialize(email, amount, reference, callback_url=None):
        charges[reference] = amount
        return f"https://checkout.paystack.com/{reference}"

    def fake_verify(reference):
        if reference in charges:
            return {"status": "success", "reference": reference, "amount": charges[reference]}
        return None

    monkeypatch.setattr(paystack, "initialize_transaction", fake_initialize)
    monkeypatch.setattr(paystack, "verify_transaction", fake_verify)
    return charges


def test_plans_are_public(client):
    resp = client.get("/subscriptions/plans")
    assert resp.status_code == 200
    tiers = {p["tier"]: p["price"] for p in resp.get_json()["plans"]}
    assert tiers == {"Free": 0, "Weekly": 140000, "Monthly": 450000, "Yearly": 5000000}


def test_requests_without_identity_are_rejected(client):
    resp = client.get("/subscriptions/current")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "unauthorized"


def test_setup_then_me(client, auth_headers, make_user):
    referrer = make_user("alice", business_name="Alice Fabrics")

    resp = client.post(
        "/auth/setup",
        json={"business_name": "Bola Foods", "referral_code": referrer.referral_code},
        headers=auth_headers("bola", email="owner@bola.ng"),
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["created"] is True
    assert body["user"]["is_trial"] is True
    assert body["user"]["subscription_tier"] == "Free"
    assert body["user"]["feature_access_tier"] == "Weekly"
    assert body["user"]["trial_days_left"] == 7

    again = client.post("/auth/setup", json={}, headers=auth_headers("bola", email="owner@bola.ng"))
    assert again.status_code == 200
    assert again.get_json()["created"] is False

    me = client.get("/auth/me", headers=auth_headers("bola"))
    assert me.status_code == 200
    assert me.get_json()["user"]["email"] == "owner@bola.ng"


def test_setup_requires_email(client, auth_headers):
    resp = client.post("/auth/setup", json={}, headers=auth_headers("bola"))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid_request"


def test_current_subscription_and_trial(client, auth_headers, make_user):
    user = make_user("bola")

    resp = client.get("/subscriptions/current", headers=auth_headers(user.id))
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "no_active_subscription"

    started = client.post("/subscriptions/trial", headers=auth_headers(user.id))
    assert started.status_code == 201
    assert started.get_json()["started"] is True

    repeated = client.post("/subscriptions/trial", headers=auth_headers(user.id))
    assert repeated.status_code == 200
    assert repeated.get_json()["started"] is False

    status = client.get("/subscriptions/trial", headers=auth_headers(user.id)).get_json()
    assert status["is_trial"] is True
    assert status["days_left"] == 7
    assert status["feature_access_tier"] == "Weekly"

    current = client.get("/subscriptions/current", headers=auth_headers(user.id)).get_json()
    assert current["subscription"]["status"] == "Trial"


def test_quote_endpoint(client, db, auth_headers, make_user):
    user = make_user("bola")
    activate_subscription(user.id, "Weekly", utcnow() - timedelta(days=4))
    db.session.commit()

    resp = client.post("/subscriptions/quote", json={"new_tier": "Monthly"}, headers=auth_headers(user.id))
    assert resp.status_code == 200
    quote = resp.get_json()["quote"]
    assert quote["remaining_days"] == 3
    assert quote["pro_rata_credit"] == 60000
    assert quote["amount_due"] == 390000


def test_unknown_tier_is_a_client_error(client, auth_headers, make_user):
    user = make_user("bola")
    resp = client.post("/subscriptions/quote", json={"new_tier": "Platinum"}, headers=auth_headers(user.id))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "unknown_tier"

    missing = client.post("/subscriptions/quote", json={}, headers=auth_headers(user.id))
    assert missing.status_code == 400
    assert "new_tier" in missing.get_json()["errors"]


def test_upgrade_and_verify_flow(client, db, auth_headers, make_user, make_referral, stub_paystack):
    referrer = make_user("alice")
    user = make_user("bola")
    make_referral(referrer, user)
    start_trial(user.id)

    resp = client.post(
        "/subscriptions/upgrade",
        json={"new_tier": "Monthly", "current_tier": "Weekly"},
        headers=auth_headers(user.id),
    )
    assert resp.status_code == 202
    body = resp.get_json()
    assert body["status"] == "pending"
    assert body["quote"]["amount_due"] == 450000
    reference = body["reference"]

    verified = client.get(f"/subscriptions/verify?reference={reference}", headers=auth_headers(user.id))
    assert verified.status_code == 200
    data = verified.get_json()
    assert data["subscription"]["tier"] == "Monthly"
    assert data["subscription"]["status"] == "Active"
    assert data["referral"] == {"processed": True, "referrer_id": "alice", "earning_amount": 45000}

    replay = client.get(f"/subscriptions/verify?reference={reference}", headers=auth_headers(user.id))
    assert replay.get_json()["already_processed"] is True

    stats = client.get("/referrals/stats", headers=auth_headers(referrer.id)).get_json()
    assert stats["total_earnings"] == 45000
    assert stats["available_balance"] == 45000
    assert stats["completed_referrals"] == 1


def test_verify_unpaid_reference(client, auth_headers, make_user, monkeypatch, stub_paystack):
    user = make_user("bola")
    start_trial(user.id)
    reference = client.post(
        "/subscriptions/upgrade", json={"new_tier": "Weekly"}, headers=auth_headers(user.id)
    ).get_json()["reference"]

    monkeypatch.setattr(paystack, "verify_transaction", lambda ref: None)
    resp = client.get(f"/subscriptions/verify?reference={reference}", headers=auth_headers(user.id))
    assert resp.status_code == 402
    assert resp.get_json()["error"] == "payment_required"

    missing = client.get("/subscriptions/verify", headers=auth_headers(user.id))
    assert missing.status_code == 400


def _earn(db, referrer_id, referred_id, naira):
    db.session.add(ReferralEarning(
        referrer_id=referrer_id,
        referred_id=referred_id,
        amount=Decimal(naira),
        subscription_tier=PlanTier.YEARLY,
    ))
    db.session.commit()


WITHDRAWAL = {
    "bank_code": "058",
    "bank_name": "GTBank",
    "account_name": "Alice Okafor",
    "account_number": "0123456789",
}


def test_withdraw_flow(client, db, auth_headers, make_user):
    referrer = make_user("alice")
    referred = make_user("bola")
    _earn(db, referrer.id, referred.id, "10000.00")

    resp = client.post("/referrals/withdraw", json={**WITHDRAWAL, "amount": 500000}, headers=auth_headers(referrer.id))
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["withdrawal"]["amount"] == 500000
    assert body["withdrawal"]["fee"] == 75000
    assert body["withdrawal"]["net_amount"] == 425000
    assert body["withdrawal"]["status"] == "pending"
    assert body["available_balance"] == 500000

    history = client.get("/referrals/withdrawals", headers=auth_headers(referrer.id)).get_json()
    assert len(history["withdrawals"]) == 1


@pytest.mark.parametrize(
    "amount, error",
    [(299999, "below_minimum"), (2000000, "insufficient_balance")],
)
def test_withdraw_rejections(client, db, auth_headers, make_user, amount, error):
    referrer = make_user("alice")
    referred = make_user("bola")
    _earn(db, referrer.id, referred.id, "10000.00")

    resp = client.post("/referrals/withdraw", json={**WITHDRAWAL, "amount": amount}, headers=auth_headers(referrer.id))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == error


def test_withdraw_validates_bank_details(client, auth_headers, make_user):
    referrer = make_user("alice")
    resp = client.post(
        "/referrals/withdraw",
        json={**WITHDRAWAL, "account_number": "12345", "amount": 500000},
        headers=auth_headers(referrer.id),
    )
    assert resp.status_code == 400
    assert "account_number" in resp.get_json()["errors"]


def test_admin_updates_withdrawal(client, db, auth_headers, make_user):
    admin = make_user("root", is_admin=True)
    referrer = make_user("alice")
    referred = make_user("bola")
    _earn(db, referrer.id, referred.id, "10000.00")
    wid = client.post(
        "/referrals/withdraw", json={**WITHDRAWAL, "amount": 300000}, headers=auth_headers(referrer.id)
    ).get_json()["withdrawal"]["id"]

    forbidden = client.post(f"/admin/withdrawals/{wid}/status", json={"status": "processing"}, headers=auth_headers(referrer.id))
    assert forbidden.status_code == 403

    listed = client.get("/admin/withdrawals?status=pending", headers=auth_headers(admin.id)).get_json()
    assert [w["id"] for w in listed["withdrawals"]] == [wid]

    ok = client.post(f"/admin/withdrawals/{wid}/status", json={"status": "processing"}, headers=auth_headers(admin.id))
    assert ok.status_code == 200
    assert ok.get_json()["withdrawal"]["status"] == WithdrawalStatus.PROCESSING.value

    bad = client.post(f"/admin/withdrawals/{wid}/status", json={"status": "pending"}, headers=auth_headers(admin.id))
    assert bad.status_code == 409
    assert bad.get_json()["error"] == "invalid_transition"


def test_withdraw_accepts_balance_shown_by_stats(client, db, auth_headers, make_user):
    referrer = make_user("alice")
    referred = make_user("bola")
    for naira in ("0.10", "0.10", "0.10", "9999.70"):
        _earn(db, referrer.id, referred.id, naira)

    stats = client.get("/referrals/stats", headers=auth_headers(referrer.id)).get_json()
    assert stats["available_balance"] == 1000000
    assert stats["min_withdrawal"] == 300000

    resp = client.post(
        "/referrals/withdraw",
        json={**WITHDRAWAL, "amount": stats["available_balance"]},
        headers=auth_headers(referrer.id),
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["withdrawal"]["amount"] == stats["available_balance"]
    assert body["available_balance"] == 0


@pytest.mark.parametrize("amount", ["3000.50", 299999.5, "abc"])
def test_withdraw_rejects_fractional_kobo(client, db, auth_headers, make_user, amount):
    referrer = make_user("alice")
    referred = make_user("bola")
    _earn(db, referrer.id, referred.id, "10000.00")

    resp = client.post("/referrals/withdraw", json={**WITHDRAWAL, "amount": amount}, headers=auth_headers(referrer.id))
    assert resp.status_code == 400
    assert "amount" in resp.get_json()["errors"]


def test_subscription_amounts_are_kobo(client, db, auth_headers, make_user):
    user = make_user("bola")
    activate_subscription(user.id, "Monthly", utcnow(), amount_paid=450000)
    db.session.commit()

    current = client.get("/subscriptions/current", headers=auth_headers(user.id)).get_json()
    assert current["subscription"]["amount_paid"] == 450000
