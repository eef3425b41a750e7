from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from bizflow.errors import InvalidRequestError
from bizflow.services.accounts import ensure_user_setup
from bizflow.services.subscriptions import get_current_subscription
from bizflow.services.trial import days_left, feature_access_tier
from bizflow.utils import validate_or_400
from . import auth_bp
from .forms import SetupForm


def serialize_user(user):
    sub = get_current_subscription(user.id)
    return {
        "id": user.id,
        "email": user.email,
        "business_name": user.business_name,
        "referral_code": user.referral_code,
        "subscription_tier": user.subscription_tier.value,
        "feature_access_tier": feature_access_tier(sub).value,
        "is_trial": user.is_trial,
        "trial_end_date": user.trial_end_date.isoformat() if user.trial_end_date else None,
        "trial_days_left": days_left(sub) if user.is_trial else 0,
    }


@auth_bp.route("/setup", methods=["POST"])
def setup():
    """Signup hook: called once the identity provider has created the account."""
    user_id = (request.headers.get(current_app.config["AUTH_USER_ID_HEADER"]) or "").strip()
    if not user_id:
        return jsonify({"success": False, "error": "unauthorized", "message": "Authentication required"}), 401

    form = validate_or_400(SetupForm())
    email = (
        request.headers.get(current_app.config["AUTH_USER_EMAIL_HEADER"])
        or form.email.data
        or ""
    ).strip()
    if not email:
        raise InvalidRequestError("Email is required.")

    user, created = ensure_user_setup(
        user_id,
        email,
        business_name=form.business_name.data,
        referral_code=form.referral_code.data or request.args.get("ref"),
    )
    return jsonify({"success": True, "created": created, "user": serialize_user(user)}), (201 if created else 200)


@auth_bp.route("/me")
@login_required
def me():
    return jsonify({"success": True, "user": serialize_user(current_user)})
