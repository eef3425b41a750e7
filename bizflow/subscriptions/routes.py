from flask import current_app, jsonify, request, url_for
from flask_login import current_user, login_required

from bizflow.errors import InvalidRequestError
from bizflow.services.billing import confirm_upgrade_payment, get_upgrade_quote, initiate_upgrade
from bizflow.services.plans import catalog, parse_tier
from bizflow.services.subscriptions import (
    get_current_subscription,
    require_current_subscription,
    serialize_subscription,
)
from bizflow.services.trial import days_left, feature_access_tier, start_trial
from bizflow.utils import validate_or_400
from . import subscription_bp
from .forms import QuoteForm, UpgradeForm


@subscription_bp.route("/plans")
def plans():
    return jsonify({"success": True, "plans": catalog()})


@subscription_bp.route("/current")
@login_required
def current_subscription():
    sub = require_current_subscription(current_user.id)
    return jsonify({
        "success": True,
        "subscription": serialize_subscription(sub),
        "feature_access_tier": feature_access_tier(sub).value,
        "days_left": days_left(sub),
    })


@subscription_bp.route("/quote", methods=["POST"])
@login_required
def quote():
    form = validate_or_400(QuoteForm())
    q = get_upgrade_quote(current_user.id, parse_tier(form.new_tier.data))
    return jsonify({"success": True, "quote": q.to_dict()})


@subscription_bp.route("/upgrade", methods=["POST"])
@login_required
def upgrade():
    form = validate_or_400(UpgradeForm())
    new_tier = parse_tier(form.new_tier.data)

    if form.current_tier.data:
        claimed = parse_tier(form.current_tier.data)
        stored = get_current_subscription(current_user.id)
        if stored is not None and stored.tier != claimed:
            current_app.logger.warning(
                "User %s claimed current tier %s but stored tier is %s",
                current_user.id, claimed.value, stored.tier.value,
            )

    callback_url = form.callback_url.data or url_for("subscriptions.verify_subscription", _external=True)
    result = initiate_upgrade(current_user, new_tier, callback_url=callback_url)
    status_code = 200 if result["status"] == "completed" else 202
    return jsonify({"success": True, **result}), status_code


@subscription_bp.route("/verify")
@login_required
def verify_subscription():
    reference = (request.args.get("reference") or "").strip()
    if not reference:
        raise InvalidRequestError("Missing payment reference.")

    result = confirm_upgrade_payment(reference, user_id=current_user.id)
    return jsonify({"success": True, **result.to_dict()})


@subscription_bp.route("/trial", methods=["POST"])
@login_required
def begin_trial():
    sub = start_trial(current_user.id)
    current = sub or get_current_subscription(current_user.id)
    return jsonify({
        "success": True,
        "started": sub is not None,
        "subscription": serialize_subscription(current) if current else None,
        "days_left": days_left(current),
    }), (201 if sub is not None else 200)


@subscription_bp.route("/trial")
@login_required
def trial_status():
    sub = get_current_subscription(current_user.id)
    return jsonify({
        "success": True,
        "is_trial": bool(current_user.is_trial),
        "trial_end_date": current_user.trial_end_date.isoformat() if current_user.trial_end_date else None,
        "days_left": days_left(sub) if current_user.is_trial else 0,
        "feature_access_tier": feature_access_tier(sub).value,
    })
