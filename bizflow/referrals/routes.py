from flask import jsonify
from flask_login import current_user, login_required

from bizflow.models import WithdrawalRequest
from bizflow.services.money import format_naira, naira_to_kobo
from bizflow.services.referral import referral_summary
from bizflow.services.wallet import (
    BankDetails,
    get_available_balance,
    min_withdrawal_amount,
    request_withdrawal,
    serialize_withdrawal,
)
from bizflow.utils import validate_or_400
from . import referral_bp
from .forms import WithdrawalForm


@referral_bp.route("/stats")
@login_required
def referral_stats():
    summary = referral_summary(current_user.id)
    return jsonify({
        "success": True,
        "referral_code": current_user.referral_code,
        "available_balance": get_available_balance(current_user.id),
        "min_withdrawal": min_withdrawal_amount(),
        **summary,
    })


@referral_bp.route("/withdraw", methods=["POST"])
@login_required
def withdraw():
    form = validate_or_400(WithdrawalForm())

    bank = BankDetails(
        bank_code=form.bank_code.data.strip(),
        bank_name=(form.bank_name.data or "").strip() or None,
        account_name=form.account_name.data.strip(),
        account_number=form.account_number.data.strip(),
    )
    wr = request_withdrawal(current_user.id, form.amount.data, bank)

    return jsonify({
        "success": True,
        "message": (
            f"Withdrawal request for {format_naira(naira_to_kobo(wr.amount))} submitted. "
            f"Net amount: {format_naira(naira_to_kobo(wr.net_amount))}"
        ),
        "withdrawal": serialize_withdrawal(wr),
        "available_balance": get_available_balance(current_user.id),
    }), 201


@referral_bp.route("/withdrawals")
@login_required
def withdrawal_history():
    withdrawals = (
        WithdrawalRequest.query.filter_by(user_id=current_user.id)
        .order_by(WithdrawalRequest.created_at.desc(), WithdrawalRequest.id.desc())
        .limit(50)
        .all()
    )
    return jsonify({"success": True, "withdrawals": [serialize_withdrawal(w) for w in withdrawals]})
