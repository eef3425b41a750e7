# bizflow/admin/withdrawals.py
from flask import jsonify, request
from flask_login import current_user, login_required

from bizflow.errors import InvalidRequestError
from bizflow.models import WithdrawalRequest, WithdrawalStatus
from bizflow.services.wallet import serialize_withdrawal, update_withdrawal_status
from bizflow.utils import admin_required

from . import admin_bp


@admin_bp.route("/withdrawals", methods=["GET"])
@login_required
@admin_required
def withdrawals():
    query = WithdrawalRequest.query
    status = (request.args.get("status") or "").strip().lower()
    if status:
        try:
            query = query.filter(WithdrawalRequest.status == WithdrawalStatus(status))
        except ValueError:
            raise InvalidRequestError("Invalid status.") from None

    rows = query.order_by(WithdrawalRequest.created_at.desc()).limit(200).all()
    return jsonify({"success": True, "withdrawals": [
        {"user_id": w.user_id, **serialize_withdrawal(w)} for w in rows
    ]})


@admin_bp.route("/withdrawals/<int:withdrawal_id>/status", methods=["POST"])
@login_required
@admin_required
def update_status(withdrawal_id: int):
    payload = request.get_json(silent=True) or request.form
    new_status = (payload.get("status") or "").strip().lower()
    note = (payload.get("note") or "").strip() or None

    wr = update_withdrawal_status(withdrawal_id, new_status, note=note, actor_id=current_user.id)
    return jsonify({
        "success": True,
        "message": f"Withdrawal #{wr.id} updated to {wr.status.value}.",
        "withdrawal": serialize_withdrawal(wr),
    })
