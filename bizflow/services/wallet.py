# bizflow/services/wallet.py
from dataclasses import dataclass

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from bizflow.errors import (
    BelowMinimumError,
    ExternalServiceError,
    InsufficientBalanceError,
    InvalidRequestError,
    InvalidTransitionError,
)
from bizflow.extensions import db
from bizflow.models import WithdrawalRequest, WithdrawalStatus
from bizflow.models.withdrawal import COMMITTED_STATUSES
from bizflow.services.fees import calc_withdrawal_fee
from bizflow.services.money import format_naira, kobo_to_naira, naira_to_kobo
from bizflow.services.referral import total_earnings
from bizflow.services.subscriptions import lock_user
from bizflow.utils import utcnow

VALID_TRANSITIONS = {
    WithdrawalStatus.PENDING: {WithdrawalStatus.PROCESSING, WithdrawalStatus.FAILED},
    WithdrawalStatus.PROCESSING: {WithdrawalStatus.COMPLETED, WithdrawalStatus.FAILED},
}


@dataclass(frozen=True)
class BankDetails:
    bank_code: str
    account_name: str
    account_number: str
    bank_name: str | None = None


def committed_withdrawals(user_id: str) -> int:
    committed_sum = db.session.query(
        func.coalesce(func.sum(WithdrawalRequest.amount), 0)
    ).filter(
        WithdrawalRequest.user_id == user_id,
        WithdrawalRequest.status.in_(COMMITTED_STATUSES),
    ).scalar()
    return naira_to_kobo(committed_sum)


def get_available_balance(user_id: str) -> int:
    """Earnings minus pending/processing/completed withdrawals, in kobo. Never cached."""
    return total_earnings(user_id) - committed_withdrawals(user_id)


def min_withdrawal_amount() -> int:
    return naira_to_kobo(current_app.config.get("MIN_WITHDRAWAL_AMOUNT", "3000"))


def request_withdrawal(user_id: str, amount: int, bank: BankDetails) -> WithdrawalRequest:
    """Record a pending withdrawal of ``amount`` kobo against the user's referral earnings."""
    if amount <= 0:
        raise InvalidRequestError("Amount must be greater than ₦0.")

    # --- ATOMIC SECTION ---
    try:
        # Lock the user row so two withdrawals can't pass at once
        user = lock_user(user_id)

        # recompute inside lock
        available = get_available_balance(user.id)

        if amount > available:
            db.session.rollback()
            raise InsufficientBalanceError(
                f"Insufficient withdrawable balance. Available: {format_naira(available)}"
            )

        minimum = min_withdrawal_amount()
        if amount < minimum:
            db.session.rollback()
            raise BelowMinimumError(f"Minimum withdrawal is {format_naira(minimum)}.")

        fee, net_amount = calc_withdrawal_fee(amount)

        wr = WithdrawalRequest(
            user_id=user.id,
            amount=kobo_to_naira(amount),
            fee=kobo_to_naira(fee),
            net_amount=kobo_to_naira(net_amount),
            bank_code=bank.bank_code,
            bank_name=bank.bank_name,
            account_name=bank.account_name,
            account_number=bank.account_number,
            status=WithdrawalStatus.PENDING,
        )
        db.session.add(wr)
        db.session.commit()

    except SQLAlchemyError as e:
        db.session.rollback()
        raise ExternalServiceError(str(e)) from e
    # --- END ATOMIC SECTION ---

    current_app.logger.info(
        "Withdrawal %s requested by %s: gross=%d fee=%d net=%d kobo",
        wr.id, user_id, amount, fee, net_amount,
    )
    return wr


def update_withdrawal_status(withdrawal_id: int, new_status, note: str | None = None, actor_id: str | None = None) -> WithdrawalRequest:
    try:
        new_status = WithdrawalStatus(new_status)
    except ValueError:
        raise InvalidRequestError("Invalid status.") from None

    try:
        # Lock the withdrawal row first (prevents double-admin updates)
        wr = (
            db.session.query(WithdrawalRequest)
            .filter(WithdrawalRequest.id == withdrawal_id)
            .with_for_update()
            .one_or_none()
        )
        if wr is None:
            db.session.rollback()
            raise InvalidRequestError(f"Withdrawal #{withdrawal_id} not found.")

        current = wr.status

        # Final states cannot change
        if wr.is_final:
            db.session.rollback()
            raise InvalidTransitionError("This withdrawal is already final and cannot be changed.")

        if new_status not in VALID_TRANSITIONS.get(current, set()):
            db.session.rollback()
            raise InvalidTransitionError(
                f"Invalid status transition: {current.value} → {new_status.value}"
            )

        wr.status = new_status
        wr.note = note
        if new_status in (WithdrawalStatus.COMPLETED, WithdrawalStatus.FAILED) or wr.processed_at is None:
            wr.processed_at = utcnow()

        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ExternalServiceError(str(e)) from e

    current_app.logger.info(
        "Admin %s set withdrawal %s → %s", actor_id, wr.id, new_status.value
    )
    return wr


def serialize_withdrawal(wr: WithdrawalRequest) -> dict:
    return {
        "id": wr.id,
        "amount": naira_to_kobo(wr.amount),
        "fee": naira_to_kobo(wr.fee),
        "net_amount": naira_to_kobo(wr.net_amount),
        "bank_code": wr.bank_code,
        "bank_name": wr.bank_name,
        "account_name": wr.account_name,
        "account_number": wr.account_number,
        "status": wr.status.value,
        "note": wr.note,
        "created_at": wr.created_at.isoformat() if wr.created_at else None,
        "processed_at": wr.processed_at.isoformat() if wr.processed_at else None,
    }
