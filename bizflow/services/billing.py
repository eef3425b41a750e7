# bizflow/services/billing.py
"""Upgrade commands: quote, charge, and commit a tier change.

``initiate_upgrade`` prices the switch and either commits it straight away
(nothing to pay) or opens a Paystack charge. ``confirm_upgrade_payment``
verifies that charge and hands over to ``finalize_upgrade``, which expires
the old subscription, activates the new one and accrues any referral
commission in a single transaction.
"""
from dataclasses import dataclass
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from bizflow.errors import (
    BillingError,
    ExternalServiceError,
    InvalidRequestError,
    PaymentRequiredError,
)
from bizflow.extensions import db
from bizflow.models import PaymentStatus, Subscription, SubscriptionPayment, User
from bizflow.services import paystack
from bizflow.services.money import format_naira, kobo_to_naira, naira_to_kobo
from bizflow.services.plans import parse_tier
from bizflow.services.prorata import UpgradeQuote, quote_upgrade
from bizflow.services.referral import CommissionResult, accrue_referral_commission
from bizflow.services.subscriptions import (
    activate_subscription,
    get_current_subscription,
    serialize_subscription,
)
from bizflow.utils import new_payment_reference, utcnow


@dataclass(frozen=True)
class UpgradeResult:
    subscription: Subscription | None
    commission: CommissionResult
    amount_paid: int = 0
    already_processed: bool = False

    def to_dict(self) -> dict:
        return {
            "subscription": serialize_subscription(self.subscription) if self.subscription else None,
            "amount_paid": self.amount_paid,
            "referral": self.commission.to_dict(),
            "already_processed": self.already_processed,
        }


def get_upgrade_quote(user_id: str, new_tier, now: datetime | None = None) -> UpgradeQuote:
    now = now or utcnow()
    return quote_upgrade(get_current_subscription(user_id), new_tier, now)


def initiate_upgrade(user: User, new_tier, callback_url: str | None = None, now: datetime | None = None) -> dict:
    now = now or utcnow()
    tier = parse_tier(new_tier)
    quote = get_upgrade_quote(user.id, tier, now)

    current_app.logger.info(
        "Upgrade quoted for %s: %s -> %s remaining_days=%d credit=%d due=%d",
        user.id,
        quote.current_tier.value if quote.current_tier else None,
        tier.value,
        quote.remaining_days,
        quote.credit,
        quote.amount_due,
    )

    if quote.amount_due == 0:
        result = finalize_upgrade(user.id, tier, now=now)
        return {
            "status": "completed",
            "quote": quote.to_dict(),
            **result.to_dict(),
        }

    reference = new_payment_reference()
    payment = SubscriptionPayment(
        user_id=user.id,
        tier=tier,
        amount=kobo_to_naira(quote.amount_due),
        currency=current_app.config.get("CURRENCY", "NGN"),
        reference=reference,
        status=PaymentStatus.PENDING,
        created_at=now,
    )
    db.session.add(payment)
    db.session.commit()

    try:
        authorization_url = paystack.initialize_transaction(
            user.email, quote.amount_due, reference, callback_url
        )
    except ExternalServiceError:
        payment.status = PaymentStatus.FAILED
        db.session.commit()
        raise

    payment.authorization_url = authorization_url
    db.session.commit()

    return {
        "status": "pending",
        "reference": reference,
        "authorization_url": authorization_url,
        "quote": quote.to_dict(),
    }


def finalize_upgrade(
    user_id: str,
    new_tier,
    amount_paid: int | None = None,
    reference: str | None = None,
    now: datetime | None = None,
) -> UpgradeResult:
    """Commit a tier change.

    With a ``reference`` the matching pending payment is flipped to success
    first; if it was already settled the call is a no-op. Without one, the
    upgrade must cost nothing, so ``amount_paid`` is only accepted together
    with a ``reference``.
    """
    now = now or utcnow()
    tier = parse_tier(new_tier)

    try:
        if reference:
            payment = SubscriptionPayment.query.filter_by(reference=reference).first()
            if payment is None or payment.user_id != user_id or payment.tier != tier:
                raise InvalidRequestError("Invalid payment reference.")
            if payment.status == PaymentStatus.FAILED:
                raise PaymentRequiredError("This payment failed. Start a new upgrade.")

            flipped = (
                SubscriptionPayment.query
                .filter(
                    SubscriptionPayment.id == payment.id,
                    SubscriptionPayment.status == PaymentStatus.PENDING,
                )
                .update(
                    {SubscriptionPayment.status: PaymentStatus.SUCCESS, SubscriptionPayment.paid_at: now},
                    synchronize_session="fetch",
                )
            )
            if flipped != 1:
                db.session.rollback()
                current_app.logger.info("Payment %s already confirmed", reference)
                return UpgradeResult(
                    subscription=get_current_subscription(user_id),
                    commission=CommissionResult(processed=False),
                    already_processed=True,
                )

            if amount_paid is None:
                amount_paid = naira_to_kobo(payment.amount)
        else:
            if amount_paid:
                raise InvalidRequestError("amount_paid requires a payment reference.")
            quote = quote_upgrade(get_current_subscription(user_id), tier, now)
            if quote.amount_due > 0:
                raise PaymentRequiredError(
                    f"Payment of {format_naira(quote.amount_due)} is required to switch to {tier.value}."
                )
            amount_paid = 0

        sub = activate_subscription(user_id, tier, now, amount_paid)

        if amount_paid > 0:
            commission = accrue_referral_commission(user_id, tier, amount_paid, commit=False)
        else:
            commission = CommissionResult(processed=False)

        db.session.commit()

    except BillingError:
        db.session.rollback()
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ExternalServiceError(str(e)) from e

    return UpgradeResult(subscription=sub, commission=commission, amount_paid=amount_paid)


def confirm_upgrade_payment(reference: str, user_id: str | None = None, now: datetime | None = None) -> UpgradeResult:
    payment = SubscriptionPayment.query.filter_by(reference=reference).first()
    if not payment or (user_id is not None and payment.user_id != user_id):
        raise InvalidRequestError("Invalid payment reference.")

    if payment.status == PaymentStatus.SUCCESS:
        current_app.logger.info("Payment %s already confirmed", reference)
        return UpgradeResult(
            subscription=get_current_subscription(payment.user_id),
            commission=CommissionResult(processed=False),
            already_processed=True,
        )

    result = paystack.verify_transaction(reference)
    if not result:
        current_app.logger.warning("Payment verification failed for %s", reference)
        raise PaymentRequiredError("Payment verification failed.")

    amount_paid = int(result.get("amount") or 0)
    expected = naira_to_kobo(payment.amount)
    if amount_paid < expected:
        current_app.logger.error(
            "Underpayment on %s: paid %d kobo, expected %d kobo", reference, amount_paid, expected
        )
        raise PaymentRequiredError(f"Amount paid is less than {format_naira(expected)}.")

    return finalize_upgrade(
        payment.user_id, payment.tier, amount_paid=amount_paid, reference=reference, now=now
    )
