# bizflow/services/referral.py
import secrets
import string
from dataclasses import dataclass

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from bizflow.errors import ExternalServiceError
from bizflow.extensions import db
from bizflow.models import (
    EarningStatus,
    Referral,
    ReferralEarning,
    ReferralStatus,
    User,
)
from bizflow.services.money import kobo_to_naira, naira_to_kobo, percent_of
from bizflow.services.plans import parse_tier
from bizflow.utils import utcnow

CODE_CHARS = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class CommissionResult:
    processed: bool
    referrer_id: str | None = None
    amount: int = 0  # kobo

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "referrer_id": self.referrer_id,
            "earning_amount": self.amount,
        }


def generate_referral_code(business_name: str | None = None, length: int = 6) -> str:
    """Three letters of the business name followed by a random suffix, unique across users."""
    letters = "".join(c for c in (business_name or "").upper() if c.isalnum())
    prefix = (letters or "USER")[:3]

    while True:
        code = prefix + "".join(secrets.choice(CODE_CHARS) for _ in range(length))
        if not User.query.filter_by(referral_code=code).first():
            return code


def register_referral(referred_user: User, referral_code: str | None) -> Referral | None:
    """Link a new user to whoever owns ``referral_code``. Caller commits."""
    code = (referral_code or "").strip().upper()
    if not code:
        return None

    referrer = User.query.filter_by(referral_code=code).first()
    if referrer is None:
        current_app.logger.info("Referrer not found for code %s", code)
        return None

    if referrer.id == referred_user.id:
        return None  # hard block self-referral

    if Referral.query.filter_by(referred_id=referred_user.id).first() is not None:
        return None

    referral = Referral(
        referrer_id=referrer.id,
        referred_id=referred_user.id,
        status=ReferralStatus.PENDING,
    )
    db.session.add(referral)
    current_app.logger.info("Referral recorded: %s -> %s", referrer.id, referred_user.id)
    return referral


def accrue_referral_commission(referred_id: str, tier, amount_paid: int, commit: bool = True) -> CommissionResult:
    """Pay the referrer of ``referred_id`` a share of their first paid upgrade.

    The pending -> completed flip is a single conditional UPDATE, so a retried
    or concurrent call finds nothing to flip and accrues nothing.
    """
    tier = parse_tier(tier)

    referral = Referral.query.filter_by(
        referred_id=referred_id, status=ReferralStatus.PENDING
    ).first()
    if referral is None:
        current_app.logger.info("No pending referral for user %s", referred_id)
        return CommissionResult(processed=False)

    try:
        flipped = (
            Referral.query
            .filter(
                Referral.id == referral.id,
                Referral.status == ReferralStatus.PENDING,
            )
            .update(
                {Referral.status: ReferralStatus.COMPLETED, Referral.updated_at: utcnow()},
                synchronize_session="fetch",
            )
        )
        if flipped != 1:
            current_app.logger.info("Referral for user %s already completed", referred_id)
            if commit:
                db.session.rollback()
            return CommissionResult(processed=False)

        pct = current_app.config.get("REFERRAL_COMMISSION_PERCENT", "0.10")
        commission = percent_of(amount_paid, pct)

        db.session.add(ReferralEarning(
            referrer_id=referral.referrer_id,
            referred_id=referred_id,
            amount=kobo_to_naira(commission),
            subscription_tier=tier,
            status=EarningStatus.PENDING,
        ))

        if commit:
            db.session.commit()
        else:
            db.session.flush()
    except SQLAlchemyError as e:
        if commit:
            db.session.rollback()
        raise ExternalServiceError(str(e)) from e

    current_app.logger.info(
        "Referral commission accrued: referrer=%s referred=%s tier=%s amount=%d kobo",
        referral.referrer_id, referred_id, tier.value, commission,
    )
    return CommissionResult(processed=True, referrer_id=referral.referrer_id, amount=commission)


def total_earnings(user_id: str) -> int:
    total = db.session.query(
        func.coalesce(func.sum(ReferralEarning.amount), 0)
    ).filter(
        ReferralEarning.referrer_id == user_id
    ).scalar()
    return naira_to_kobo(total)


def referral_summary(user_id: str) -> dict:
    total_referrals = Referral.query.filter_by(referrer_id=user_id).count()
    completed = Referral.query.filter_by(
        referrer_id=user_id, status=ReferralStatus.COMPLETED
    ).count()

    recent = (
        ReferralEarning.query
        .filter_by(referrer_id=user_id)
        .order_by(ReferralEarning.created_at.desc(), ReferralEarning.id.desc())
        .limit(10)
        .all()
    )

    return {
        "total_referrals": total_referrals,
        "completed_referrals": completed,
        "pending_referrals": total_referrals - completed,
        "total_earnings": total_earnings(user_id),
        "recent_earnings": [
            {
                "referred_id": e.referred_id,
                "amount": naira_to_kobo(e.amount),
                "subscription_tier": e.subscription_tier.value,
                "status": e.status.value,
                "created_at": e.created_at.isoformat(),
            }
            for e in recent
        ],
    }
