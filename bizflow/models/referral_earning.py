from bizflow.extensions import db
from bizflow.models.enums import EarningStatus, PlanTier, literal_enum
from bizflow.utils import utcnow


class ReferralEarning(db.Model):
    """Append-only commission accrued to a referrer."""

    __tablename__ = "referral_earnings"

    id = db.Column(db.Integer, primary_key=True)

    referrer_id = db.Column(db.String(64), db.ForeignKey("users.id"), nullable=False, index=True)
    referred_id = db.Column(db.String(64), db.ForeignKey("users.id"), nullable=False)

    # naira
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    subscription_tier = db.Column(literal_enum(PlanTier), nullable=False)
    status = db.Column(literal_enum(EarningStatus), nullable=False, default=EarningStatus.PENDING)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    referrer = db.relationship("User", foreign_keys=[referrer_id], backref="earnings")
    referred_user = db.relationship("User", foreign_keys=[referred_id])
