from bizflow.extensions import db
from bizflow.models.enums import ReferralStatus, literal_enum
from bizflow.utils import utcnow


class Referral(db.Model):
    __tablename__ = "referrals"

    id = db.Column(db.Integer, primary_key=True)

    referrer_id = db.Column(db.String(64), db.ForeignKey("users.id"), nullable=False, index=True)
    # a user is referred by at most one other user
    referred_id = db.Column(db.String(64), db.ForeignKey("users.id"), nullable=False, unique=True)

    status = db.Column(literal_enum(ReferralStatus), nullable=False, default=ReferralStatus.PENDING, index=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    referrer = db.relationship("User", foreign_keys=[referrer_id], backref="referrals_given")
    referred_user = db.relationship("User", foreign_keys=[referred_id], backref=db.backref("referral_received", uselist=False))

    def __repr__(self) -> str:
        return f"<Referral {self.referrer_id} -> {self.referred_id} status={self.status}>"
