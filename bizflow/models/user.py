from flask_login import UserMixin

from bizflow.extensions import db
from bizflow.models.enums import PlanTier, literal_enum
from bizflow.utils import utcnow


class User(UserMixin, db.Model):
    """Business owner profile. ``id`` is issued by the identity provider."""

    __tablename__ = "users"

    id = db.Column(db.String(64), primary_key=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    business_name = db.Column(db.String(120), nullable=False, default="My Business")

    referral_code = db.Column(db.String(16), unique=True, index=True)

    # Denormalized billing label of the current subscription
    subscription_tier = db.Column(literal_enum(PlanTier), nullable=False, default=PlanTier.FREE)
    is_trial = db.Column(db.Boolean, nullable=False, default=False)
    trial_end_date = db.Column(db.DateTime, nullable=True)

    is_admin = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    subscriptions = db.relationship(
        "Subscription",
        backref="user",
        lazy="dynamic",
        order_by="Subscription.start_date.desc()",
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} tier={self.subscription_tier}>"
