from bizflow.extensions import db
from bizflow.models.enums import PaymentStatus, PlanTier, SubscriptionStatus, literal_enum
from bizflow.utils import utcnow


class Subscription(db.Model):
    """One period of a user's plan. Rows are never deleted, only expired."""

    __tablename__ = "subscriptions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey("users.id"), nullable=False, index=True)

    tier = db.Column(literal_enum(PlanTier), nullable=False)
    status = db.Column(literal_enum(SubscriptionStatus), nullable=False, index=True)

    start_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    end_date = db.Column(db.DateTime, nullable=True)  # null for Free

    # naira actually charged for this period (after pro-rata credit)
    amount_paid = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Subscription id={self.id} user_id={self.user_id} tier={self.tier} status={self.status}>"


class SubscriptionPayment(db.Model):
    """A gateway charge opened by an upgrade and settled by its verification."""

    __tablename__ = "subscription_payments"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey("users.id"), nullable=False, index=True)

    tier = db.Column(literal_enum(PlanTier), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    currency = db.Column(db.String(10), default="NGN")

    # for paystack verification
    reference = db.Column(db.String(100), unique=True, nullable=False, index=True)
    authorization_url = db.Column(db.String(255), nullable=True)

    status = db.Column(literal_enum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    paid_at = db.Column(db.DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<SubscriptionPayment reference={self.reference} status={self.status}>"
