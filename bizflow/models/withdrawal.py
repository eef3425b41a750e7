# bizflow/models/withdrawal.py
from bizflow.extensions import db
from bizflow.models.enums import WithdrawalStatus, literal_enum
from bizflow.utils import utcnow

# Statuses that hold on to the requested funds
COMMITTED_STATUSES = (
    WithdrawalStatus.PENDING,
    WithdrawalStatus.PROCESSING,
    WithdrawalStatus.COMPLETED,
)
FINAL_STATUSES = (WithdrawalStatus.COMPLETED, WithdrawalStatus.FAILED)


class WithdrawalRequest(db.Model):
    __tablename__ = "withdrawal_requests"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.String(64), db.ForeignKey("users.id"), nullable=False, index=True)

    # naira; fee is charged on the gross amount, net_amount is what gets paid out
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    fee = db.Column(db.Numeric(12, 2), nullable=False)
    net_amount = db.Column(db.Numeric(12, 2), nullable=False)

    # Destination bank account
    bank_code = db.Column(db.String(20), nullable=False)
    bank_name = db.Column(db.String(120), nullable=True)
    account_name = db.Column(db.String(120), nullable=False)
    account_number = db.Column(db.String(20), nullable=False)

    status = db.Column(literal_enum(WithdrawalStatus), nullable=False, default=WithdrawalStatus.PENDING, index=True)
    note = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    processed_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship(
        "User",
        backref=db.backref("withdrawal_requests", lazy="dynamic"),
        foreign_keys=[user_id],
    )

    def __repr__(self) -> str:
        return f"<WithdrawalRequest id={self.id} user_id={self.user_id} amount={self.amount} status={self.status}>"

    @property
    def is_final(self) -> bool:
        return self.status in FINAL_STATUSES
