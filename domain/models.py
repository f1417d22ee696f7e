# models.py
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Index

from utils.time_utils import utcnow

db = SQLAlchemy()


# =========================
#       Core: Accounts
# =========================
class AccountRow(db.Model):
    __tablename__ = "accounts"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.Text, unique=True, nullable=False)
    # werkzeug password hash
    password = db.Column(db.Text, nullable=False)

    # 게스트 계정일 때만 채워짐
    guest_id = db.Column(db.Text, nullable=True, index=True)
    is_guest = db.Column(db.Boolean, default=False, nullable=False)

    transformations = db.relationship(
        "TransformationRow",
        backref="account",
        lazy=True,
        foreign_keys="TransformationRow.account_id",
    )


# =========================
#     Product: Transform
# =========================
class TransformationRow(db.Model):
    __tablename__ = "transformations"

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=True)
    guest_id = db.Column(db.Text, nullable=True)

    original_text = db.Column(db.Text, nullable=False)
    transformed_text = db.Column(db.Text, nullable=False)
    from_style = db.Column(db.Text, nullable=False)
    to_style = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_transformations_account", "account_id", "id"),
        Index("idx_transformations_guest", "guest_id", "id"),
        db.CheckConstraint(
            "(account_id IS NULL) <> (guest_id IS NULL)",
            name="ck_transformations_single_owner",
        ),
    )


# =========================
#     Guest usage ledger
# =========================
class GuestUsageRow(db.Model):
    __tablename__ = "guest_usage"

    id = db.Column(db.Integer, primary_key=True)
    guest_id = db.Column(db.Text, unique=True, nullable=False)
    usage_count = db.Column(db.Integer, default=0, nullable=False)
    max_usage = db.Column(db.Integer, default=10, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
