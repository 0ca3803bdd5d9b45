"""SQLAlchemy ORM models for the petty cash ledger"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

from petty_cash.utils.date_utils import utcnow

Base = declarative_base()


class User(Base):
    """Person known to the identity provider"""

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="custodian")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("role IN ('custodian', 'accountant', 'admin')", name="ck_users_role"),
    )

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class Transaction(Base):
    """Single cash movement; becomes a ledger entry once approved"""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    received_by = Column(String, nullable=False)
    payment_method = Column(String, nullable=False)
    receipt_url = Column(String, nullable=True)
    receipt_file_name = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending", index=True)
    submitted_by = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    approved_by = Column(String, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    comments = Column(Text, nullable=True)
    # Null until appended to the ledger; sequence is the ledger ordering key
    running_balance = Column(Numeric(10, 2), nullable=True)
    ledger_sequence = Column(Integer, nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_transactions_status"),
        CheckConstraint("payment_method IN ('cash', 'check', 'card')", name="ck_transactions_payment_method"),
        CheckConstraint(
            "(ledger_sequence IS NULL) = (running_balance IS NULL)",
            name="ck_transactions_ledger_pair",
        ),
    )

    submitter = relationship("User", foreign_keys=[submitted_by])
    approver = relationship("User", foreign_keys=[approved_by])


class ReplenishmentRequest(Base):
    """Request to inject cash into the float"""

    __tablename__ = "replenishment_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    requested_amount = Column(Numeric(10, 2), nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(String, nullable=False, default="pending", index=True)
    requested_by = Column(String, ForeignKey("users.id"), nullable=False)
    approved_by = Column(String, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    comments = Column(Text, nullable=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("requested_amount > 0", name="ck_replenishment_positive"),
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_replenishment_status"),
    )

    transaction = relationship("Transaction")


class Setting(Base):
    """Key/value configuration with last-editor audit"""

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String, nullable=False, unique=True)
    value = Column(Text, nullable=False)
    updated_by = Column(String, ForeignKey("users.id"), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
