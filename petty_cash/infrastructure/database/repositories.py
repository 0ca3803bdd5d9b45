"""Data access layer for petty cash entities"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select, text
from sqlalchemy.orm import Session

from petty_cash.domain.models import LedgerEntry, PENDING
from petty_cash.infrastructure.database.models import (
    ReplenishmentRequest,
    Setting,
    Transaction,
    User,
)
from petty_cash.utils.date_utils import utcnow

# Key for the transaction-scoped Postgres advisory lock serializing ledger appends
LEDGER_LOCK_KEY = 7_240_001


class UserRepository:
    """Repository for users"""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def upsert_user(
        self,
        user_id: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        """Create the user, or refresh profile fields; role is left untouched"""
        user = self.get_user(user_id)
        if user is None:
            user = User(id=user_id, email=email, first_name=first_name, last_name=last_name)
            self.db.add(user)
        else:
            user.email = email if email is not None else user.email
            user.first_name = first_name if first_name is not None else user.first_name
            user.last_name = last_name if last_name is not None else user.last_name
        self.db.flush()
        return user

    def list_users(self) -> List[User]:
        return list(self.db.scalars(select(User).order_by(User.created_at, User.id)))

    def update_role(self, user: User, role: str) -> User:
        user.role = role
        self.db.flush()
        return user


class TransactionRepository:
    """Repository for transactions and the ledger sequence they form"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(self, **fields) -> Transaction:
        """Persist a new transaction; flush to get its ID without committing"""
        db_transaction = Transaction(**fields)
        self.db.add(db_transaction)
        self.db.flush()
        return db_transaction

    def get_transaction(self, transaction_id: int, for_update: bool = False) -> Optional[Transaction]:
        query = select(Transaction).where(Transaction.id == transaction_id)
        if for_update:
            query = query.with_for_update()
        return self.db.scalars(query).first()

    def list_transactions(
        self,
        status: Optional[str] = None,
        submitted_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Transaction]:
        """Newest first by creation time, with optional filters and paging"""
        query = select(Transaction)
        if status:
            query = query.where(Transaction.status == status)
        if submitted_by:
            query = query.where(Transaction.submitted_by == submitted_by)
        if start_date:
            query = query.where(Transaction.date >= start_date)
        if end_date:
            query = query.where(Transaction.date <= end_date)
        query = query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        return list(self.db.scalars(query))

    def count_by_status(self, status: str) -> int:
        return self.db.scalar(select(func.count(Transaction.id)).where(Transaction.status == status)) or 0

    def count_pending(self) -> int:
        return self.count_by_status(PENDING)

    def lock_ledger(self) -> None:
        """
        Serialize appends across processes until the current transaction ends.

        Row locks alone cannot cover an empty ledger, or a writer that re-reads
        the row another writer just superseded. Other dialects fall back to the
        row lock and the unique ledger_sequence.
        """
        if self.db.get_bind().dialect.name == "postgresql":
            self.db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": LEDGER_LOCK_KEY})

    def latest_ledger_entry(self, for_update: bool = False) -> Optional[Transaction]:
        """Most recently appended ledger entry, optionally row-locked"""
        query = (
            select(Transaction)
            .where(Transaction.ledger_sequence.is_not(None))
            .order_by(Transaction.ledger_sequence.desc())
            .limit(1)
        )
        if for_update:
            query = query.with_for_update()
        return self.db.scalars(query).first()

    def record_ledger_position(self, transaction: Transaction, sequence: int, running_balance: Decimal) -> None:
        transaction.ledger_sequence = sequence
        transaction.running_balance = running_balance
        self.db.flush()

    def ledger_entries(self) -> List[LedgerEntry]:
        """Appended entries in ledger order"""
        rows = self.db.execute(
            select(
                Transaction.id,
                Transaction.ledger_sequence,
                Transaction.amount,
                Transaction.running_balance,
                Transaction.date,
            )
            .where(Transaction.ledger_sequence.is_not(None))
            .order_by(Transaction.ledger_sequence)
        ).all()
        return [
            LedgerEntry(
                entry_id=row.id,
                sequence=row.ledger_sequence,
                amount=Decimal(row.amount),
                running_balance=Decimal(row.running_balance),
                entry_date=row.date,
            )
            for row in rows
        ]


class ReplenishmentRepository:
    """Repository for replenishment requests"""

    def __init__(self, db: Session):
        self.db = db

    def create_request(self, requested_amount: Decimal, reason: str, requested_by: str) -> ReplenishmentRequest:
        db_request = ReplenishmentRequest(
            requested_amount=requested_amount,
            reason=reason,
            requested_by=requested_by,
        )
        self.db.add(db_request)
        self.db.flush()
        return db_request

    def get_request(self, request_id: int, for_update: bool = False) -> Optional[ReplenishmentRequest]:
        query = select(ReplenishmentRequest).where(ReplenishmentRequest.id == request_id)
        if for_update:
            query = query.with_for_update()
        return self.db.scalars(query).first()

    def list_requests(self, status: Optional[str] = None) -> List[ReplenishmentRequest]:
        query = select(ReplenishmentRequest)
        if status:
            query = query.where(ReplenishmentRequest.status == status)
        query = query.order_by(ReplenishmentRequest.created_at.desc(), ReplenishmentRequest.id.desc())
        return list(self.db.scalars(query))


class SettingRepository:
    """Repository for key/value settings"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[Setting]:
        return self.db.scalars(select(Setting).where(Setting.key == key)).first()

    def get_setting(self, key: str) -> Optional[str]:
        setting = self.get(key)
        return setting.value if setting else None

    def set_setting(self, key: str, value: str, updated_by: str) -> Setting:
        """Insert or overwrite ``key``, recording the editor"""
        setting = self.get(key)
        if setting is None:
            setting = Setting(key=key, value=value, updated_by=updated_by)
            self.db.add(setting)
        else:
            setting.value = value
            setting.updated_by = updated_by
            setting.updated_at = utcnow()
        self.db.flush()
        return setting
