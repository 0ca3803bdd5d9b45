"""Ledger engine - the single owner of running-balance appends"""

import threading
import time
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from petty_cash.domain.balances import (
    ZERO,
    average_amount,
    compute_running_balance,
    monthly_expense_total,
    reconcile,
    to_money,
    verify_chain,
)
from petty_cash.domain.exceptions import PersistenceFailure
from petty_cash.domain.models import LedgerEntry, LedgerStats, Reconciliation
from petty_cash.infrastructure.database.models import Transaction
from petty_cash.infrastructure.database.repositories import TransactionRepository
from petty_cash.infrastructure.observability.logging import log_ledger_append
from petty_cash.infrastructure.observability.metrics import (
    ledger_append_failure_counter,
    ledger_append_latency_histogram,
    record_ledger_append,
)

# Serializes read-latest-then-insert within this process; the row lock and the
# unique ledger_sequence cover writers in other processes.
_append_lock = threading.RLock()


class LedgerEngine:
    """
    Append-only view over approved transactions.

    Each append reads the latest entry's running balance (0 for an empty
    ledger), adds the new amount and stamps the entry with the result and the
    next sequence number. Ordering is append order, never the user-supplied
    transaction date, so backdated entries cannot rewrite earlier balances.

    The engine never commits: callers own the unit of work and use
    ``appending()`` to hold the lock until their commit lands.
    """

    def __init__(self, db: Session):
        self.db = db
        self.transactions = TransactionRepository(db)

    @staticmethod
    def appending():
        """Lock guarding the whole read-append-commit unit"""
        return _append_lock

    def append(self, transaction: Transaction) -> Decimal:
        """
        Append ``transaction`` to the ledger and return its running balance.

        Must be called while holding ``appending()``. Flushes but does not
        commit; callers ``publish`` the entry once their commit lands.

        Raises:
            ValidationError: Amount is not a valid decimal
            PersistenceFailure: Store rejected the write
        """
        amount = to_money(transaction.amount)
        started = time.perf_counter()
        try:
            self.transactions.lock_ledger()
            latest = self.transactions.latest_ledger_entry(for_update=True)
            previous = Decimal(latest.running_balance) if latest is not None else None
            sequence = latest.ledger_sequence + 1 if latest is not None else 1
            running_balance = compute_running_balance(previous, amount)
            transaction.amount = amount
            self.transactions.record_ledger_position(transaction, sequence, running_balance)
        except SQLAlchemyError as e:
            ledger_append_failure_counter.inc()
            raise PersistenceFailure(f"Ledger append failed: {e.__class__.__name__}") from e
        finally:
            ledger_append_latency_histogram.observe(time.perf_counter() - started)

        return running_balance

    @staticmethod
    def publish(transaction: Transaction) -> None:
        """Emit metrics and the append log for a committed ledger entry"""
        amount = Decimal(transaction.amount)
        running_balance = Decimal(transaction.running_balance)
        record_ledger_append(amount, running_balance)
        log_ledger_append(transaction.id, transaction.ledger_sequence, amount, running_balance)

    def current_balance(self) -> Decimal:
        """Running balance of the latest ledger entry, 0.00 when empty"""
        latest = self.transactions.latest_ledger_entry()
        if latest is None:
            return ZERO
        return Decimal(latest.running_balance)

    def entries(self) -> List[LedgerEntry]:
        return self.transactions.ledger_entries()

    def verify(self) -> List[LedgerEntry]:
        """Verify the stored chain and return it"""
        entries = self.entries()
        verify_chain(entries)
        return entries

    def stats(self, today: Optional[date] = None) -> LedgerStats:
        """Aggregate read-only projection over approved entries"""
        today = today or date.today()
        entries = self.entries()
        current = entries[-1].running_balance if entries else ZERO
        return LedgerStats(
            current_balance=current,
            monthly_total=monthly_expense_total(entries, today),
            pending_count=self.transactions.count_pending(),
            average_transaction=average_amount(e.amount for e in entries),
            total_transactions=len(entries),
        )

    def reconcile(self, physical_count: object, tolerance: Decimal) -> Reconciliation:
        return reconcile(self.current_balance(), physical_count, tolerance)

    def get_transactions(
        self,
        status: Optional[str] = None,
        submitted_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Transaction]:
        return self.transactions.list_transactions(
            status=status,
            submitted_by=submitted_by,
            limit=limit,
            offset=offset,
            start_date=start_date,
            end_date=end_date,
        )
