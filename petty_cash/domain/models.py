"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

# Roles
CUSTODIAN = "custodian"
ACCOUNTANT = "accountant"
ADMIN = "admin"
ROLES = (CUSTODIAN, ACCOUNTANT, ADMIN)

# Lifecycle statuses shared by transactions and replenishment requests
PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
STATUSES = (PENDING, APPROVED, REJECTED)
DECISIONS = (APPROVED, REJECTED)

PAYMENT_METHODS = ("cash", "check", "card")

# Replenishment credits land in the float as cash
FLOAT_RECEIVER = "Cash Float"
FLOAT_PAYMENT_METHOD = "cash"


@dataclass
class Actor:
    """Caller identity supplied by the identity provider"""

    id: str
    role: str


@dataclass
class LedgerEntry:
    """Balance-affecting record as seen by chain verification"""

    entry_id: int
    sequence: int
    amount: Decimal
    running_balance: Decimal
    entry_date: Optional[date] = None


@dataclass
class LedgerStats:
    """Read-only projection over the approved ledger"""

    current_balance: Decimal
    monthly_total: Decimal
    pending_count: int
    average_transaction: Decimal
    total_transactions: int


@dataclass
class MonthSummary:
    """Current-month movement of the float"""

    expenses: Decimal
    replenishments: Decimal
    opening_float: Decimal


@dataclass
class Reconciliation:
    """Outcome of comparing a physical cash count to the ledger"""

    current_balance: Decimal
    physical_count: Decimal
    variance: Decimal
    balanced: bool
