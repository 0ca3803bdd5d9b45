"""Running-balance arithmetic - core business logic for the cash float"""

from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List, Sequence

from petty_cash.domain.exceptions import LedgerIntegrityError, ValidationError
from petty_cash.domain.models import LedgerEntry, MonthSummary, Reconciliation
from petty_cash.utils.date_utils import is_same_month

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# Columns are Numeric(10, 2)
MAX_AMOUNT = Decimal("100000000")


def to_money(value: object, field: str = "amount") -> Decimal:
    """
    Parse a caller-supplied amount into an exact 2-place Decimal.

    Floats go through ``str`` so 45.5 becomes Decimal("45.50") rather than
    its binary expansion. Sub-cent values are rejected, never rounded.

    Raises:
        ValidationError: Value is missing, not numeric, not finite, or has
            more than two decimal places
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a decimal number")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"{field} must be a decimal number, got {value!r}") from e
    if not amount.is_finite():
        raise ValidationError(f"{field} must be finite, got {value!r}")
    if abs(amount) >= MAX_AMOUNT:
        raise ValidationError(f"{field} must be below {MAX_AMOUNT} in magnitude")
    quantized = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if quantized != amount:
        raise ValidationError(f"{field} must have at most two decimal places, got {value!r}")
    return quantized


def compute_running_balance(previous_balance: Decimal | None, amount: Decimal) -> Decimal:
    """
    Balance after appending ``amount`` to a ledger whose latest balance is
    ``previous_balance`` (None for an empty ledger).

    Example:
        None + -45.50 -> -45.50
        -45.50 + -10.00 -> -55.50
        -55.50 + 500.00 -> 444.50
    """
    base = previous_balance if previous_balance is not None else ZERO
    return (base + amount).quantize(CENT, rounding=ROUND_HALF_UP)


def verify_chain(entries: Sequence[LedgerEntry]) -> None:
    """
    Check that every entry's running balance extends the one before it.

    Entries must be in ledger (append) order.

    Raises:
        LedgerIntegrityError: On the first entry that breaks the chain
    """
    previous: Decimal | None = None
    last_sequence: int | None = None
    for entry in entries:
        if last_sequence is not None and entry.sequence <= last_sequence:
            raise LedgerIntegrityError(
                f"Entry {entry.entry_id} is out of ledger order (sequence {entry.sequence})",
                entry_id=entry.entry_id,
            )
        expected = compute_running_balance(previous, entry.amount)
        if entry.running_balance != expected:
            raise LedgerIntegrityError(
                f"Entry {entry.entry_id} has running balance {entry.running_balance}, expected {expected}",
                entry_id=entry.entry_id,
            )
        previous = entry.running_balance
        last_sequence = entry.sequence


def average_amount(amounts: Iterable[Decimal]) -> Decimal:
    """Mean of absolute amounts, 0.00 when there are none"""
    values = [abs(a) for a in amounts]
    if not values:
        return ZERO
    return (sum(values, ZERO) / len(values)).quantize(CENT, rounding=ROUND_HALF_UP)


def _in_month(entries: Iterable[LedgerEntry], today: date) -> List[LedgerEntry]:
    return [e for e in entries if e.entry_date is not None and is_same_month(e.entry_date, today)]


def monthly_expense_total(entries: Iterable[LedgerEntry], today: date) -> Decimal:
    """Sum of expenses (negative amounts, as positives) dated in the month of ``today``"""
    total = sum((abs(e.amount) for e in _in_month(entries, today) if e.amount < 0), ZERO)
    return total.quantize(CENT)


def summarize_month(entries: List[LedgerEntry], current_balance: Decimal, today: date) -> MonthSummary:
    """
    Split this month's approved movement into expenses and replenishments.

    Opening float is what the balance was before this month's movement:
    current + expenses - replenishments.
    """
    this_month = _in_month(entries, today)
    expenses = sum((abs(e.amount) for e in this_month if e.amount < 0), ZERO)
    replenishments = sum((e.amount for e in this_month if e.amount > 0), ZERO)
    return MonthSummary(
        expenses=expenses.quantize(CENT),
        replenishments=replenishments.quantize(CENT),
        opening_float=(current_balance + expenses - replenishments).quantize(CENT),
    )


def reconcile(current_balance: Decimal, physical_count: object, tolerance: Decimal = CENT) -> Reconciliation:
    """
    Compare a physical cash count with the ledger balance.

    A variance within ``tolerance`` counts as balanced (rounding differences).
    """
    counted = to_money(physical_count, field="physical_count")
    variance = (counted - current_balance).quantize(CENT)
    return Reconciliation(
        current_balance=current_balance,
        physical_count=counted,
        variance=variance,
        balanced=abs(variance) <= tolerance,
    )
