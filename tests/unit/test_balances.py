"""Unit tests for running-balance arithmetic"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from petty_cash.domain.balances import (
    average_amount,
    compute_running_balance,
    monthly_expense_total,
    reconcile,
    summarize_month,
    to_money,
    verify_chain,
)
from petty_cash.domain.exceptions import LedgerIntegrityError, ValidationError
from petty_cash.domain.models import LedgerEntry


def chain(*amounts: str, on: date | None = None) -> list[LedgerEntry]:
    """Build a well-formed ledger from amounts"""
    entries = []
    balance = None
    for i, raw in enumerate(amounts, start=1):
        amount = Decimal(raw)
        balance = compute_running_balance(balance, amount)
        entries.append(LedgerEntry(entry_id=i, sequence=i, amount=amount, running_balance=balance, entry_date=on))
    return entries


def test_to_money_quantizes_to_cents():
    assert to_money("45.5") == Decimal("45.50")
    assert to_money(Decimal("-10")) == Decimal("-10.00")
    assert to_money(3) == Decimal("3.00")


@pytest.mark.parametrize("sub_cent", ["-10.005", "0.001", Decimal("45.505"), 0.125])
def test_to_money_rejects_sub_cent_amounts(sub_cent):
    with pytest.raises(ValidationError):
        to_money(sub_cent)


def test_to_money_accepts_trailing_zeros():
    assert to_money("10.500") == Decimal("10.50")


def test_to_money_float_has_no_binary_drift():
    """0.1 + 0.2 style inputs land on exact cents"""
    assert to_money(0.1) + to_money(0.2) == Decimal("0.30")


@pytest.mark.parametrize("bad", [None, "", "abc", "NaN", "Infinity", True, "1e9"])
def test_to_money_rejects_non_decimals(bad):
    with pytest.raises(ValidationError):
        to_money(bad)


def test_compute_running_balance_empty_ledger_base_case():
    assert compute_running_balance(None, Decimal("-45.50")) == Decimal("-45.50")


def test_compute_running_balance_scenario():
    """Expense, expense, replenishment"""
    balance = compute_running_balance(None, Decimal("-45.50"))
    balance = compute_running_balance(balance, Decimal("-10.00"))
    assert balance == Decimal("-55.50")
    balance = compute_running_balance(balance, Decimal("500.00"))
    assert balance == Decimal("444.50")


def test_verify_chain_accepts_well_formed_ledger():
    entries = chain("-45.50", "-10.00", "500.00")
    verify_chain(entries)
    assert entries[0].running_balance == entries[0].amount
    for prev, cur in zip(entries, entries[1:]):
        assert cur.running_balance == prev.running_balance + cur.amount


def test_verify_chain_accepts_empty_ledger():
    verify_chain([])


def test_verify_chain_reports_first_broken_entry():
    entries = chain("100.00", "-20.00", "-5.00")
    entries[1].running_balance = Decimal("79.00")

    with pytest.raises(LedgerIntegrityError) as exc:
        verify_chain(entries)

    assert exc.value.entry_id == 2


def test_verify_chain_rejects_out_of_order_sequence():
    entries = chain("100.00", "-20.00")
    entries[1].sequence = 1

    with pytest.raises(LedgerIntegrityError):
        verify_chain(entries)


def test_average_amount_uses_absolute_values():
    assert average_amount([Decimal("-10.00"), Decimal("30.00")]) == Decimal("20.00")
    assert average_amount([Decimal("-1.00"), Decimal("-1.00"), Decimal("-2.00")]) == Decimal("1.33")


def test_average_amount_empty():
    assert average_amount([]) == Decimal("0.00")


def test_monthly_expense_total_counts_only_this_months_expenses():
    today = date(2026, 3, 15)
    entries = chain("500.00", "-40.00", "-2.50", on=today)
    entries.append(
        LedgerEntry(entry_id=9, sequence=9, amount=Decimal("-99.00"), running_balance=Decimal("358.50"), entry_date=date(2026, 2, 28))
    )

    assert monthly_expense_total(entries, today) == Decimal("42.50")


def test_summarize_month_opening_float():
    today = date(2026, 3, 15)
    entries = chain("1000.00", on=today - timedelta(days=40)) + [
        LedgerEntry(entry_id=2, sequence=2, amount=Decimal("-200.00"), running_balance=Decimal("800.00"), entry_date=today),
        LedgerEntry(entry_id=3, sequence=3, amount=Decimal("300.00"), running_balance=Decimal("1100.00"), entry_date=today),
    ]

    summary = summarize_month(entries, Decimal("1100.00"), today)

    assert summary.expenses == Decimal("200.00")
    assert summary.replenishments == Decimal("300.00")
    assert summary.opening_float == Decimal("1000.00")


def test_reconcile_within_tolerance_is_balanced():
    result = reconcile(Decimal("444.50"), "444.51")
    assert result.variance == Decimal("0.01")
    assert result.balanced is True


def test_reconcile_reports_shortfall():
    result = reconcile(Decimal("444.50"), "400")
    assert result.variance == Decimal("-44.50")
    assert result.balanced is False


def test_reconcile_rejects_bad_count():
    with pytest.raises(ValidationError):
        reconcile(Decimal("0.00"), "lots")
