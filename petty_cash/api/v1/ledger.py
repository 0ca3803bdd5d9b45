"""GET /v1/ledger and POST /v1/reconciliation - float balance views"""

from datetime import date

from fastapi import APIRouter, Depends

from petty_cash.api.dependencies import get_actor, get_ledger_engine
from petty_cash.api.v1.schemas import (
    LedgerEntrySchema,
    LedgerResponse,
    MonthSummarySchema,
    ReconciliationRequest,
    ReconciliationResponse,
)
from petty_cash.config import settings
from petty_cash.domain.balances import ZERO, summarize_month
from petty_cash.domain.models import Actor
from petty_cash.domain.permissions import VIEW_ALL_TRANSACTIONS, require
from petty_cash.services.ledger import LedgerEngine

router = APIRouter()


@router.get("/ledger", response_model=LedgerResponse)
def get_ledger(
    actor: Actor = Depends(get_actor),
    ledger: LedgerEngine = Depends(get_ledger_engine),
):
    """
    Full ledger in append order, verified before it is returned.

    Raises LedgerIntegrityError (500) if stored balances do not chain.
    """
    require(actor.role, VIEW_ALL_TRANSACTIONS)
    entries = ledger.verify()
    current = entries[-1].running_balance if entries else ZERO
    month = summarize_month(entries, current, date.today())
    return LedgerResponse(
        current_balance=current,
        entries=[
            LedgerEntrySchema(
                entry_id=e.entry_id,
                sequence=e.sequence,
                amount=e.amount,
                running_balance=e.running_balance,
                entry_date=e.entry_date,
            )
            for e in entries
        ],
        month=MonthSummarySchema(
            expenses=month.expenses,
            replenishments=month.replenishments,
            opening_float=month.opening_float,
        ),
    )


@router.post("/reconciliation", response_model=ReconciliationResponse, dependencies=[Depends(get_actor)])
def reconcile_float(
    body: ReconciliationRequest,
    ledger: LedgerEngine = Depends(get_ledger_engine),
):
    """Compare a physical cash count against the ledger balance"""
    result = ledger.reconcile(body.physical_count, settings.reconciliation_tolerance)
    return ReconciliationResponse(
        current_balance=result.current_balance,
        physical_count=result.physical_count,
        variance=result.variance,
        balanced=result.balanced,
    )
