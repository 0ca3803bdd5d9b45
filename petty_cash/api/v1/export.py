"""GET /v1/export/transactions - CSV projection of the transaction list"""

import csv
import io
from datetime import date
from typing import Iterable, Optional

from fastapi import APIRouter, Depends, Query
from starlette.responses import Response

from petty_cash.api.dependencies import get_actor, get_ledger_engine
from petty_cash.domain.models import Actor
from petty_cash.domain.permissions import VIEW_ALL_TRANSACTIONS, can
from petty_cash.infrastructure.database.models import Transaction
from petty_cash.services.ledger import LedgerEngine

router = APIRouter()

CSV_HEADERS = ["Date", "Description", "Amount", "Received By", "Payment Method", "Status", "Balance", "Submitted By"]


def render_csv(transactions: Iterable[Transaction]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for t in transactions:
        writer.writerow([
            t.date.isoformat(),
            t.description,
            f"{t.amount:.2f}",
            t.received_by,
            t.payment_method,
            t.status,
            f"{t.running_balance:.2f}" if t.running_balance is not None else "",
            t.submitter.full_name if t.submitter is not None else "",
        ])
    return buffer.getvalue()


@router.get("/export/transactions")
def export_transactions(
    status: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    actor: Actor = Depends(get_actor),
    ledger: LedgerEngine = Depends(get_ledger_engine),
):
    """Download transactions as CSV, optionally filtered by status and date range (inclusive)"""
    submitted_by = None if can(actor.role, VIEW_ALL_TRANSACTIONS) else actor.id
    transactions = ledger.get_transactions(
        status=status,
        submitted_by=submitted_by,
        start_date=start_date,
        end_date=end_date,
    )
    return Response(
        content=render_csv(transactions),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=transactions.csv"},
    )
