"""Transaction endpoints - submit, list, decide, stats"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from petty_cash.api.dependencies import (
    get_actor,
    get_approval_service,
    get_ledger_engine,
    get_settings_service,
)
from petty_cash.api.v1.schemas import (
    StatsResponse,
    StatusUpdate,
    TransactionCreate,
    TransactionResponse,
)
from petty_cash.config import settings
from petty_cash.domain.exceptions import NotFound, PermissionDenied
from petty_cash.domain.models import Actor
from petty_cash.domain.permissions import VIEW_ALL_TRANSACTIONS, can
from petty_cash.services.approvals import ApprovalService
from petty_cash.services.ledger import LedgerEngine
from petty_cash.services.settings import SettingsService

router = APIRouter()


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def submit_transaction(
    body: TransactionCreate,
    actor: Actor = Depends(get_actor),
    service: ApprovalService = Depends(get_approval_service),
):
    """Submit a transaction for approval. It stays off the ledger until approved."""
    return service.submit_transaction(
        actor,
        transaction_date=body.date,
        description=body.description,
        amount=body.amount,
        received_by=body.received_by,
        payment_method=body.payment_method,
        receipt_url=body.receipt_url,
        receipt_file_name=body.receipt_file_name,
    )


@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(
    status: Optional[str] = Query(None),
    submitted_by: Optional[str] = Query(None),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_actor),
    ledger: LedgerEngine = Depends(get_ledger_engine),
):
    """
    List transactions, newest first.

    Custodians only ever see their own submissions.
    """
    if not can(actor.role, VIEW_ALL_TRANSACTIONS):
        submitted_by = actor.id
    return ledger.get_transactions(status=status, submitted_by=submitted_by, limit=limit, offset=offset)


@router.get("/transactions/stats", response_model=StatsResponse, dependencies=[Depends(get_actor)])
def get_stats(
    ledger: LedgerEngine = Depends(get_ledger_engine),
    settings_service: SettingsService = Depends(get_settings_service),
):
    stats = ledger.stats()
    threshold = settings_service.low_balance_threshold()
    return StatsResponse(
        current_balance=stats.current_balance,
        monthly_total=stats.monthly_total,
        pending_count=stats.pending_count,
        average_transaction=stats.average_transaction,
        total_transactions=stats.total_transactions,
        low_balance_threshold=threshold,
        is_low_balance=stats.current_balance < threshold,
    )


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    actor: Actor = Depends(get_actor),
    ledger: LedgerEngine = Depends(get_ledger_engine),
):
    transaction = ledger.transactions.get_transaction(transaction_id)
    if transaction is None:
        raise NotFound("Transaction", transaction_id)
    if transaction.submitted_by != actor.id and not can(actor.role, VIEW_ALL_TRANSACTIONS):
        raise PermissionDenied("Custodians may only view their own transactions")
    return transaction


@router.patch("/transactions/{transaction_id}/status", response_model=TransactionResponse)
def decide_transaction(
    transaction_id: int,
    body: StatusUpdate,
    actor: Actor = Depends(get_actor),
    service: ApprovalService = Depends(get_approval_service),
):
    """Approve or reject a pending transaction; rejections need comments."""
    return service.decide_transaction(transaction_id, body.status, actor, body.comments)
