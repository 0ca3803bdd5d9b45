"""Replenishment request endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from petty_cash.api.dependencies import get_actor, get_approval_service
from petty_cash.api.v1.schemas import ReplenishmentCreate, ReplenishmentResponse, StatusUpdate
from petty_cash.domain.models import Actor
from petty_cash.infrastructure.database.models import ReplenishmentRequest
from petty_cash.services.approvals import ApprovalService

router = APIRouter()


def to_response(request: ReplenishmentRequest) -> ReplenishmentResponse:
    response = ReplenishmentResponse.model_validate(request)
    if request.transaction is not None:
        response.running_balance = request.transaction.running_balance
    return response


@router.post("/replenishments", response_model=ReplenishmentResponse, status_code=201)
def submit_replenishment(
    body: ReplenishmentCreate,
    actor: Actor = Depends(get_actor),
    service: ApprovalService = Depends(get_approval_service),
):
    return to_response(service.submit_replenishment(actor, body.requested_amount, body.reason))


@router.get("/replenishments", response_model=List[ReplenishmentResponse], dependencies=[Depends(get_actor)])
def list_replenishments(
    status: Optional[str] = Query(None),
    service: ApprovalService = Depends(get_approval_service),
):
    return [to_response(r) for r in service.replenishments.list_requests(status)]


@router.patch("/replenishments/{request_id}/status", response_model=ReplenishmentResponse)
def decide_replenishment(
    request_id: int,
    body: StatusUpdate,
    actor: Actor = Depends(get_actor),
    service: ApprovalService = Depends(get_approval_service),
):
    """
    Approve or reject a replenishment request.

    Approval credits the float with the requested amount; the response
    carries the resulting running balance.
    """
    return to_response(service.decide_replenishment(request_id, body.status, actor, body.comments))
