"""Approval workflow for transactions and replenishment requests"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from petty_cash.domain.approval import (
    REPLENISHMENT,
    TRANSACTION,
    check_decision_request,
    check_transition,
)
from petty_cash.domain.balances import to_money
from petty_cash.domain.exceptions import NotFound, PersistenceFailure, PettyCashError, ValidationError
from petty_cash.domain.models import (
    APPROVED,
    FLOAT_PAYMENT_METHOD,
    FLOAT_RECEIVER,
    PAYMENT_METHODS,
    Actor,
)
from petty_cash.domain.permissions import SUBMIT_REPLENISHMENT, SUBMIT_TRANSACTION, require
from petty_cash.infrastructure.database.models import ReplenishmentRequest, Transaction
from petty_cash.infrastructure.database.repositories import (
    ReplenishmentRepository,
    TransactionRepository,
)
from petty_cash.infrastructure.observability.logging import log_transition
from petty_cash.infrastructure.observability.metrics import record_decision, submission_counter
from petty_cash.services.ledger import LedgerEngine
from petty_cash.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def _parse_date(value: Union[date, str, None]) -> date:
    if isinstance(value, date):
        return value
    if not value:
        raise ValidationError("date is required")
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise ValidationError(f"date must be ISO formatted, got {value!r}") from e


class ApprovalService:
    """
    Submission and decision of pending entities.

    Every decision runs the same gate: capability check, target status,
    existence, pending state, rejection comment. All of it happens before
    any write, and the status change commits together with its ledger
    append.
    """

    def __init__(self, db: Session):
        self.db = db
        self.transactions = TransactionRepository(db)
        self.replenishments = ReplenishmentRepository(db)
        self.ledger = LedgerEngine(db)

    # Submission

    def submit_transaction(
        self,
        actor: Actor,
        transaction_date: Union[date, str],
        description: str,
        amount: object,
        received_by: str,
        payment_method: str,
        receipt_url: Optional[str] = None,
        receipt_file_name: Optional[str] = None,
    ) -> Transaction:
        """
        Record a pending transaction. It has no ledger effect until approved.

        Amount sign is taken as given: negative for expenses, positive for credits.
        """
        require(actor.role, SUBMIT_TRANSACTION)
        fields = {
            "date": _parse_date(transaction_date),
            "description": _require_text(description, "description"),
            "amount": to_money(amount),
            "received_by": _require_text(received_by, "received_by"),
            "payment_method": payment_method,
            "receipt_url": receipt_url,
            "receipt_file_name": receipt_file_name,
            "submitted_by": actor.id,
        }
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(f"payment_method must be one of {', '.join(PAYMENT_METHODS)}")

        transaction = self._commit(lambda: self.transactions.create_transaction(**fields))
        submission_counter.labels(entity=TRANSACTION).inc()
        logger.info("Transaction submitted", extra={"entity_id": transaction.id, "actor_id": actor.id})
        return transaction

    def submit_replenishment(self, actor: Actor, requested_amount: object, reason: str) -> ReplenishmentRequest:
        """Record a pending request to top up the float; amount must be positive"""
        require(actor.role, SUBMIT_REPLENISHMENT)
        amount = to_money(requested_amount, field="requested_amount")
        if amount <= 0:
            raise ValidationError("requested_amount must be positive")
        reason = _require_text(reason, "reason")

        request = self._commit(lambda: self.replenishments.create_request(amount, reason, actor.id))
        submission_counter.labels(entity=REPLENISHMENT).inc()
        logger.info("Replenishment requested", extra={"entity_id": request.id, "actor_id": actor.id})
        return request

    # Decisions

    def transition(
        self,
        kind: str,
        entity_id: int,
        target_status: str,
        actor: Actor,
        comments: Optional[str] = None,
    ) -> Union[Transaction, ReplenishmentRequest]:
        if kind == TRANSACTION:
            return self.decide_transaction(entity_id, target_status, actor, comments)
        if kind == REPLENISHMENT:
            return self.decide_replenishment(entity_id, target_status, actor, comments)
        raise ValidationError(f"Unknown entity kind {kind!r}")

    def decide_transaction(
        self,
        transaction_id: int,
        target_status: str,
        actor: Actor,
        comments: Optional[str] = None,
    ) -> Transaction:
        """
        Approve or reject a pending transaction.

        Approval appends the transaction to the ledger, making its running
        balance visible.

        Raises:
            PermissionDenied, ValidationError, NotFound, AlreadyDecided, PersistenceFailure
        """
        check_decision_request(TRANSACTION, actor.role, target_status)

        def decide() -> Transaction:
            transaction = self.transactions.get_transaction(transaction_id, for_update=True)
            if transaction is None:
                raise NotFound("Transaction", transaction_id)
            comment = check_transition(TRANSACTION, transaction_id, transaction.status, target_status, comments)
            self._stamp_decision(transaction, target_status, actor, comment)
            if target_status == APPROVED:
                self.ledger.append(transaction)
            else:
                self.db.flush()
            return transaction

        with LedgerEngine.appending():
            transaction = self._commit(decide)
            if target_status == APPROVED:
                LedgerEngine.publish(transaction)

        record_decision(TRANSACTION, target_status)
        log_transition(TRANSACTION, transaction.id, target_status, actor.id, transaction.running_balance)
        return transaction

    def decide_replenishment(
        self,
        request_id: int,
        target_status: str,
        actor: Actor,
        comments: Optional[str] = None,
    ) -> ReplenishmentRequest:
        """
        Approve or reject a pending replenishment request.

        Approval creates exactly one approved "Cash Float" credit for the
        requested amount, attributed to the approver, and appends it to the
        ledger.

        Raises:
            PermissionDenied, ValidationError, NotFound, AlreadyDecided, PersistenceFailure
        """
        check_decision_request(REPLENISHMENT, actor.role, target_status)

        def decide() -> ReplenishmentRequest:
            request = self.replenishments.get_request(request_id, for_update=True)
            if request is None:
                raise NotFound("Replenishment request", request_id)
            comment = check_transition(REPLENISHMENT, request_id, request.status, target_status, comments)
            self._stamp_decision(request, target_status, actor, comment)
            if target_status == APPROVED:
                credit = self.transactions.create_transaction(
                    date=date.today(),
                    description=f"Cash replenishment - {request.reason}",
                    amount=Decimal(request.requested_amount),
                    received_by=FLOAT_RECEIVER,
                    payment_method=FLOAT_PAYMENT_METHOD,
                    status=APPROVED,
                    submitted_by=actor.id,
                    approved_by=actor.id,
                    approved_at=request.approved_at,
                )
                self.ledger.append(credit)
                request.transaction_id = credit.id
            self.db.flush()
            return request

        with LedgerEngine.appending():
            request = self._commit(decide)
            credit = request.transaction
            if credit is not None:
                LedgerEngine.publish(credit)

        balance = credit.running_balance if credit is not None else None
        record_decision(REPLENISHMENT, target_status)
        log_transition(REPLENISHMENT, request.id, target_status, actor.id, balance)
        return request

    # Helpers

    @staticmethod
    def _stamp_decision(entity, target_status: str, actor: Actor, comment: Optional[str]) -> None:
        entity.status = target_status
        entity.approved_by = actor.id
        entity.approved_at = utcnow()
        entity.comments = comment

    def _commit(self, work):
        """Run ``work`` and commit, rolling back on any failure"""
        try:
            result = work()
            self.db.commit()
        except PettyCashError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceFailure(f"Could not persist change: {e.__class__.__name__}") from e
        return result
