"""Approval state machine rules shared by transactions and replenishment requests"""

from typing import Optional

from petty_cash.domain.exceptions import AlreadyDecided, ValidationError
from petty_cash.domain.models import APPROVED, DECISIONS, PENDING, REJECTED
from petty_cash.domain.permissions import require

TRANSACTION = "transaction"
REPLENISHMENT = "replenishment"

DECIDE_ACTIONS = {
    TRANSACTION: "decide_transaction",
    REPLENISHMENT: "decide_replenishment",
}

# pending is the only state with outgoing edges
TRANSITIONS = {
    PENDING: frozenset({APPROVED, REJECTED}),
    APPROVED: frozenset(),
    REJECTED: frozenset(),
}


def check_decision_request(kind: str, actor_role: str, target_status: str) -> None:
    """
    Checks that need nothing but the request itself.

    Raises:
        PermissionDenied: Actor role cannot decide this kind of entity
        ValidationError: Target status is not a decision
    """
    require(actor_role, DECIDE_ACTIONS[kind])
    if target_status not in DECISIONS:
        raise ValidationError(f"status must be one of {', '.join(DECISIONS)}, got {target_status!r}")


def check_transition(
    kind: str,
    entity_id: object,
    current_status: str,
    target_status: str,
    comments: Optional[str],
) -> Optional[str]:
    """
    Checks against the stored entity. Returns the normalized comment.

    Raises:
        AlreadyDecided: Entity is terminal
        ValidationError: Rejection without a comment
    """
    if target_status not in TRANSITIONS.get(current_status, frozenset()):
        raise AlreadyDecided(kind.capitalize(), entity_id, current_status)

    comment = comments.strip() if comments is not None else None
    if target_status == REJECTED and not comment:
        raise ValidationError("comments are required when rejecting")
    return comment or None
