"""Role capability table consulted by every gated operation"""

from typing import Dict, FrozenSet

from petty_cash.domain.exceptions import PermissionDenied
from petty_cash.domain.models import ACCOUNTANT, ADMIN, CUSTODIAN

SUBMIT_TRANSACTION = "submit_transaction"
SUBMIT_REPLENISHMENT = "submit_replenishment"
DECIDE_TRANSACTION = "decide_transaction"
DECIDE_REPLENISHMENT = "decide_replenishment"
VIEW_ALL_TRANSACTIONS = "view_all_transactions"
MANAGE_USERS = "manage_users"
MANAGE_SETTINGS = "manage_settings"

_SUBMIT = frozenset({SUBMIT_TRANSACTION, SUBMIT_REPLENISHMENT})
_DECIDE = frozenset({DECIDE_TRANSACTION, DECIDE_REPLENISHMENT, VIEW_ALL_TRANSACTIONS})

CAPABILITIES: Dict[str, FrozenSet[str]] = {
    CUSTODIAN: _SUBMIT,
    ACCOUNTANT: _SUBMIT | _DECIDE,
    ADMIN: _SUBMIT | _DECIDE | frozenset({MANAGE_USERS, MANAGE_SETTINGS}),
}


def can(role: str, action: str) -> bool:
    """Return True when ``role`` may perform ``action``; unknown roles may do nothing."""
    return action in CAPABILITIES.get(role, frozenset())


def require(role: str, action: str) -> None:
    """
    Raise PermissionDenied unless ``role`` may perform ``action``.

    Raises:
        PermissionDenied: Role lacks the capability
    """
    if not can(role, action):
        raise PermissionDenied(f"Role '{role}' may not {action.replace('_', ' ')}")
