"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from petty_cash.domain.exceptions import Unauthenticated
from petty_cash.domain.models import Actor
from petty_cash.infrastructure.database.models import User
from petty_cash.infrastructure.database.repositories import UserRepository
from petty_cash.infrastructure.database.session import get_db
from petty_cash.services.approvals import ApprovalService
from petty_cash.services.ledger import LedgerEngine
from petty_cash.services.settings import SettingsService
from petty_cash.services.users import UserService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_identity(x_user_id: str | None = Header(None)) -> str:
    """User id asserted by the upstream identity provider"""
    if not x_user_id or not x_user_id.strip():
        raise Unauthenticated("Missing X-User-Id header")
    return x_user_id.strip()


def get_current_user(identity: str = Depends(get_identity), db: Session = Depends(get_db)) -> User:
    """Load the registered user behind the request"""
    user = UserRepository(db).get_user(identity)
    if user is None:
        raise Unauthenticated("Unknown user")
    return user


def get_actor(user: User = Depends(get_current_user)) -> Actor:
    return Actor(id=user.id, role=user.role)


def get_approval_service(db: Session = Depends(get_db)) -> ApprovalService:
    return ApprovalService(db)


def get_ledger_engine(db: Session = Depends(get_db)) -> LedgerEngine:
    return LedgerEngine(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_settings_service(db: Session = Depends(get_db)) -> SettingsService:
    return SettingsService(db)
