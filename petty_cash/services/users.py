"""User registration and role administration"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from petty_cash.domain.exceptions import NotFound, PersistenceFailure, ValidationError
from petty_cash.domain.models import ROLES, Actor
from petty_cash.domain.permissions import MANAGE_USERS, require
from petty_cash.infrastructure.database.models import User
from petty_cash.infrastructure.database.repositories import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Users are never deleted; only admins change roles"""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)

    def register(
        self,
        user_id: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        if not user_id or not user_id.strip():
            raise ValidationError("user id is required")
        try:
            user = self.users.upsert_user(user_id.strip(), email, first_name, last_name)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceFailure(f"Could not register user: {e.__class__.__name__}") from e
        return user

    def get(self, user_id: str) -> User:
        user = self.users.get_user(user_id)
        if user is None:
            raise NotFound("User", user_id)
        return user

    def list_users(self, actor: Actor) -> List[User]:
        require(actor.role, MANAGE_USERS)
        return self.users.list_users()

    def update_role(self, actor: Actor, user_id: str, role: str) -> User:
        """
        Raises:
            PermissionDenied: Actor is not an admin
            ValidationError: Unknown role
            NotFound: No such user
        """
        require(actor.role, MANAGE_USERS)
        if role not in ROLES:
            raise ValidationError(f"role must be one of {', '.join(ROLES)}")
        user = self.get(user_id)
        try:
            self.users.update_role(user, role)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceFailure(f"Could not update role: {e.__class__.__name__}") from e
        logger.info("Role updated", extra={"user_id": user_id, "role": role, "actor_id": actor.id})
        return user
