"""User registration and role administration endpoints"""

from typing import List

from fastapi import APIRouter, Depends

from petty_cash.api.dependencies import get_actor, get_current_user, get_identity, get_user_service
from petty_cash.api.v1.schemas import RoleUpdate, UserRegistration, UserResponse
from petty_cash.domain.models import Actor
from petty_cash.infrastructure.database.models import User
from petty_cash.services.users import UserService

router = APIRouter()


@router.post("/users", response_model=UserResponse, status_code=201)
def register(
    body: UserRegistration,
    identity: str = Depends(get_identity),
    service: UserService = Depends(get_user_service),
):
    """Register (or refresh) the caller. New users start as custodians."""
    return service.register(identity, body.email, body.first_name, body.last_name)


@router.get("/users/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return user


@router.get("/users", response_model=List[UserResponse])
def list_users(
    actor: Actor = Depends(get_actor),
    service: UserService = Depends(get_user_service),
):
    return service.list_users(actor)


@router.patch("/users/{user_id}/role", response_model=UserResponse)
def update_role(
    user_id: str,
    body: RoleUpdate,
    actor: Actor = Depends(get_actor),
    service: UserService = Depends(get_user_service),
):
    """Admin only"""
    return service.update_role(actor, user_id, body.role)
