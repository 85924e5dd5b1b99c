"""
Authentication Endpoints

    - POST /api/auth: register a diner
    - PUT /api/auth: log in
    - DELETE /api/auth: log out
"""

import logging

from fastapi import APIRouter

from pizza_service import crud
from pizza_service.api.deps import DB, CurrentActor, Sessions
from pizza_service.core.errors import Unauthorized
from pizza_service.core.policy import RoleAssignment
from pizza_service.schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    user_to_out,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("", response_model=AuthResponse, summary="Register")
async def register(body: RegisterRequest, db: DB, sessions: Sessions) -> AuthResponse:
    """Create a diner account and log it in."""
    user = await crud.create_user(
        db, body.name, body.email, body.password, [RoleAssignment.diner()]
    )
    token = await sessions.issue(user)
    return AuthResponse(user=user_to_out(user), token=token)


@router.put("", response_model=AuthResponse, summary="Login")
async def login(body: LoginRequest, db: DB, sessions: Sessions) -> AuthResponse:
    user = await crud.authenticate_user(db, body.email, body.password)
    if user is None:
        logger.warning(f"Failed login for {body.email}")
        raise Unauthorized()
    token = await sessions.issue(user)
    return AuthResponse(user=user_to_out(user), token=token)


@router.delete("", response_model=MessageResponse, summary="Logout")
async def logout(actor: CurrentActor, sessions: Sessions) -> MessageResponse:
    await sessions.revoke(actor.session_id)
    return MessageResponse(message="logout successful")
