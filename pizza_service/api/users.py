"""
User Endpoints

    - GET /api/user/me: the caller's own profile
    - PUT /api/user/{user_id}: update a profile (self or admin)
    - GET /api/user: list users
"""

from typing import Optional

from fastapi import APIRouter, Query

from pizza_service import crud
from pizza_service.api.deps import DB, CurrentActor, Sessions
from pizza_service.core.config import get_settings
from pizza_service.core.errors import NotFound
from pizza_service.core.policy import Action, RoleAssignment, Target, authorize
from pizza_service.schemas import AuthResponse, UserOut, UserUpdate, user_to_out

router = APIRouter(prefix="/api/user", tags=["Users"])


@router.get("/me", response_model=UserOut)
async def get_me(actor: CurrentActor, db: DB) -> UserOut:
    authorize(actor, Action.READ_USER, Target(user_id=actor.id))
    user = await crud.get_user(db, actor.id)
    if user is None:
        raise NotFound("user not found")
    return user_to_out(user)


@router.put("/{user_id}", response_model=AuthResponse)
async def update_user(
    user_id: int,
    body: UserUpdate,
    actor: CurrentActor,
    db: DB,
    sessions: Sessions,
) -> AuthResponse:
    """
    Update name, email, password and (admins only) roles.

    The updated user gets a fresh token carrying the new roles; any token
    they held before stops working.
    """
    target = Target(user_id=user_id)
    authorize(actor, Action.UPDATE_USER, target)
    roles = None
    if body.roles is not None:
        authorize(actor, Action.ASSIGN_ROLES, target)
        roles = [RoleAssignment(role.role, role.franchise_id) for role in body.roles]

    user = await crud.get_user(db, user_id)
    if user is None:
        raise NotFound("user not found")

    user = await crud.update_user(
        db,
        user,
        name=body.name,
        email=body.email,
        password=body.password,
        roles=roles,
    )
    token = await sessions.issue(user)
    return AuthResponse(user=user_to_out(user), token=token)


@router.get("", response_model=tuple[list[UserOut], bool])
async def list_users(
    actor: CurrentActor,
    db: DB,
    page: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=100),
    name: Optional[str] = Query(None, max_length=255),
) -> tuple[list[UserOut], bool]:
    """
    One page of users as ``[users, more]``.

    ``name`` matches anywhere in the user's name, ``*`` matching any run of
    characters.
    """
    authorize(actor, Action.LIST_USERS)
    users, more = await crud.list_users(
        db, page, limit or get_settings().default_page_limit, name
    )
    return [user_to_out(user) for user in users], more
