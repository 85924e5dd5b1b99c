"""
Franchise & Store Endpoints

    - GET /api/franchise: list franchises (public)
    - GET /api/franchise/{user_id}: franchises a user administers
    - POST /api/franchise: create a franchise (admin)
    - DELETE /api/franchise/{franchise_id}: delete a franchise (admin)
    - POST /api/franchise/{franchise_id}/store: open a store
    - DELETE /api/franchise/{franchise_id}/store/{store_id}: close a store
"""

from typing import Optional

from fastapi import APIRouter, Query

from pizza_service import crud
from pizza_service.api.deps import DB, CurrentActor
from pizza_service.core.config import get_settings
from pizza_service.core.policy import Action, Target, authorize
from pizza_service.schemas import (
    FranchiseCreate,
    FranchiseListResponse,
    FranchiseOut,
    MessageResponse,
    StoreCreate,
    StoreOut,
    franchise_to_out,
)

router = APIRouter(prefix="/api/franchise", tags=["Franchises"])


@router.get("", response_model=FranchiseListResponse)
async def list_franchises(
    db: DB,
    page: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=100),
    name: Optional[str] = Query(None, max_length=255),
) -> FranchiseListResponse:
    """One page of franchises with their stores; ``name`` filters like the user list."""
    franchises, more = await crud.list_franchises(
        db, page, limit or get_settings().default_page_limit, name
    )
    return FranchiseListResponse(
        franchises=[franchise_to_out(franchise) for franchise in franchises],
        more=more,
    )


@router.get("/{user_id}", response_model=list[FranchiseOut])
async def list_user_franchises(user_id: int, actor: CurrentActor, db: DB) -> list[FranchiseOut]:
    authorize(actor, Action.LIST_USER_FRANCHISES, Target(user_id=user_id))
    franchises = await crud.list_user_franchises(db, user_id)
    return [franchise_to_out(franchise) for franchise in franchises]


@router.post("", response_model=FranchiseOut)
async def create_franchise(body: FranchiseCreate, actor: CurrentActor, db: DB) -> FranchiseOut:
    authorize(actor, Action.CREATE_FRANCHISE)
    franchise = await crud.create_franchise(db, body.name, [admin.email for admin in body.admins])
    return franchise_to_out(franchise)


@router.delete("/{franchise_id}", response_model=MessageResponse)
async def delete_franchise(franchise_id: int, actor: CurrentActor, db: DB) -> MessageResponse:
    authorize(actor, Action.DELETE_FRANCHISE, Target(franchise_id=franchise_id))
    await crud.delete_franchise(db, franchise_id)
    return MessageResponse(message="franchise deleted")


@router.post("/{franchise_id}/store", response_model=StoreOut)
async def create_store(
    franchise_id: int,
    body: StoreCreate,
    actor: CurrentActor,
    db: DB,
) -> StoreOut:
    authorize(actor, Action.CREATE_STORE, Target(franchise_id=franchise_id))
    store = await crud.create_store(db, franchise_id, body.name)
    return StoreOut.model_validate(store)


@router.delete("/{franchise_id}/store/{store_id}", response_model=MessageResponse)
async def delete_store(
    franchise_id: int,
    store_id: int,
    actor: CurrentActor,
    db: DB,
) -> MessageResponse:
    authorize(actor, Action.DELETE_STORE, Target(franchise_id=franchise_id))
    await crud.delete_store(db, franchise_id, store_id)
    return MessageResponse(message="store deleted")
