"""
Menu & Order Endpoints

    - GET /api/order/menu: the menu (public)
    - PUT /api/order/menu: add or replace a menu item (admin)
    - GET /api/order: the caller's orders, newest first
    - POST /api/order: place an order and send it to the order factory
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query

from pizza_service import crud
from pizza_service.api.deps import DB, CurrentActor, OrderFactory
from pizza_service.core.config import get_settings
from pizza_service.core.errors import NotFound, UpstreamFailure
from pizza_service.core.policy import Action, Target, authorize
from pizza_service.schemas import (
    MenuItemIn,
    MenuItemOut,
    OrderCreate,
    OrderCreateResponse,
    OrderListResponse,
    OrderOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/order", tags=["Orders"])


@router.get("/menu", response_model=list[MenuItemOut])
async def get_menu(db: DB) -> list[MenuItemOut]:
    items = await crud.list_menu(db)
    return [MenuItemOut.model_validate(item) for item in items]


@router.put("/menu", response_model=list[MenuItemOut])
async def save_menu_item(body: MenuItemIn, actor: CurrentActor, db: DB) -> list[MenuItemOut]:
    authorize(actor, Action.UPDATE_MENU)
    await crud.save_menu_item(db, body)
    items = await crud.list_menu(db)
    return [MenuItemOut.model_validate(item) for item in items]


@router.get("", response_model=OrderListResponse)
async def list_orders(
    actor: CurrentActor,
    db: DB,
    page: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=100),
) -> OrderListResponse:
    authorize(actor, Action.READ_ORDERS, Target(user_id=actor.id))
    orders = await crud.list_orders(
        db, actor.id, page, limit or get_settings().default_page_limit
    )
    return OrderListResponse(
        diner_id=actor.id,
        orders=[OrderOut.model_validate(order) for order in orders],
        page=page,
    )


@router.post("", response_model=OrderCreateResponse)
async def create_order(
    body: OrderCreate,
    actor: CurrentActor,
    db: DB,
    factory: OrderFactory,
) -> OrderCreateResponse:
    """
    Persist the order, then submit it to the order factory once.

    The order stays recorded even when the factory fails; the failure is
    reported to the caller with the factory's report URL when it gave one.
    """
    authorize(actor, Action.CREATE_ORDER, Target(user_id=actor.id))

    diner = await crud.get_user(db, actor.id)
    if diner is None:
        raise NotFound("user not found")

    order = await crud.create_order(db, actor.id, body.franchise_id, body.store_id, body.items)
    order_out = OrderOut.model_validate(order)

    result = await factory.submit_order(
        diner={"id": diner.id, "name": diner.name, "email": diner.email},
        order=order_out.model_dump(mode="json", by_alias=True),
    )

    if not result.success:
        logger.error(
            f"Order #{order.id} persisted but factory failed via {factory.provider_name}: "
            f"{result.error_message}"
        )
        raise UpstreamFailure(reportUrl=result.report_url, details=result.error_message)

    return OrderCreateResponse(order=order_out, jwt=result.jwt, report_url=result.report_url)
