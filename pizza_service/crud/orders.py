"""
Order Ledger

The global menu and each diner's order history.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pizza_service.core.errors import NotFound
from pizza_service.crud.base import fetch_page
from pizza_service.crud.franchises import get_store
from pizza_service.models import MenuItem, Order, OrderItem
from pizza_service.schemas import MenuItemIn, OrderItemIn

logger = logging.getLogger(__name__)


async def list_menu(db: AsyncSession) -> Sequence[MenuItem]:
    result = await db.execute(select(MenuItem).order_by(MenuItem.id))
    return result.scalars().all()


async def get_menu_item(db: AsyncSession, item_id: int) -> Optional[MenuItem]:
    return await db.get(MenuItem, item_id)


async def save_menu_item(db: AsyncSession, item_in: MenuItemIn) -> MenuItem:
    """Replace the item named by ``item_in.id``, or append a new one."""
    item = await get_menu_item(db, item_in.id) if item_in.id is not None else None
    if item is None:
        item = MenuItem()
        db.add(item)
    item.title = item_in.title
    item.description = item_in.description
    item.image = item_in.image
    item.price = item_in.price
    await db.commit()
    await db.refresh(item)
    logger.info(f"Menu item #{item.id} '{item.title}' saved")
    return item


def _order_query():
    return select(Order).options(selectinload(Order.items))


async def get_order(db: AsyncSession, order_id: int) -> Optional[Order]:
    result = await db.execute(
        _order_query().where(Order.id == order_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_order(
    db: AsyncSession,
    diner_id: int,
    franchise_id: int,
    store_id: int,
    items_in: Sequence[OrderItemIn],
) -> Order:
    """
    Persist an order, snapshotting each line's description and price from
    the menu as it is now.

    Raises:
        NotFound: the store is not part of the franchise, or a line
            references a menu item that does not exist
    """
    if await get_store(db, franchise_id, store_id) is None:
        raise NotFound("store not found for franchise")

    items = []
    for item_in in items_in:
        menu_item = await get_menu_item(db, item_in.menu_id)
        if menu_item is None:
            raise NotFound(f"menu item {item_in.menu_id} not found")
        items.append(OrderItem(
            menu_id=menu_item.id,
            description=item_in.description or menu_item.title,
            price=menu_item.price,
        ))

    order = Order(diner_id=diner_id, franchise_id=franchise_id, store_id=store_id, items=items)
    db.add(order)
    await db.commit()

    logger.info(f"Order #{order.id} created for diner #{diner_id}")
    return await get_order(db, order.id)


async def list_orders(
    db: AsyncSession,
    diner_id: int,
    page: int,
    limit: int,
) -> Sequence[Order]:
    """A diner's orders, newest first."""
    query = (
        _order_query()
        .where(Order.diner_id == diner_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    orders, _ = await fetch_page(db, query, page, limit)
    return orders
