"""
Franchise Store

Franchises, their stores, and the franchisee role assignments that make
users the admins of a franchise.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pizza_service.core.errors import Conflict, NotFound
from pizza_service.core.policy import Role, RoleAssignment
from pizza_service.core.sessions import SessionStore
from pizza_service.crud.base import apply_name_filter, fetch_page
from pizza_service.crud.users import get_user_by_email
from pizza_service.models import Franchise, Store, UserRole

logger = logging.getLogger(__name__)


def _franchise_query():
    return select(Franchise).options(
        selectinload(Franchise.stores),
        selectinload(Franchise.admin_roles).selectinload(UserRole.user),
    )


async def get_franchise(db: AsyncSession, franchise_id: int) -> Optional[Franchise]:
    result = await db.execute(
        _franchise_query()
        .where(Franchise.id == franchise_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_franchise(db: AsyncSession, name: str, admin_emails: Sequence[str]) -> Franchise:
    """
    Create a franchise and make each listed user one of its admins.

    Raises:
        NotFound: an admin email does not belong to a user
        Conflict: a franchise with this name already exists
    """
    existing = await db.execute(select(Franchise.id).where(Franchise.name == name))
    if existing.scalar_one_or_none() is not None:
        raise Conflict("franchise name already in use")

    admins = []
    for email in admin_emails:
        user = await get_user_by_email(db, email)
        if user is None:
            raise NotFound(f"unknown user for franchise admin {email} provided")
        if user not in admins:
            admins.append(user)

    franchise = Franchise(name=name)
    db.add(franchise)
    try:
        await db.flush()
        for user in admins:
            user.roles.append(UserRole(role=Role.FRANCHISEE, franchise_id=franchise.id))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("franchise name already in use")

    logger.info(f"Franchise #{franchise.id} '{name}' created with {len(admins)} admin(s)")
    return await get_franchise(db, franchise.id)


async def list_franchises(
    db: AsyncSession,
    page: int,
    limit: int,
    name_filter: Optional[str] = None,
) -> tuple[Sequence[Franchise], bool]:
    query = apply_name_filter(_franchise_query(), Franchise.name, name_filter).order_by(Franchise.id)
    return await fetch_page(db, query, page, limit)


async def list_user_franchises(db: AsyncSession, user_id: int) -> Sequence[Franchise]:
    """Franchises in which ``user_id`` holds a franchisee assignment."""
    administered = select(UserRole.franchise_id).where(
        UserRole.user_id == user_id,
        UserRole.role == Role.FRANCHISEE,
    )
    result = await db.execute(
        _franchise_query().where(Franchise.id.in_(administered)).order_by(Franchise.id)
    )
    return result.scalars().unique().all()


async def delete_franchise(db: AsyncSession, franchise_id: int) -> None:
    """
    Delete a franchise, its stores and the admin assignments scoped to it.
    Sessions still carrying one of those assignments are revoked.

    Raises:
        NotFound: no such franchise
    """
    franchise = await get_franchise(db, franchise_id)
    if franchise is None:
        raise NotFound("franchise not found")

    result = await db.execute(
        select(UserRole.user_id).where(UserRole.franchise_id == franchise_id)
    )
    admin_ids = result.scalars().all()
    await SessionStore(db).revoke_role(RoleAssignment.franchisee(franchise_id), admin_ids)

    await db.execute(delete(UserRole).where(UserRole.franchise_id == franchise_id))
    await db.delete(franchise)
    await db.commit()
    logger.info(f"Franchise #{franchise_id} deleted")


async def create_store(db: AsyncSession, franchise_id: int, name: str) -> Store:
    """
    Raises:
        NotFound: no such franchise
    """
    franchise = await db.get(Franchise, franchise_id)
    if franchise is None:
        raise NotFound("franchise not found")

    store = Store(franchise_id=franchise_id, name=name)
    db.add(store)
    await db.commit()
    await db.refresh(store)
    logger.info(f"Store #{store.id} created in franchise #{franchise_id}")
    return store


async def get_store(db: AsyncSession, franchise_id: int, store_id: int) -> Optional[Store]:
    result = await db.execute(
        select(Store).where(Store.id == store_id, Store.franchise_id == franchise_id)
    )
    return result.scalar_one_or_none()


async def delete_store(db: AsyncSession, franchise_id: int, store_id: int) -> None:
    """
    Raises:
        NotFound: the store does not exist under this franchise
    """
    store = await get_store(db, franchise_id, store_id)
    if store is None:
        raise NotFound("store not found")

    await db.delete(store)
    await db.commit()
    logger.info(f"Store #{store_id} deleted from franchise #{franchise_id}")
