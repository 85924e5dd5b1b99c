"""
Identity Store

User records and their role assignments.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pizza_service.core.config import Settings
from pizza_service.core.errors import Conflict, NotFound
from pizza_service.core.policy import RoleAssignment
from pizza_service.core.security import get_password_hash, verify_password
from pizza_service.crud.base import apply_name_filter, fetch_page
from pizza_service.models import Franchise, User, UserRole

logger = logging.getLogger(__name__)


def _user_query():
    return select(User).options(selectinload(User.roles))


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    result = await db.execute(
        _user_query().where(User.id == user_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(_user_query().where(User.email == email))
    return result.scalar_one_or_none()


async def _commit_unique(db: AsyncSession, what: str) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict(f"{what} already exists")


async def _check_role_scopes(db: AsyncSession, roles: Sequence[RoleAssignment]) -> None:
    for assignment in roles:
        if assignment.franchise_id is not None and await db.get(Franchise, assignment.franchise_id) is None:
            raise NotFound(f"franchise {assignment.franchise_id} not found")


async def create_user(
    db: AsyncSession,
    name: str,
    email: str,
    password: str,
    roles: Sequence[RoleAssignment],
) -> User:
    """
    Add a user.

    Raises:
        Conflict: the email is already registered
        NotFound: a franchisee role names a franchise that does not exist
    """
    await _check_role_scopes(db, roles)
    if await get_user_by_email(db, email):
        raise Conflict("email already in use")

    user = User(name=name, email=email, password_hash=get_password_hash(password))
    user.roles = [
        UserRole(role=assignment.role, franchise_id=assignment.franchise_id)
        for assignment in roles
    ]
    db.add(user)
    await _commit_unique(db, "user")

    logger.info(f"User #{user.id} created")
    return await get_user(db, user.id)


async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[User]:
    user = await get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


async def update_user(
    db: AsyncSession,
    user: User,
    name: Optional[str] = None,
    email: Optional[str] = None,
    password: Optional[str] = None,
    roles: Optional[Sequence[RoleAssignment]] = None,
) -> User:
    """
    Apply the given changes to ``user``; None leaves a field unchanged.

    Raises:
        Conflict: the new email belongs to another user
        NotFound: a franchisee role names a franchise that does not exist
    """
    if roles is not None:
        await _check_role_scopes(db, roles)
    if email is not None and email != user.email:
        existing = await get_user_by_email(db, email)
        if existing is not None and existing.id != user.id:
            raise Conflict("email already in use")
        user.email = email
    if name is not None:
        user.name = name
    if password is not None:
        user.password_hash = get_password_hash(password)
    if roles is not None:
        user.roles = [
            UserRole(role=assignment.role, franchise_id=assignment.franchise_id)
            for assignment in roles
        ]

    await _commit_unique(db, "user")
    return await get_user(db, user.id)


async def list_users(
    db: AsyncSession,
    page: int,
    limit: int,
    name_filter: Optional[str] = None,
) -> tuple[Sequence[User], bool]:
    query = apply_name_filter(_user_query(), User.name, name_filter).order_by(User.id)
    return await fetch_page(db, query, page, limit)


async def ensure_default_admin(db: AsyncSession, settings: Settings) -> Optional[User]:
    """Create the bootstrap admin from configuration if it does not exist yet."""
    if not settings.default_admin_email or not settings.default_admin_password:
        return None
    existing = await get_user_by_email(db, settings.default_admin_email)
    if existing:
        return existing
    logger.info(f"Creating default admin {settings.default_admin_email}")
    return await create_user(
        db,
        settings.default_admin_name,
        settings.default_admin_email,
        settings.default_admin_password,
        [RoleAssignment.admin()],
    )
