from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from pizza_service.core.policy import Actor
from pizza_service.core.sessions import SessionStore
from pizza_service.database import get_db
from pizza_service.services.factory import BaseOrderFactoryService, get_order_factory_service

# HTTP Bearer security scheme; a missing header is reported by SessionStore
# as Unauthorized rather than by FastAPI
security = HTTPBearer(auto_error=False)


async def get_session_store(db: Annotated[AsyncSession, Depends(get_db)]) -> SessionStore:
    return SessionStore(db)


async def get_current_actor(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> Actor:
    """
    Dependency to get the authenticated caller.

    Raises:
        Unauthorized: no bearer token, or the token is invalid or revoked
    """
    token = credentials.credentials if credentials else None
    return await sessions.resolve(token)


# Type aliases for cleaner endpoint signatures
DB = Annotated[AsyncSession, Depends(get_db)]
Sessions = Annotated[SessionStore, Depends(get_session_store)]
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
OrderFactory = Annotated[BaseOrderFactoryService, Depends(get_order_factory_service)]
