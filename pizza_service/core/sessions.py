"""
Session Store

Keeps the set of active session tokens in the ``sessions`` table. A token is
accepted only while it verifies (signature, expiry) AND its row is present,
so revocation is immediate. Each user holds at most one live session:
issuing a token revokes the user's previous ones, so a token carrying an
outdated role snapshot cannot outlive a role change. Removing a franchise
revokes the sessions whose snapshot is scoped to it.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from pizza_service.core.errors import Unauthorized
from pizza_service.core.policy import Actor, RoleAssignment
from pizza_service.core.security import create_access_token, decode_token
from pizza_service.models import Session, User

logger = logging.getLogger(__name__)


class SessionStore:
    """Issues, resolves and revokes session tokens for one database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def issue(self, user: User) -> str:
        """
        Issue a fresh token for ``user`` with its current roles.

        Any token previously issued to the user stops working.
        """
        await self.db.execute(delete(Session).where(Session.user_id == user.id))

        session_id = uuid.uuid4().hex
        roles = [assignment.to_dict() for assignment in user.role_assignments]
        token, issued_at, expires_at = create_access_token(user.id, session_id, roles)

        self.db.add(Session(
            token_id=session_id,
            user_id=user.id,
            roles=json.dumps(roles),
            issued_at=issued_at,
            expires_at=expires_at,
        ))
        await self.db.commit()

        logger.debug(f"Issued session {session_id} for user {user.id}")
        return token

    async def resolve(self, token: Optional[str]) -> Actor:
        """
        Resolve a bearer token to the actor it was issued to.

        Raises:
            Unauthorized: token missing, malformed, expired or revoked
        """
        if not token:
            raise Unauthorized()

        payload = decode_token(token)
        if payload is None:
            logger.warning("Token verification failed - invalid or expired token")
            raise Unauthorized()

        session_id = payload.get("jti")
        if not session_id:
            raise Unauthorized()

        result = await self.db.execute(
            select(Session).where(
                Session.token_id == session_id,
                Session.expires_at > datetime.now(timezone.utc),
            )
        )
        session = result.scalar_one_or_none()
        if session is None or str(session.user_id) != payload.get("sub"):
            logger.warning(f"Rejected revoked or unknown session {session_id}")
            raise Unauthorized()

        roles = tuple(RoleAssignment.from_dict(role) for role in json.loads(session.roles))
        return Actor(id=session.user_id, roles=roles, session_id=session_id)

    async def revoke(self, session_id: str) -> None:
        """Log out a single session."""
        await self.db.execute(delete(Session).where(Session.token_id == session_id))
        await self.db.commit()

    async def revoke_role(self, assignment: RoleAssignment, user_ids: Sequence[int]) -> int:
        """
        Revoke the sessions of ``user_ids`` whose role snapshot holds
        ``assignment``. Runs in the caller's transaction; the caller commits.

        Returns:
            Number of sessions revoked
        """
        if not user_ids:
            return 0

        claim = assignment.to_dict()
        result = await self.db.execute(select(Session).where(Session.user_id.in_(user_ids)))
        stale = [session for session in result.scalars() if claim in json.loads(session.roles)]
        for session in stale:
            await self.db.delete(session)

        if stale:
            logger.info(f"Revoked {len(stale)} session(s) holding {claim}")
        return len(stale)

    async def purge_expired(self) -> int:
        """
        Remove sessions past their validity window.

        Returns:
            Number of sessions removed
        """
        result = await self.db.execute(
            delete(Session).where(Session.expires_at <= datetime.now(timezone.utc))
        )
        await self.db.commit()
        return result.rowcount or 0
