from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from pizza_service.core.config import get_settings

settings = get_settings()

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Unknown or corrupt hash formats count as a mismatch.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def get_password_hash(password: str) -> str:
    """Hash a password with a per-password salt."""
    return pwd_context.hash(password)


def create_access_token(
    subject: int,
    session_id: str,
    roles: list[dict[str, Any]],
    expires_delta: Optional[timedelta] = None,
) -> tuple[str, datetime, datetime]:
    """
    Create a signed session token.

    Args:
        subject: The user id
        session_id: Key of the session row backing this token
        roles: Role snapshot to embed
        expires_delta: Optional custom validity window

    Returns:
        (token, issued_at, expires_at)
    """
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(minutes=settings.session_ttl_minutes))

    to_encode = {
        "sub": str(subject),
        "jti": session_id,
        "roles": roles,
        "iat": issued_at,
        "exp": expire,
    }

    encoded_jwt = jwt.encode(
        to_encode,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt, issued_at, expire


def decode_token(token: str) -> Optional[dict[str, Any]]:
    """
    Decode and validate a session token (signature and expiry).

    Returns:
        Decoded token payload or None if invalid
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
