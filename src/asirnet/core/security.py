"""Password hashing and session token helpers."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from asirnet.core.errors import Unauthenticated
from asirnet.core.settings import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(secret: str) -> str:
    """Return a salted digest of ``secret`` suitable for storage."""
    return pwd_context.hash(secret)


def verify_password(secret: str, digest: str) -> bool:
    """Return True if ``secret`` matches the stored ``digest``."""
    try:
        return pwd_context.verify(secret, digest)
    except ValueError:
        # Unknown or malformed digest
        return False


def create_access_token(
    user_id: str,
    username: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Issue a signed JWT identifying ``user_id``.

    Args:
        user_id: Opaque identifier placed in the ``sub`` claim.
        username: Optional display claim, informational only.
        expires_delta: Token lifetime; defaults to ``ACCESS_TOKEN_EXPIRE_MINUTES``.

    Returns:
        Encoded JWT string.
    """
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims: dict[str, Any] = {"sub": user_id, "exp": expire}
    if username is not None:
        claims["username"] = username
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify ``token`` and return its claims.

    Raises:
        Unauthenticated: If the signature, expiry or subject is invalid.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise Unauthenticated("Invalid token") from err
    if not payload.get("sub"):
        raise Unauthenticated("Invalid token")
    return payload
