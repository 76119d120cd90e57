"""Password hashing and JWT access tokens."""

from datetime import UTC, datetime, timedelta
from typing import Any

import structlog
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.config import settings

logger = structlog.get_logger(__name__)

TOKEN_TYPE = "access"

# bcrypt only looks at the first 72 bytes of a password
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password for storage."""
    return pwd_context.hash(password)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Sign an access token.

    Args:
        data: Claims to include; ``sub`` should hold the user ID
        expires_delta: Lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT
    """
    issued_at = datetime.now(UTC)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)

    claims = {
        **data,
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "type": TOKEN_TYPE,
    }

    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_user_token(user: dict[str, Any]) -> str:
    """Issue an access token for a user row; the role travels as an informational claim."""
    return create_access_token(
        data={"sub": str(user["id"]), "role": user["role"], "username": user["username"]},
    )


def decode_access_token(token: str) -> dict[str, Any] | None:
    """
    Verify an access token.

    The role claim is not trusted for authorization; callers reload the
    user from the database.

    Args:
        token: Encoded JWT

    Returns:
        Claims, or None if the token is invalid, expired or not an access token
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        logger.info("access_token_expired")
        return None
    except JWTError as e:
        logger.info("access_token_rejected", error=str(e))
        return None

    if claims.get("type") != TOKEN_TYPE:
        logger.info("access_token_rejected", error="wrong token type")
        return None

    return claims
