"""FastAPI dependencies."""

from collections.abc import Callable, Coroutine
from typing import Annotated, Any
from uuid import UUID

from fastapi import BackgroundTasks, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import ForbiddenException
from app.core.notifications import BackgroundPublisher, NotificationPublisher, RedisPublisher
from app.core.redis_client import CacheManager, get_redis_client
from app.core.security import decode_access_token
from app.database import get_db
from app.scheduling.visibility import UserRole
from app.services.user_service import UserService

# Security
security = HTTPBearer()


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> UUID:
    """
    Extract and validate user ID from JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        User ID from token

    Raises:
        HTTPException: If token is invalid or expired
    """
    token = credentials.credentials
    payload = decode_access_token(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id_str = payload.get("sub")
    if user_id_str is None or not isinstance(user_id_str, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return UUID(user_id_str)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Get current user from database.

    Args:
        user_id: User ID from JWT token
        db: Database session

    Returns:
        User data from database

    Raises:
        HTTPException: If user not found or inactive
    """
    user = await UserService(db).get_user_by_id(user_id)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user["is_active"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    return user


def require_roles(
    *roles: UserRole,
) -> Callable[..., Coroutine[Any, Any, dict]]:
    """
    Build a dependency that only admits users holding one of ``roles``.

    Args:
        roles: Allowed roles

    Returns:
        Dependency resolving to the current user
    """
    allowed = {role.value for role in roles}

    async def checker(user: Annotated[dict, Depends(get_current_user)]) -> dict:
        if user["role"] not in allowed:
            raise ForbiddenException("Insufficient permissions")
        return user

    return checker


def get_cache_manager() -> CacheManager:
    """Get the Redis-backed cache manager."""
    return CacheManager(get_redis_client(), namespace=settings.cache_namespace)


def get_event_transport() -> NotificationPublisher:
    """Get the publisher that delivers real-time events."""
    return RedisPublisher(get_redis_client(), settings.notification_channel_prefix)


def get_publisher(
    background_tasks: BackgroundTasks,
    transport: Annotated[NotificationPublisher, Depends(get_event_transport)],
) -> NotificationPublisher:
    """Get the publisher services use; events go out after the response is sent."""
    return BackgroundPublisher(transport, background_tasks)


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
AdminUser = Annotated[dict, Depends(require_roles(UserRole.ADMIN))]
CacheManagerDep = Annotated[CacheManager | None, Depends(get_cache_manager)]
PublisherDep = Annotated[NotificationPublisher, Depends(get_publisher)]
