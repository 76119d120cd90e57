"""Authentication service for password login and JWT issuance."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import UnauthorizedException
from app.core.security import create_user_token, verify_password
from app.scheduling.visibility import UserRole
from app.schemas.users import UserRegister
from app.services.user_service import UserService

logger = structlog.get_logger(__name__)


class AuthService:
    """Authentication service for registration and login."""

    def __init__(self, db: AsyncSession):
        """Initialize auth service with database session."""
        self.db = db
        self.users = UserService(db)

    async def register(self, data: UserRegister) -> dict:
        """
        Register a self-service patient account.

        Args:
            data: Registration details

        Returns:
            Created user
        """
        user = await self.users.create_user(data, role=UserRole.USER)
        logger.info("user_registered", user_id=str(user["id"]), username=user["username"])
        return user

    async def login(self, login: str, password: str) -> tuple[dict, str]:
        """
        Authenticate by username or email and issue an access token.

        Args:
            login: Username or email
            password: Plain-text password

        Returns:
            Tuple of (user dict, access token)

        Raises:
            UnauthorizedException: If credentials are invalid or the account is inactive
        """
        user = await self.users.get_user_by_login(login)

        if not user or not verify_password(password, user["hashed_password"]):
            logger.info("login_failed", login=login)
            raise UnauthorizedException("Invalid credentials")

        if not user["is_active"]:
            logger.info("login_rejected_inactive", user_id=str(user["id"]))
            raise UnauthorizedException("Account is deactivated. Please contact administrator.")

        await self.users.update_last_login(user["id"])
        logger.info("login_succeeded", user_id=str(user["id"]), role=user["role"])

        return user, create_user_token(user)
