"""User service for business logic."""

from collections.abc import Iterable
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateResourceException
from app.core.security import get_password_hash
from app.models.users import users
from app.scheduling.visibility import PATIENT_ROLES, UserRole
from app.schemas.users import ActorSummary, UserCreate, UserRegister


def display_name(user: dict) -> str:
    """Get a user's name as shown to other people."""
    name = f"{user['first_name']} {user['last_name']}"
    if user["role"] == UserRole.DOCTOR.value:
        return f"Dr. {name}"
    return name


class UserService:
    """Service for user operations; also the identity store of the scheduling core."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def create_user(
        self,
        user_data: UserCreate | UserRegister,
        role: UserRole | None = None,
    ) -> dict:
        """
        Create a new user with a hashed password.

        Args:
            user_data: Account details
            role: Role override; defaults to the role on ``user_data`` or ``user``

        Returns:
            Created user

        Raises:
            DuplicateResourceException: If username or email is taken
        """
        if role is None:
            role = getattr(user_data, "role", UserRole.USER)

        email = user_data.email.lower()
        if await self.get_user_by_login(user_data.username) or await self.get_user_by_login(email):
            raise DuplicateResourceException("User with this username or email already exists")

        values = {
            "username": user_data.username,
            "email": email,
            "hashed_password": get_password_hash(user_data.password),
            "first_name": user_data.first_name,
            "last_name": user_data.last_name,
            "phone": user_data.phone,
            "role": UserRole(role).value,
            "department": getattr(user_data, "department", None),
            "specialization": getattr(user_data, "specialization", None),
            "employee_id": getattr(user_data, "employee_id", None),
        }

        try:
            result = await self.db.execute(users.insert().values(**values).returning(users))
            user = result.mappings().first()
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateResourceException("User with this username or email already exists")

        if not user:
            raise ValueError("Failed to create user")

        return dict(user)

    async def get_user_by_id(self, user_id: UUID) -> dict | None:
        """Get user by internal ID."""
        result = await self.db.execute(select(users).where(users.c.id == user_id))
        user = result.mappings().first()
        return dict(user) if user else None

    async def get_user_by_login(self, login: str) -> dict | None:
        """Get user by username or email."""
        query = select(users).where(or_(users.c.username == login, users.c.email == login.lower()))
        result = await self.db.execute(query)
        user = result.mappings().first()
        return dict(user) if user else None

    async def get_users_by_ids(self, user_ids: Iterable[UUID]) -> dict[UUID, dict]:
        """Get several users at once, keyed by ID."""
        ids = set(user_ids)
        if not ids:
            return {}
        result = await self.db.execute(select(users).where(users.c.id.in_(ids)))
        return {row["id"]: dict(row) for row in result.mappings().all()}

    async def list_users(
        self,
        role: UserRole | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[int, list[dict]]:
        """
        List users with optional role filter.

        Returns:
            Tuple of (total count, page of users)
        """
        conditions = []
        if role is not None:
            conditions.append(users.c.role == role.value)

        count_stmt = select(func.count()).select_from(users).where(*conditions)
        total = (await self.db.execute(count_stmt)).scalar() or 0

        stmt = (
            select(users)
            .where(*conditions)
            .order_by(users.c.created_at.desc())
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        result = await self.db.execute(stmt)
        return total, [dict(row) for row in result.mappings().all()]

    async def list_doctors(self, department: str | None = None) -> list[dict]:
        """List active doctors, optionally within one department."""
        conditions = [users.c.role == UserRole.DOCTOR.value, users.c.is_active.is_(True)]
        if department:
            conditions.append(users.c.department == department)

        stmt = select(users).where(*conditions).order_by(users.c.last_name, users.c.first_name)
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def update_last_login(self, user_id: UUID) -> None:
        """Update user's last login timestamp."""
        query = update(users).where(users.c.id == user_id).values(last_login_at=datetime.now(UTC))
        await self.db.execute(query)
        await self.db.commit()

    async def lookup_actor(self, user_id: UUID) -> ActorSummary | None:
        """Resolve an actor's role and display name; inactive accounts resolve to None."""
        user = await self.get_user_by_id(user_id)
        if not user or not user["is_active"]:
            return None
        return ActorSummary(id=user["id"], role=user["role"], display_name=display_name(user))

    async def is_doctor(self, user_id: UUID) -> bool:
        """Check whether the user is an active doctor."""
        actor = await self.lookup_actor(user_id)
        return actor is not None and actor.role == UserRole.DOCTOR.value

    async def is_patient(self, user_id: UUID) -> bool:
        """Check whether the user is an active patient."""
        actor = await self.lookup_actor(user_id)
        return actor is not None and actor.role in {role.value for role in PATIENT_ROLES}
