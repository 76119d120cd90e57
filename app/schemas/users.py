"""User schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.scheduling.visibility import UserRole

# Roles an administrator may assign when creating accounts
STAFF_ROLES = (
    UserRole.ADMIN,
    UserRole.DOCTOR,
    UserRole.NURSE,
    UserRole.RECEPTIONIST,
    UserRole.PHARMACIST,
)


class UserBase(BaseModel):
    """Base user schema with common fields."""

    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=20)


class UserRegister(UserBase):
    """Self-registration request."""

    password: str = Field(..., min_length=6, max_length=72)


class UserCreate(UserRegister):
    """Schema for an administrator creating an account."""

    role: UserRole = UserRole.USER
    department: str | None = Field(None, max_length=50)
    specialization: str | None = Field(None, max_length=200)
    employee_id: str | None = Field(None, max_length=50)


class UserResponse(UserBase):
    """User schema for API responses."""

    id: UUID
    role: str
    department: str | None = None
    specialization: str | None = None
    employee_id: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    """Compact user reference embedded in other resources."""

    id: UUID
    first_name: str
    last_name: str
    email: str
    role: str
    department: str | None = None
    specialization: str | None = None

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    """Paginated user list."""

    total: int
    page: int
    page_size: int
    items: list[UserResponse]


class ActorSummary(BaseModel):
    """Identity of an actor as seen by the scheduling core."""

    id: UUID
    role: str
    display_name: str
