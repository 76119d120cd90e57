"""User endpoints."""

from fastapi import APIRouter, Query, status

from app.core.exceptions import ValidationException
from app.dependencies import AdminUser, CurrentUser, DatabaseSession
from app.scheduling.visibility import UserRole
from app.schemas.appointments import Department
from app.schemas.users import (
    STAFF_ROLES,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserSummary,
)
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    admin: AdminUser,
    db: DatabaseSession,
    role: UserRole | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    """List user accounts (admin only)."""
    total, items = await UserService(db).list_users(role, page, page_size)
    return UserListResponse(
        total=total,
        page=page,
        page_size=page_size,
        items=[UserResponse.model_validate(user) for user in items],
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    admin: AdminUser,
    db: DatabaseSession,
):
    """Create a staff account (admin only)."""
    if user_data.role not in STAFF_ROLES:
        raise ValidationException(
            f"Role must be one of: {', '.join(role.value for role in STAFF_ROLES)}"
        )

    user = await UserService(db).create_user(user_data)
    return UserResponse.model_validate(user)


@router.get("/doctors", response_model=list[UserSummary])
async def list_doctors(
    current_user: CurrentUser,
    db: DatabaseSession,
    department: Department | None = Query(None),
):
    """List active doctors, optionally within one department."""
    doctors = await UserService(db).list_doctors(department.value if department else None)
    return [UserSummary.model_validate(doctor) for doctor in doctors]
