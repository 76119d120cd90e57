"""Authentication endpoints."""

from fastapi import APIRouter, status

from app.dependencies import CurrentUser, DatabaseSession
from app.schemas.auth import LoginRequest, LoginResponse
from app.schemas.users import UserRegister, UserResponse
from app.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Authentication"],
    summary="Register a patient account",
)
async def register(data: UserRegister, db: DatabaseSession) -> UserResponse:
    """
    Create a self-service account with the ``user`` role.

    Raises:
        DuplicateResourceException: If username or email is taken
    """
    user = await AuthService(db).register(data)
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    tags=["Authentication"],
    summary="Password login",
)
async def login(data: LoginRequest, db: DatabaseSession) -> LoginResponse:
    """
    Exchange username (or email) and password for an access token.

    Args:
        data: Credentials
        db: Database session

    Returns:
        Access token and user information
    """
    user, token = await AuthService(db).login(data.username, data.password)
    return LoginResponse(access_token=token, user=UserResponse.model_validate(user))


@router.get(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    tags=["Authentication"],
    summary="Current user",
)
async def me(current_user: CurrentUser) -> UserResponse:
    """Get the authenticated user."""
    return UserResponse.model_validate(current_user)
