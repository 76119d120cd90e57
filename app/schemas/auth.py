"""Authentication schemas."""

from pydantic import BaseModel, Field

from app.schemas.users import UserResponse


class LoginRequest(BaseModel):
    """Username (or email) and password login request."""

    username: str = Field(..., min_length=1, description="Username or email address")
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Login response with token and user info."""

    message: str = "Login successful"
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
