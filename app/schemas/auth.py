"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from app.models.user import Role

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


class RegisterRequest(BaseModel):
    """New account. role defaults to 'user'."""

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    role: Role = Field(default=Role.USER, description="Account role")


class UserOut(BaseModel):
    """Public view of a user (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str
    email: str
    role: Role


class RegisterResponse(BaseModel):
    message: str = "User registered successfully"
    user: UserOut


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=255, description="Email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class LoginResponse(BaseModel):
    """JWT session token returned after successful login."""

    message: str = "Login successful"
    token: str = Field(..., description="JWT session token")
    id: int = Field(..., description="Authenticated user id")


class UpdateUserRequest(BaseModel):
    """Any subset of the self-service fields."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)
    password: str | None = Field(
        default=None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN
    )


class UpdateUserResponse(BaseModel):
    message: str = "User updated successfully"
    user: UserOut


class UpdatePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword", min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(
        ..., alias="newPassword", min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN
    )


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)


class ResetPasswordRequest(BaseModel):
    """newPassword is optional here so its absence maps to a 400 from the service."""

    model_config = ConfigDict(populate_by_name=True)

    new_password: str | None = Field(
        default=None, alias="newPassword", max_length=PASSWORD_MAX_LEN
    )


class MessageResponse(BaseModel):
    message: str


class CurrentUser(BaseModel):
    """Authenticated user (id, username, email, role) for dependency injection."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: Role
