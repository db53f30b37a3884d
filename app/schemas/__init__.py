"""Pydantic request/response schemas."""

from app.schemas.auth import (
    CurrentUser,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    UpdatePasswordRequest,
    UpdateUserRequest,
    UpdateUserResponse,
    UserOut,
)
from app.schemas.card import (
    CardCreateRequest,
    CardListResponse,
    CardOut,
    CardUpdateRequest,
)
from app.schemas.health import HealthResponse

__all__ = [
    "CardCreateRequest",
    "CardListResponse",
    "CardOut",
    "CardUpdateRequest",
    "CurrentUser",
    "ForgotPasswordRequest",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "RegisterRequest",
    "RegisterResponse",
    "ResetPasswordRequest",
    "UpdatePasswordRequest",
    "UpdateUserRequest",
    "UpdateUserResponse",
    "UserOut",
]
