"""Auth routes and the access gate dependencies (get_current_user, require_role)."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import (
    PasswordHasher,
    TokenError,
    TokenService,
    get_password_hasher,
    get_token_service,
)
from app.models.user import Role
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
from app.services.auth import AuthService
from app.services.errors import ServiceError
from app.services.notifications import ResetLinkSender, get_reset_link_sender
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)

# One entry per Role; require_role looks the message up for the required role.
ROLE_DENIED_MESSAGES: dict[Role, str] = {
    Role.ADMIN: "Access denied: Admins only",
    Role.USER: "Access denied: Users only",
}


def _http_error(e: ServiceError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_user_store(db: Annotated[Session, Depends(get_db)]) -> UserStore:
    return UserStore(db)


def get_auth_service(
    store: Annotated[UserStore, Depends(get_user_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    sender: Annotated[ResetLinkSender, Depends(get_reset_link_sender)],
) -> AuthService:
    return AuthService(store=store, hasher=hasher, tokens=tokens, sender=sender)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    store: Annotated[UserStore, Depends(get_user_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> CurrentUser:
    """Dependency: require a valid Bearer session token and return the current user. Raises 401."""
    if credentials is None:
        raise _unauthorized("Unauthorized: No token provided")
    try:
        claims = tokens.verify_session_token(credentials.credentials)
    except TokenError:
        raise _unauthorized("Invalid or expired token")
    try:
        user = store.find_by_id(claims.id)
    except SQLAlchemyError as e:
        logger.exception("Identity lookup failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e
    if user is None:
        raise _unauthorized("Unauthorized: User not found")
    return CurrentUser(id=user.id, username=user.username, email=user.email, role=user.role)


def require_role(required: Role) -> Callable[..., CurrentUser]:
    """Dependency factory: require an authenticated user whose role is `required`. Raises 403."""
    denied = ROLE_DENIED_MESSAGES[required]

    def dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if Role(current_user.role) is not required:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=denied)
        return current_user

    return dependency


require_admin = require_role(Role.ADMIN)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> RegisterResponse:
    """Create an account. The response never includes the password hash."""
    try:
        user = service.register(
            username=body.username,
            name=body.name,
            password=body.password,
            email=body.email,
            role=body.role,
        )
    except ServiceError as e:
        raise _http_error(e) from e
    return RegisterResponse(user=UserOut.model_validate(user))


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginResponse:
    """
    Authenticate with email and password; returns a JWT session token.
    Include the token in the Authorization header as: Bearer <token>
    """
    try:
        result = service.login(body.email, body.password)
    except ServiceError as e:
        raise _http_error(e) from e
    return LoginResponse(token=result.token, id=result.user.id)


@router.get("/me", response_model=CurrentUser)
def me(current_user: Annotated[CurrentUser, Depends(get_current_user)]) -> CurrentUser:
    return current_user


@router.put("/update", response_model=UpdateUserResponse)
def update_user(
    body: UpdateUserRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UpdateUserResponse:
    """Update name, email and/or password of the calling admin."""
    try:
        user = service.update_user(
            admin.id, name=body.name, email=body.email, password=body.password
        )
    except ServiceError as e:
        raise _http_error(e) from e
    return UpdateUserResponse(user=UserOut.model_validate(user))


@router.put("/update-password", response_model=MessageResponse)
def update_password(
    body: UpdatePasswordRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    try:
        service.update_password(current_user.id, body.current_password, body.new_password)
    except ServiceError as e:
        raise _http_error(e) from e
    return MessageResponse(message="Password updated successfully")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    body: ForgotPasswordRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Email a reset link valid for RESET_TOKEN_EXPIRE_MINUTES."""
    try:
        service.forgot_password(body.email)
    except ServiceError as e:
        raise _http_error(e) from e
    return MessageResponse(message="Password reset link sent to your email")


@router.post("/reset-password/{token}", response_model=MessageResponse)
def reset_password(
    token: str,
    service: Annotated[AuthService, Depends(get_auth_service)],
    body: ResetPasswordRequest | None = None,
) -> MessageResponse:
    try:
        service.reset_password(token, body.new_password if body else None)
    except ServiceError as e:
        raise _http_error(e) from e
    return MessageResponse(message="Password has been reset successfully")
