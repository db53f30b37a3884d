"""
Auth flows: register, login, profile and password updates, forgot/reset password.

Every operation touches at most one user row. Passwords are hashed before they
reach the store and are never logged. Reset tokens are not persisted, so a
reset link stays usable until it expires, even after a successful reset.
"""

import logging
from dataclasses import dataclass

from app.core.security import (
    PASSWORD_MIN_LEN,
    PasswordHasher,
    SessionClaims,
    TokenError,
    TokenExpired,
    TokenService,
)
from app.models import Role, User
from app.services.errors import (
    Conflict,
    InternalError,
    NotFound,
    Unauthorized,
    ValidationError,
    database_errors,
)
from app.services.notifications import NotificationError, ResetLinkSender
from app.services.user_store import DuplicateKey, UserStore

logger = logging.getLogger(__name__)

# Same message for unknown email and wrong password (no user enumeration).
INVALID_CREDENTIALS = "Invalid email or password"
INVALID_RESET_TOKEN = "Invalid or expired token"


@dataclass
class LoginResult:
    token: str
    user: User


class AuthService:
    """Orchestrates the credential store, password hasher, token service and mailer."""

    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        sender: ResetLinkSender,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.sender = sender

    def register(
        self,
        username: str,
        name: str,
        password: str,
        email: str,
        role: Role = Role.USER,
    ) -> User:
        """Create a user. Raises Conflict if username or email is taken."""
        with database_errors(logger, "Error registering user"):
            if self.store.find_by_username(username) is not None:
                raise Conflict("Username already taken")
            if self.store.find_by_email(email) is not None:
                raise Conflict("Email already registered")
            try:
                user = self.store.create(
                    username=username,
                    name=name,
                    email=email,
                    password_hash=self.hasher.hash(password),
                    role=role,
                )
            except DuplicateKey as e:
                # Lost a concurrent insert race after the existence checks passed.
                raise Conflict("Username or email already exists") from e
        logger.info("User registered", extra={"user_id": user.id, "role": Role(user.role).value})
        return user

    def login(self, email: str, password: str) -> LoginResult:
        """Verify credentials and issue a session token."""
        with database_errors(logger, "Something went wrong. Please try again later."):
            user = self.store.find_by_email(email)
        if user is None:
            logger.info("Login failed: unknown email")
            raise Unauthorized(INVALID_CREDENTIALS)
        if not self.hasher.verify(password, user.password_hash):
            logger.info("Login failed: password mismatch", extra={"user_id": user.id})
            raise Unauthorized(INVALID_CREDENTIALS)
        token = self.tokens.issue_session_token(
            SessionClaims(
                id=user.id,
                username=user.username,
                email=user.email,
                role=Role(user.role).value,
            )
        )
        logger.info("Login succeeded", extra={"user_id": user.id})
        return LoginResult(token=token, user=user)

    def update_user(
        self,
        user_id: int,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> User:
        """Apply any subset of name/email/password to the user."""
        with database_errors(logger, "Error updating user"):
            user = self.store.find_by_id(user_id)
            if user is None:
                raise NotFound("User not found")
            if name is not None:
                user.name = name
            if email is not None:
                user.email = email
            if password is not None:
                user.password_hash = self.hasher.hash(password)
            try:
                user = self.store.save(user)
            except DuplicateKey as e:
                raise Conflict("Email already registered") from e
        logger.info("User updated", extra={"user_id": user.id})
        return user

    def update_password(self, user_id: int, current_password: str, new_password: str) -> None:
        with database_errors(logger, "Error updating password"):
            user = self.store.find_by_id(user_id)
            if user is None:
                raise NotFound("User not found")
            if not self.hasher.verify(current_password, user.password_hash):
                raise Unauthorized("Current password is incorrect")
            user.password_hash = self.hasher.hash(new_password)
            self.store.save(user)
        logger.info("Password updated", extra={"user_id": user_id})

    def forgot_password(self, email: str) -> None:
        """
        Issue a reset token and email the link. The token is issued before the
        send; if the send fails the token still verifies until it expires.
        """
        with database_errors(logger, "Error sending reset email"):
            user = self.store.find_by_email(email)
        if user is None:
            raise NotFound("User with this email does not exist")
        token = self.tokens.issue_reset_token(user.id)
        try:
            self.sender.send_reset_link(user.email, token)
        except NotificationError as e:
            logger.error("Reset email not sent", extra={"user_id": user.id})
            raise InternalError("Error sending reset email") from e
        logger.info("Reset link sent", extra={"user_id": user.id})

    def reset_password(self, token: str, new_password: str | None) -> None:
        if not new_password:
            raise ValidationError("New password is required")
        if len(new_password) < PASSWORD_MIN_LEN:
            raise ValidationError(
                f"New password must be at least {PASSWORD_MIN_LEN} characters"
            )
        try:
            user_id = self.tokens.verify_reset_token(token)
        except TokenError as e:
            reason = "expired" if isinstance(e, TokenExpired) else "invalid"
            logger.info("Reset rejected: token %s", reason)
            raise NotFound(INVALID_RESET_TOKEN) from e
        with database_errors(logger, "Error resetting password"):
            user = self.store.find_by_id(user_id)
            if user is None:
                raise NotFound(INVALID_RESET_TOKEN)
            user.password_hash = self.hasher.hash(new_password)
            self.store.save(user)
        logger.info("Password reset", extra={"user_id": user_id})
