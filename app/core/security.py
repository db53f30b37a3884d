"""Password hashing and JWT issuance/verification for authentication."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import Settings, get_settings

# Bcrypt only reads the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

SESSION_STR_CLAIMS = ("username", "email", "role")
RESET_CLAIMS = frozenset({"id", "exp"})


class TokenError(Exception):
    """Base class for token verification failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TokenExpired(TokenError):
    """Raised when the token's exp is in the past."""


class TokenInvalid(TokenError):
    """Raised when the signature check fails or the payload is malformed."""


class PasswordHasher:
    """Salted one-way bcrypt hashing. Do not store plain passwords."""

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        """Return True when plain_password matches hashed; never raises on mismatch."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            return False


@dataclass(frozen=True)
class SessionClaims:
    """Identity carried by a session token."""

    id: int
    username: str
    email: str
    role: str


class TokenService:
    """
    Signs and verifies HMAC JWTs with a process-wide secret.

    Session tokens carry {id, username, email, role, iat, exp}. Reset tokens
    carry only {id, exp}; the two shapes are not interchangeable. There is no
    revocation list: a token stays valid until its exp even after a password
    change.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        session_ttl: timedelta = timedelta(hours=1),
        reset_ttl: timedelta = timedelta(minutes=15),
    ) -> None:
        self._secret = secret
        self.algorithm = algorithm
        self.session_ttl = session_ttl
        self.reset_ttl = reset_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            session_ttl=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
            reset_ttl=timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
        )

    def _encode(self, payload: dict[str, Any]) -> str:
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def issue_session_token(
        self, claims: SessionClaims, ttl: timedelta | None = None
    ) -> str:
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "id": claims.id,
            "username": claims.username,
            "email": claims.email,
            "role": claims.role,
            "iat": now,
            "exp": now + (ttl if ttl is not None else self.session_ttl),
        }
        return self._encode(payload)

    def issue_reset_token(self, user_id: int, ttl: timedelta | None = None) -> str:
        expire = datetime.now(UTC) + (ttl if ttl is not None else self.reset_ttl)
        return self._encode({"id": user_id, "exp": expire})

    def verify(self, token: str) -> dict[str, Any]:
        """
        Decode and validate a token; return its payload.
        Raises TokenExpired past exp, TokenInvalid on bad signature or structure.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired("Token has expired") from e
        except jwt.PyJWTError as e:
            raise TokenInvalid("Invalid token") from e
        if not isinstance(payload.get("id"), int) or isinstance(payload.get("id"), bool):
            raise TokenInvalid("Invalid token payload")
        return payload

    def verify_session_token(self, token: str) -> SessionClaims:
        payload = self.verify(token)
        if not all(isinstance(payload.get(k), str) for k in SESSION_STR_CLAIMS):
            raise TokenInvalid("Invalid token payload")
        return SessionClaims(
            id=payload["id"],
            username=payload["username"],
            email=payload["email"],
            role=payload["role"],
        )

    def verify_reset_token(self, token: str) -> int:
        """Return the user id of a reset token. Session tokens are rejected."""
        payload = self.verify(token)
        if set(payload) != RESET_CLAIMS:
            raise TokenInvalid("Invalid token payload")
        return payload["id"]


def get_password_hasher() -> PasswordHasher:
    """Dependency: hasher configured with BCRYPT_ROUNDS."""
    return PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)


def get_token_service() -> TokenService:
    """Dependency: token service bound to the configured secret and ttls."""
    return TokenService.from_settings(get_settings())
