"""Credential store: single-row reads and writes of User records."""

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import User

logger = logging.getLogger(__name__)


class DuplicateKey(Exception):
    """Raised when an insert or update violates the username/email unique constraint."""

    def __init__(self, message: str = "Duplicate key") -> None:
        self.message = message
        super().__init__(message)


class UserStore:
    """
    Repository over a SQLAlchemy session. Route and service code never query
    User directly.

    The unique constraints on username and email are the guard against
    concurrent duplicate registrations: a second insert fails with
    DuplicateKey even if both callers passed an existence check first.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_username(self, username: str) -> User | None:
        return self.session.query(User).filter(User.username == username).first()

    def find_by_email(self, email: str) -> User | None:
        return self.session.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def create(self, **fields: Any) -> User:
        user = User(**fields)
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        logger.info("User created", extra={"user_id": user.id})
        return user

    def save(self, user: User) -> User:
        """Persist mutations to an existing record."""
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        return user

    def _commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateKey("Username or email already exists") from e
