"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.card import UserCardData
from app.models.user import Role, User

__all__ = ["Base", "Role", "User", "UserCardData"]
