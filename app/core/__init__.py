"""Core app configuration, database and security primitives."""

from app.core.config import get_settings, settings
from app.core.database import get_db
from app.core.security import get_password_hasher, get_token_service

__all__ = ["get_settings", "settings", "get_db", "get_password_hasher", "get_token_service"]
