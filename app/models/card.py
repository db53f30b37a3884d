"""ORM model for location cards saved by a user."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, func

from app.models.base import Base


class UserCardData(Base):
    """A titled endpoint pinned at a coordinate, owned by a user."""

    __tablename__ = "user_card_data"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False, index=True)
    end_point = Column(String(2048), nullable=False)
    lat = Column(Float, nullable=False)
    lon = Column(Float, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
