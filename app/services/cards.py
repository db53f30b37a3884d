"""Card data: create, list, update and delete cards by title."""

import logging

from sqlalchemy.orm import Session

from app.models import User, UserCardData
from app.services.errors import NotFound, database_errors

logger = logging.getLogger(__name__)

DB_ERROR = "Database error"


def store_card(
    db: Session,
    user_id: int,
    title: str,
    end_point: str,
    lat: float,
    lon: float,
) -> UserCardData:
    """Insert a card for an existing user."""
    with database_errors(logger, DB_ERROR):
        if db.get(User, user_id) is None:
            raise NotFound("User not found")
        card = UserCardData(
            user_id=user_id,
            title=title,
            end_point=end_point,
            lat=lat,
            lon=lon,
        )
        db.add(card)
        db.commit()
        db.refresh(card)
    logger.info("Card stored", extra={"card_id": card.id, "user_id": user_id})
    return card


def list_cards(db: Session) -> list[UserCardData]:
    """Return all cards; NotFound when there are none."""
    with database_errors(logger, DB_ERROR):
        cards = db.query(UserCardData).order_by(UserCardData.id).all()
    if not cards:
        raise NotFound("No card data found")
    return cards


def update_card(
    db: Session,
    title: str,
    end_point: str | None = None,
    lat: float | None = None,
    lon: float | None = None,
) -> UserCardData:
    """Update the first card with this title; omitted fields keep their value."""
    with database_errors(logger, DB_ERROR):
        card = db.query(UserCardData).filter(UserCardData.title == title).first()
        if card is None:
            raise NotFound("Card not found")
        if end_point is not None:
            card.end_point = end_point
        if lat is not None:
            card.lat = lat
        if lon is not None:
            card.lon = lon
        db.commit()
        db.refresh(card)
    return card


def delete_cards(db: Session, title: str) -> int:
    """Delete every card with this title; return how many were removed."""
    with database_errors(logger, DB_ERROR):
        deleted = (
            db.query(UserCardData)
            .filter(UserCardData.title == title)
            .delete(synchronize_session=False)
        )
        db.commit()
    if deleted == 0:
        raise NotFound("Card not found")
    logger.info("Cards deleted", extra={"title": title, "deleted": deleted})
    return deleted
