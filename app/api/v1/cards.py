"""Card data endpoints: store, list, update and delete cards by title."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models import UserCardData
from app.schemas.auth import MessageResponse
from app.schemas.card import (
    CardCreateRequest,
    CardListResponse,
    CardOut,
    CardUpdateRequest,
)
from app.services import cards
from app.services.errors import ServiceError

router = APIRouter()


def _card_out(card: UserCardData) -> CardOut:
    return CardOut(
        id=card.id,
        user_id=card.user_id,
        title=card.title,
        end_point=card.end_point,
        lat=card.lat,
        lon=card.lon,
        created_at=card.created_at,
        updated_at=card.updated_at,
    )


@router.post("/storecardData", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def store_card_data(
    body: CardCreateRequest,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    try:
        cards.store_card(
            db,
            user_id=body.user_id,
            title=body.title,
            end_point=body.end_point,
            lat=body.lat,
            lon=body.lon,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return MessageResponse(message="Data inserted successfully")


@router.get("/getcardData", response_model=CardListResponse)
def get_card_data(db: Annotated[Session, Depends(get_db)]) -> CardListResponse:
    try:
        all_cards = cards.list_cards(db)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return CardListResponse(data=[_card_out(c) for c in all_cards])


@router.put("/updateCardData/{title}", response_model=MessageResponse)
def update_card_data(
    title: str,
    body: CardUpdateRequest,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    try:
        cards.update_card(
            db, title, end_point=body.end_point, lat=body.lat, lon=body.lon
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return MessageResponse(message="Card updated successfully")


@router.delete("/deleteCardData/{title}", response_model=MessageResponse)
def delete_card_data(
    title: str,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    try:
        cards.delete_cards(db, title)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return MessageResponse(message="Card deleted successfully")
