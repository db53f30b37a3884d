"""Request/response schemas for card data endpoints. JSON keys are camelCase."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CardCreateRequest(BaseModel):
    """All five fields are required."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId", ge=1)
    title: str = Field(..., min_length=1, max_length=255)
    end_point: str = Field(..., alias="endPoint", min_length=1, max_length=2048)
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class CardUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    end_point: str | None = Field(default=None, alias="endPoint", min_length=1, max_length=2048)
    lat: float | None = Field(default=None, ge=-90, le=90)
    lon: float | None = Field(default=None, ge=-180, le=180)


class CardOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    user_id: int = Field(..., alias="userId")
    title: str
    end_point: str = Field(..., alias="endPoint")
    lat: float
    lon: float
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class CardListResponse(BaseModel):
    message: str = "Data retrieved successfully"
    data: list[CardOut]
