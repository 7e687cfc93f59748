from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class RoomLevel(str, Enum):
    BASEMENT = "basement"
    MAIN = "main"
    UPPER = "upper"
    OUTSIDE = "outside"


# Listing order, top of the house down
LEVEL_ORDER = {
    RoomLevel.UPPER.value: 1,
    RoomLevel.MAIN.value: 2,
    RoomLevel.BASEMENT.value: 3,
    RoomLevel.OUTSIDE.value: 4,
}


class RoomCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    level: RoomLevel

    model_config = {"str_strip_whitespace": True}


class RoomUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    level: RoomLevel | None = None

    model_config = {"str_strip_whitespace": True}


class RoomResponse(BaseModel):
    id: int
    name: str
    level: RoomLevel
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
