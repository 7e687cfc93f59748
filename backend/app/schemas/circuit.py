from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from app.panels.addressing import Slot


class CircuitType(str, Enum):
    OUTLET = "outlet"
    LIGHTING = "lighting"
    HEATING = "heating"
    APPLIANCE = "appliance"
    SUBPANEL = "subpanel"


class CircuitCreate(BaseModel):
    breaker_id: int = Field(..., gt=0)
    room_id: int | None = Field(default=None, gt=0)
    type: CircuitType | None = None
    notes: str | None = None
    subpanel_id: int | None = Field(default=None, gt=0)

    model_config = {"str_strip_whitespace": True}


class CircuitUpdate(BaseModel):
    room_id: int | None = Field(default=None, gt=0)
    type: CircuitType | None = None
    notes: str | None = None
    subpanel_id: int | None = Field(default=None, gt=0)

    model_config = {"str_strip_whitespace": True}


class CircuitResponse(BaseModel):
    id: int
    breaker_id: int
    room_id: int | None = None
    type: CircuitType | None = None
    notes: str | None = None
    subpanel_id: int | None = None
    created_at: datetime | None = None

    # Joined from room / breaker
    room_name: str | None = None
    room_level: str | None = None
    panel_id: int | None = None
    position: int | None = None
    slot: Slot | None = None

    model_config = {"from_attributes": True}
