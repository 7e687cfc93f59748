from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.panels.addressing import BreakerType, Slot


class BreakerCreate(BaseModel):
    panel_id: int = Field(..., gt=0)
    position: int = Field(..., gt=0)
    slot: Slot | None = None
    breaker_type: BreakerType = BreakerType.SINGLE
    label: str | None = Field(default=None, max_length=255)
    amperage: int | None = Field(default=None, gt=0, le=200)
    critical: bool = False
    monitor: bool = False
    confirmed: bool = False

    model_config = {"str_strip_whitespace": True}


class BreakerUpdate(BaseModel):
    """Position and panel are changed through the move endpoint only."""

    slot: Slot | None = None
    breaker_type: BreakerType | None = None
    label: str | None = Field(default=None, max_length=255)
    amperage: int | None = Field(default=None, gt=0, le=200)
    critical: bool | None = None
    monitor: bool | None = None
    confirmed: bool | None = None

    model_config = {"str_strip_whitespace": True}


class BreakerResponse(BaseModel):
    id: int
    panel_id: int
    position: int
    slot: Slot
    breaker_type: BreakerType
    label: str | None = None
    amperage: int | None = None
    critical: bool = False
    monitor: bool = False
    confirmed: bool = False
    created_at: datetime | None = None
    display_label: str = ""

    model_config = {"from_attributes": True}
