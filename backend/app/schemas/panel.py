"""Pydantic schemas for Panel CRUD operations."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.breaker import BreakerResponse
from app.schemas.circuit import CircuitResponse


# ─── Request Schemas ───


class PanelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    size: int = Field(..., ge=12, le=42)

    model_config = {"str_strip_whitespace": True}


class PanelUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    size: int | None = Field(None, ge=12, le=42)

    model_config = {"str_strip_whitespace": True}


# ─── Response Schemas ───


class PanelResponse(BaseModel):
    id: int
    name: str
    size: int
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class PanelListItem(PanelResponse):
    is_main: bool = True


class PanelComplete(BaseModel):
    """Panel with all breakers and circuits in one payload."""

    panel: PanelResponse
    breakers: list[BreakerResponse] = Field(default_factory=list)
    circuits: list[CircuitResponse] = Field(default_factory=list)
