"""Schemas for breaker moves, move previews and error payloads."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.moves.engine import MoveOutcome
from app.panels.addressing import Slot


# ─── Request Schemas ───


class MoveRequest(BaseModel):
    """Move request; accepts camelCase (as sent by the panel UI) or
    snake_case keys."""

    source_breaker_id: int = Field(..., gt=0, alias="sourceBreakerId")
    destination_panel_id: int = Field(..., gt=0, alias="destinationPanelId")
    destination_position: int = Field(..., gt=0, alias="destinationPosition")
    destination_slot: Slot | None = Field(default=Slot.SINGLE, alias="destinationSlot")

    # Informational, for the caller's bookkeeping only
    source_panel_id: int | None = Field(default=None, alias="sourcePanelId")
    source_position: int | None = Field(default=None, alias="sourcePosition")
    source_slot: Slot | None = Field(default=None, alias="sourceSlot")

    model_config = {"populate_by_name": True}


# ─── Response Schemas ───


class MoveResponse(BaseModel):
    message: str = "Breaker moved successfully"
    outcome: MoveOutcome
    source_breaker_id: int
    destination_breaker_id: int
    created_breaker: bool = False
    source_deleted: bool = False
    moved_circuit_ids: list[int] = Field(default_factory=list)
    returned_circuit_ids: list[int] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class PreviewCircuit(BaseModel):
    id: int
    room_name: str | None = None
    type: str | None = None
    notes: str | None = None

    @property
    def summary(self) -> str:
        return (
            f"{self.room_name or 'No Room'} - {self.type or 'Unknown'} - "
            f"{self.notes or 'No notes'}"
        )


class MovePreview(BaseModel):
    operation: str  # relocate, swap
    source_panel_name: str
    source_position: str
    destination_panel_name: str
    destination_position: str
    destination_occupied: bool = False
    source_circuits: list[PreviewCircuit] = Field(default_factory=list)
    destination_circuits: list[PreviewCircuit] = Field(default_factory=list)
    lines: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
    kind: str
