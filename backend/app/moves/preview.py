"""Move preview: a read-only description of what a move would do.

Advisory only. The data can go stale between preview and commit; the move
engine re-validates everything from scratch when the move is executed.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.gateway import BreakerGateway
from app.errors import NotFoundError, ValidationFailed
from app.panels.addressing import (
    BreakerAddress,
    breaker_type_for_slot,
    describe_conflicts,
    layout_conflicts,
    position_label,
    validate_address,
)
from app.schemas.move import MovePreview, PreviewCircuit
from app.services.circuit_service import CircuitService


def describe_move(
    source_panel_name: str,
    source_position: str,
    destination_panel_name: str,
    destination_position: str,
    source_circuits: list[PreviewCircuit],
    destination_circuits: list[PreviewCircuit],
    destination_occupied: bool,
) -> list[str]:
    """Human-readable lines for the move confirmation dialog."""
    lines = ["Move: Moving electrical connections (hot wires)"]

    lines.append(f"From: {source_panel_name} - Position {source_position}")
    if source_circuits:
        lines.extend(f"  - {c.summary}" for c in source_circuits)
    else:
        lines.append("  No circuits to move")

    lines.append(f"To: {destination_panel_name} - Position {destination_position}")
    if destination_occupied and destination_circuits:
        lines.append("Swap Operation: Destination position is occupied")
        lines.append(
            f"The following circuits will move to position {source_position}:"
        )
        lines.extend(f"  - {c.summary}" for c in destination_circuits)
    elif destination_occupied:
        lines.append("Destination position has empty breaker")
    else:
        lines.append("Destination position is empty")

    return lines


async def _preview_circuits(db: AsyncSession, breaker_id: int) -> list[PreviewCircuit]:
    circuits = await CircuitService(db).list_by_breaker(breaker_id)
    return [
        PreviewCircuit(
            id=c.id,
            room_name=c.room_name,
            type=c.type.value if c.type else None,
            notes=c.notes,
        )
        for c in circuits
    ]


async def build_move_preview(
    db: AsyncSession,
    source_breaker_id: int,
    destination: BreakerAddress,
) -> MovePreview:
    gw = BreakerGateway(db)

    source = await gw.get_breaker(source_breaker_id)
    if source is None:
        raise NotFoundError("Source breaker")
    source_panel = await gw.get_panel(source.panel_id)
    destination_panel = await gw.get_panel(destination.panel_id)
    if destination_panel is None:
        raise NotFoundError("Destination panel")

    occupant = await gw.get_breaker_at(destination)
    source_circuits = await _preview_circuits(db, source.id)
    destination_circuits = (
        await _preview_circuits(db, occupant.id) if occupant is not None else []
    )

    source_label = position_label(source.position, source.slot)
    warnings: list[str] = []
    if occupant is not None and occupant.id == source.id:
        warnings.append("Source and destination are the same position")
    elif occupant is None:
        new_type = breaker_type_for_slot(source.breaker_type, destination.slot)
        try:
            validate_address(destination, destination_panel.size, new_type)
        except ValidationFailed as exc:
            warnings.append(exc.message)
        occupants = await gw.get_breakers_by_panel(destination.panel_id)
        conflicts = layout_conflicts(
            destination, new_type, occupants, ignore_ids=[source.id]
        )
        if conflicts:
            warnings.append(describe_conflicts(destination, conflicts))

    occupied = occupant is not None
    return MovePreview(
        operation="swap" if occupied else "relocate",
        source_panel_name=source_panel.name,
        source_position=source_label,
        destination_panel_name=destination_panel.name,
        destination_position=destination.label,
        destination_occupied=occupied,
        source_circuits=source_circuits,
        destination_circuits=destination_circuits,
        lines=describe_move(
            source_panel.name,
            source_label,
            destination_panel.name,
            destination.label,
            source_circuits,
            destination_circuits,
            occupied,
        ),
        warnings=warnings,
    )
