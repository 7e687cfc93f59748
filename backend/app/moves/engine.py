"""Breaker Move/Swap Engine.

Relocates a breaker's circuits to another panel address, or swaps circuits
with the breaker already sitting there, as one atomic unit:

  * destination occupied -> swap: both breaker rows stay where they are and
    only their circuits trade places ("the wires swap terminals").
  * destination empty    -> relocate: a new breaker is created at the
    destination with the source's ratings and a blank label, and every
    source circuit is moved onto it.

Afterwards an emptied source breaker is deleted. Any failure rolls the whole
unit back, so no circuit ever points at a missing breaker and no
(panel, position, slot) is ever claimed twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from app.db.gateway import BreakerGateway
from app.errors import (
    FOREIGN_KEY,
    UNIQUE,
    ConflictError,
    ConstraintViolation,
    InvalidReferenceError,
    NotFoundError,
    StorageError,
    ValidationFailed,
)
from app.panels.addressing import (
    BreakerAddress,
    Slot,
    breaker_type_for_slot,
    describe_conflicts,
    layout_conflicts,
    validate_address,
)

logger = logging.getLogger(__name__)

DESTINATION_OCCUPIED = "Destination position is already occupied"
INVALID_REFERENCE = "Invalid panel or breaker reference"


class MoveOutcome(str, Enum):
    RELOCATED = "relocated"
    SWAPPED = "swapped"


@dataclass(frozen=True)
class SourceSnapshot:
    """Plain copy of the source row, safe to read after a rollback."""

    id: int
    panel_id: int
    position: int
    slot: str
    breaker_type: str
    amperage: int | None
    critical: bool
    monitor: bool
    confirmed: bool

    @property
    def address(self) -> BreakerAddress:
        return BreakerAddress(self.panel_id, self.position, Slot(self.slot))


@dataclass
class MoveResult:
    outcome: MoveOutcome
    source_breaker_id: int
    destination_breaker_id: int
    created_breaker: bool = False
    source_deleted: bool = False
    moved_circuit_ids: list[int] = field(default_factory=list)
    returned_circuit_ids: list[int] = field(default_factory=list)


class MoveEngine:
    def __init__(self, gateway: BreakerGateway):
        self.gateway = gateway

    async def move_breaker(
        self,
        source_breaker_id: int,
        destination_panel_id: int,
        destination_position: int,
        destination_slot: Slot | str | None = Slot.SINGLE,
    ) -> MoveResult:
        # Checked before any write so a missing source never touches the store
        breaker = await self.gateway.get_breaker(source_breaker_id)
        if breaker is None:
            raise NotFoundError("Source breaker")

        try:
            slot = Slot(destination_slot or Slot.SINGLE)
        except ValueError as exc:
            raise ValidationFailed(
                f"Invalid destination slot {destination_slot!r}"
            ) from exc
        destination = BreakerAddress(destination_panel_id, destination_position, slot)
        source = SourceSnapshot(
            id=breaker.id,
            panel_id=breaker.panel_id,
            position=breaker.position,
            slot=breaker.slot,
            breaker_type=breaker.breaker_type,
            amperage=breaker.amperage,
            critical=breaker.critical,
            monitor=breaker.monitor,
            confirmed=breaker.confirmed,
        )
        if source.address == destination:
            raise ValidationFailed("Source and destination are the same position")

        try:
            async with self.gateway.transaction():
                result = await self._apply(source, destination)
        except ConstraintViolation as exc:
            if exc.kind == UNIQUE:
                logger.warning(
                    "Move of breaker %d to %s lost a race: %s",
                    source.id,
                    destination.label,
                    exc.message,
                )
                raise ConflictError(DESTINATION_OCCUPIED) from exc
            if exc.kind == FOREIGN_KEY:
                logger.warning(
                    "Move of breaker %d rejected, bad reference: %s",
                    source.id,
                    exc.message,
                )
                raise InvalidReferenceError(INVALID_REFERENCE) from exc
            logger.exception("Move of breaker %d violated a constraint", source.id)
            raise StorageError("Breaker move failed", detail=exc.message) from exc
        except SQLAlchemyError as exc:
            logger.exception("Move of breaker %d failed in storage", source.id)
            raise StorageError("Breaker move failed", detail=str(exc)) from exc

        logger.info(
            "Breaker %d %s to panel %d position %s (destination breaker %d)",
            source.id,
            result.outcome.value,
            destination.panel_id,
            destination.label,
            result.destination_breaker_id,
        )
        return result

    async def _apply(
        self, source: SourceSnapshot, destination: BreakerAddress
    ) -> MoveResult:
        gw = self.gateway
        source_circuits = await gw.get_circuits_by_breaker(source.id)

        panel = await gw.get_panel(destination.panel_id)
        if panel is None:
            logger.warning("Move target panel %d does not exist", destination.panel_id)
            raise InvalidReferenceError(INVALID_REFERENCE)

        occupant = await gw.get_breaker_at(destination)
        if occupant is not None:
            result = await self._swap(source, occupant.id, source_circuits)
        else:
            result = await self._relocate(
                source, destination, panel.size, source_circuits
            )

        # Every source circuit was moved, so this is normally zero
        if await gw.count_circuits(source.id) == 0:
            await gw.delete_breaker(source.id)
            result.source_deleted = True
        return result

    async def _swap(self, source: SourceSnapshot, occupant_id: int, source_circuits):
        gw = self.gateway
        destination_circuits = await gw.get_circuits_by_breaker(occupant_id)

        for circuit in source_circuits:
            await gw.reassign_circuit(circuit.id, occupant_id)
        for circuit in destination_circuits:
            await gw.reassign_circuit(circuit.id, source.id)

        return MoveResult(
            outcome=MoveOutcome.SWAPPED,
            source_breaker_id=source.id,
            destination_breaker_id=occupant_id,
            moved_circuit_ids=[c.id for c in source_circuits],
            returned_circuit_ids=[c.id for c in destination_circuits],
        )

    async def _relocate(
        self,
        source: SourceSnapshot,
        destination: BreakerAddress,
        panel_size: int,
        source_circuits,
    ) -> MoveResult:
        gw = self.gateway
        new_type = breaker_type_for_slot(source.breaker_type, destination.slot)
        validate_address(destination, panel_size, new_type)

        # The source vacates its position, so it never blocks its own move
        occupants = await gw.get_breakers_by_panel(destination.panel_id)
        conflicts = layout_conflicts(
            destination, new_type, occupants, ignore_ids=[source.id]
        )
        if conflicts:
            raise ConflictError(describe_conflicts(destination, conflicts))

        new_breaker = await gw.create_breaker(
            panel_id=destination.panel_id,
            position=destination.position,
            slot=destination.slot.value,
            breaker_type=new_type.value,
            label="",
            amperage=source.amperage,
            critical=source.critical,
            monitor=source.monitor,
            confirmed=source.confirmed,
        )
        for circuit in source_circuits:
            await gw.reassign_circuit(circuit.id, new_breaker.id)

        return MoveResult(
            outcome=MoveOutcome.RELOCATED,
            source_breaker_id=source.id,
            destination_breaker_id=new_breaker.id,
            created_breaker=True,
            moved_circuit_ids=[c.id for c in source_circuits],
        )
