"""Breaker service: breaker CRUD and the move entry point."""

from __future__ import annotations

import logging

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.gateway import BreakerGateway
from app.errors import (
    FOREIGN_KEY,
    UNIQUE,
    ConflictError,
    ConstraintViolation,
    InvalidReferenceError,
    NotFoundError,
)
from app.models.panel import Breaker, Panel
from app.moves.engine import MoveEngine, MoveResult
from app.panels.addressing import (
    BreakerAddress,
    BreakerType,
    Slot,
    describe_conflicts,
    layout_conflicts,
    normalize_slot,
    validate_address,
)
from app.panels.labels import display_label
from app.schemas.breaker import BreakerCreate, BreakerResponse, BreakerUpdate
from app.schemas.move import MoveRequest
from app.services.circuit_service import CircuitService
from app.services.integrity import flush_or_raise

logger = logging.getLogger(__name__)

ADDRESS_TAKEN = "A breaker already exists at this position and slot"


class BreakerService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.gateway = BreakerGateway(db)

    async def get_by_id(self, breaker_id: int) -> Breaker:
        breaker = await self.gateway.get_breaker(breaker_id)
        if not breaker:
            raise NotFoundError("Breaker")
        return breaker

    async def to_response(self, breaker: Breaker) -> BreakerResponse:
        """Breaker payload with its label derived from its circuits."""
        circuits = await CircuitService(self.db).list_by_breaker(breaker.id)
        feed = next((c for c in circuits if c.type == "subpanel" and c.subpanel_id), None)
        fed_panel = await self.db.get(Panel, feed.subpanel_id) if feed else None

        response = BreakerResponse.model_validate(breaker)
        response.display_label = display_label(
            breaker.label,
            breaker.breaker_type,
            circuits,
            fed_panel.name if fed_panel else None,
        )
        return response

    async def list_by_panel(self, panel_id: int) -> list[Breaker]:
        return await self.gateway.get_breakers_by_panel(panel_id)

    async def get_at_position(
        self, panel_id: int, position: int, slot: str = "single"
    ) -> list[Breaker]:
        """Breakers at a position; ``slot="both"`` returns both tandem halves."""
        if slot == "both":
            return await self.gateway.get_breakers_at_position(panel_id, position)
        breaker = await self.gateway.get_breaker_at(
            BreakerAddress(panel_id, position, Slot(slot))
        )
        return [breaker] if breaker else []

    async def _check_placement(
        self,
        panel: Panel,
        address: BreakerAddress,
        breaker_type: BreakerType,
        breaker_id: int | None = None,
    ) -> None:
        validate_address(address, panel.size, breaker_type)

        occupant = await self.gateway.get_breaker_at(address)
        if occupant is not None and occupant.id != breaker_id:
            raise ConflictError(ADDRESS_TAKEN)

        occupants = await self.gateway.get_breakers_by_panel(panel.id)
        ignore = [breaker_id] if breaker_id is not None else []
        conflicts = layout_conflicts(address, breaker_type, occupants, ignore_ids=ignore)
        if conflicts:
            raise ConflictError(describe_conflicts(address, conflicts))

    async def create(self, data: BreakerCreate) -> Breaker:
        panel = await self.db.get(Panel, data.panel_id)
        if panel is None:
            raise InvalidReferenceError("Invalid panel_id - panel does not exist")

        address = BreakerAddress(
            panel.id, data.position, normalize_slot(data.breaker_type, data.slot)
        )
        await self._check_placement(panel, address, data.breaker_type)

        try:
            breaker = await self.gateway.create_breaker(
                panel_id=panel.id,
                position=address.position,
                slot=address.slot.value,
                breaker_type=data.breaker_type.value,
                label=data.label or None,
                amperage=data.amperage,
                critical=data.critical,
                monitor=data.monitor,
                confirmed=data.confirmed,
            )
        except ConstraintViolation as exc:
            if exc.kind == UNIQUE:
                raise ConflictError(ADDRESS_TAKEN) from exc
            if exc.kind == FOREIGN_KEY:
                raise InvalidReferenceError(
                    "Invalid panel_id - panel does not exist"
                ) from exc
            raise
        logger.info("Created breaker %d at panel %d %s", breaker.id, panel.id, address.label)
        return breaker

    async def update(self, breaker_id: int, data: BreakerUpdate) -> Breaker:
        breaker = await self.get_by_id(breaker_id)
        update_data = data.model_dump(exclude_unset=True)

        new_type = BreakerType(update_data.get("breaker_type") or breaker.breaker_type)
        requested_slot = update_data.get("slot")
        if requested_slot is None:
            keep_half = new_type is BreakerType.TANDEM
            requested_slot = breaker.slot if keep_half else Slot.SINGLE
        new_slot = normalize_slot(new_type, requested_slot)

        if new_type.value != breaker.breaker_type or new_slot.value != breaker.slot:
            panel = await self.db.get(Panel, breaker.panel_id)
            address = BreakerAddress(panel.id, breaker.position, new_slot)
            await self._check_placement(panel, address, new_type, breaker_id=breaker.id)

        breaker.breaker_type = new_type.value
        breaker.slot = new_slot.value
        if "label" in update_data:
            breaker.label = data.label or None
        if "amperage" in update_data:
            breaker.amperage = data.amperage
        for flag in ("critical", "monitor", "confirmed"):
            if update_data.get(flag) is not None:
                setattr(breaker, flag, update_data[flag])

        await flush_or_raise(self.db, conflict=ADDRESS_TAKEN)
        return breaker

    async def delete(self, breaker_id: int) -> None:
        """Delete a breaker; its circuits are removed by the store cascade."""
        await self.get_by_id(breaker_id)
        await self.db.execute(delete(Breaker).where(Breaker.id == breaker_id))

    async def move(self, request: MoveRequest) -> MoveResult:
        engine = MoveEngine(self.gateway)
        return await engine.move_breaker(
            request.source_breaker_id,
            request.destination_panel_id,
            request.destination_position,
            request.destination_slot,
        )
