"""Circuit service: business logic for circuit CRUD."""

from __future__ import annotations

import logging

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.gateway import BreakerGateway
from app.errors import InvalidReferenceError, NotFoundError, ValidationFailed
from app.models.panel import Breaker, Circuit, Panel, Room
from app.panels.hierarchy import feeds_own_panel
from app.schemas.circuit import (
    CircuitCreate,
    CircuitResponse,
    CircuitType,
    CircuitUpdate,
)
from app.services.integrity import flush_or_raise

logger = logging.getLogger(__name__)


def _detail_stmt() -> Select:
    """Circuits joined with their room and breaker address."""
    return (
        select(
            Circuit,
            Room.name,
            Room.level,
            Breaker.panel_id,
            Breaker.position,
            Breaker.slot,
        )
        .join(Breaker, Circuit.breaker_id == Breaker.id)
        .outerjoin(Room, Circuit.room_id == Room.id)
    )


def _to_response(row) -> CircuitResponse:
    circuit, room_name, room_level, panel_id, position, slot = row
    return CircuitResponse(
        id=circuit.id,
        breaker_id=circuit.breaker_id,
        room_id=circuit.room_id,
        type=circuit.type,
        notes=circuit.notes,
        subpanel_id=circuit.subpanel_id,
        created_at=circuit.created_at,
        room_name=room_name,
        room_level=room_level,
        panel_id=panel_id,
        position=position,
        slot=slot,
    )


class CircuitService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, circuit_id: int) -> Circuit:
        circuit = await self.db.get(Circuit, circuit_id)
        if not circuit:
            raise NotFoundError("Circuit")
        return circuit

    async def get_detail(self, circuit_id: int) -> CircuitResponse:
        stmt = _detail_stmt().where(Circuit.id == circuit_id)
        row = (await self.db.execute(stmt)).one_or_none()
        if row is None:
            raise NotFoundError("Circuit")
        return _to_response(row)

    async def list_all(self) -> list[CircuitResponse]:
        stmt = _detail_stmt().order_by(Circuit.created_at, Circuit.id)
        result = await self.db.execute(stmt)
        return [_to_response(row) for row in result.all()]

    async def list_by_breaker(self, breaker_id: int) -> list[CircuitResponse]:
        stmt = (
            _detail_stmt()
            .where(Circuit.breaker_id == breaker_id)
            .order_by(Circuit.created_at, Circuit.id)
        )
        result = await self.db.execute(stmt)
        return [_to_response(row) for row in result.all()]

    async def list_by_panel(self, panel_id: int) -> list[CircuitResponse]:
        stmt = (
            _detail_stmt()
            .where(Breaker.panel_id == panel_id)
            .order_by(Breaker.position, Circuit.id)
        )
        result = await self.db.execute(stmt)
        return [_to_response(row) for row in result.all()]

    async def _check_references(
        self,
        breaker: Breaker,
        room_id: int | None,
        circuit_type: str | None,
        subpanel_id: int | None,
    ) -> int | None:
        """Validate room / subpanel references; return the subpanel id to store."""
        if room_id is not None and await self.db.get(Room, room_id) is None:
            raise InvalidReferenceError("Invalid room_id - room does not exist")

        if circuit_type != CircuitType.SUBPANEL.value:
            return None
        if subpanel_id is None:
            return None
        if await self.db.get(Panel, subpanel_id) is None:
            raise InvalidReferenceError("Invalid subpanel_id - subpanel does not exist")
        if feeds_own_panel(breaker.panel_id, subpanel_id):
            raise ValidationFailed("A circuit cannot feed the panel its breaker is in")
        return subpanel_id

    async def create(self, data: CircuitCreate) -> CircuitResponse:
        breaker = await self.db.get(Breaker, data.breaker_id)
        if breaker is None:
            raise InvalidReferenceError("Invalid breaker_id - breaker does not exist")

        circuit_type = data.type.value if data.type else None
        circuit = Circuit(
            breaker_id=data.breaker_id,
            room_id=data.room_id,
            type=circuit_type,
            notes=data.notes or None,
            subpanel_id=await self._check_references(
                breaker, data.room_id, circuit_type, data.subpanel_id
            ),
        )
        self.db.add(circuit)
        await flush_or_raise(
            self.db, invalid_reference="Invalid breaker_id - breaker does not exist"
        )
        return await self.get_detail(circuit.id)

    async def update(self, circuit_id: int, data: CircuitUpdate) -> CircuitResponse:
        circuit = await self.get_by_id(circuit_id)
        breaker = await self.db.get(Breaker, circuit.breaker_id)
        update_data = data.model_dump(exclude_unset=True)

        circuit_type = circuit.type
        if "type" in update_data:
            circuit_type = data.type.value if data.type else None
        room_id = update_data.get("room_id", circuit.room_id)

        # Lookups below autoflush; the row must be untouched until they pass
        subpanel_id = await self._check_references(
            breaker,
            room_id,
            circuit_type,
            update_data.get("subpanel_id", circuit.subpanel_id),
        )

        circuit.type = circuit_type
        circuit.room_id = room_id
        circuit.subpanel_id = subpanel_id
        if "notes" in update_data:
            circuit.notes = data.notes or None
        await flush_or_raise(self.db)
        return await self.get_detail(circuit.id)

    async def delete(self, circuit_id: int) -> None:
        """Delete a circuit; a breaker left with no circuits goes with it."""
        circuit = await self.get_by_id(circuit_id)
        breaker_id = circuit.breaker_id
        await self.db.execute(delete(Circuit).where(Circuit.id == circuit_id))

        gateway = BreakerGateway(self.db)
        if await gateway.count_circuits(breaker_id) == 0:
            await gateway.delete_breaker(breaker_id)
            logger.info("Breaker %d removed with its last circuit", breaker_id)
