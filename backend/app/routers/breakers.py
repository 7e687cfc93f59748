"""Breaker router: CRUD, lookup by position, move and move preview."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.moves.preview import build_move_preview
from app.panels.addressing import BreakerAddress, Slot
from app.services.breaker_service import BreakerService
from app.services.circuit_service import CircuitService
from app.schemas.breaker import BreakerCreate, BreakerResponse, BreakerUpdate
from app.schemas.circuit import CircuitResponse
from app.schemas.move import MovePreview, MoveRequest, MoveResponse

router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> BreakerService:
    return BreakerService(db)


@router.get("/panels/{panel_id}/breakers", response_model=list[BreakerResponse])
async def list_panel_breakers(
    panel_id: int,
    service: BreakerService = Depends(_get_service),
):
    breakers = await service.list_by_panel(panel_id)
    return [await service.to_response(b) for b in breakers]


@router.get(
    "/panels/{panel_id}/breakers/position/{position}",
    response_model=list[BreakerResponse],
)
async def get_breakers_at_position(
    panel_id: int,
    position: int,
    slot: str = Query("single", pattern=r"^(single|A|B|both)$"),
    service: BreakerService = Depends(_get_service),
):
    """Breaker(s) at a position. ``slot=both`` returns both tandem halves."""
    breakers = await service.get_at_position(panel_id, position, slot)
    return [await service.to_response(b) for b in breakers]


@router.post("/breakers", response_model=BreakerResponse, status_code=201)
async def create_breaker(
    data: BreakerCreate,
    service: BreakerService = Depends(_get_service),
):
    breaker = await service.create(data)
    return await service.to_response(breaker)


@router.post("/breakers/move", response_model=MoveResponse)
async def move_breaker(
    data: MoveRequest,
    service: BreakerService = Depends(_get_service),
):
    """Move a breaker's circuits to another address, swapping if occupied."""
    result = await service.move(data)
    return MoveResponse.model_validate(result)


@router.get("/breakers/{breaker_id}", response_model=BreakerResponse)
async def get_breaker(
    breaker_id: int,
    service: BreakerService = Depends(_get_service),
):
    breaker = await service.get_by_id(breaker_id)
    return await service.to_response(breaker)


@router.get("/breakers/{breaker_id}/move-preview", response_model=MovePreview)
async def preview_move(
    breaker_id: int,
    destination_panel_id: int = Query(..., gt=0),
    destination_position: int = Query(..., gt=0),
    destination_slot: Slot = Query(Slot.SINGLE),
    db: AsyncSession = Depends(get_db),
):
    """Describe what moving this breaker would do. Read-only."""
    destination = BreakerAddress(
        destination_panel_id, destination_position, destination_slot
    )
    return await build_move_preview(db, breaker_id, destination)


@router.get("/breakers/{breaker_id}/circuits", response_model=list[CircuitResponse])
async def list_breaker_circuits(
    breaker_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await CircuitService(db).list_by_breaker(breaker_id)


@router.put("/breakers/{breaker_id}", response_model=BreakerResponse)
async def update_breaker(
    breaker_id: int,
    data: BreakerUpdate,
    service: BreakerService = Depends(_get_service),
):
    breaker = await service.update(breaker_id, data)
    return await service.to_response(breaker)


@router.delete("/breakers/{breaker_id}", status_code=204)
async def delete_breaker(
    breaker_id: int,
    service: BreakerService = Depends(_get_service),
):
    """Delete a breaker together with its circuits."""
    await service.delete(breaker_id)
