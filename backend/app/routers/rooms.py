"""Room router: CRUD endpoints for rooms."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.services.room_service import RoomService
from app.schemas.room import RoomCreate, RoomResponse, RoomUpdate

router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> RoomService:
    return RoomService(db)


@router.get("/rooms", response_model=list[RoomResponse])
async def list_rooms(service: RoomService = Depends(_get_service)):
    """List rooms from the upper floor down to outside."""
    rooms = await service.list_all()
    return [RoomResponse.model_validate(r) for r in rooms]


@router.post("/rooms", response_model=RoomResponse, status_code=201)
async def create_room(
    data: RoomCreate,
    service: RoomService = Depends(_get_service),
):
    room = await service.create(data)
    return RoomResponse.model_validate(room)


@router.put("/rooms/{room_id}", response_model=RoomResponse)
async def update_room(
    room_id: int,
    data: RoomUpdate,
    service: RoomService = Depends(_get_service),
):
    room = await service.update(room_id, data)
    return RoomResponse.model_validate(room)


@router.delete("/rooms/{room_id}", status_code=204)
async def delete_room(
    room_id: int,
    service: RoomService = Depends(_get_service),
):
    """Delete a room. Its circuits stay, with no room assigned."""
    await service.delete(room_id)
