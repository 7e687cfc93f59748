"""Room service: business logic for room CRUD."""

from __future__ import annotations

from sqlalchemy import case, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFoundError
from app.models.panel import Room
from app.schemas.room import LEVEL_ORDER, RoomCreate, RoomUpdate
from app.services.integrity import flush_or_raise

DUPLICATE_NAME = "A room with this name already exists"


class RoomService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: RoomCreate) -> Room:
        room = Room(name=data.name, level=data.level.value)
        self.db.add(room)
        await flush_or_raise(self.db, conflict=DUPLICATE_NAME)
        return room

    async def get_by_id(self, room_id: int) -> Room:
        room = await self.db.get(Room, room_id)
        if not room:
            raise NotFoundError("Room")
        return room

    async def list_all(self) -> list[Room]:
        """Rooms from the top floor down, then alphabetically."""
        level_rank = case(LEVEL_ORDER, value=Room.level, else_=len(LEVEL_ORDER) + 1)
        stmt = select(Room).order_by(level_rank, Room.name)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update(self, room_id: int, data: RoomUpdate) -> Room:
        room = await self.get_by_id(room_id)
        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("name") is not None:
            room.name = data.name
        if update_data.get("level") is not None:
            room.level = data.level.value
        await flush_or_raise(self.db, conflict=DUPLICATE_NAME)
        return room

    async def delete(self, room_id: int) -> None:
        """Delete a room; circuits in it keep existing with no room."""
        await self.get_by_id(room_id)
        await self.db.execute(delete(Room).where(Room.id == room_id))
