"""Persistence gateway for breakers and circuits.

Thin, explicit read/write primitives keyed by the addressing model, plus a
scoped transaction. The move engine talks to the store only through this
class, never through cached UI state.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import IN_USE, ConstraintViolation
from app.models.panel import Breaker, Circuit, Panel
from app.panels.addressing import BreakerAddress, Slot

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BreakerGateway:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads ───

    async def get_panel(self, panel_id: int) -> Panel | None:
        return await self.db.get(Panel, panel_id)

    async def get_breaker(self, breaker_id: int) -> Breaker | None:
        return await self.db.get(Breaker, breaker_id)

    async def get_breaker_at(self, address: BreakerAddress) -> Breaker | None:
        stmt = select(Breaker).where(
            Breaker.panel_id == address.panel_id,
            Breaker.position == address.position,
            Breaker.slot == Slot(address.slot).value,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_breakers_by_panel(self, panel_id: int) -> list[Breaker]:
        stmt = (
            select(Breaker)
            .where(Breaker.panel_id == panel_id)
            .order_by(Breaker.position, Breaker.slot)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_breakers_at_position(
        self, panel_id: int, position: int
    ) -> list[Breaker]:
        stmt = (
            select(Breaker)
            .where(Breaker.panel_id == panel_id, Breaker.position == position)
            .order_by(Breaker.slot)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_circuits_by_breaker(self, breaker_id: int) -> list[Circuit]:
        stmt = (
            select(Circuit)
            .where(Circuit.breaker_id == breaker_id)
            .order_by(Circuit.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_circuits(self, breaker_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(Circuit)
            .where(Circuit.breaker_id == breaker_id)
        )
        return (await self.db.execute(stmt)).scalar() or 0

    # ─── Writes ───

    async def create_breaker(self, **fields) -> Breaker:
        """Insert a breaker. Fails if its (panel, position, slot) is taken."""
        breaker = Breaker(**fields)
        self.db.add(breaker)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            raise ConstraintViolation.from_integrity_error(exc) from exc
        return breaker

    async def reassign_circuit(self, circuit_id: int, breaker_id: int) -> None:
        stmt = (
            update(Circuit)
            .where(Circuit.id == circuit_id)
            .values(breaker_id=breaker_id)
        )
        try:
            await self.db.execute(stmt)
        except IntegrityError as exc:
            raise ConstraintViolation.from_integrity_error(exc) from exc

    async def delete_breaker(self, breaker_id: int) -> None:
        """Delete an empty breaker.

        The store would cascade the delete to circuits; refusing here keeps a
        caller from dropping circuits it forgot to move.
        """
        remaining = await self.count_circuits(breaker_id)
        if remaining:
            raise ConstraintViolation(
                IN_USE,
                f"Breaker {breaker_id} still has {remaining} circuit(s)",
            )
        await self.db.execute(delete(Breaker).where(Breaker.id == breaker_id))

    # ─── Transactions ───

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[BreakerGateway]:
        """Commit on normal exit; roll back and re-raise on any error."""
        try:
            yield self
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            raise ConstraintViolation.from_integrity_error(exc) from exc
        except BaseException:
            await self.db.rollback()
            raise

    async def run_in_transaction(
        self, work: Callable[[BreakerGateway], Awaitable[T]]
    ) -> T:
        async with self.transaction():
            return await work(self)
