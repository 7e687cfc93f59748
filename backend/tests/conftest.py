"""Shared fixtures: a fresh SQLite file per test, a session and an HTTP client."""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from app.db import session as db_session
from app.models.panel import Breaker, Circuit, Panel, Room


class Catalog:
    """Seeds rows straight through the ORM and commits each one.

    Every helper returns the new row id rather than the ORM object, so tests
    never touch attributes expired by a rolled-back move.
    """

    def __init__(self, db):
        self.db = db

    async def _add(self, row) -> int:
        self.db.add(row)
        await self.db.commit()
        return row.id

    async def panel(self, name: str = "Main", size: int = 20) -> int:
        return await self._add(Panel(name=name, size=size))

    async def room(self, name: str = "Kitchen", level: str = "main") -> int:
        return await self._add(Room(name=name, level=level))

    async def breaker(
        self,
        panel_id: int,
        position: int,
        slot: str = "single",
        breaker_type: str = "single",
        label: str | None = None,
        amperage: int | None = 20,
    ) -> int:
        return await self._add(
            Breaker(
                panel_id=panel_id,
                position=position,
                slot=slot,
                breaker_type=breaker_type,
                label=label,
                amperage=amperage,
            )
        )

    async def circuit(
        self,
        breaker_id: int,
        room_id: int | None = None,
        type: str | None = "outlet",
        notes: str | None = None,
        subpanel_id: int | None = None,
    ) -> int:
        return await self._add(
            Circuit(
                breaker_id=breaker_id,
                room_id=room_id,
                type=type,
                notes=notes,
                subpanel_id=subpanel_id,
            )
        )

    async def circuit_owners(self) -> dict[int, int]:
        """Map of circuit id -> breaker id as currently stored."""
        rows = await self.db.execute(select(Circuit.id, Circuit.breaker_id))
        return {row.id: row.breaker_id for row in rows}

    async def breakers_in(self, panel_id: int) -> list[tuple[int, str, str]]:
        """(position, slot, breaker_type) of every stored breaker in a panel."""
        rows = await self.db.execute(
            select(Breaker.position, Breaker.slot, Breaker.breaker_type)
            .where(Breaker.panel_id == panel_id)
            .order_by(Breaker.position, Breaker.slot)
        )
        return [tuple(row) for row in rows]

    async def breaker_exists(self, breaker_id: int) -> bool:
        row = await self.db.execute(select(Breaker.id).where(Breaker.id == breaker_id))
        return row.scalar_one_or_none() is not None


@pytest_asyncio.fixture
async def engine(tmp_path):
    test_engine = db_session.configure_engine(f"sqlite:///{tmp_path / 'catalog.db'}")
    await db_session.create_all()
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    async with db_session.get_session_factory()() as session:
        yield session


@pytest_asyncio.fixture
async def catalog(engine):
    async with db_session.get_session_factory()() as session:
        yield Catalog(session)


@pytest_asyncio.fixture
async def client(engine):
    from app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
