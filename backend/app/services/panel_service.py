"""Panel service: business logic for panel CRUD."""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFoundError, ValidationFailed
from app.models.panel import Breaker, Circuit, Panel
from app.panels.addressing import occupied_positions, position_label
from app.panels.hierarchy import sort_main_first, subpanel_ids
from app.panels.labels import display_label
from app.schemas.breaker import BreakerResponse
from app.schemas.panel import (
    PanelComplete,
    PanelCreate,
    PanelListItem,
    PanelResponse,
    PanelUpdate,
)
from app.services.circuit_service import CircuitService
from app.services.integrity import flush_or_raise

logger = logging.getLogger(__name__)

DUPLICATE_NAME = "A panel with this name already exists"


class PanelService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: PanelCreate) -> Panel:
        panel = Panel(name=data.name, size=data.size)
        self.db.add(panel)
        await flush_or_raise(self.db, conflict=DUPLICATE_NAME)
        logger.info("Created panel %r with %d positions", panel.name, panel.size)
        return panel

    async def get_by_id(self, panel_id: int) -> Panel:
        panel = await self.db.get(Panel, panel_id)
        if not panel:
            raise NotFoundError("Panel")
        return panel

    async def list_all(self) -> list[PanelListItem]:
        """All panels, main panels first and subpanels after."""
        panels = list((await self.db.execute(select(Panel))).scalars().all())
        feeds = (
            await self.db.execute(
                select(Circuit.type, Circuit.subpanel_id).where(
                    Circuit.subpanel_id.is_not(None)
                )
            )
        ).all()
        fed_ids = subpanel_ids(feeds)
        return [
            PanelListItem(
                id=p.id,
                name=p.name,
                size=p.size,
                created_at=p.created_at,
                is_main=p.id not in fed_ids,
            )
            for p in sort_main_first(panels, fed_ids)
        ]

    async def get_complete(self, panel_id: int) -> PanelComplete:
        panel = await self.get_by_id(panel_id)
        breakers = list(
            (
                await self.db.execute(
                    select(Breaker)
                    .where(Breaker.panel_id == panel_id)
                    .order_by(Breaker.position, Breaker.slot)
                )
            )
            .scalars()
            .all()
        )
        circuits = await CircuitService(self.db).list_by_panel(panel_id)

        fed_ids = {c.subpanel_id for c in circuits if c.subpanel_id}
        panel_names: dict[int, str] = {}
        if fed_ids:
            rows = await self.db.execute(
                select(Panel.id, Panel.name).where(Panel.id.in_(fed_ids))
            )
            panel_names = {row.id: row.name for row in rows}

        breaker_items = []
        for breaker in breakers:
            own = [c for c in circuits if c.breaker_id == breaker.id]
            feed = next(
                (c for c in own if c.type == "subpanel" and c.subpanel_id), None
            )
            item = BreakerResponse.model_validate(breaker)
            item.display_label = display_label(
                breaker.label,
                breaker.breaker_type,
                own,
                panel_names.get(feed.subpanel_id) if feed else None,
            )
            breaker_items.append(item)

        return PanelComplete(
            panel=PanelResponse.model_validate(panel),
            breakers=breaker_items,
            circuits=circuits,
        )

    async def update(self, panel_id: int, data: PanelUpdate) -> Panel:
        panel = await self.get_by_id(panel_id)
        update_data = data.model_dump(exclude_unset=True)

        new_size = update_data.get("size")
        if new_size is not None and new_size < panel.size:
            await self._check_shrink(panel_id, new_size)

        for field, value in update_data.items():
            if value is not None:
                setattr(panel, field, value)
        await flush_or_raise(self.db, conflict=DUPLICATE_NAME)
        return panel

    async def _check_shrink(self, panel_id: int, new_size: int) -> None:
        breakers = (
            await self.db.execute(
                select(Breaker)
                .where(Breaker.panel_id == panel_id)
                .order_by(Breaker.position, Breaker.slot)
            )
        ).scalars()
        outside = [
            position_label(b.position, b.slot)
            for b in breakers
            if max(occupied_positions(b)) > new_size
        ]
        if outside:
            raise ValidationFailed(
                f"Cannot shrink panel to {new_size} positions; "
                f"breakers at {', '.join(outside)} would not fit"
            )

    async def delete(self, panel_id: int) -> None:
        """Delete a panel and, through the store cascade, its breakers."""
        await self.get_by_id(panel_id)
        total = (
            await self.db.execute(select(func.count()).select_from(Panel))
        ).scalar() or 0
        if total <= 1:
            raise ValidationFailed("Cannot delete the last remaining panel")
        await self.db.execute(delete(Panel).where(Panel.id == panel_id))
        logger.info("Deleted panel %d", panel_id)
