"""Panel router: CRUD endpoints for panels."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.services.panel_service import PanelService
from app.schemas.panel import (
    PanelComplete,
    PanelCreate,
    PanelListItem,
    PanelResponse,
    PanelUpdate,
)

router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> PanelService:
    return PanelService(db)


@router.get("/panels", response_model=list[PanelListItem])
async def list_panels(service: PanelService = Depends(_get_service)):
    """List panels, main panels first and subpanels after."""
    return await service.list_all()


@router.post("/panels", response_model=PanelResponse, status_code=201)
async def create_panel(
    data: PanelCreate,
    service: PanelService = Depends(_get_service),
):
    panel = await service.create(data)
    return PanelResponse.model_validate(panel)


@router.get("/panels/{panel_id}", response_model=PanelResponse)
async def get_panel(
    panel_id: int,
    service: PanelService = Depends(_get_service),
):
    panel = await service.get_by_id(panel_id)
    return PanelResponse.model_validate(panel)


@router.get("/panels/{panel_id}/complete", response_model=PanelComplete)
async def get_panel_complete(
    panel_id: int,
    service: PanelService = Depends(_get_service),
):
    """Panel with all its breakers and circuits in one request."""
    return await service.get_complete(panel_id)


@router.put("/panels/{panel_id}", response_model=PanelResponse)
async def update_panel(
    panel_id: int,
    data: PanelUpdate,
    service: PanelService = Depends(_get_service),
):
    """Rename or resize a panel."""
    panel = await service.update(panel_id, data)
    return PanelResponse.model_validate(panel)


@router.delete("/panels/{panel_id}", status_code=204)
async def delete_panel(
    panel_id: int,
    service: PanelService = Depends(_get_service),
):
    """Delete a panel with its breakers and circuits. The last panel stays."""
    await service.delete(panel_id)
