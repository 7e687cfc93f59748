"""Circuit router: CRUD endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.services.circuit_service import CircuitService
from app.schemas.circuit import CircuitCreate, CircuitResponse, CircuitUpdate

router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> CircuitService:
    return CircuitService(db)


@router.get("/circuits", response_model=list[CircuitResponse])
async def list_circuits(service: CircuitService = Depends(_get_service)):
    """List every circuit with its room and breaker address."""
    return await service.list_all()


@router.post("/circuits", response_model=CircuitResponse, status_code=201)
async def create_circuit(
    data: CircuitCreate,
    service: CircuitService = Depends(_get_service),
):
    return await service.create(data)


@router.get("/circuits/{circuit_id}", response_model=CircuitResponse)
async def get_circuit(
    circuit_id: int,
    service: CircuitService = Depends(_get_service),
):
    return await service.get_detail(circuit_id)


@router.put("/circuits/{circuit_id}", response_model=CircuitResponse)
async def update_circuit(
    circuit_id: int,
    data: CircuitUpdate,
    service: CircuitService = Depends(_get_service),
):
    return await service.update(circuit_id, data)


@router.delete("/circuits/{circuit_id}", status_code=204)
async def delete_circuit(
    circuit_id: int,
    service: CircuitService = Depends(_get_service),
):
    """Delete a circuit. A breaker left without circuits is removed too."""
    await service.delete(circuit_id)
