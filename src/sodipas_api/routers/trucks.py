"""Trucks router — registration, status changes and unloading."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.database.engine import get_session, hold_write_lock
from sodipas_api.models.user import User
from sodipas_api.routers.dependencies import current_user, get_clock
from sodipas_api.schemas import (
    StockDeltaOut,
    TruckCreate,
    TruckOut,
    TruckResponse,
    TruckStatusUpdate,
    UnloadRequest,
    UnloadResponse,
)
from sodipas_api.services.session_manager import Clock
from sodipas_api.services.truck_service import TruckService

router = APIRouter(prefix="/trucks", tags=["trucks"])


def get_truck_service(
    session: AsyncSession = Depends(get_session), clock: Clock = Depends(get_clock)
) -> TruckService:
    return TruckService(session, clock=clock)


@router.get("", response_model=list[TruckOut])
async def list_trucks(
    user: User = Depends(current_user), service: TruckService = Depends(get_truck_service)
):
    """Trucks visible to the caller (own hangar unless admin)."""
    return await service.list_trucks(user)


@router.get("/{truck_id}", response_model=TruckOut)
async def get_truck(
    truck_id: str,
    user: User = Depends(current_user),
    service: TruckService = Depends(get_truck_service),
):
    return await service.get_truck(user, truck_id)


@router.post(
    "",
    response_model=TruckResponse,
    status_code=201,
    dependencies=[Depends(hold_write_lock)],
)
async def register_truck(
    body: TruckCreate,
    user: User = Depends(current_user),
    service: TruckService = Depends(get_truck_service),
):
    truck = await service.register_truck(user, body)
    return TruckResponse(truck=TruckOut.model_validate(truck))


@router.put(
    "/{truck_id}/status", response_model=TruckResponse, dependencies=[Depends(hold_write_lock)]
)
async def set_truck_status(
    truck_id: str,
    body: TruckStatusUpdate,
    user: User = Depends(current_user),
    service: TruckService = Depends(get_truck_service),
):
    truck = await service.set_status(user, truck_id, body.status)
    return TruckResponse(truck=TruckOut.model_validate(truck))


@router.post(
    "/{truck_id}/unload", response_model=UnloadResponse, dependencies=[Depends(hold_write_lock)]
)
async def unload_truck(
    truck_id: str,
    body: UnloadRequest,
    user: User = Depends(current_user),
    service: TruckService = Depends(get_truck_service),
):
    truck, deltas = await service.unload_truck(user, truck_id, body.items)
    return UnloadResponse(
        truck=TruckOut.model_validate(truck),
        stock_updates=[StockDeltaOut(**delta.as_dict()) for delta in deltas],
    )


@router.delete("/{truck_id}", response_model=TruckOut, dependencies=[Depends(hold_write_lock)])
async def delete_truck(
    truck_id: str,
    user: User = Depends(current_user),
    service: TruckService = Depends(get_truck_service),
):
    return await service.delete_truck(user, truck_id)
