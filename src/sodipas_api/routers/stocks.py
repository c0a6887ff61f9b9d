"""Stocks router — hangar inventory."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.database.engine import get_session, hold_write_lock
from sodipas_api.models.user import User
from sodipas_api.routers.dependencies import current_user, get_clock
from sodipas_api.schemas import StockOut, StockUpdate
from sodipas_api.services.session_manager import Clock
from sodipas_api.services.stock_service import StockService

router = APIRouter(prefix="/stocks", tags=["stocks"])


def get_stock_service(
    session: AsyncSession = Depends(get_session), clock: Clock = Depends(get_clock)
) -> StockService:
    return StockService(session, clock=clock)


@router.get("", response_model=list[StockOut])
async def list_stocks(
    user: User = Depends(current_user), service: StockService = Depends(get_stock_service)
):
    """Stock rows visible to the caller (own hangar unless admin)."""
    return await service.list_stocks(user)


@router.get("/alerts", response_model=list[StockOut])
async def list_stock_alerts(
    user: User = Depends(current_user), service: StockService = Depends(get_stock_service)
):
    """Rows whose quantity has dropped to their threshold or below."""
    return await service.list_alerts(user)


@router.get("/{stock_id}", response_model=StockOut)
async def get_stock(
    stock_id: str,
    user: User = Depends(current_user),
    service: StockService = Depends(get_stock_service),
):
    return await service.get_stock(user, stock_id)


@router.put("/{stock_id}", response_model=StockOut, dependencies=[Depends(hold_write_lock)])
async def update_stock(
    stock_id: str,
    body: StockUpdate,
    user: User = Depends(current_user),
    service: StockService = Depends(get_stock_service),
):
    return await service.update_stock(user, stock_id, body)


@router.delete("/{stock_id}", response_model=StockOut, dependencies=[Depends(hold_write_lock)])
async def delete_stock(
    stock_id: str,
    user: User = Depends(current_user),
    service: StockService = Depends(get_stock_service),
):
    return await service.delete_stock(user, stock_id)
