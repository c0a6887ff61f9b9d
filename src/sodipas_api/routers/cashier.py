"""Cashier router — cash desk transactions and closures (cashiers only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.database.engine import get_session, hold_write_lock
from sodipas_api.models.user import User
from sodipas_api.routers.dependencies import current_user, get_clock
from sodipas_api.schemas import BalanceOut, ClosureOut, TransactionIn, TransactionOut
from sodipas_api.services.cashier_service import CashierService
from sodipas_api.services.session_manager import Clock

router = APIRouter(prefix="/cashier", tags=["cashier"])


def get_cashier_service(
    session: AsyncSession = Depends(get_session), clock: Clock = Depends(get_clock)
) -> CashierService:
    return CashierService(session, clock=clock)


@router.post(
    "/transactions",
    response_model=TransactionOut,
    status_code=201,
    dependencies=[Depends(hold_write_lock)],
)
async def record_transaction(
    body: TransactionIn,
    user: User = Depends(current_user),
    service: CashierService = Depends(get_cashier_service),
):
    return await service.record_transaction(user, body)


@router.get("/transactions", response_model=list[TransactionOut])
async def list_transactions(
    user: User = Depends(current_user), service: CashierService = Depends(get_cashier_service)
):
    return await service.list_transactions(user)


@router.get("/balance", response_model=BalanceOut)
async def current_balance(
    user: User = Depends(current_user), service: CashierService = Depends(get_cashier_service)
):
    totals = await service.current_balance(user)
    return BalanceOut(
        total_in=totals.total_in,
        total_out=totals.total_out,
        balance=totals.balance,
        transaction_count=totals.transaction_count,
    )


@router.post(
    "/closures",
    response_model=ClosureOut,
    status_code=201,
    dependencies=[Depends(hold_write_lock)],
)
async def close_day(
    user: User = Depends(current_user), service: CashierService = Depends(get_cashier_service)
):
    return await service.close_day(user)


@router.get("/closures", response_model=list[ClosureOut])
async def list_closures(
    user: User = Depends(current_user), service: CashierService = Depends(get_cashier_service)
):
    return await service.list_closures(user)
