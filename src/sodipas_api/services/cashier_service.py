"""Cash desk — cashier transactions and end-of-day closures.

Balances are computed on demand from the cashier's open transactions;
nothing is maintained incrementally.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.database.repository import ClosureRepository, TransactionRepository
from sodipas_api.errors import ValidationError
from sodipas_api.models.base import utcnow
from sodipas_api.models.records import CashTransaction, Closure
from sodipas_api.models.user import ROLE_CASHIER, User
from sodipas_api.schemas import TransactionIn
from sodipas_api.services.activity import AuditLogger, Notifier
from sodipas_api.services.auth_guard import authorize
from sodipas_api.services.session_manager import Clock

logger = logging.getLogger(__name__)

CASHIERS = (ROLE_CASHIER,)
INFLOW_TYPES = frozenset({"sale", "payment"})


@dataclass
class Balance:
    total_in: float
    total_out: float
    transaction_count: int

    @property
    def balance(self) -> float:
        return self.total_in - self.total_out


def summarize(transactions: Iterable[CashTransaction]) -> Balance:
    total_in = total_out = 0.0
    count = 0
    for tx in transactions:
        count += 1
        if tx.type in INFLOW_TYPES:
            total_in += tx.amount
        else:
            total_out += tx.amount
    return Balance(total_in=total_in, total_out=total_out, transaction_count=count)


class CashierService:
    def __init__(self, session: AsyncSession, clock: Clock = utcnow) -> None:
        self._transactions = TransactionRepository(session)
        self._closures = ClosureRepository(session)
        self._notifier = Notifier(session)
        self._audit = AuditLogger(session)
        self._now = clock

    async def record_transaction(self, cashier: User, payload: TransactionIn) -> CashTransaction:
        authorize(cashier, CASHIERS)
        tx = await self._transactions.add(
            CashTransaction(
                type=payload.type,
                amount=payload.amount,
                description=payload.description,
                client_id=payload.client_id,
                cashier_id=cashier.id,
                hangar=cashier.hangar,
                created_at=self._now(),
            )
        )
        logger.info("Cash %s of %.2f by %s", tx.type, tx.amount, cashier.email)
        return tx

    async def list_transactions(self, cashier: User) -> Sequence[CashTransaction]:
        authorize(cashier, CASHIERS)
        return await self._transactions.list_for_cashier(cashier.id)

    async def current_balance(self, cashier: User) -> Balance:
        authorize(cashier, CASHIERS)
        return summarize(await self._transactions.list_for_cashier(cashier.id, open_only=True))

    async def close_day(self, cashier: User) -> Closure:
        """Fold every open transaction of *cashier* into a new closure."""
        authorize(cashier, CASHIERS)
        open_txs = await self._transactions.list_for_cashier(cashier.id, open_only=True)
        if not open_txs:
            raise ValidationError("No open transactions to close")

        totals = summarize(open_txs)
        closure = await self._closures.add(
            Closure(
                cashier_id=cashier.id,
                cashier_name=cashier.name,
                hangar=cashier.hangar,
                total_in=totals.total_in,
                total_out=totals.total_out,
                balance=totals.balance,
                transaction_count=totals.transaction_count,
                closed_at=self._now(),
            )
        )
        for tx in open_txs:
            tx.closure_id = closure.id

        details = (
            f"{cashier.name} closed {totals.transaction_count} transaction(s), "
            f"balance {totals.balance:.2f}"
        )
        await self._notifier.notify("cash_closure", "Cash desk closed", details)
        await self._audit.record(cashier.id, cashier.name, "CASH_CLOSURE", details)
        return closure

    async def list_closures(self, cashier: User) -> Sequence[Closure]:
        authorize(cashier, CASHIERS)
        return await self._closures.list_for_cashier(cashier.id)
