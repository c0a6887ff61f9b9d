"""Stock service — hangar inventory and reconciliation of incoming goods."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.config import Settings, settings
from sodipas_api.database.repository import StockRepository
from sodipas_api.errors import NotFound
from sodipas_api.models.base import utcnow
from sodipas_api.models.logistics import Stock, Truck
from sodipas_api.models.user import ROLE_ADMIN, ROLE_MANAGER, User
from sodipas_api.schemas import StockUpdate
from sodipas_api.services.auth_guard import authorize, hangar_scope
from sodipas_api.services.session_manager import Clock

logger = logging.getLogger(__name__)

STOCK_EDITORS = (ROLE_ADMIN, ROLE_MANAGER)

CREATED = "created"
UPDATED = "updated"


@dataclass
class StockDelta:
    """What one reconciled article did to its stock row."""

    stock: Stock
    action: str
    quantity_added: float

    def as_dict(self) -> dict:
        return {
            "stock_id": self.stock.id,
            "name": self.stock.name,
            "hangar": self.stock.hangar,
            "action": self.action,
            "quantity_added": self.quantity_added,
            "quantity": self.stock.quantity,
            "total_value": self.stock.total_value,
        }


class StockService:
    def __init__(
        self,
        session: AsyncSession,
        clock: Clock = utcnow,
        config: Settings | None = None,
    ) -> None:
        self._stocks = StockRepository(session)
        self._now = clock
        self._config = config or settings

    # ── Reconciliation ───────────────────────────────────

    async def reconcile(
        self,
        truck: Truck,
        name: str,
        quantity: float,
        *,
        unit: str | None = None,
        unit_price: float | None = None,
        value: float | None = None,
    ) -> StockDelta:
        """Merge *quantity* of *name* into the truck's hangar stock.

        The row for ``(name, truck.hangar)`` is found or created. Value added
        is *value* when given, else ``quantity * unit_price``, falling back
        to the row's current unit price.
        """
        name = name.strip()
        stock = await self._stocks.find(name, truck.hangar)

        if value is None:
            if unit_price is None:
                unit_price = stock.unit_price if stock is not None else 0
            value = quantity * unit_price

        if stock is not None:
            stock.quantity += quantity
            stock.total_value += value
            if stock.quantity:
                stock.unit_price = stock.total_value / stock.quantity
            stock.last_truck_id = truck.id
            stock.updated_at = self._now()
            logger.info(
                "Stock %s @ %s: +%s → %s", name, truck.hangar, quantity, stock.quantity
            )
            return StockDelta(stock=stock, action=UPDATED, quantity_added=quantity)

        stock = await self._stocks.add(
            Stock(
                name=name,
                hangar=truck.hangar,
                quantity=quantity,
                unit=unit or "unit",
                unit_price=value / quantity if quantity else (unit_price or 0),
                total_value=value,
                threshold=self._config.default_stock_threshold,
                origin=truck.origin,
                supplier=truck.driver,
                last_truck_id=truck.id,
                created_at=self._now(),
            )
        )
        logger.info("Stock %s @ %s created with %s", name, truck.hangar, quantity)
        return StockDelta(stock=stock, action=CREATED, quantity_added=quantity)

    # ── Queries & edits ──────────────────────────────────

    async def list_stocks(self, user: User) -> Sequence[Stock]:
        return await self._stocks.list(hangar_scope(user))

    async def list_alerts(self, user: User) -> Sequence[Stock]:
        return await self._stocks.list_low(hangar_scope(user))

    async def get_stock(self, user: User, stock_id: str) -> Stock:
        stock = await self._stocks.get(stock_id)
        scope = hangar_scope(user)
        if stock is None or (scope is not None and stock.hangar != scope):
            raise NotFound("Stock not found")
        return stock

    async def update_stock(self, user: User, stock_id: str, changes: StockUpdate) -> Stock:
        authorize(user, STOCK_EDITORS)
        stock = await self.get_stock(user, stock_id)
        for field, new_value in changes.model_dump(exclude_unset=True).items():
            if new_value is not None:
                setattr(stock, field, new_value)
        stock.total_value = stock.quantity * stock.unit_price
        stock.updated_at = self._now()
        return stock

    async def delete_stock(self, user: User, stock_id: str) -> Stock:
        authorize(user, STOCK_EDITORS)
        stock = await self.get_stock(user, stock_id)
        await self._stocks.delete(stock)
        logger.info("Stock %s @ %s deleted by %s", stock.name, stock.hangar, user.email)
        return stock
