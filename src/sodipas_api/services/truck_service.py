"""Truck lifecycle — registration, status transitions and unloading."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.database.repository import TruckRepository
from sodipas_api.errors import InvalidStatus, NotFound, ValidationError
from sodipas_api.models.base import utcnow
from sodipas_api.models.logistics import (
    STATUS_ARRIVED,
    STATUS_REGISTERED,
    STATUS_UNLOADED,
    TRUCK_STATUSES,
    Truck,
)
from sodipas_api.models.user import ROLE_ADMIN, ROLE_MANAGER, User
from sodipas_api.schemas import TruckCreate, UnloadItem
from sodipas_api.services.activity import AuditLogger, Notifier
from sodipas_api.services.auth_guard import authorize, hangar_scope
from sodipas_api.services.session_manager import Clock
from sodipas_api.services.stock_service import CREATED, StockDelta, StockService

logger = logging.getLogger(__name__)

TRUCK_OPERATORS = (ROLE_ADMIN, ROLE_MANAGER)

_REQUIRED_FIELDS = ("origin", "driver", "phone", "hangar")


class TruckService:
    """Moves a truck through ``registered → arrived → unloading → unloaded``.

    Registration and unloading both reconcile goods into hangar stock
    through :class:`StockService`; every change is announced to admins
    and written to the audit trail in the same transaction.
    """

    def __init__(self, session: AsyncSession, clock: Clock = utcnow) -> None:
        self._trucks = TruckRepository(session)
        self._stock = StockService(session, clock=clock)
        self._notifier = Notifier(session)
        self._audit = AuditLogger(session)
        self._now = clock

    # ── Queries ──────────────────────────────────────────

    async def list_trucks(self, user: User) -> Sequence[Truck]:
        return await self._trucks.list(hangar_scope(user))

    async def get_truck(self, user: User, truck_id: str) -> Truck:
        """Load a truck, hiding trucks outside the user's hangar as not found."""
        truck = await self._trucks.get(truck_id)
        scope = hangar_scope(user)
        if truck is None or (scope is not None and truck.hangar != scope):
            raise NotFound("Truck not found")
        return truck

    # ── Lifecycle ────────────────────────────────────────

    async def register_truck(self, user: User, payload: TruckCreate) -> Truck:
        authorize(user, TRUCK_OPERATORS)

        missing = [f for f in _REQUIRED_FIELDS if not (getattr(payload, f) or "").strip()]
        if not payload.articles:
            missing.append("articles")
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        truck = await self._trucks.add(
            Truck(
                origin=payload.origin.strip(),
                driver=payload.driver.strip(),
                phone=payload.phone.strip(),
                hangar=payload.hangar.strip(),
                articles=[article.as_record() for article in payload.articles],
                status=STATUS_REGISTERED,
                registered_at=self._now(),
                registered_by=user.name,
            )
        )

        for article in payload.articles:
            await self._stock.reconcile(
                truck,
                article.name,
                article.quantity,
                unit=article.unit,
                unit_price=article.unit_price,
            )

        logger.info("Truck %s registered for %s by %s", truck.id, truck.hangar, user.email)
        await self._notifier.notify(
            "truck_registered",
            "New truck registered",
            f"Truck from {truck.origin} (driver {truck.driver}) expected at {truck.hangar}",
        )
        await self._audit.record(
            user.id,
            user.name,
            "CREATE_TRUCK",
            f"Truck {truck.id} from {truck.origin} with {len(truck.articles)} article(s) "
            f"for {truck.hangar}",
        )
        return truck

    async def set_status(self, user: User, truck_id: str, status: str) -> Truck:
        authorize(user, TRUCK_OPERATORS)
        truck = await self.get_truck(user, truck_id)

        status = (status or "").strip().lower()
        if status not in TRUCK_STATUSES:
            raise InvalidStatus(
                f"Unknown status '{status}'; expected one of {', '.join(TRUCK_STATUSES)}"
            )
        if TRUCK_STATUSES.index(status) < TRUCK_STATUSES.index(truck.status):
            raise InvalidStatus(f"A truck cannot go back from '{truck.status}' to '{status}'")
        if status == truck.status:
            return truck

        now = self._now()
        previous, truck.status, truck.updated_at = truck.status, status, now
        if status == STATUS_ARRIVED:
            truck.arrived_at = now
        elif status == STATUS_UNLOADED:
            truck.unloaded_at = now

        logger.info("Truck %s: %s → %s", truck.id, previous, status)
        await self._notifier.notify(
            "truck_status",
            "Truck status updated",
            f"Truck from {truck.origin} at {truck.hangar} is now {status}",
        )
        await self._audit.record(
            user.id, user.name, "UPDATE_TRUCK_STATUS", f"Truck {truck.id}: {previous} → {status}"
        )
        return truck

    async def unload_truck(
        self, user: User, truck_id: str, items: Sequence[UnloadItem] | None
    ) -> tuple[Truck, list[StockDelta]]:
        """Mark the truck unloaded and book *items* into its hangar's stock."""
        authorize(user, TRUCK_OPERATORS)
        truck = await self.get_truck(user, truck_id)
        if items is None or not isinstance(items, (list, tuple)):
            raise ValidationError("items must be a list of {name, quantity}")

        if truck.status == STATUS_UNLOADED:
            logger.warning("Truck %s is already unloaded; booking items again", truck.id)

        now = self._now()
        truck.status = STATUS_UNLOADED
        truck.unloaded_at = now
        truck.unloaded_by = user.name
        truck.updated_at = now

        deltas = []
        for item in items:
            article = _find_article(truck, item.name)
            unit_price = item.unit_price
            if unit_price is None and article is not None:
                unit_price = article.get("unitPrice")
            deltas.append(
                await self._stock.reconcile(
                    truck,
                    item.name,
                    item.quantity,
                    unit=item.unit or (article or {}).get("unit"),
                    unit_price=unit_price,
                    value=item.value,
                )
            )

        created = sum(1 for d in deltas if d.action == CREATED)
        logger.info(
            "Truck %s unloaded at %s: %d item(s), %d new stock row(s)",
            truck.id,
            truck.hangar,
            len(deltas),
            created,
        )
        await self._notifier.notify(
            "truck_unloaded",
            "Truck unloaded",
            f"Truck from {truck.origin} unloaded at {truck.hangar} by {user.name}",
        )
        await self._audit.record(
            user.id,
            user.name,
            "UNLOAD_TRUCK",
            f"Truck {truck.id}: {len(deltas)} item(s) booked into {truck.hangar}",
        )
        return truck, deltas

    async def delete_truck(self, user: User, truck_id: str) -> Truck:
        authorize(user, (ROLE_ADMIN,))
        truck = await self._trucks.get(truck_id)
        if truck is None:
            raise NotFound("Truck not found")
        await self._trucks.delete(truck)
        await self._audit.record(user.id, user.name, "DELETE_TRUCK", f"Truck {truck.id} deleted")
        return truck


def _find_article(truck: Truck, name: str) -> dict[str, Any] | None:
    wanted = name.strip()
    return next((a for a in truck.articles or [] if a.get("name") == wanted), None)
