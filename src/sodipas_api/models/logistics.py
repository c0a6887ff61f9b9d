"""Trucks and the warehouse stock they feed."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Float, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from sodipas_api.models.base import Base, UTCDateTime, new_id, utcnow

STATUS_REGISTERED = "registered"
STATUS_ARRIVED = "arrived"
STATUS_UNLOADING = "unloading"
STATUS_UNLOADED = "unloaded"

# Forward order of the truck lifecycle.
TRUCK_STATUSES = (STATUS_REGISTERED, STATUS_ARRIVED, STATUS_UNLOADING, STATUS_UNLOADED)


class Truck(Base):
    """A shipment on its way to (or sitting in) a hangar.

    ``articles`` keeps the ordered list of ``{name, quantity, unit, unitPrice}``
    declared at registration.
    """

    __tablename__ = "trucks"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    origin: Mapped[str] = mapped_column(String(256), nullable=False)
    driver: Mapped[str] = mapped_column(String(256), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    articles: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    hangar: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_REGISTERED)
    registered_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    registered_by: Mapped[str | None] = mapped_column(String(256), nullable=True)
    arrived_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    unloaded_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    unloaded_by: Mapped[str | None] = mapped_column(String(256), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (
        Index("ix_trucks_hangar", "hangar"),
        Index("ix_trucks_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Truck id={self.id} hangar={self.hangar!r} status={self.status!r}>"


class Stock(Base):
    """Inventory of one article in one hangar.

    ``(name, hangar)`` is unique: reconciliation always finds or creates
    by that pair. ``total_value`` is the running monetary value and
    ``unit_price`` is derived from it.
    """

    __tablename__ = "stocks"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    hangar: Mapped[str] = mapped_column(String(64), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    unit: Mapped[str] = mapped_column(String(32), nullable=False, default="unit")
    unit_price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    total_value: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    threshold: Mapped[float] = mapped_column(Float, nullable=False, default=50)
    origin: Mapped[str | None] = mapped_column(String(256), nullable=True)
    supplier: Mapped[str | None] = mapped_column(String(256), nullable=True)
    last_truck_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("name", "hangar", name="uq_stocks_name_hangar"),
        Index("ix_stocks_hangar", "hangar"),
    )

    def __repr__(self) -> str:
        return f"<Stock name={self.name!r} hangar={self.hangar!r} quantity={self.quantity}>"
