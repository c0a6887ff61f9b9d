"""Pydantic request/response models shared by the routers and services.

Wire format is camelCase (``unitPrice``, ``requiresOtp`` …); Python code
uses the snake_case attribute names.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# ── Generic envelopes ────────────────────────────────────

class MessageResponse(CamelModel):
    success: bool = True
    message: str


class SuccessResponse(CamelModel):
    success: bool = True


# ── Users ────────────────────────────────────────────────

class UserProfile(CamelModel):
    """What a client may know about the signed-in user."""

    id: str
    email: str
    name: str
    role: str
    hangar: str | None = None
    phone: str | None = None


class UserOut(UserProfile):
    is_active: bool
    created_at: datetime
    updated_at: datetime | None = None


class UserCreate(CamelModel):
    email: str = Field(min_length=3)
    name: str = Field(min_length=1)
    role: str
    hangar: str | None = None
    phone: str | None = None
    is_active: bool = True


class UserUpdate(CamelModel):
    email: str | None = None
    name: str | None = None
    role: str | None = None
    hangar: str | None = None
    phone: str | None = None
    is_active: bool | None = None


# ── Auth ─────────────────────────────────────────────────

class EmailRequest(CamelModel):
    email: str = Field(min_length=1)


class VerifyOtpRequest(CamelModel):
    email: str = Field(min_length=1)
    otp: str = Field(min_length=1)


class LoginResponse(CamelModel):
    success: bool = True
    requires_otp: bool = True
    user: UserProfile
    debug_otp: str | None = Field(default=None, alias="_debug_otp")


class ResendOtpResponse(CamelModel):
    success: bool = True
    message: str
    debug_otp: str | None = Field(default=None, alias="_debug_otp")


class VerifyOtpResponse(CamelModel):
    success: bool = True
    token: str
    user: UserProfile


class MeResponse(CamelModel):
    success: bool = True
    user: UserProfile


# ── Trucks & stock ───────────────────────────────────────

class ArticleIn(CamelModel):
    name: str = Field(min_length=1)
    quantity: float
    unit: str | None = None
    unit_price: float = 0

    def as_record(self) -> dict[str, Any]:
        """The camelCase dict stored in ``Truck.articles``."""
        return {
            "name": self.name.strip(),
            "quantity": self.quantity,
            "unit": self.unit,
            "unitPrice": self.unit_price,
        }


class TruckCreate(CamelModel):
    """Registration payload; required fields are checked by the service."""

    origin: str | None = None
    driver: str | None = None
    phone: str | None = None
    hangar: str | None = None
    articles: list[ArticleIn] | None = None


class TruckStatusUpdate(CamelModel):
    status: str


class UnloadItem(CamelModel):
    name: str = Field(min_length=1)
    quantity: float
    unit: str | None = None
    unit_price: float | None = None
    value: float | None = None


class UnloadRequest(CamelModel):
    items: list[UnloadItem]


class TruckOut(CamelModel):
    id: str
    origin: str
    driver: str
    phone: str
    articles: list[dict[str, Any]]
    hangar: str
    status: str
    registered_at: datetime
    registered_by: str | None = None
    arrived_at: datetime | None = None
    unloaded_at: datetime | None = None
    unloaded_by: str | None = None


class TruckResponse(CamelModel):
    success: bool = True
    truck: TruckOut


class StockOut(CamelModel):
    id: str
    name: str
    hangar: str
    quantity: float
    unit: str
    unit_price: float
    total_value: float
    threshold: float
    origin: str | None = None
    supplier: str | None = None
    last_truck_id: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class StockUpdate(CamelModel):
    quantity: float | None = None
    unit: str | None = None
    unit_price: float | None = None
    threshold: float | None = None


class StockDeltaOut(CamelModel):
    stock_id: str
    name: str
    hangar: str
    action: Literal["created", "updated"]
    quantity_added: float
    quantity: float
    total_value: float


class UnloadResponse(CamelModel):
    success: bool = True
    truck: TruckOut
    stock_updates: list[StockDeltaOut]


# ── Clients & managers ───────────────────────────────────

class ClientIn(CamelModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: str | None = None
    address: str | None = None
    hangar: str | None = None


class ClientUpdate(CamelModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    hangar: str | None = None


class ClientOut(ClientIn):
    id: str
    created_at: datetime
    updated_at: datetime | None = None


class ManagerIn(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    email: str | None = None
    hangar: str | None = None


class ManagerUpdate(ManagerIn):
    is_active: bool | None = None


class ManagerOut(CamelModel):
    id: str
    first_name: str
    last_name: str
    name: str
    phone: str
    email: str
    hangar: str
    is_active: bool
    created_at: datetime
    updated_at: datetime | None = None


class ManagerCreatedResponse(CamelModel):
    success: bool = True
    manager: ManagerOut
    message: str


# ── Activity ─────────────────────────────────────────────

class NotificationOut(CamelModel):
    id: str
    type: str
    title: str
    message: str
    read: bool
    created_at: datetime


class AuditLogIn(CamelModel):
    action: str = Field(min_length=1)
    details: str = ""


class AuditLogOut(CamelModel):
    id: str
    user_id: str | None = None
    user_name: str | None = None
    action: str
    details: str
    timestamp: datetime


# ── Cash desk ────────────────────────────────────────────

class TransactionIn(CamelModel):
    type: Literal["sale", "payment", "expense"]
    amount: float = Field(gt=0)
    description: str | None = None
    client_id: str | None = None


class TransactionOut(CamelModel):
    id: str
    type: str
    amount: float
    description: str | None = None
    client_id: str | None = None
    cashier_id: str
    hangar: str | None = None
    closure_id: str | None = None
    created_at: datetime


class BalanceOut(CamelModel):
    total_in: float
    total_out: float
    balance: float
    transaction_count: int


class ClosureOut(CamelModel):
    id: str
    cashier_id: str
    cashier_name: str
    hangar: str | None = None
    total_in: float
    total_out: float
    balance: float
    transaction_count: int
    closed_at: datetime
