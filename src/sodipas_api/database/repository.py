"""Typed repositories — the data access layer, one class per table."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Generic, TypeVar

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.models.auth import AuthSession, OtpCode
from sodipas_api.models.base import Base
from sodipas_api.models.logistics import Stock, Truck
from sodipas_api.models.records import (
    AuditLog,
    CashTransaction,
    Client,
    Closure,
    Manager,
    Notification,
)
from sodipas_api.models.user import User

ModelT = TypeVar("ModelT", bound=Base)


class _Repository(Generic[ModelT]):
    """Shared get/add/delete for a single mapped class."""

    model: type[ModelT]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, record_id: str) -> ModelT | None:
        return await self._session.get(self.model, str(record_id))

    async def add(self, record: ModelT) -> ModelT:
        self._session.add(record)
        await self._session.flush()
        return record

    async def delete(self, record: ModelT) -> None:
        await self._session.delete(record)
        await self._session.flush()


class UserRepository(_Repository[User]):
    """Encapsulates all database queries related to users."""

    model = User

    async def find_by_email(self, email: str, *, active_only: bool = True) -> User | None:
        """Look up a user by e-mail, case-insensitively."""
        stmt = select(User).where(User.email == email.strip().lower())
        if active_only:
            stmt = stmt.where(User.is_active.is_(True))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(self) -> Sequence[User]:
        result = await self._session.execute(select(User).order_by(User.created_at))
        return result.scalars().all()


class OtpCodeRepository(_Repository[OtpCode]):
    model = OtpCode

    async def find(self, email: str) -> OtpCode | None:
        return await self._session.get(OtpCode, email.strip().lower())

    async def replace(self, code: OtpCode) -> OtpCode:
        """Store *code*, discarding any previous code for the same email."""
        await self.discard(code.email)
        return await self.add(code)

    async def discard(self, email: str) -> None:
        code = await self.find(email)
        if code is not None:
            await self.delete(code)


class SessionRepository(_Repository[AuthSession]):
    model = AuthSession

    async def find(self, token: str) -> AuthSession | None:
        return await self._session.get(AuthSession, token)

    async def exists(self, token: str) -> bool:
        result = await self._session.execute(
            select(AuthSession.token).where(AuthSession.token == token)
        )
        return result.first() is not None

    async def revoke(self, token: str) -> bool:
        """Delete the session for *token*; return whether one existed."""
        auth_session = await self.find(token)
        if auth_session is None:
            return False
        await self.delete(auth_session)
        return True


class TruckRepository(_Repository[Truck]):
    model = Truck

    async def list(self, hangar: str | None = None) -> Sequence[Truck]:
        """All trucks, newest first, optionally restricted to one hangar."""
        stmt = select(Truck).order_by(Truck.registered_at.desc())
        if hangar is not None:
            stmt = stmt.where(Truck.hangar == hangar)
        result = await self._session.execute(stmt)
        return result.scalars().all()


class StockRepository(_Repository[Stock]):
    model = Stock

    async def find(self, name: str, hangar: str) -> Stock | None:
        """Look up the single stock row for the ``(name, hangar)`` pair."""
        stmt = select(Stock).where(Stock.name == name, Stock.hangar == hangar)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(self, hangar: str | None = None) -> Sequence[Stock]:
        stmt = select(Stock).order_by(Stock.hangar, Stock.name)
        if hangar is not None:
            stmt = stmt.where(Stock.hangar == hangar)
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def list_low(self, hangar: str | None = None) -> Sequence[Stock]:
        """Rows at or below their alert threshold."""
        stmt = select(Stock).where(Stock.quantity <= Stock.threshold).order_by(Stock.quantity)
        if hangar is not None:
            stmt = stmt.where(Stock.hangar == hangar)
        result = await self._session.execute(stmt)
        return result.scalars().all()


class ClientRepository(_Repository[Client]):
    model = Client

    async def list(self, hangar: str | None = None) -> Sequence[Client]:
        stmt = select(Client).order_by(Client.name)
        if hangar is not None:
            stmt = stmt.where(Client.hangar == hangar)
        result = await self._session.execute(stmt)
        return result.scalars().all()


class ManagerRepository(_Repository[Manager]):
    model = Manager

    async def find_by_email(self, email: str) -> Manager | None:
        stmt = select(Manager).where(Manager.email == email.strip().lower())
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(self) -> Sequence[Manager]:
        result = await self._session.execute(select(Manager).order_by(Manager.name))
        return result.scalars().all()


class NotificationRepository(_Repository[Notification]):
    model = Notification

    async def list(self) -> Sequence[Notification]:
        stmt = select(Notification).order_by(Notification.created_at.desc())
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def mark_all_read(self) -> None:
        await self._session.execute(
            update(Notification).where(Notification.read.is_(False)).values(read=True)
        )


class AuditLogRepository(_Repository[AuditLog]):
    model = AuditLog

    async def list(self) -> Sequence[AuditLog]:
        result = await self._session.execute(
            select(AuditLog).order_by(AuditLog.timestamp.desc())
        )
        return result.scalars().all()


class TransactionRepository(_Repository[CashTransaction]):
    model = CashTransaction

    async def list_for_cashier(
        self, cashier_id: str, *, open_only: bool = False
    ) -> Sequence[CashTransaction]:
        stmt = (
            select(CashTransaction)
            .where(CashTransaction.cashier_id == cashier_id)
            .order_by(CashTransaction.created_at.desc())
        )
        if open_only:
            stmt = stmt.where(CashTransaction.closure_id.is_(None))
        result = await self._session.execute(stmt)
        return result.scalars().all()


class ClosureRepository(_Repository[Closure]):
    model = Closure

    async def list_for_cashier(self, cashier_id: str) -> Sequence[Closure]:
        stmt = (
            select(Closure)
            .where(Closure.cashier_id == cashier_id)
            .order_by(Closure.closed_at.desc())
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()
