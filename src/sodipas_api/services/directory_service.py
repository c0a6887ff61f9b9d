"""Directory service — staff accounts, clients and hangar managers."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.database.repository import (
    ClientRepository,
    ManagerRepository,
    UserRepository,
)
from sodipas_api.errors import Conflict, NotFound, ValidationError
from sodipas_api.models.base import utcnow
from sodipas_api.models.records import Client, Manager
from sodipas_api.models.user import ROLE_ADMIN, ROLES, User
from sodipas_api.schemas import (
    ClientIn,
    ClientUpdate,
    ManagerIn,
    ManagerUpdate,
    UserCreate,
    UserUpdate,
)
from sodipas_api.services.activity import AuditLogger, Notifier
from sodipas_api.services.auth_guard import authorize, hangar_scope
from sodipas_api.services.session_manager import Clock

logger = logging.getLogger(__name__)

ADMINS = (ROLE_ADMIN,)


def _check_role(role: str) -> str:
    role = role.strip().lower()
    if role not in ROLES:
        raise ValidationError(f"Unknown role '{role}'; expected one of {', '.join(ROLES)}")
    return role


def _require_text(changes: dict, fields: tuple[str, ...]) -> None:
    """Reject nulls and blanks for *fields* present in a partial update."""
    blank = [f for f in fields if f in changes and not (changes[f] or "").strip()]
    if blank:
        raise ValidationError(f"Fields cannot be empty: {', '.join(blank)}")
    for field in fields:
        if field in changes:
            changes[field] = changes[field].strip()


class UserDirectory:
    """Admin-only management of sign-in accounts."""

    def __init__(self, session: AsyncSession, clock: Clock = utcnow) -> None:
        self._users = UserRepository(session)
        self._audit = AuditLogger(session)
        self._now = clock

    async def list_users(self, admin: User) -> Sequence[User]:
        authorize(admin, ADMINS)
        return await self._users.list()

    async def get_user(self, admin: User, user_id: str) -> User:
        authorize(admin, ADMINS)
        user = await self._users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    async def create_user(self, admin: User, payload: UserCreate) -> User:
        authorize(admin, ADMINS)
        email = payload.email.strip().lower()
        if await self._users.find_by_email(email, active_only=False):
            raise Conflict("A user with this email already exists")

        user = await self._users.add(
            User(
                email=email,
                name=payload.name.strip(),
                role=_check_role(payload.role),
                hangar=payload.hangar,
                phone=payload.phone,
                is_active=payload.is_active,
                created_at=self._now(),
            )
        )
        await self._audit.record(
            admin.id, admin.name, "CREATE_USER", f"Account {user.email} ({user.role})"
        )
        return user

    async def update_user(self, admin: User, user_id: str, payload: UserUpdate) -> User:
        user = await self.get_user(admin, user_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("is_active", False) is None:
            del changes["is_active"]
        _require_text(changes, ("email", "name", "role"))

        if "email" in changes:
            email = changes["email"].lower()
            other = await self._users.find_by_email(email, active_only=False)
            if other is not None and other.id != user.id:
                raise Conflict("A user with this email already exists")
            changes["email"] = email
        if "role" in changes:
            changes["role"] = _check_role(changes["role"])

        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = self._now()
        await self._audit.record(admin.id, admin.name, "UPDATE_USER", f"Account {user.email}")
        return user

    async def delete_user(self, admin: User, user_id: str) -> User:
        user = await self.get_user(admin, user_id)
        await self._users.delete(user)
        await self._audit.record(admin.id, admin.name, "DELETE_USER", f"Account {user.email}")
        return user


class ClientDirectory:
    def __init__(self, session: AsyncSession, clock: Clock = utcnow) -> None:
        self._clients = ClientRepository(session)
        self._audit = AuditLogger(session)
        self._now = clock

    async def list_clients(self, user: User) -> Sequence[Client]:
        return await self._clients.list(hangar_scope(user))

    async def get_client(self, user: User, client_id: str) -> Client:
        client = await self._clients.get(client_id)
        scope = hangar_scope(user)
        if client is None or (scope is not None and client.hangar != scope):
            raise NotFound("Client not found")
        return client

    async def create_client(self, user: User, payload: ClientIn) -> Client:
        data = payload.model_dump()
        if not data.get("hangar"):
            data["hangar"] = hangar_scope(user)
        client = await self._clients.add(Client(**data, created_at=self._now()))
        await self._audit.record_and_notify(
            user.id, user.name, "CREATE_CLIENT", f"New client {client.name} ({client.phone})"
        )
        return client

    async def update_client(self, user: User, client_id: str, payload: ClientUpdate) -> Client:
        client = await self.get_client(user, client_id)
        changes = payload.model_dump(exclude_unset=True)
        _require_text(changes, ("name", "phone"))
        for field, value in changes.items():
            setattr(client, field, value)
        client.updated_at = self._now()
        await self._audit.record(user.id, user.name, "UPDATE_CLIENT", f"Client {client.name}")
        return client

    async def delete_client(self, user: User, client_id: str) -> Client:
        client = await self.get_client(user, client_id)
        await self._clients.delete(client)
        await self._audit.record_and_notify(
            user.id, user.name, "DELETE_CLIENT", f"Client {client.name} deleted"
        )
        return client


class ManagerDirectory:
    """Admin-only hangar manager records."""

    def __init__(self, session: AsyncSession, clock: Clock = utcnow) -> None:
        self._managers = ManagerRepository(session)
        self._notifier = Notifier(session)
        self._audit = AuditLogger(session)
        self._now = clock

    async def list_managers(self, admin: User) -> Sequence[Manager]:
        authorize(admin, ADMINS)
        return await self._managers.list()

    async def get_manager(self, admin: User, manager_id: str) -> Manager:
        authorize(admin, ADMINS)
        manager = await self._managers.get(manager_id)
        if manager is None:
            raise NotFound("Manager not found")
        return manager

    async def create_manager(self, admin: User, payload: ManagerIn) -> Manager:
        authorize(admin, ADMINS)
        fields = ("first_name", "last_name", "phone", "email", "hangar")
        missing = [f for f in fields if not (getattr(payload, f) or "").strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        email = payload.email.strip().lower()
        if await self._managers.find_by_email(email):
            raise Conflict("A manager with this email already exists")

        first, last = payload.first_name.strip(), payload.last_name.strip()
        manager = await self._managers.add(
            Manager(
                first_name=first,
                last_name=last,
                name=f"{first} {last}",
                phone=payload.phone.strip(),
                email=email,
                hangar=payload.hangar.strip(),
                is_active=True,
                created_at=self._now(),
            )
        )
        await self._notifier.notify(
            "manager_created",
            "New manager created",
            f"{manager.name} has been assigned to {manager.hangar}",
        )
        await self._audit.record(
            admin.id,
            admin.name,
            "CREATE_MANAGER",
            f"Manager {manager.name} created for {manager.hangar}",
        )
        logger.info("Manager %s created for %s", manager.email, manager.hangar)
        return manager

    async def update_manager(
        self, admin: User, manager_id: str, payload: ManagerUpdate
    ) -> Manager:
        manager = await self.get_manager(admin, manager_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("is_active", False) is None:
            del changes["is_active"]
        _require_text(changes, ("first_name", "last_name", "phone", "email", "hangar"))
        if "email" in changes:
            changes["email"] = changes["email"].lower()
            other = await self._managers.find_by_email(changes["email"])
            if other is not None and other.id != manager.id:
                raise Conflict("A manager with this email already exists")
        for field, value in changes.items():
            setattr(manager, field, value)
        manager.name = f"{manager.first_name} {manager.last_name}"
        manager.updated_at = self._now()
        await self._audit.record(
            admin.id, admin.name, "UPDATE_MANAGER", f"Manager {manager.name} updated"
        )
        return manager

    async def delete_manager(self, admin: User, manager_id: str) -> Manager:
        manager = await self.get_manager(admin, manager_id)
        await self._managers.delete(manager)
        await self._audit.record(
            admin.id, admin.name, "DELETE_MANAGER", f"Manager {manager.name} deleted"
        )
        return manager
