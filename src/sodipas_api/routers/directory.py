"""Directory routers — /users, /clients and /managers."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.database.engine import get_session, hold_write_lock
from sodipas_api.models.user import User
from sodipas_api.routers.dependencies import current_user, get_clock
from sodipas_api.schemas import (
    ClientIn,
    ClientOut,
    ClientUpdate,
    ManagerCreatedResponse,
    ManagerIn,
    ManagerOut,
    ManagerUpdate,
    MessageResponse,
    UserCreate,
    UserOut,
    UserUpdate,
)
from sodipas_api.services.directory_service import (
    ClientDirectory,
    ManagerDirectory,
    UserDirectory,
)
from sodipas_api.services.session_manager import Clock

users_router = APIRouter(prefix="/users", tags=["users"])
clients_router = APIRouter(prefix="/clients", tags=["clients"])
managers_router = APIRouter(prefix="/managers", tags=["managers"])

_write = [Depends(hold_write_lock)]


def get_user_directory(
    session: AsyncSession = Depends(get_session), clock: Clock = Depends(get_clock)
) -> UserDirectory:
    return UserDirectory(session, clock=clock)


def get_client_directory(
    session: AsyncSession = Depends(get_session), clock: Clock = Depends(get_clock)
) -> ClientDirectory:
    return ClientDirectory(session, clock=clock)


def get_manager_directory(
    session: AsyncSession = Depends(get_session), clock: Clock = Depends(get_clock)
) -> ManagerDirectory:
    return ManagerDirectory(session, clock=clock)


# ── Users (admin only) ───────────────────────────────────

@users_router.get("", response_model=list[UserOut])
async def list_users(
    admin: User = Depends(current_user), users: UserDirectory = Depends(get_user_directory)
):
    return await users.list_users(admin)


@users_router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: str,
    admin: User = Depends(current_user),
    users: UserDirectory = Depends(get_user_directory),
):
    return await users.get_user(admin, user_id)


@users_router.post("", response_model=UserOut, status_code=201, dependencies=_write)
async def create_user(
    body: UserCreate,
    admin: User = Depends(current_user),
    users: UserDirectory = Depends(get_user_directory),
):
    return await users.create_user(admin, body)


@users_router.put("/{user_id}", response_model=UserOut, dependencies=_write)
async def update_user(
    user_id: str,
    body: UserUpdate,
    admin: User = Depends(current_user),
    users: UserDirectory = Depends(get_user_directory),
):
    return await users.update_user(admin, user_id, body)


@users_router.delete("/{user_id}", response_model=UserOut, dependencies=_write)
async def delete_user(
    user_id: str,
    admin: User = Depends(current_user),
    users: UserDirectory = Depends(get_user_directory),
):
    return await users.delete_user(admin, user_id)


# ── Clients ──────────────────────────────────────────────

@clients_router.get("", response_model=list[ClientOut])
async def list_clients(
    user: User = Depends(current_user), clients: ClientDirectory = Depends(get_client_directory)
):
    return await clients.list_clients(user)


@clients_router.get("/{client_id}", response_model=ClientOut)
async def get_client(
    client_id: str,
    user: User = Depends(current_user),
    clients: ClientDirectory = Depends(get_client_directory),
):
    return await clients.get_client(user, client_id)


@clients_router.post("", response_model=ClientOut, status_code=201, dependencies=_write)
async def create_client(
    body: ClientIn,
    user: User = Depends(current_user),
    clients: ClientDirectory = Depends(get_client_directory),
):
    return await clients.create_client(user, body)


@clients_router.put("/{client_id}", response_model=ClientOut, dependencies=_write)
async def update_client(
    client_id: str,
    body: ClientUpdate,
    user: User = Depends(current_user),
    clients: ClientDirectory = Depends(get_client_directory),
):
    return await clients.update_client(user, client_id, body)


@clients_router.delete("/{client_id}", response_model=ClientOut, dependencies=_write)
async def delete_client(
    client_id: str,
    user: User = Depends(current_user),
    clients: ClientDirectory = Depends(get_client_directory),
):
    return await clients.delete_client(user, client_id)


# ── Managers (admin only) ────────────────────────────────

@managers_router.get("", response_model=list[ManagerOut])
async def list_managers(
    admin: User = Depends(current_user),
    managers: ManagerDirectory = Depends(get_manager_directory),
):
    return await managers.list_managers(admin)


@managers_router.get("/{manager_id}", response_model=ManagerOut)
async def get_manager(
    manager_id: str,
    admin: User = Depends(current_user),
    managers: ManagerDirectory = Depends(get_manager_directory),
):
    return await managers.get_manager(admin, manager_id)


@managers_router.post(
    "", response_model=ManagerCreatedResponse, status_code=201, dependencies=_write
)
async def create_manager(
    body: ManagerIn,
    admin: User = Depends(current_user),
    managers: ManagerDirectory = Depends(get_manager_directory),
):
    manager = await managers.create_manager(admin, body)
    return ManagerCreatedResponse(
        manager=ManagerOut.model_validate(manager),
        message=f"Manager {manager.name} assigned to {manager.hangar}",
    )


@managers_router.put("/{manager_id}", response_model=ManagerOut, dependencies=_write)
async def update_manager(
    manager_id: str,
    body: ManagerUpdate,
    admin: User = Depends(current_user),
    managers: ManagerDirectory = Depends(get_manager_directory),
):
    return await managers.update_manager(admin, manager_id, body)


@managers_router.delete("/{manager_id}", response_model=MessageResponse, dependencies=_write)
async def delete_manager(
    manager_id: str,
    admin: User = Depends(current_user),
    managers: ManagerDirectory = Depends(get_manager_directory),
):
    await managers.delete_manager(admin, manager_id)
    return MessageResponse(message="Manager deleted")
