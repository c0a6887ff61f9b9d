"""Shared fixtures: a throwaway database, a controllable clock and an API client."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from sodipas_api.database.engine import get_session
from sodipas_api.main import app
from sodipas_api.models.auth import AuthSession
from sodipas_api.models.base import Base
from sodipas_api.models.user import User
from sodipas_api.routers.dependencies import get_clock


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now += timedelta(**delta)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 1, 8, 0, tzinfo=UTC))


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Fresh SQLite file per test, tables created up front."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def users(session_factory):
    """One account per role; managers sit in different hangars."""
    accounts = {
        "admin": User(email="admin@sodipas.sn", name="Admin SODIPAS", role="admin"),
        "manager": User(
            email="gestionnaire@sodipas.sn", name="Moussa Diop", role="manager", hangar="Hangar 1"
        ),
        "manager2": User(
            email="fatou@sodipas.sn", name="Fatou Sall", role="manager", hangar="Hangar 2"
        ),
        "cashier": User(
            email="caisse@sodipas.sn", name="Awa Ndiaye", role="cashier", hangar="Hangar 1"
        ),
        "viewer": User(email="demo@sodipas.sn", name="Compte Demo", role="viewer"),
        "inactive": User(
            email="old@sodipas.sn", name="Ancien Compte", role="viewer", is_active=False
        ),
    }
    async with session_factory() as session:
        session.add_all(accounts.values())
        await session.commit()
    return accounts


@pytest_asyncio.fixture
async def client(session_factory, clock):
    """HTTP client wired to the test database and clock."""

    async def _get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_clock] = lambda: clock
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(session_factory, clock):
    """Open a session for a user directly and return its bearer header."""

    async def _headers(user: User, token: str | None = None) -> dict[str, str]:
        token = token or f"token-{user.id}"
        async with session_factory() as session:
            session.add(
                AuthSession(
                    token=token,
                    user_id=user.id,
                    email=user.email,
                    created_at=clock(),
                    expires_at=clock() + timedelta(hours=24),
                )
            )
            await session.commit()
        return {"Authorization": f"Bearer {token}"}

    return _headers
