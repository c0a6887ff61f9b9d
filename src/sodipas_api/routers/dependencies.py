"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.database.engine import get_session
from sodipas_api.models.base import utcnow
from sodipas_api.models.user import User
from sodipas_api.services.auth_guard import AuthGuard, bearer_token
from sodipas_api.services.session_manager import Clock


def get_clock() -> Clock:
    """Time source for the services; overridden in tests."""
    return utcnow


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    return bearer_token(authorization)


async def current_user(
    token: str | None = Depends(get_bearer_token),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> User:
    """Resolve the ``Authorization: Bearer`` header to a signed-in user."""
    return await AuthGuard(session, clock=clock).authenticate(token)
