"""Auth guard — resolves bearer tokens and checks roles."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.database.repository import SessionRepository, UserRepository
from sodipas_api.errors import (
    Forbidden,
    InvalidSession,
    MissingCredential,
    SessionExpired,
    UserNotFound,
)
from sodipas_api.models.base import utcnow
from sodipas_api.models.user import User
from sodipas_api.services.session_manager import Clock

logger = logging.getLogger(__name__)


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class AuthGuard:
    def __init__(self, session: AsyncSession, clock: Clock = utcnow) -> None:
        self._db = session
        self._sessions = SessionRepository(session)
        self._users = UserRepository(session)
        self._now = clock

    async def authenticate(self, token: str | None) -> User:
        """Return the user behind a live session token."""
        if not token:
            raise MissingCredential()

        auth_session = await self._sessions.find(token)
        if auth_session is None:
            raise InvalidSession()

        if self._now() >= auth_session.expires_at:
            await self._sessions.delete(auth_session)
            await self._db.commit()
            logger.info("Session for %s expired", auth_session.email)
            raise SessionExpired()

        user = await self._users.get(auth_session.user_id)
        if user is None:
            raise UserNotFound()

        if not user.is_active:
            await self._sessions.delete(auth_session)
            await self._db.commit()
            logger.info("Session for deactivated user %s dropped", user.email)
            raise InvalidSession()

        return user


def authorize(user: User, allowed_roles: Iterable[str]) -> User:
    """Raise ``Forbidden`` unless *user* holds one of *allowed_roles*."""
    if user.role not in allowed_roles:
        logger.warning("User %s (%s) denied; needs one of %s", user.email, user.role, allowed_roles)
        raise Forbidden()
    return user


def hangar_scope(user: User) -> str | None:
    """The hangar a user's listings are restricted to, or ``None`` for everything."""
    if user.is_admin or not user.hangar:
        return None
    return user.hangar
