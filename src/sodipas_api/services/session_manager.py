"""Session manager — one-time codes and the bearer sessions they unlock."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.config import Settings, settings
from sodipas_api.database.repository import (
    OtpCodeRepository,
    SessionRepository,
    UserRepository,
)
from sodipas_api.errors import CodeExpired, CodeMismatch, NoPendingCode, UnknownUser
from sodipas_api.models.auth import AuthSession, OtpCode
from sodipas_api.models.base import utcnow
from sodipas_api.models.user import User
from sodipas_api.services.email_service import EmailService

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def generate_otp() -> str:
    """Uniform 6-digit code in [100000, 999999]."""
    return str(100000 + secrets.randbelow(900000))


def generate_token() -> str:
    """64-character URL-safe bearer token (48 bytes of entropy)."""
    return secrets.token_urlsafe(48)


@dataclass
class OtpChallenge:
    """Result of issuing a code: who it is for, and the code itself."""

    user: User
    code: str
    expires_at: datetime


@dataclass
class LoginResult:
    token: str
    user: User
    expires_at: datetime


class SessionManager:
    """Issues one-time codes and promotes a verified code into a session.

    Flow
    ----
    1. ``request_otp`` / ``resend_otp`` replace any pending code for the
       email and hand the new one to the mailer.
    2. ``verify_otp`` consumes the code and opens a session.
    3. ``logout`` drops the session; it never fails.
    """

    def __init__(
        self,
        session: AsyncSession,
        email_service: EmailService | None = None,
        clock: Clock = utcnow,
        config: Settings | None = None,
    ) -> None:
        self._db = session
        self._users = UserRepository(session)
        self._codes = OtpCodeRepository(session)
        self._sessions = SessionRepository(session)
        self._mailer = email_service or EmailService()
        self._now = clock
        self._config = config or settings

    async def request_otp(self, email: str) -> OtpChallenge:
        """Issue a fresh code for *email*; raises ``UnknownUser`` if nobody matches."""
        user = await self._users.find_by_email(email)
        if user is None:
            logger.info("Login attempt for unknown email %s", email)
            raise UnknownUser()

        code = generate_otp()
        expires_at = self._now() + timedelta(minutes=self._config.otp_ttl_minutes)
        await self._codes.replace(
            OtpCode(email=user.email, otp=code, expires_at=expires_at, created_at=self._now())
        )
        logger.info("OTP issued for %s (expires %s)", user.email, expires_at.isoformat())

        await self._mailer.send_otp(user.email, user.name, code)
        return OtpChallenge(user=user, code=code, expires_at=expires_at)

    async def resend_otp(self, email: str) -> OtpChallenge:
        """Same issuance path as :meth:`request_otp`."""
        return await self.request_otp(email)

    async def verify_otp(self, email: str, code: str) -> LoginResult:
        """Consume the pending code for *email* and open a session."""
        pending = await self._codes.find(email)
        if pending is None:
            raise NoPendingCode()

        if self._now() >= pending.expires_at:
            # Expired: remove it even though the request fails
            await self._codes.delete(pending)
            await self._db.commit()
            logger.info("OTP expired for %s", pending.email)
            raise CodeExpired()

        if pending.otp != code.strip():
            logger.info("OTP mismatch for %s", pending.email)
            raise CodeMismatch()

        await self._codes.delete(pending)

        user = await self._users.find_by_email(pending.email)
        if user is None:
            raise UnknownUser()

        token = await self._new_token()
        now = self._now()
        expires_at = now + timedelta(hours=self._config.session_ttl_hours)
        await self._sessions.add(
            AuthSession(
                token=token,
                user_id=user.id,
                email=user.email,
                created_at=now,
                expires_at=expires_at,
            )
        )
        logger.info("User %s authenticated via OTP", user.email)
        return LoginResult(token=token, user=user, expires_at=expires_at)

    async def logout(self, token: str | None) -> None:
        """Drop the session for *token* if there is one."""
        if not token:
            return
        if await self._sessions.revoke(token):
            logger.info("Session closed")

    async def _new_token(self) -> str:
        token = generate_token()
        while await self._sessions.exists(token):
            token = generate_token()
        return token
