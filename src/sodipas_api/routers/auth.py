"""Auth router — email + one-time-code sign-in.

Endpoints
---------
POST /auth/login        → issue a code for a registered email
POST /auth/verify-otp   → exchange the code for a bearer token
POST /auth/resend-otp   → issue a fresh code
POST /auth/logout       → drop the current session (always succeeds)
GET  /auth/me           → the signed-in user
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.config import settings
from sodipas_api.database.engine import get_session, hold_write_lock
from sodipas_api.models.user import User
from sodipas_api.routers.dependencies import current_user, get_bearer_token, get_clock
from sodipas_api.schemas import (
    EmailRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    ResendOtpResponse,
    UserProfile,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from sodipas_api.services.email_service import EmailService
from sodipas_api.services.session_manager import Clock, SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def get_email_service() -> EmailService:
    return EmailService()


def get_session_manager(
    session: AsyncSession = Depends(get_session),
    email_service: EmailService = Depends(get_email_service),
    clock: Clock = Depends(get_clock),
) -> SessionManager:
    return SessionManager(session, email_service=email_service, clock=clock)


def _debug_otp(code: str) -> str | None:
    """Only ever echo the code back in dev mode."""
    return code if settings.dev_mode else None


@router.post(
    "/login",
    response_model=LoginResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(hold_write_lock)],
)
async def login(body: EmailRequest, manager: SessionManager = Depends(get_session_manager)):
    """Step 1: check the email and send a one-time code."""
    challenge = await manager.request_otp(body.email)
    return LoginResponse(
        user=UserProfile.model_validate(challenge.user),
        debug_otp=_debug_otp(challenge.code),
    )


@router.post(
    "/verify-otp", response_model=VerifyOtpResponse, dependencies=[Depends(hold_write_lock)]
)
async def verify_otp(
    body: VerifyOtpRequest, manager: SessionManager = Depends(get_session_manager)
):
    """Step 2: trade the code for a session token."""
    result = await manager.verify_otp(body.email, body.otp)
    return VerifyOtpResponse(token=result.token, user=UserProfile.model_validate(result.user))


@router.post(
    "/resend-otp",
    response_model=ResendOtpResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(hold_write_lock)],
)
async def resend_otp(body: EmailRequest, manager: SessionManager = Depends(get_session_manager)):
    challenge = await manager.resend_otp(body.email)
    return ResendOtpResponse(
        message="A new code has been sent", debug_otp=_debug_otp(challenge.code)
    )


@router.post("/logout", response_model=MessageResponse, dependencies=[Depends(hold_write_lock)])
async def logout(
    token: str | None = Depends(get_bearer_token),
    manager: SessionManager = Depends(get_session_manager),
):
    await manager.logout(token)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=MeResponse)
async def me(user: User = Depends(current_user)):
    return MeResponse(user=UserProfile.model_validate(user))
