"""Activity router — notifications, audit log and hangar list."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.config import settings
from sodipas_api.database.engine import get_session, hold_write_lock
from sodipas_api.database.repository import AuditLogRepository, NotificationRepository
from sodipas_api.models.user import ROLE_ADMIN, User
from sodipas_api.routers.dependencies import current_user
from sodipas_api.schemas import AuditLogIn, AuditLogOut, NotificationOut, SuccessResponse
from sodipas_api.services.activity import AuditLogger
from sodipas_api.services.auth_guard import authorize

router = APIRouter(tags=["activity"])

ADMINS = (ROLE_ADMIN,)


@router.get("/notifications", response_model=list[NotificationOut])
async def list_notifications(
    user: User = Depends(current_user), session: AsyncSession = Depends(get_session)
):
    """Admin feed, newest first."""
    authorize(user, ADMINS)
    return await NotificationRepository(session).list()


@router.put(
    "/notifications/read-all",
    response_model=SuccessResponse,
    dependencies=[Depends(hold_write_lock)],
)
async def mark_all_notifications_read(
    user: User = Depends(current_user), session: AsyncSession = Depends(get_session)
):
    authorize(user, ADMINS)
    await NotificationRepository(session).mark_all_read()
    return SuccessResponse()


@router.put(
    "/notifications/{notification_id}/read",
    response_model=SuccessResponse,
    dependencies=[Depends(hold_write_lock)],
)
async def mark_notification_read(
    notification_id: str,
    user: User = Depends(current_user),
    session: AsyncSession = Depends(get_session),
):
    """Unknown ids are ignored."""
    authorize(user, ADMINS)
    notification = await NotificationRepository(session).get(notification_id)
    if notification is not None:
        notification.read = True
    return SuccessResponse()


@router.get("/audit-logs", response_model=list[AuditLogOut])
async def list_audit_logs(
    user: User = Depends(current_user), session: AsyncSession = Depends(get_session)
):
    authorize(user, ADMINS)
    return await AuditLogRepository(session).list()


@router.post(
    "/audit-logs",
    response_model=AuditLogOut,
    status_code=201,
    dependencies=[Depends(hold_write_lock)],
)
async def create_audit_log(
    body: AuditLogIn,
    user: User = Depends(current_user),
    session: AsyncSession = Depends(get_session),
):
    """Record an action for the caller; important ones reach the admin feed."""
    return await AuditLogger(session).record_and_notify(
        user.id, user.name, body.action.strip().upper(), body.details
    )


@router.get("/hangars", response_model=list[str])
async def list_hangars():
    return settings.hangars
