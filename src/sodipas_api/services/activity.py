"""Activity feed — admin notifications and the audit trail.

Both writers share the caller's session, so an entry is committed
together with the change it describes, or not at all.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.database.repository import AuditLogRepository, NotificationRepository
from sodipas_api.models.records import AuditLog, Notification

logger = logging.getLogger(__name__)

# Audit actions that also surface in the admin notification feed.
NOTIFIED_ACTIONS = frozenset(
    {"CREATE_CLIENT", "CREATE_INVOICE", "CREATE_PAYMENT", "DELETE_CLIENT"}
)


class Notifier:
    """Appends entries to the admin notification feed."""

    def __init__(self, session: AsyncSession) -> None:
        self._repo = NotificationRepository(session)

    async def notify(self, type: str, title: str, message: str) -> Notification:
        notification = await self._repo.add(
            Notification(type=type, title=title, message=message, read=False)
        )
        logger.info("🔔 [%s] %s — %s", type, title, message)
        return notification


class AuditLogger:
    """Records who did what."""

    def __init__(self, session: AsyncSession) -> None:
        self._repo = AuditLogRepository(session)
        self._notifier = Notifier(session)

    async def record(
        self, user_id: str | None, user_name: str | None, action: str, details: str
    ) -> AuditLog:
        entry = await self._repo.add(
            AuditLog(user_id=user_id, user_name=user_name, action=action, details=details)
        )
        logger.info("Audit %s by %s: %s", action, user_name or user_id, details)
        return entry

    async def record_and_notify(
        self, user_id: str | None, user_name: str | None, action: str, details: str
    ) -> AuditLog:
        """Record an entry; important actions are echoed to the notification feed."""
        entry = await self.record(user_id, user_name, action, details)
        if action in NOTIFIED_ACTIONS:
            await self._notifier.notify(
                type=action.lower(),
                title=action.replace("_", " ").title(),
                message=details,
            )
        return entry
