"""Vendor activity log and in-app notifications.

Activity logging is a side channel: a failure to record an entry is logged
and never fails the operation that triggered it.
"""


import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from covera.core.exceptions import NotFoundError
from covera.repositories.activity import ActivityRepository, NotificationRepository
from covera.schemas.activity import Activity, Notification

logger = logging.getLogger(__name__)


class ActivityService:
    def __init__(self, session: AsyncSession, org_id: str):
        self._activities = ActivityRepository(session, org_id)
        self._notifications = NotificationRepository(session, org_id)

    async def log(
        self, vendor_id: str, action: str, detail: str, tone: str = "neutral",
    ) -> Activity | None:
        try:
            entry = Activity(
                id=uuid.uuid4().hex,
                vendor_id=vendor_id,
                action=action,
                detail=detail,
                tone=tone,
                created_at=datetime.now(timezone.utc),
            )
            return await self._activities.save(entry)
        except Exception:
            logger.exception("Failed to record activity '%s' for vendor %s", action, vendor_id)
            return None

    async def notify(
        self,
        title: str,
        message: str,
        kind: str = "info",
        vendor_id: str | None = None,
        vendor_name: str | None = None,
    ) -> Notification:
        notification = Notification(
            id=uuid.uuid4().hex,
            kind=kind,
            title=title,
            message=message,
            vendor_id=vendor_id,
            vendor_name=vendor_name,
            created_at=datetime.now(timezone.utc),
        )
        logger.info("Notification [%s] %s", kind, title)
        return await self._notifications.save(notification)

    async def list_for_vendor(self, vendor_id: str) -> list[Activity]:
        entries = await self._activities.list_for_vendor(vendor_id)
        return sorted(entries, key=lambda a: a.created_at, reverse=True)

    async def delete_for_vendor(self, vendor_id: str) -> int:
        return await self._activities.delete_for_vendor(vendor_id)

    async def list_notifications(self, unread_only: bool = False) -> list[Notification]:
        items = await self._notifications.list()
        if unread_only:
            items = [n for n in items if not n.read]
        return sorted(items, key=lambda n: n.created_at, reverse=True)

    async def mark_read(self, notification_id: str) -> Notification:
        notification = await self._notifications.get(notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        return await self._notifications.save(notification.model_copy(update={"read": True}))

    async def mark_all_read(self) -> int:
        updated = 0
        for notification in await self._notifications.list():
            if not notification.read:
                await self._notifications.save(notification.model_copy(update={"read": True}))
                updated += 1
        return updated
