"""In-app notification router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from covera.core.config import settings
from covera.core.response import DataResponse
from covera.db.base import get_db
from covera.schemas.activity import MarkReadResult, Notification
from covera.services.activity import ActivityService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def _svc(session: AsyncSession) -> ActivityService:
    return ActivityService(session, settings.default_org_id)


@router.get("", response_model=DataResponse[list[Notification]])
async def list_notifications(
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    session: AsyncSession = Depends(get_db),
):
    notifications = await _svc(session).list_notifications(unread_only=unread_only)
    return {"data": notifications}


@router.put("/read-all", response_model=DataResponse[MarkReadResult])
async def mark_all_notifications_read(session: AsyncSession = Depends(get_db)):
    updated = await _svc(session).mark_all_read()
    return {"data": MarkReadResult(updated=updated)}


@router.put("/{notification_id}/read", response_model=DataResponse[Notification])
async def mark_notification_read(
    notification_id: str,
    session: AsyncSession = Depends(get_db),
):
    notification = await _svc(session).mark_read(notification_id)
    return {"data": notification}
