"""Vendor activity log and in-app notification schemas."""


from typing import Literal

from covera.schemas.common import CamelModel, KeyedRecord

class Activity(KeyedRecord):
    vendor_id: str
    action: str
    detail: str
    tone: Literal["positive", "neutral", "warning"] = "neutral"

class Notification(KeyedRecord):
    kind: Literal["success", "warning", "alert", "info"] = "info"
    title: str
    message: str
    vendor_id: str | None = None
    vendor_name: str | None = None
    read: bool = False

class MarkReadResult(CamelModel):
    updated: int
