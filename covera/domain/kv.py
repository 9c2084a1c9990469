"""SQLAlchemy ORM model backing the generic key-value store.

Every record (vendor, contract, activity, notification) is an opaque JSON
blob under a namespaced key such as ``vendor:{org_id}:{vendor_id}``. The
table enforces nothing beyond key uniqueness.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from covera.db.base import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class KVEntry(Base):
    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_now,
        onupdate=_now,
        server_default=func.now(),
        nullable=False,
    )
