"""Async key-value store over the kv_store table.

Mirrors the minimal contract the rest of the app relies on: ``get``, ``set``,
``get_by_prefix``, ``delete`` and ``mdel``. Values are JSON-serializable
objects; the store never inspects them.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from covera.domain.kv import KVEntry


class KVStore:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, key: str) -> Any | None:
        entry = await self._session.get(KVEntry, key)
        return entry.value if entry is not None else None

    async def set(self, key: str, value: Any) -> None:
        entry = await self._session.get(KVEntry, key)
        if entry is None:
            self._session.add(KVEntry(key=key, value=value))
        else:
            entry.value = value
        await self._session.flush()

    async def get_by_prefix(self, prefix: str) -> list[Any]:
        """Return all values whose key starts with *prefix*, ordered by key."""
        result = await self._session.execute(
            select(KVEntry)
            .where(KVEntry.key.startswith(prefix, autoescape=True))
            .order_by(KVEntry.key)
        )
        return [entry.value for entry in result.scalars().all()]

    async def keys_by_prefix(self, prefix: str) -> list[str]:
        result = await self._session.execute(
            select(KVEntry.key)
            .where(KVEntry.key.startswith(prefix, autoescape=True))
            .order_by(KVEntry.key)
        )
        return list(result.scalars().all())

    async def delete(self, key: str) -> bool:
        result = await self._session.execute(delete(KVEntry).where(KVEntry.key == key))
        await self._session.flush()
        return result.rowcount > 0

    async def mdel(self, keys: list[str]) -> int:
        if not keys:
            return 0
        result = await self._session.execute(delete(KVEntry).where(KVEntry.key.in_(keys)))
        await self._session.flush()
        return result.rowcount
