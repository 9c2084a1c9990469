"""Generic per-organization record repository on top of the KV store."""

from __future__ import annotations

import logging
from typing import Generic, TypeVar

from pydantic import ValidationError as SchemaError
from sqlalchemy.ext.asyncio import AsyncSession

from covera.repositories.kv import KVStore
from covera.schemas.common import KeyedRecord

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=KeyedRecord)


class RecordRepository(Generic[ModelT]):
    """CRUD over ``{namespace}:{org_id}:{id}`` keys. All reads are scoped to one org.

    Blobs are stored with camelCase keys (the wire shape). The store enforces
    no schema, so a blob that no longer validates is skipped on list and
    logged rather than failing the whole read.
    """

    namespace: str
    model: type[ModelT]

    def __init__(self, session: AsyncSession, org_id: str):
        self._kv = KVStore(session)
        self._org_id = org_id

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @property
    def _prefix(self) -> str:
        return f"{self.namespace}:{self._org_id}:"

    def _key(self, record_id: str) -> str:
        return f"{self._prefix}{record_id}"

    def _key_for(self, record: ModelT) -> str:
        return self._key(record.id)

    def _load(self, blob: object) -> ModelT | None:
        try:
            return self.model.model_validate(blob)
        except SchemaError as exc:
            logger.warning("Skipping malformed %s record: %s", self.namespace, exc)
            return None

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get(self, record_id: str) -> ModelT | None:
        blob = await self._kv.get(self._key(record_id))
        if blob is None:
            return None
        return self._load(blob)

    async def list(self, prefix_suffix: str = "") -> list[ModelT]:
        blobs = await self._kv.get_by_prefix(self._prefix + prefix_suffix)
        return [record for record in map(self._load, blobs) if record is not None]

    async def count(self) -> int:
        return len(await self._kv.keys_by_prefix(self._prefix))

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def save(self, record: ModelT) -> ModelT:
        await self._kv.set(self._key_for(record), record.model_dump(mode="json", by_alias=True))
        return record

    async def delete(self, record_id: str) -> bool:
        return await self._kv.delete(self._key(record_id))

    async def delete_prefix(self, prefix_suffix: str) -> int:
        keys = await self._kv.keys_by_prefix(self._prefix + prefix_suffix)
        return await self._kv.mdel(keys)
