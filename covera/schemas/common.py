"""Schema bases shared by every record and DTO.

Python attributes are snake_case; the wire shape (HTTP bodies and the JSON
blobs in ``kv_store``) is camelCase.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        from_attributes=True,
    )


class KeyedRecord(CamelModel):
    """A record persisted under ``{namespace}:{org_id}:{id}``."""

    id: str
    created_at: datetime


class HealthResponse(CamelModel):
    status: str = "ok"
    app: str
    env: str
    version: str
    ai_enabled: bool = False
