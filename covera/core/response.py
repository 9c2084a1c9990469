"""Response envelopes shared by the v1 routers.

Single records: ``{"data": {...}}``.
Lists: ``{"data": [...], "meta": {"total", "page", "limit", "pages"}}``.
"""


import math
from typing import Generic, TypeVar

from pydantic import BaseModel

from covera.core.pagination import PageMeta, PaginationParams

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    data: T


class ListResponse(BaseModel, Generic[T]):
    data: list[T]
    meta: PageMeta


def paginated(items: list, total: int, pagination: PaginationParams) -> dict:
    """Wrap one page of *items* out of *total*; an empty result still has page 1."""
    return {
        "data": items,
        "meta": PageMeta(
            total=total,
            page=pagination.page,
            limit=pagination.limit,
            pages=max(1, math.ceil(total / pagination.limit)),
        ),
    }
