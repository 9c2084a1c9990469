"""Pagination helpers for list endpoints."""


from fastapi import Query
from pydantic import BaseModel


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=20&sort=createdAt&order=desc`."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=20, ge=1, le=200, description="Items per page"),
        sort: str = Query(default="createdAt", description="Sort field (camelCase record key)"),
        order: str = Query(default="desc", pattern="^(asc|desc)$", description="Sort order"),
    ):
        self.page = page
        self.limit = limit
        self.sort = sort
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def apply(self, records: list[dict]) -> list[dict]:
        """Sort and slice already-loaded records (the KV store has no query planner).

        Records missing the sort key sort last regardless of direction.
        """
        present = [r for r in records if r.get(self.sort) is not None]
        missing = [r for r in records if r.get(self.sort) is None]
        present.sort(key=lambda r: str(r[self.sort]), reverse=self.order == "desc")
        ordered = present + missing
        return ordered[self.offset:self.offset + self.limit]


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int
