"""
Pagination policy shared by every listing endpoint.

``page`` defaults to 1 and is floored at 1, ``limit`` defaults per endpoint and
is clamped to [1, MAX_LIMIT]; ``pages`` is never below 1, even for an empty
result.
"""

import math
from dataclasses import dataclass
from typing import Optional

from fastapi import Query

from app.core.schemas import Pagination

MAX_LIMIT = 100


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def resolve_page(page: Optional[int], limit: Optional[int], default_limit: int) -> PageParams:
    page = max(page if page is not None else 1, 1)
    limit = limit if limit is not None else default_limit
    limit = min(max(limit, 1), MAX_LIMIT)
    return PageParams(page=page, limit=limit)


def total_pages(total: int, limit: int) -> int:
    return max(math.ceil(total / limit), 1)


def build_pagination(total: int, params: PageParams) -> Pagination:
    return Pagination(
        total=total,
        page=params.page,
        pages=total_pages(total, params.limit),
        limit=params.limit,
    )


class PageQuery:
    """FastAPI dependency reading ``page`` and ``limit`` query parameters"""

    def __init__(self, default_limit: int):
        self.default_limit = default_limit

    def __call__(
        self,
        page: Optional[int] = Query(None, description="Page number, starting at 1"),
        limit: Optional[int] = Query(None, description="Page size, 1 to 100"),
    ) -> PageParams:
        return resolve_page(page, limit, self.default_limit)
