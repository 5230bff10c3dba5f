"""Offset pagination: 1-based ``page`` + ``limit``.

Every list endpoint returns ``meta = {page, limit, total, totalPages}`` where
``totalPages = ceil(total / limit)``.
"""

import math
from dataclasses import dataclass
from typing import Annotated

from fastapi import Query
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass(frozen=True)
class Pagination:
    page: int = 1
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PaginationMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")


def build_meta(pagination: Pagination, total: int) -> PaginationMeta:
    return PaginationMeta(
        page=pagination.page,
        limit=pagination.limit,
        total=total,
        total_pages=math.ceil(total / pagination.limit),
    )


def pagination_params(
    page: Annotated[int, Query(ge=1, description="1-based page number")] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_LIMIT, description="Items per page")] = DEFAULT_LIMIT,
) -> Pagination:
    """FastAPI dependency: parse ``?page=&limit=`` into a Pagination."""
    return Pagination(page=page, limit=limit)
