"""Shared API models: camelCase base classes, envelope and pagination"""

import math
from datetime import datetime, timezone
from typing import Generic, Optional, Sequence, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Model serialised with camelCase keys, populated by either name"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class RequestModel(CamelModel):
    """Request body that rejects unknown fields"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "forbid"
        str_strip_whitespace = True


class ApiResponse(BaseModel, Generic[T]):
    """Standard success envelope"""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class Pagination(CamelModel):
    """Pagination block returned with list endpoints"""
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool


def paginate(items: Sequence[T], page: int, limit: int) -> tuple[list[T], Pagination]:
    """Slice an already filtered and sorted sequence into one page."""
    total = len(items)
    total_pages = math.ceil(total / limit) if limit else 0
    start = (page - 1) * limit
    page_items = list(items[start : start + limit])
    return page_items, Pagination(
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        items_per_page=limit,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


def matches_search(term: Optional[str], *fields: Optional[str]) -> bool:
    """Case-insensitive substring match over any of the given fields"""
    if not term:
        return True
    needle = term.lower()
    return any(needle in field.lower() for field in fields if field)
