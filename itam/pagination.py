"""
itam.pagination
===============

Normalisation of ``page`` / ``limit`` query parameters for list endpoints.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, TypeVar, Union

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50
DEFAULT_MAX_LIMIT = 1000


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def _to_int(value: Union[int, str, None], default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def get_pagination_params(
    page: Union[int, str, None] = None,
    limit: Union[int, str, None] = None,
    max_limit: int = DEFAULT_MAX_LIMIT,
) -> PageParams:
    """
    Clamp page to ``>= 1`` and limit to ``[1, max_limit]``.

    >>> get_pagination_params("3", "0")
    PageParams(page=3, limit=1)
    >>> get_pagination_params(None, 5000).limit
    1000
    """
    page_no = max(1, _to_int(page, DEFAULT_PAGE))
    size = min(max(1, _to_int(limit, DEFAULT_LIMIT)), max_limit)
    return PageParams(page=page_no, limit=size)


def paginate(items: Sequence[T], params: PageParams) -> List[T]:
    return list(items[params.skip:params.skip + params.limit])


def build_pagination_meta(total: int, params: PageParams) -> Dict[str, Any]:
    total_pages = math.ceil(total / params.limit)
    return {
        "page": params.page,
        "limit": params.limit,
        "total": total,
        "total_pages": total_pages,
        "has_next": params.page < total_pages,
        "has_prev": params.page > 1,
    }


def page_response(items: Sequence[Any], params: Optional[PageParams] = None) -> Dict[str, Any]:
    """``{"data": [...], "pagination": {...}}`` envelope used by the API."""
    params = params or get_pagination_params()
    return {
        "data": paginate(items, params),
        "pagination": build_pagination_meta(len(items), params),
    }
