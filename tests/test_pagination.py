"""
tests/test_pagination.py
========================

Query parameter clamping and the paginated response envelope.
"""

import pytest

from itam.pagination import PageParams, get_pagination_params, page_response


@pytest.mark.parametrize(
    "page, limit, expected",
    [
        (None, None, PageParams(1, 50)),
        ("3", "10", PageParams(3, 10)),
        (0, 0, PageParams(1, 1)),
        (-4, 5000, PageParams(1, 1000)),
        ("abc", "xyz", PageParams(1, 50)),
    ],
)
def test_params_are_clamped(page, limit, expected):
    assert get_pagination_params(page, limit) == expected


def test_custom_max_limit():
    assert get_pagination_params(1, 500, max_limit=100).limit == 100


def test_page_response_envelope():
    out = page_response(list(range(25)), PageParams(page=2, limit=10))
    assert out["data"] == list(range(10, 20))
    assert out["pagination"] == {
        "page": 2,
        "limit": 10,
        "total": 25,
        "total_pages": 3,
        "has_next": True,
        "has_prev": True,
    }


def test_empty_page():
    out = page_response([], PageParams(page=1, limit=10))
    assert out["data"] == []
    assert out["pagination"]["total_pages"] == 0
    assert out["pagination"]["has_next"] is False
