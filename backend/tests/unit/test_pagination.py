"""
Tests for pagination and ordering helpers.
"""

import pytest

from character_nexus.core.exceptions import ValidationError
from character_nexus.infrastructure.local.character_repository import SORT_COLUMNS
from character_nexus.utils.pagination import clamp_pagination, resolve_order_by


@pytest.mark.parametrize(
    "limit, expected",
    [
        (None, 100),
        (0, 100),
        ("abc", 100),
        ("25", 25),
        (10_000, 500),
        (-5, 1),
    ],
)
def test_limit_clamping(limit, expected):
    assert clamp_pagination(limit, 0)[0] == expected


@pytest.mark.parametrize("offset, expected", [(None, 0), (-5, 0), ("7", 7), ("x", 0)])
def test_offset_clamping(offset, expected):
    assert clamp_pagination(None, offset)[1] == expected


def test_default_sort_is_descending():
    clause = resolve_order_by(None, None, SORT_COLUMNS, "created")

    assert "created DESC" in str(clause)


def test_snake_and_camel_sort_keys():
    camel = resolve_order_by("contentRating", "asc", SORT_COLUMNS, "created")
    snake = resolve_order_by("content_rating", "ASC", SORT_COLUMNS, "created")

    assert str(camel) == str(snake)
    assert "content_rating ASC" in str(camel)


def test_unknown_sort_key_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        resolve_order_by("name; DROP TABLE characters", None, SORT_COLUMNS, "created")

    assert exc_info.value.fields[0]["field"] == "sortBy"


def test_unknown_sort_direction_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        resolve_order_by("name", "sideways", SORT_COLUMNS, "created")

    assert exc_info.value.fields[0]["field"] == "sortOrder"
