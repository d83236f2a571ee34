"""
Pagination and ordering helpers shared by list queries.
"""

from typing import Any, Mapping, Optional

from character_nexus.core.exceptions import ValidationError
from character_nexus.models.enums import SortOrder

DEFAULT_LIMIT = 100
MAX_LIMIT = 500


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def clamp_pagination(limit: Any = None, offset: Any = None) -> tuple[int, int]:
    """
    Normalize limit and offset.

    A missing, zero or non-numeric limit means DEFAULT_LIMIT; otherwise it is
    clamped to [1, MAX_LIMIT]. Offset is clamped to >= 0.
    """
    parsed_limit = _to_int(limit) or DEFAULT_LIMIT
    parsed_offset = _to_int(offset)
    return max(1, min(parsed_limit, MAX_LIMIT)), max(0, parsed_offset)


def resolve_order_by(
    sort_by: Optional[str],
    sort_order: Optional[str],
    columns: Mapping[str, Any],
    default_key: str,
) -> Any:
    """
    Map a caller-supplied sort key and direction onto a column ordering.

    Only keys present in ``columns`` are accepted; the caller's text never
    reaches the generated SQL.

    Raises:
        ValidationError: If the key or direction is not recognized
    """
    key = sort_by or default_key
    column = columns.get(key)
    if column is None:
        allowed = ", ".join(sorted(columns))
        raise ValidationError(
            fields=[{"field": "sortBy", "message": f"must be one of: {allowed}"}]
        )

    direction = str(sort_order or SortOrder.DESC.value).strip().lower()
    if direction not in (SortOrder.ASC.value, SortOrder.DESC.value):
        raise ValidationError(
            fields=[{"field": "sortOrder", "message": "must be one of: asc, desc"}]
        )
    return column.asc() if direction == SortOrder.ASC.value else column.desc()
