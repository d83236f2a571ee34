"""
Helpers for JSON values stored in text columns.

Reads never fail on bad stored data: malformed or wrongly shaped JSON
degrades to an empty list or dict.
"""

import json
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def dump_json(value: Any, default: Any) -> str:
    return json.dumps(default if value is None else value, ensure_ascii=False)


def _load(raw: Optional[str], expected: type) -> Any:
    if raw is None or raw == "":
        return expected()
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Discarding malformed JSON column value")
        return expected()
    if not isinstance(value, expected):
        logger.warning("Discarding JSON column value of type %s", type(value).__name__)
        return expected()
    return value


def load_json_list(raw: Optional[str]) -> list:
    return _load(raw, list)


def load_json_object(raw: Optional[str]) -> dict:
    return _load(raw, dict)
