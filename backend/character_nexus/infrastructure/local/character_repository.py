"""
SQLite implementation of Character repository.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import and_, delete, func, insert, or_, select, update

from character_nexus.core.exceptions import NotFoundError
from character_nexus.infrastructure.local.database import (
    Database,
    characters_table,
    wrap_database_errors,
)
from character_nexus.interfaces.character_repository import ICharacterRepository
from character_nexus.models.character import Character, CharacterCreate, CharacterUpdate
from character_nexus.models.enums import ContentRating
from character_nexus.utils.datetime_utils import now_utc
from character_nexus.utils.json_columns import dump_json, load_json_list
from character_nexus.utils.pagination import clamp_pagination, resolve_order_by
from character_nexus.utils.sanitize import sanitize_html

logger = logging.getLogger(__name__)

_c = characters_table.c

SORT_COLUMNS = {
    "name": _c.name,
    "universe": _c.universe,
    "created": _c.created,
    "modified": _c.modified,
    "contentRating": _c.content_rating,
    "content_rating": _c.content_rating,
}
DEFAULT_SORT = "created"

JSON_FIELDS = ("example_dialogues", "tags", "relationships", "custom_tags")
SANITIZED_FIELDS = ("bio", "personality", "scenario", "intro_message", "notes")
REQUIRED_FIELDS = ("name", "universe")


def _rating_value(value: Any) -> str:
    if isinstance(value, ContentRating):
        return value.value
    return value or ContentRating.SFW.value


class SqliteCharacterRepository(ICharacterRepository):
    """SQLite implementation of character repository."""

    def __init__(self, db: Database):
        self._db = db

    def _row_to_model(self, row: dict[str, Any]) -> Character:
        """Convert a stored row into a Character."""
        data = dict(row)
        for field in JSON_FIELDS:
            data[field] = load_json_list(data.get(field))
        for field in ("example_dialogues", "relationships"):
            data[field] = [item for item in data[field] if isinstance(item, dict)]
        data["content_rating"] = _rating_value(data.get("content_rating"))
        return Character.model_validate(data)

    def _to_columns(self, data: dict[str, Any]) -> dict[str, Any]:
        """Sanitize free text and serialize JSON-valued fields for storage."""
        values = {}
        for field, value in data.items():
            if field in JSON_FIELDS:
                values[field] = dump_json(value, [])
            elif field in SANITIZED_FIELDS:
                values[field] = sanitize_html(value) if value is not None else None
            elif field == "content_rating":
                values[field] = _rating_value(value)
            else:
                values[field] = value
        return values

    def _filters(self, universe: Optional[str], content_rating: Optional[str]) -> list:
        filters = []
        if universe:
            filters.append(_c.universe == universe)
        if content_rating:
            filters.append(_c.content_rating == _rating_value(content_rating))
        return filters

    async def list(
        self,
        universe: Optional[str] = None,
        content_rating: Optional[str] = None,
        search: Optional[str] = None,
        limit: Any = None,
        offset: Any = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> list[Character]:
        """List characters matching every provided filter."""
        order_by = resolve_order_by(sort_by, sort_order, SORT_COLUMNS, DEFAULT_SORT)
        limit, offset = clamp_pagination(limit, offset)

        filters = self._filters(universe, content_rating)
        if search:
            filters.append(
                or_(
                    _c.name.icontains(search, autoescape=True),
                    _c.bio.icontains(search, autoescape=True),
                )
            )

        query = select(characters_table)
        if filters:
            query = query.where(and_(*filters))
        query = query.order_by(order_by, _c.id).limit(limit).offset(offset)

        with wrap_database_errors("listing characters"):
            rows = await self._db.fetch_all(query)
        return [self._row_to_model(row) for row in rows]

    async def count(
        self,
        universe: Optional[str] = None,
        content_rating: Optional[str] = None,
    ) -> int:
        """Count characters matching the universe/rating filters."""
        query = select(func.count().label("total")).select_from(characters_table)
        filters = self._filters(universe, content_rating)
        if filters:
            query = query.where(and_(*filters))

        with wrap_database_errors("counting characters"):
            row = await self._db.fetch_one(query)
        return int(row["total"]) if row else 0

    async def get(self, character_id: str) -> Character:
        """Get a character by ID."""
        with wrap_database_errors("loading character"):
            row = await self._db.fetch_one(
                select(characters_table).where(_c.id == character_id)
            )
        if row is None:
            raise NotFoundError(f"Character {character_id} not found")
        return self._row_to_model(row)

    async def create(self, data: CharacterCreate) -> Character:
        """Create a new character. Insert and re-read share one transaction."""
        character_id = str(uuid4())
        now = now_utc()
        values = self._to_columns(data.model_dump(mode="json"))
        values.update(id=character_id, created=now, modified=now)

        with wrap_database_errors("creating character"):
            async with self._db.transaction() as tx:
                await tx.execute(insert(characters_table).values(**values))
                row = await tx.fetch_one(
                    select(characters_table).where(_c.id == character_id)
                )

        logger.info("Created character %s", character_id)
        return self._row_to_model(row)

    async def update(self, character_id: str, data: CharacterUpdate) -> Character:
        """
        Update the fields explicitly set on ``data``.

        ``modified`` is refreshed whenever at least one field is written.
        Required fields explicitly set to null are ignored.
        """
        changes = data.model_dump(mode="json", exclude_unset=True)
        for field in REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                del changes[field]

        with wrap_database_errors("updating character"):
            async with self._db.transaction() as tx:
                select_one = select(characters_table).where(_c.id == character_id)
                row = await tx.fetch_one(select_one)
                if row is None:
                    raise NotFoundError(f"Character {character_id} not found")

                if changes:
                    values = self._to_columns(changes)
                    values["modified"] = now_utc()
                    await tx.execute(
                        update(characters_table)
                        .where(_c.id == character_id)
                        .values(**values)
                    )
                    row = await tx.fetch_one(select_one)

        return self._row_to_model(row)

    async def delete(self, character_id: str) -> Character:
        """Delete a character and return the deleted snapshot."""
        with wrap_database_errors("deleting character"):
            async with self._db.transaction() as tx:
                row = await tx.fetch_one(
                    select(characters_table).where(_c.id == character_id)
                )
                if row is None:
                    raise NotFoundError(f"Character {character_id} not found")
                await tx.execute(delete(characters_table).where(_c.id == character_id))

        logger.info("Deleted character %s", character_id)
        return self._row_to_model(row)
