"""
Shared fixtures: a fresh SQLite database file per test.
"""

import pytest

from character_nexus.infrastructure.local.character_repository import SqliteCharacterRepository
from character_nexus.infrastructure.local.conversation_repository import (
    SqliteConversationRepository,
)
from character_nexus.infrastructure.local.database import Database
from character_nexus.models.character import CharacterCreate


@pytest.fixture
async def db(tmp_path):
    """Initialized database backed by a temporary file."""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite'}")
    await database.init()
    yield database
    await database.close()


@pytest.fixture
def character_repo(db):
    return SqliteCharacterRepository(db)


@pytest.fixture
def conversation_repo(db):
    return SqliteConversationRepository(db)


@pytest.fixture
def make_character(character_repo):
    """Create a character with sensible defaults."""

    async def _make(**overrides):
        data = {"name": "Aria", "universe": "Starfall"}
        data.update(overrides)
        return await character_repo.create(CharacterCreate(**data))

    return _make
