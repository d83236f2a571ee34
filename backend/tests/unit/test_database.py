"""
Tests for the persistence gateway.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError

from character_nexus.core.exceptions import DatabaseError, DatabaseNotInitializedError
from character_nexus.infrastructure.local.database import (
    Database,
    characters_table,
    conversations_table,
    messages_table,
    wrap_database_errors,
)

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _character_row(character_id="c1", name="Aria"):
    return {
        "id": character_id,
        "name": name,
        "universe": "Starfall",
        "created": NOW,
        "modified": NOW,
    }


@pytest.mark.asyncio
async def test_operations_before_init_fail_fast(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'db.sqlite'}")

    with pytest.raises(DatabaseNotInitializedError):
        await database.fetch_all(select(characters_table))

    with pytest.raises(DatabaseNotInitializedError):
        async with database.transaction():
            pass


@pytest.mark.asyncio
async def test_init_twice_raises(db):
    with pytest.raises(RuntimeError):
        await db.init()


@pytest.mark.asyncio
async def test_close_is_idempotent(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'db.sqlite'}")
    await database.init()

    await database.close()
    await database.close()

    assert not database.is_initialized
    with pytest.raises(DatabaseNotInitializedError):
        await database.fetch_one(select(characters_table))


@pytest.mark.asyncio
async def test_init_creates_parent_directory(tmp_path):
    path = tmp_path / "nested" / "dir" / "db.sqlite"
    database = Database(f"sqlite+aiosqlite:///{path}")
    await database.init()
    try:
        assert path.parent.is_dir()
    finally:
        await database.close()


@pytest.mark.asyncio
async def test_execute_and_fetch(db):
    result = await db.execute(insert(characters_table).values(**_character_row()))
    assert result.rows_affected == 1

    row = await db.fetch_one(select(characters_table).where(characters_table.c.id == "c1"))
    assert row["name"] == "Aria"
    assert row["created"] == NOW
    assert row["created"].tzinfo is not None

    assert await db.fetch_one(select(characters_table).where(characters_table.c.id == "nope")) is None
    assert len(await db.fetch_all(select(characters_table))) == 1


@pytest.mark.asyncio
async def test_values_are_bound_parameters(db):
    hostile = "Robert'); DROP TABLE characters;--"
    await db.execute(insert(characters_table).values(**_character_row(name=hostile)))

    rows = await db.fetch_all(select(characters_table).where(characters_table.c.name == hostile))
    assert [row["name"] for row in rows] == [hostile]


@pytest.mark.asyncio
async def test_transaction_commits(db):
    async with db.transaction() as tx:
        await tx.execute(insert(characters_table).values(**_character_row("c1")))
        await tx.execute(insert(characters_table).values(**_character_row("c2")))

    assert len(await db.fetch_all(select(characters_table))) == 2


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_error(db):
    with pytest.raises(ValueError):
        async with db.transaction() as tx:
            await tx.execute(insert(characters_table).values(**_character_row("c1")))
            raise ValueError("boom")

    assert await db.fetch_all(select(characters_table)) == []


@pytest.mark.asyncio
async def test_foreign_keys_are_enforced(db):
    with pytest.raises(IntegrityError):
        await db.execute(
            insert(messages_table).values(
                id="m1",
                conversation_id="missing",
                role="user",
                content="hi",
                timestamp=NOW,
                order_index=0,
                metadata="{}",
            )
        )


@pytest.mark.asyncio
async def test_conversation_delete_cascades_to_messages(db):
    async with db.transaction() as tx:
        await tx.execute(
            insert(conversations_table).values(
                id="conv", title="t", message_count=1, metadata="{}", created=NOW, modified=NOW
            )
        )
        await tx.execute(
            insert(messages_table).values(
                id="m1",
                conversation_id="conv",
                role="user",
                content="hi",
                timestamp=NOW,
                order_index=0,
                metadata="{}",
            )
        )

    await db.execute(conversations_table.delete().where(conversations_table.c.id == "conv"))

    assert await db.fetch_all(select(messages_table)) == []


@pytest.mark.asyncio
async def test_wrap_database_errors_hides_cause(db):
    await db.execute(insert(characters_table).values(**_character_row("c1")))

    with pytest.raises(DatabaseError) as exc_info:
        with wrap_database_errors("inserting duplicate"):
            await db.execute(insert(characters_table).values(**_character_row("c1")))

    assert exc_info.value.message == "Database operation failed"
    assert isinstance(exc_info.value.__cause__, IntegrityError)
