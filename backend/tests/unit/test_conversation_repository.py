"""
Tests for the SQLite conversation repository.
"""

import json
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from character_nexus.core.exceptions import BadRequestError, DatabaseError, NotFoundError, ValidationError
from character_nexus.infrastructure.local.database import Executor, conversations_table
from character_nexus.models.conversation import (
    ConversationCreate,
    ImportedChat,
    MessageCreate,
)
from character_nexus.models.enums import MessageRole


@pytest.mark.asyncio
async def test_create_conversation_defaults(conversation_repo):
    conversation = await conversation_repo.create(ConversationCreate())

    assert conversation.title == "New Conversation"
    assert conversation.message_count == 0
    assert conversation.character_id is None
    assert conversation.metadata == {}
    assert conversation.created == conversation.modified


@pytest.mark.asyncio
async def test_create_requires_existing_character(conversation_repo, make_character):
    with pytest.raises(NotFoundError):
        await conversation_repo.create(ConversationCreate(character_id="ghost"))

    character = await make_character()
    conversation = await conversation_repo.create(
        ConversationCreate(character_id=character.id, metadata={"k": [1, 2]})
    )
    assert conversation.character_id == character.id
    assert conversation.metadata == {"k": [1, 2]}


@pytest.mark.asyncio
async def test_deleting_character_unlinks_conversations(
    conversation_repo, character_repo, make_character
):
    character = await make_character()
    conversation = await conversation_repo.create(ConversationCreate(character_id=character.id))

    await character_repo.delete(character.id)

    assert (await conversation_repo.get(conversation.id)).character_id is None


@pytest.mark.asyncio
async def test_messages_get_dense_order_regardless_of_timestamps(conversation_repo):
    conversation = await conversation_repo.create(ConversationCreate(title="Chat"))
    inputs = [
        MessageCreate(role="user", content="first", timestamp=datetime(2030, 1, 1, tzinfo=timezone.utc)),
        MessageCreate(role="assistant", content="second", timestamp=datetime(2000, 1, 1, tzinfo=timezone.utc)),
        MessageCreate(content="third"),
    ]

    messages = await conversation_repo.create_messages(conversation.id, inputs)

    assert [m.order_index for m in messages] == [0, 1, 2]
    assert [m.content for m in messages] == ["first", "second", "third"]
    assert messages[2].role == MessageRole.USER
    assert messages[2].timestamp.tzinfo is not None
    assert await conversation_repo.list_messages(conversation.id) == messages


@pytest.mark.asyncio
async def test_second_batch_continues_order_and_count(conversation_repo):
    conversation = await conversation_repo.create(ConversationCreate())
    await conversation_repo.create_messages(
        conversation.id, [MessageCreate(content="a"), MessageCreate(content="b")]
    )

    messages = await conversation_repo.create_messages(
        conversation.id, [MessageCreate(content="c")]
    )

    assert [m.order_index for m in messages] == [0, 1, 2]
    updated = await conversation_repo.get(conversation.id)
    assert updated.message_count == 3
    assert updated.modified > conversation.modified


@pytest.mark.asyncio
async def test_message_content_is_sanitized(conversation_repo):
    conversation = await conversation_repo.create(ConversationCreate())

    messages = await conversation_repo.create_messages(
        conversation.id, [MessageCreate(content="<b>hi</b><script>x()</script>")]
    )

    assert messages[0].content == "<b>hi</b>"


@pytest.mark.asyncio
async def test_failed_batch_leaves_no_messages(conversation_repo, monkeypatch):
    conversation = await conversation_repo.create(ConversationCreate())
    original_execute = Executor.execute

    async def failing_execute(self, statement):
        if getattr(statement, "is_update", False) and statement.table is conversations_table:
            raise OperationalError("UPDATE conversations", {}, Exception("disk I/O error"))
        return await original_execute(self, statement)

    monkeypatch.setattr(Executor, "execute", failing_execute)

    with pytest.raises(DatabaseError):
        await conversation_repo.create_messages(
            conversation.id, [MessageCreate(content="a"), MessageCreate(content="b")]
        )

    monkeypatch.undo()
    assert await conversation_repo.list_messages(conversation.id) == []
    assert (await conversation_repo.get(conversation.id)).message_count == 0


@pytest.mark.asyncio
async def test_messages_for_unknown_conversation(conversation_repo):
    with pytest.raises(NotFoundError):
        await conversation_repo.list_messages("missing")
    with pytest.raises(NotFoundError):
        await conversation_repo.create_messages("missing", [MessageCreate(content="x")])


@pytest.mark.asyncio
async def test_delete_cascades_messages(conversation_repo):
    conversation = await conversation_repo.create(ConversationCreate())
    await conversation_repo.create_messages(conversation.id, [MessageCreate(content="x")])

    await conversation_repo.delete(conversation.id)

    with pytest.raises(NotFoundError):
        await conversation_repo.list_messages(conversation.id)
    with pytest.raises(NotFoundError):
        await conversation_repo.delete(conversation.id)


@pytest.mark.asyncio
async def test_list_filters_and_sorts(conversation_repo, make_character):
    character = await make_character()
    older = await conversation_repo.create(ConversationCreate(title="b", character_id=character.id))
    newer = await conversation_repo.create(ConversationCreate(title="a", character_id=character.id))
    await conversation_repo.create(ConversationCreate(title="c"))

    by_character = await conversation_repo.list(character_id=character.id)
    assert [c.id for c in by_character] == [newer.id, older.id]

    by_title = await conversation_repo.list(sort_by="title", sort_order="asc", limit=2)
    assert [c.title for c in by_title] == ["a", "b"]

    await conversation_repo.create_messages(older.id, [MessageCreate(content="x")])
    by_count = await conversation_repo.list(sort_by="messageCount", sort_order="desc", limit=1)
    assert by_count[0].id == older.id

    with pytest.raises(ValidationError):
        await conversation_repo.list(sort_by="persona_name")


@pytest.mark.asyncio
async def test_import_chat_normalizes_synonyms(conversation_repo):
    chat = ImportedChat.model_validate(
        {
            "characterName": "Aria",
            "userName": "Sam",
            "sourceUrl": "https://janitorai.com/chats/1",
            "metadata": {"exporter": "v2"},
            "messages": [
                {"isUser": True, "text": "hello", "createdAt": "2024-01-01T00:00:00.000Z"},
                {"role": "assistant", "content": "hi Sam"},
                {"content": "no role"},
            ],
        }
    )

    imported = await conversation_repo.import_chat(chat)

    assert imported.title == "Aria"
    assert imported.persona_name == "Sam"
    assert imported.source_url == "https://janitorai.com/chats/1"
    assert imported.message_count == 3
    assert imported.metadata["originalData"] == {"exporter": "v2"}
    assert "importedAt" in imported.metadata
    assert [m.role for m in imported.messages] == [
        MessageRole.USER,
        MessageRole.ASSISTANT,
        MessageRole.ASSISTANT,
    ]
    assert imported.messages[0].content == "hello"
    assert imported.messages[0].timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_import_chat_default_title_and_unknown_character(conversation_repo):
    imported = await conversation_repo.import_chat(ImportedChat(messages=[]))
    assert imported.title == "Imported Chat"
    assert imported.messages == []

    with pytest.raises(NotFoundError):
        await conversation_repo.import_chat(ImportedChat(title="x"), character_id="ghost")


@pytest.mark.asyncio
async def test_export_jsonl(conversation_repo):
    conversation = await conversation_repo.create(ConversationCreate())
    await conversation_repo.create_messages(
        conversation.id,
        [
            MessageCreate(
                role="user",
                content="hi",
                timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
            )
        ],
    )

    exported = await conversation_repo.export_conversation(conversation.id, "jsonl")

    assert exported.content == '{"name":"User","is_user":true,"send_date":1704067200000,"mes":"hi"}'
    assert exported.media_type == "application/x-ndjson"
    assert exported.filename == f"chat-{conversation.id}.jsonl"


@pytest.mark.asyncio
async def test_export_json_embeds_messages(conversation_repo):
    conversation = await conversation_repo.create(ConversationCreate(title="T"))
    await conversation_repo.create_messages(conversation.id, [MessageCreate(content="x")])

    exported = await conversation_repo.export_conversation(conversation.id, "JSON")
    document = json.loads(exported.content)

    assert document["id"] == conversation.id
    assert document["messageCount"] == 1
    assert document["messages"][0]["orderIndex"] == 0


@pytest.mark.asyncio
async def test_export_rejects_unknown_format(conversation_repo):
    conversation = await conversation_repo.create(ConversationCreate())

    with pytest.raises(BadRequestError) as exc_info:
        await conversation_repo.export_conversation(conversation.id, "xml")

    assert "json, txt, markdown, jsonl" in exc_info.value.message


@pytest.mark.asyncio
async def test_export_unknown_conversation(conversation_repo):
    with pytest.raises(NotFoundError):
        await conversation_repo.export_conversation("missing", "json")
