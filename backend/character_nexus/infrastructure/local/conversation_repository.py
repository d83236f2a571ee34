"""
SQLite implementation of Conversation repository.

Conversations own their messages; the messages table cascades on delete.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import delete, func, insert, select, update

from character_nexus.core.exceptions import NotFoundError
from character_nexus.infrastructure.local.database import (
    Database,
    Executor,
    characters_table,
    conversations_table,
    messages_table,
    wrap_database_errors,
)
from character_nexus.interfaces.conversation_repository import IConversationRepository
from character_nexus.models.conversation import (
    Conversation,
    ConversationCreate,
    ConversationWithMessages,
    ExportedChat,
    ImportedChat,
    Message,
    MessageCreate,
)
from character_nexus.services.chat_export import export_chat
from character_nexus.utils.datetime_utils import now_utc
from character_nexus.utils.json_columns import dump_json, load_json_object
from character_nexus.utils.pagination import clamp_pagination, resolve_order_by
from character_nexus.utils.sanitize import sanitize_html

logger = logging.getLogger(__name__)

_cv = conversations_table.c
_m = messages_table.c

SORT_COLUMNS = {
    "title": _cv.title,
    "created": _cv.created,
    "modified": _cv.modified,
    "messageCount": _cv.message_count,
    "message_count": _cv.message_count,
}
DEFAULT_SORT = "modified"


def _conversation_from_row(row: dict[str, Any]) -> Conversation:
    data = dict(row)
    data["metadata"] = load_json_object(data.get("metadata"))
    return Conversation.model_validate(data)


def _message_from_row(row: dict[str, Any]) -> Message:
    data = dict(row)
    data["metadata"] = load_json_object(data.get("metadata"))
    return Message.model_validate(data)


class SqliteConversationRepository(IConversationRepository):
    """SQLite implementation of conversation repository."""

    def __init__(self, db: Database):
        self._db = db

    async def _require_conversation(self, tx: Executor, conversation_id: str) -> dict[str, Any]:
        row = await tx.fetch_one(
            select(conversations_table).where(_cv.id == conversation_id)
        )
        if row is None:
            raise NotFoundError(f"Conversation {conversation_id} not found")
        return row

    async def _insert_conversation(self, tx: Executor, data: ConversationCreate) -> str:
        if data.character_id is not None:
            character = await tx.fetch_one(
                select(characters_table.c.id).where(characters_table.c.id == data.character_id)
            )
            if character is None:
                raise NotFoundError(f"Character {data.character_id} not found")

        conversation_id = str(uuid4())
        now = now_utc()
        await tx.execute(
            insert(conversations_table).values(
                id=conversation_id,
                character_id=data.character_id,
                title=data.title or "New Conversation",
                persona_name=data.persona_name,
                message_count=0,
                source_url=data.source_url,
                metadata=dump_json(data.metadata, {}),
                created=now,
                modified=now,
            )
        )
        return conversation_id

    async def _select_messages(self, tx: Executor, conversation_id: str) -> list[Message]:
        rows = await tx.fetch_all(
            select(messages_table)
            .where(_m.conversation_id == conversation_id)
            .order_by(_m.order_index.asc())
        )
        return [_message_from_row(row) for row in rows]

    async def _append_messages(
        self, tx: Executor, conversation_id: str, messages: list[MessageCreate]
    ) -> None:
        """Insert messages after the current last order_index and update the count."""
        if not messages:
            return

        row = await tx.fetch_one(
            select(func.coalesce(func.max(_m.order_index) + 1, 0).label("next_index"))
            .where(_m.conversation_id == conversation_id)
        )
        next_index = int(row["next_index"]) if row else 0
        now = now_utc()

        values = [
            {
                "id": str(uuid4()),
                "conversation_id": conversation_id,
                "role": message.role.value,
                "content": sanitize_html(message.content),
                "timestamp": message.timestamp or now,
                "order_index": next_index + position,
                "metadata": dump_json(message.metadata, {}),
            }
            for position, message in enumerate(messages)
        ]
        await tx.execute(insert(messages_table).values(values))
        await tx.execute(
            update(conversations_table)
            .where(_cv.id == conversation_id)
            .values(message_count=next_index + len(values), modified=now)
        )

    async def list(
        self,
        character_id: Optional[str] = None,
        limit: Any = None,
        offset: Any = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> list[Conversation]:
        """List conversations, newest activity first by default."""
        order_by = resolve_order_by(sort_by, sort_order, SORT_COLUMNS, DEFAULT_SORT)
        limit, offset = clamp_pagination(limit, offset)

        query = select(conversations_table)
        if character_id:
            query = query.where(_cv.character_id == character_id)
        query = query.order_by(order_by, _cv.id).limit(limit).offset(offset)

        with wrap_database_errors("listing conversations"):
            rows = await self._db.fetch_all(query)
        return [_conversation_from_row(row) for row in rows]

    async def get(self, conversation_id: str) -> Conversation:
        with wrap_database_errors("loading conversation"):
            row = await self._db.fetch_one(
                select(conversations_table).where(_cv.id == conversation_id)
            )
        if row is None:
            raise NotFoundError(f"Conversation {conversation_id} not found")
        return _conversation_from_row(row)

    async def create(self, data: ConversationCreate) -> Conversation:
        """Create an empty conversation. A given character_id must exist."""
        with wrap_database_errors("creating conversation"):
            async with self._db.transaction() as tx:
                conversation_id = await self._insert_conversation(tx, data)
                row = await self._require_conversation(tx, conversation_id)

        logger.info("Created conversation %s", conversation_id)
        return _conversation_from_row(row)

    async def delete(self, conversation_id: str) -> None:
        with wrap_database_errors("deleting conversation"):
            async with self._db.transaction() as tx:
                await self._require_conversation(tx, conversation_id)
                await tx.execute(
                    delete(conversations_table).where(_cv.id == conversation_id)
                )
        logger.info("Deleted conversation %s", conversation_id)

    async def list_messages(self, conversation_id: str) -> list[Message]:
        with wrap_database_errors("listing messages"):
            async with self._db.transaction() as tx:
                await self._require_conversation(tx, conversation_id)
                return await self._select_messages(tx, conversation_id)

    async def create_messages(
        self, conversation_id: str, messages: list[MessageCreate]
    ) -> list[Message]:
        """
        Append messages to a conversation.

        All messages are written in one transaction together with the updated
        message_count, so a failure leaves the conversation untouched.
        """
        with wrap_database_errors("creating messages"):
            async with self._db.transaction() as tx:
                await self._require_conversation(tx, conversation_id)
                await self._append_messages(tx, conversation_id, messages)
                return await self._select_messages(tx, conversation_id)

    async def import_chat(
        self, chat: ImportedChat, character_id: Optional[str] = None
    ) -> ConversationWithMessages:
        """Store an external chat log as a new conversation with its messages."""
        data = ConversationCreate(
            character_id=character_id,
            title=chat.resolved_title(),
            persona_name=chat.resolved_persona_name(),
            source_url=chat.source_url,
            metadata={
                "importedAt": now_utc().isoformat(),
                "originalData": chat.metadata or {},
            },
        )
        messages = [message.to_message_create() for message in chat.messages]

        with wrap_database_errors("importing chat"):
            async with self._db.transaction() as tx:
                conversation_id = await self._insert_conversation(tx, data)
                await self._append_messages(tx, conversation_id, messages)
                row = await self._require_conversation(tx, conversation_id)
                stored_messages = await self._select_messages(tx, conversation_id)

        logger.info(
            "Imported chat %s with %d messages", conversation_id, len(stored_messages)
        )
        conversation = _conversation_from_row(row)
        return ConversationWithMessages(**conversation.model_dump(), messages=stored_messages)

    async def export_conversation(self, conversation_id: str, format: str) -> ExportedChat:
        with wrap_database_errors("exporting conversation"):
            async with self._db.transaction() as tx:
                row = await self._require_conversation(tx, conversation_id)
                messages = await self._select_messages(tx, conversation_id)
        return export_chat(_conversation_from_row(row), messages, format)
