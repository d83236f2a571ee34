"""
Conversation repository interface.

Defines the contract for conversation and message data operations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from character_nexus.models.conversation import (
    Conversation,
    ConversationCreate,
    ConversationWithMessages,
    ExportedChat,
    ImportedChat,
    Message,
    MessageCreate,
)


class IConversationRepository(ABC):
    """Interface for conversation repository operations."""

    @abstractmethod
    async def list(
        self,
        character_id: Optional[str] = None,
        limit: Any = None,
        offset: Any = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> list[Conversation]:
        """List conversations, optionally for one character."""
        pass

    @abstractmethod
    async def get(self, conversation_id: str) -> Conversation:
        """Get a conversation by ID. Raises NotFoundError if absent."""
        pass

    @abstractmethod
    async def create(self, data: ConversationCreate) -> Conversation:
        """Create an empty conversation."""
        pass

    @abstractmethod
    async def delete(self, conversation_id: str) -> None:
        """Delete a conversation and all of its messages."""
        pass

    @abstractmethod
    async def list_messages(self, conversation_id: str) -> list[Message]:
        """List messages in ascending order_index."""
        pass

    @abstractmethod
    async def create_messages(
        self, conversation_id: str, messages: list[MessageCreate]
    ) -> list[Message]:
        """Append messages atomically and return the full message list."""
        pass

    @abstractmethod
    async def import_chat(
        self, chat: ImportedChat, character_id: Optional[str] = None
    ) -> ConversationWithMessages:
        """Store an external chat log as a new conversation."""
        pass

    @abstractmethod
    async def export_conversation(self, conversation_id: str, format: str) -> ExportedChat:
        """Render a conversation in the requested export format."""
        pass
