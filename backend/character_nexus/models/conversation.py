"""
Conversation and message model definitions.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from character_nexus.models.base import CamelModel
from character_nexus.models.enums import MessageRole

DEFAULT_CONVERSATION_TITLE = "New Conversation"
DEFAULT_IMPORTED_TITLE = "Imported Chat"


class ConversationCreate(CamelModel):
    """Schema for creating a conversation."""

    character_id: Optional[str] = None
    title: str = DEFAULT_CONVERSATION_TITLE
    persona_name: Optional[str] = None
    source_url: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class Conversation(CamelModel):
    """Complete conversation model."""

    id: str
    character_id: Optional[str] = None
    title: str = DEFAULT_CONVERSATION_TITLE
    persona_name: Optional[str] = None
    message_count: int = 0
    source_url: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created: datetime
    modified: datetime


class ConversationPage(CamelModel):
    """Paginated conversation list."""

    data: list[Conversation]
    limit: int
    offset: int


class MessageCreate(CamelModel):
    """Schema for appending a message to a conversation."""

    role: MessageRole = MessageRole.USER
    content: str = ""
    timestamp: Optional[datetime] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class Message(CamelModel):
    """Complete message model."""

    id: str
    conversation_id: str
    role: MessageRole
    content: str
    timestamp: datetime
    order_index: int
    metadata: dict[str, Any] = Field(default_factory=dict)


class ConversationWithMessages(Conversation):
    """Conversation with its messages in order."""

    messages: list[Message] = Field(default_factory=list)


class ImportedChatMessage(CamelModel):
    """
    A message in an externally produced chat log.

    Several field-name synonyms are accepted; see to_message_create().
    """

    role: Optional[MessageRole] = None
    is_user: Optional[bool] = None
    content: Optional[str] = None
    text: Optional[str] = None
    timestamp: Optional[datetime] = None
    created_at: Optional[datetime] = None
    metadata: Optional[dict[str, Any]] = None

    def to_message_create(self) -> MessageCreate:
        """Collapse synonyms into a MessageCreate."""
        if self.role is not None:
            role = self.role
        else:
            role = MessageRole.USER if self.is_user else MessageRole.ASSISTANT
        return MessageCreate(
            role=role,
            content=self.content or self.text or "",
            timestamp=self.timestamp or self.created_at,
            metadata=self.metadata or {},
        )


class ImportedChat(CamelModel):
    """An externally produced chat log."""

    title: Optional[str] = None
    character_name: Optional[str] = None
    persona_name: Optional[str] = None
    user_name: Optional[str] = None
    source_url: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    messages: list[ImportedChatMessage] = Field(default_factory=list)

    def resolved_title(self) -> str:
        return self.title or self.character_name or DEFAULT_IMPORTED_TITLE

    def resolved_persona_name(self) -> Optional[str]:
        return self.persona_name or self.user_name


class ChatImportRequest(CamelModel):
    """Request body for importing a chat log."""

    chat_data: ImportedChat
    character_id: Optional[str] = None


class ExportedChat(CamelModel):
    """A rendered conversation export."""

    content: str
    media_type: str
    filename: str
