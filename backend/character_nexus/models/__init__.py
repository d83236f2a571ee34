"""Pydantic models (schemas) for the application."""

from character_nexus.models.enums import (
    ContentRating,
    ExportFormat,
    MessageRole,
    RelationshipType,
    SortOrder,
)
from character_nexus.models.character import (
    Character,
    CharacterCreate,
    CharacterPage,
    CharacterUpdate,
    ExampleDialogue,
    Relationship,
)
from character_nexus.models.conversation import (
    ChatImportRequest,
    Conversation,
    ConversationCreate,
    ConversationPage,
    ConversationWithMessages,
    ExportedChat,
    ImportedChat,
    ImportedChatMessage,
    Message,
    MessageCreate,
)
from character_nexus.models.imports import (
    BulkImportResult,
    ImportUrlRequest,
    JsonImportRequest,
    ScrapedCharacter,
)
from character_nexus.models.universe import GroupCreate, UniverseCreate

__all__ = [
    # Enums
    "ContentRating",
    "ExportFormat",
    "MessageRole",
    "RelationshipType",
    "SortOrder",
    # Character
    "Character",
    "CharacterCreate",
    "CharacterUpdate",
    "CharacterPage",
    "ExampleDialogue",
    "Relationship",
    # Conversation
    "Conversation",
    "ConversationCreate",
    "ConversationPage",
    "ConversationWithMessages",
    "Message",
    "MessageCreate",
    "ImportedChat",
    "ImportedChatMessage",
    "ChatImportRequest",
    "ExportedChat",
    # Import
    "ImportUrlRequest",
    "JsonImportRequest",
    "ScrapedCharacter",
    "BulkImportResult",
    # Universe
    "UniverseCreate",
    "GroupCreate",
]
