"""
Enum definitions for the application.

These enums are used across models and provide type-safe values for
constrained fields.
"""

from enum import Enum


class ContentRating(str, Enum):
    """Character content rating."""

    SFW = "sfw"
    NSFW = "nsfw"


class RelationshipType(str, Enum):
    """Kind of relationship between two characters."""

    ALLY = "ally"
    FRIEND = "friend"
    BEST_FRIEND = "best-friend"
    RIVAL = "rival"
    ENEMY = "enemy"
    MENTOR = "mentor"
    STUDENT = "student"
    FAMILY = "family"
    ROMANTIC = "romantic"
    NEUTRAL = "neutral"
    UNKNOWN = "unknown"


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class SortOrder(str, Enum):
    """Sort direction for list queries."""

    ASC = "asc"
    DESC = "desc"


class ExportFormat(str, Enum):
    """
    Chat export format.

    MARKDOWN also answers to "md", JSONL to "sillytavern".
    """

    JSON = "json"
    TXT = "txt"
    MARKDOWN = "markdown"
    JSONL = "jsonl"

    @classmethod
    def parse(cls, value: str) -> "ExportFormat":
        """Resolve a user-supplied format name, including aliases."""
        normalized = value.strip().lower()
        normalized = _EXPORT_FORMAT_ALIASES.get(normalized, normalized)
        return cls(normalized)


_EXPORT_FORMAT_ALIASES = {
    "md": ExportFormat.MARKDOWN.value,
    "sillytavern": ExportFormat.JSONL.value,
}
