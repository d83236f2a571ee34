"""
Character model definitions.

CharacterCreate doubles as the ``character`` validation schema; Character is
the canonical stored form returned to clients.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import (
    AnyUrl,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationError as PydanticValidationError,
    field_validator,
)

from character_nexus.models.base import CamelModel
from character_nexus.models.enums import ContentRating, RelationshipType

# Validation limits
NAME_MAX_LENGTH = 255
BIO_MAX_LENGTH = 10_000
PERSONALITY_MAX_LENGTH = 50_000
SCENARIO_MAX_LENGTH = 5_000
INTRO_MESSAGE_MAX_LENGTH = 2_000
NOTES_MAX_LENGTH = 50_000
DIALOGUE_LINE_MAX_LENGTH = 1_000
MAX_TAGS = 50
TAG_MAX_LENGTH = 100
URL_MAX_LENGTH = 2_083

RequiredName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=NAME_MAX_LENGTH)
]
OptionalName = Annotated[
    str, StringConstraints(strip_whitespace=True, max_length=NAME_MAX_LENGTH)
]
Tag = Annotated[str, StringConstraints(min_length=1, max_length=TAG_MAX_LENGTH)]

_URL_ADAPTER = TypeAdapter(AnyUrl)


def validate_uri(value: Optional[str]) -> Optional[str]:
    """Accept None, empty string or an absolute URI; return it unchanged."""
    if value is None or value == "":
        return value
    try:
        _URL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        raise ValueError("must be a valid uri")
    return value


class ExampleDialogue(CamelModel):
    """One user/bot exchange illustrating the character's voice."""

    user: Optional[str] = Field(None, max_length=DIALOGUE_LINE_MAX_LENGTH)
    bot: Optional[str] = Field(None, max_length=DIALOGUE_LINE_MAX_LENGTH)


class Relationship(CamelModel):
    """Link from one character to another."""

    character_id: str = Field(..., min_length=1)
    type: RelationshipType
    notes: Optional[str] = None


class CharacterCreate(CamelModel):
    """Schema for creating a character (also used for full replacement)."""

    name: RequiredName
    chat_name: Optional[OptionalName] = None
    universe: RequiredName
    image: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=BIO_MAX_LENGTH)
    personality: Optional[str] = Field(None, max_length=PERSONALITY_MAX_LENGTH)
    scenario: Optional[str] = Field(None, max_length=SCENARIO_MAX_LENGTH)
    intro_message: Optional[str] = Field(None, max_length=INTRO_MESSAGE_MAX_LENGTH)
    example_dialogues: Optional[list[ExampleDialogue]] = None
    tags: Optional[list[Tag]] = Field(None, max_length=MAX_TAGS)
    content_rating: Optional[ContentRating] = None
    notes: Optional[str] = Field(None, max_length=NOTES_MAX_LENGTH)
    relationships: Optional[list[Relationship]] = None
    custom_tags: Optional[list[Tag]] = Field(None, max_length=MAX_TAGS)
    source: Optional[str] = Field(None, max_length=URL_MAX_LENGTH)
    last_synced_from: Optional[str] = Field(None, max_length=URL_MAX_LENGTH)

    @field_validator("source", "last_synced_from")
    @classmethod
    def check_uri(cls, v: Optional[str]) -> Optional[str]:
        return validate_uri(v)


class CharacterUpdate(CharacterCreate):
    """Schema for partial updates. Only explicitly set fields are written."""

    name: Optional[RequiredName] = None
    universe: Optional[RequiredName] = None


class Character(CamelModel):
    """Complete character model."""

    id: str
    name: str
    chat_name: Optional[str] = None
    universe: str
    image: Optional[str] = None
    bio: Optional[str] = None
    personality: Optional[str] = None
    scenario: Optional[str] = None
    intro_message: Optional[str] = None
    example_dialogues: list[ExampleDialogue] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    content_rating: ContentRating = ContentRating.SFW
    notes: Optional[str] = None
    relationships: list[Relationship] = Field(default_factory=list)
    custom_tags: list[str] = Field(default_factory=list)
    source: Optional[str] = None
    last_synced_from: Optional[str] = None
    created: datetime
    modified: datetime


class CharacterPage(CamelModel):
    """Paginated character list."""

    data: list[Character]
    total: int
    limit: int
    offset: int
