"""
Character import model definitions.
"""

from typing import Any, Optional

from pydantic import Field, field_validator

from character_nexus.models.base import CamelModel
from character_nexus.models.character import URL_MAX_LENGTH, validate_uri
from character_nexus.models.enums import ContentRating


class ImportUrlRequest(CamelModel):
    """Schema for importing a character from a page URL."""

    url: str = Field(..., min_length=1, max_length=URL_MAX_LENGTH)

    @field_validator("url")
    @classmethod
    def check_uri(cls, v: str) -> str:
        return validate_uri(v)


class ScrapedCharacter(CamelModel):
    """Metadata extracted from a character page."""

    name: str
    bio: Optional[str] = None
    personality: Optional[str] = None
    scenario: Optional[str] = None
    intro_message: Optional[str] = None
    image_url: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    content_rating: ContentRating = ContentRating.SFW
    source: str
    last_synced_from: Optional[str] = None


class JsonImportRequest(CamelModel):
    """Request body for bulk JSON import. Entries are validated one by one."""

    characters: Any = None


class ImportedCharacterRef(CamelModel):
    id: str
    name: str


class FailedImport(CamelModel):
    name: str
    error: str


class BulkImportResult(CamelModel):
    """Outcome of a bulk import; each entry succeeds or fails independently."""

    success: list[ImportedCharacterRef] = Field(default_factory=list)
    failed: list[FailedImport] = Field(default_factory=list)
