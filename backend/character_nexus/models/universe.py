"""
Universe and group schemas.

These are validated input shapes only; neither is persisted yet.
"""

from typing import Optional

from pydantic import Field

from character_nexus.models.base import CamelModel
from character_nexus.models.character import RequiredName

DESCRIPTION_MAX_LENGTH = 5_000


class UniverseCreate(CamelModel):
    name: RequiredName
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)


class GroupCreate(CamelModel):
    name: RequiredName
    universe: RequiredName
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    characters: Optional[list[str]] = None
