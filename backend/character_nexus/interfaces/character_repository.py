"""
Character repository interface.

Defines the contract for character data operations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from character_nexus.models.character import Character, CharacterCreate, CharacterUpdate


class ICharacterRepository(ABC):
    """Interface for character repository operations."""

    @abstractmethod
    async def list(
        self,
        universe: Optional[str] = None,
        content_rating: Optional[str] = None,
        search: Optional[str] = None,
        limit: Any = None,
        offset: Any = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> list[Character]:
        """List characters matching every provided filter."""
        pass

    @abstractmethod
    async def count(
        self,
        universe: Optional[str] = None,
        content_rating: Optional[str] = None,
    ) -> int:
        """Count characters matching the universe/rating filters."""
        pass

    @abstractmethod
    async def get(self, character_id: str) -> Character:
        """Get a character by ID. Raises NotFoundError if absent."""
        pass

    @abstractmethod
    async def create(self, data: CharacterCreate) -> Character:
        """Create a new character and return its stored form."""
        pass

    @abstractmethod
    async def update(self, character_id: str, data: CharacterUpdate) -> Character:
        """Apply the explicitly set fields of ``data``."""
        pass

    @abstractmethod
    async def delete(self, character_id: str) -> Character:
        """Delete a character and return the deleted snapshot."""
        pass
