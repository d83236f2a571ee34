"""Abstract interfaces for infrastructure abstraction."""

from character_nexus.interfaces.character_repository import ICharacterRepository
from character_nexus.interfaces.character_scraper import ICharacterScraper
from character_nexus.interfaces.conversation_repository import IConversationRepository
from character_nexus.interfaces.image_store import IImageStore

__all__ = [
    "ICharacterRepository",
    "IConversationRepository",
    "ICharacterScraper",
    "IImageStore",
]
