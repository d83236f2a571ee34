"""
Dependency injection for API endpoints.

Repositories are built per request around the Database handle that the
application lifespan stores on ``app.state.db``. Stateless collaborators are
cached process-wide.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from character_nexus.infrastructure.local.database import Database
from character_nexus.interfaces.character_repository import ICharacterRepository
from character_nexus.interfaces.character_scraper import ICharacterScraper
from character_nexus.interfaces.conversation_repository import IConversationRepository
from character_nexus.interfaces.image_store import IImageStore
from character_nexus.services.import_service import ImportService


def get_database(request: Request) -> Database:
    """Get the Database handle owned by the application."""
    return request.app.state.db


DB = Annotated[Database, Depends(get_database)]


# ===========================================
# Repository Dependencies
# ===========================================


def get_character_repository(db: DB) -> ICharacterRepository:
    """Get character repository instance."""
    from character_nexus.infrastructure.local.character_repository import SqliteCharacterRepository

    return SqliteCharacterRepository(db)


def get_conversation_repository(db: DB) -> IConversationRepository:
    """Get conversation repository instance."""
    from character_nexus.infrastructure.local.conversation_repository import (
        SqliteConversationRepository,
    )

    return SqliteConversationRepository(db)


# ===========================================
# Collaborator Dependencies
# ===========================================


@lru_cache()
def get_image_store() -> IImageStore:
    """Get image store instance."""
    from character_nexus.infrastructure.local.image_store import LocalImageStore

    return LocalImageStore()


@lru_cache()
def get_character_scraper() -> ICharacterScraper:
    """Get character scraper instance."""
    from character_nexus.infrastructure.local.character_scraper import HttpCharacterScraper

    return HttpCharacterScraper()


CharacterRepo = Annotated[ICharacterRepository, Depends(get_character_repository)]
ConversationRepo = Annotated[IConversationRepository, Depends(get_conversation_repository)]
ImageStore = Annotated[IImageStore, Depends(get_image_store)]
CharacterScraper = Annotated[ICharacterScraper, Depends(get_character_scraper)]


def get_import_service(
    characters: CharacterRepo,
    scraper: CharacterScraper,
    images: ImageStore,
) -> ImportService:
    """Get import service instance."""
    return ImportService(characters, scraper, images)


Importer = Annotated[ImportService, Depends(get_import_service)]
