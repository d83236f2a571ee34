"""
Character import orchestration.

Sequences scrape -> image download -> create for page imports, and validates
and creates characters one by one for bulk JSON imports.
"""

import logging
from typing import Any, Optional
from urllib.parse import urlparse

from character_nexus.core.config import Settings, get_settings
from character_nexus.core.exceptions import BadRequestError, NexusError, ValidationError
from character_nexus.interfaces.character_repository import ICharacterRepository
from character_nexus.interfaces.character_scraper import ICharacterScraper
from character_nexus.interfaces.image_store import IImageStore
from character_nexus.models.character import (
    BIO_MAX_LENGTH,
    INTRO_MESSAGE_MAX_LENGTH,
    MAX_TAGS,
    NAME_MAX_LENGTH,
    PERSONALITY_MAX_LENGTH,
    SCENARIO_MAX_LENGTH,
    TAG_MAX_LENGTH,
    Character,
    CharacterCreate,
)
from character_nexus.models.imports import (
    BulkImportResult,
    FailedImport,
    ImportedCharacterRef,
    ImportUrlRequest,
    ScrapedCharacter,
)
from character_nexus.services.validation import validate

logger = logging.getLogger(__name__)


def _url_error(message: str) -> ValidationError:
    return ValidationError(message, fields=[{"field": "url", "message": message}])


def _clip(value: Optional[str], limit: int) -> Optional[str]:
    return value[:limit] if value else value


def _clip_tags(tags: list[str]) -> list[str]:
    """Trim, truncate and dedupe scraped tags, keeping at most MAX_TAGS."""
    clipped = (tag.strip()[:TAG_MAX_LENGTH] for tag in tags)
    return [tag for tag in dict.fromkeys(clipped) if tag][:MAX_TAGS]


class ImportService:
    """Imports characters from external pages and JSON documents."""

    def __init__(
        self,
        characters: ICharacterRepository,
        scraper: ICharacterScraper,
        images: IImageStore,
        settings: Optional[Settings] = None,
    ):
        self._characters = characters
        self._scraper = scraper
        self._images = images
        self._settings = settings or get_settings()

    def check_import_url(self, url: Any) -> str:
        """
        Validate an import URL against the allowed domains and paths.

        Raises:
            ValidationError: If the URL is malformed, off-domain or restricted
        """
        request: ImportUrlRequest = validate("import-url", {"url": url}).unwrap()
        parsed = urlparse(request.url)

        if parsed.scheme not in ("http", "https"):
            raise _url_error("Invalid URL format")

        allowed = self._settings.ALLOWED_SCRAPE_DOMAINS
        if (parsed.hostname or "").lower() not in allowed:
            raise _url_error(f"Invalid domain. Only {', '.join(allowed)} allowed.")

        for path in self._settings.FORBIDDEN_SCRAPE_PATHS:
            if path in parsed.path:
                raise _url_error(f"Cannot scrape from restricted page: {path}")

        return request.url

    async def _download_image(self, image_url: Optional[str]) -> Optional[str]:
        if not image_url:
            return None
        try:
            return await self._images.download(image_url)
        except NexusError as e:
            # The character is still created, just without an avatar
            logger.warning("Failed to download character image %s: %s", image_url, e.message)
            return None

    def _to_character(self, scraped: ScrapedCharacter, image: Optional[str]) -> dict[str, Any]:
        """Map scraped data onto a character, cut down to the stored field limits."""
        name = _clip(scraped.name.strip(), NAME_MAX_LENGTH)
        return {
            "name": name,
            "chatName": name,
            "universe": self._settings.IMPORT_DEFAULT_UNIVERSE,
            "image": image,
            "bio": _clip(scraped.bio, BIO_MAX_LENGTH),
            "personality": _clip(scraped.personality, PERSONALITY_MAX_LENGTH),
            "scenario": _clip(scraped.scenario, SCENARIO_MAX_LENGTH),
            "introMessage": _clip(scraped.intro_message, INTRO_MESSAGE_MAX_LENGTH),
            "tags": _clip_tags(scraped.tags),
            "contentRating": scraped.content_rating.value,
            "source": scraped.source,
            "lastSyncedFrom": scraped.last_synced_from or scraped.source,
        }

    async def import_from_url(self, url: Any) -> Character:
        """Scrape a character page and create the character it describes."""
        page_url = self.check_import_url(url)
        logger.info("Starting import from %s", page_url)

        scraped = await self._scraper.scrape(page_url)
        image = await self._download_image(scraped.image_url)

        try:
            data: CharacterCreate = validate(
                "character", self._to_character(scraped, image)
            ).unwrap()
            character = await self._characters.create(data)
        except Exception:
            # No character will reference the stored avatar
            if image:
                await self._images.delete(image)
            raise

        logger.info(
            "Imported character %s (%s), image: %s", character.id, character.name, bool(image)
        )
        return character

    async def import_from_json(self, characters: Any) -> BulkImportResult:
        """
        Create each character independently.

        Raises:
            BadRequestError: If ``characters`` is not a non-empty list
        """
        if not isinstance(characters, list) or not characters:
            raise BadRequestError("Invalid JSON data. Expected array of characters.")

        result = BulkImportResult()
        for item in characters:
            name = "Unknown"
            if isinstance(item, dict) and item.get("name"):
                name = str(item["name"])

            validation = validate("character", item)
            if not validation.ok:
                details = "; ".join(f"{e.field}: {e.message}" for e in validation.errors)
                result.failed.append(FailedImport(name=name, error=f"Validation failed: {details}"))
                continue

            try:
                character = await self._characters.create(validation.value)
            except NexusError as e:
                result.failed.append(FailedImport(name=name, error=e.message))
                continue
            result.success.append(ImportedCharacterRef(id=character.id, name=character.name))

        logger.info(
            "Bulk import completed: %d succeeded, %d failed",
            len(result.success),
            len(result.failed),
        )
        return result
