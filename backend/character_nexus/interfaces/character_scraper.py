"""
Character scraper interface.
"""

from abc import ABC, abstractmethod

from character_nexus.models.imports import ScrapedCharacter


class ICharacterScraper(ABC):
    """Fetches a character page and extracts its metadata."""

    @abstractmethod
    async def scrape(self, url: str) -> ScrapedCharacter:
        """
        Scrape a character page.

        Raises:
            ScrapingError: If the page cannot be fetched or has no usable data
        """
        pass
