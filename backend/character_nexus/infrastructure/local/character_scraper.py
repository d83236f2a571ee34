"""
HTTP character page scraper.

Fetches the page once with a fixed timeout and reads the character from the
static markup: dedicated data attributes first, then OpenGraph metadata.
There are no retries; any failure surfaces as ScrapingError.
"""

import logging
from typing import Optional
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from character_nexus.core.config import get_settings
from character_nexus.core.exceptions import ScrapingError
from character_nexus.interfaces.character_scraper import ICharacterScraper
from character_nexus.models.enums import ContentRating
from character_nexus.models.imports import ScrapedCharacter
from character_nexus.utils.sanitize import sanitize_html

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Unknown Character"
NSFW_MARKERS = ("nsfw", "18+", "adult")
USER_AGENT = "Mozilla/5.0 (compatible; CharacterNexus/0.1)"


def _text(soup: BeautifulSoup, *selectors: str) -> str:
    for selector in selectors:
        element = soup.select_one(selector)
        if element is not None:
            text = element.get_text(strip=True)
            if text:
                return text
    return ""


def _attr(soup: BeautifulSoup, selector: str, attribute: str) -> str:
    element = soup.select_one(selector)
    if element is None:
        return ""
    value = element.get(attribute) or ""
    return value.strip() if isinstance(value, str) else ""


def parse_character_page(html: str, url: str) -> ScrapedCharacter:
    """Extract character data from a page's HTML."""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(["script", "style", "noscript"]):
        element.decompose()

    name = (
        _text(soup, "h1", "[data-character-name]")
        or _attr(soup, 'meta[property="og:title"]', "content")
        or (soup.title.get_text(strip=True) if soup.title else "")
        or DEFAULT_NAME
    )
    bio = _text(soup, "[data-character-bio]", ".character-bio") or _attr(
        soup, 'meta[property="og:description"]', "content"
    )
    image_url = (
        _attr(soup, 'meta[property="og:image"]', "content")
        or _attr(soup, "img[data-character-image]", "src")
        or _attr(soup, ".character-image img", "src")
        or _attr(soup, "img", "src")
    )

    tags = [el.get_text(strip=True) for el in soup.select("[data-tag], .character-tag")]
    if not tags:
        keywords = _attr(soup, 'meta[name="keywords"]', "content")
        tags = [keyword.strip() for keyword in keywords.split(",")]
    tags = [tag for tag in dict.fromkeys(tags) if tag]

    body_text = soup.get_text(" ", strip=True).lower()
    rating = (
        ContentRating.NSFW
        if any(marker in body_text for marker in NSFW_MARKERS)
        else ContentRating.SFW
    )

    return ScrapedCharacter(
        name=name,
        bio=sanitize_html(bio),
        personality=sanitize_html(_text(soup, "[data-character-personality]", ".character-personality")),
        scenario=sanitize_html(_text(soup, "[data-character-scenario]", ".character-scenario")),
        intro_message=sanitize_html(_text(soup, "[data-character-intro]", ".character-intro")),
        image_url=urljoin(url, image_url) if image_url else None,
        tags=tags,
        content_rating=rating,
        source=url,
        last_synced_from=url,
    )


class HttpCharacterScraper(ICharacterScraper):
    """Scrapes character pages over plain HTTP."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize scraper.

        Args:
            timeout: Request timeout in seconds (default: SCRAPE_TIMEOUT_SECONDS)
            transport: Optional httpx transport (for testing)
        """
        self.timeout = timeout or get_settings().SCRAPE_TIMEOUT_SECONDS
        self._transport = transport

    async def scrape(self, url: str) -> ScrapedCharacter:
        logger.info("Scraping character page %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Failed to fetch %s: %s", url, e)
            raise ScrapingError(f"Failed to scrape character page: {e}") from e

        character = parse_character_page(response.text, url)
        logger.info(
            "Scraped character %r (image: %s, tags: %d)",
            character.name,
            bool(character.image_url),
            len(character.tags),
        )
        return character
