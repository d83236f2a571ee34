"""
Fixtures for API integration tests.

The app is served in-process through httpx's ASGI transport. The lifespan
does not run there, so the test database is attached to app.state directly.
"""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from character_nexus.api.deps import get_character_scraper, get_image_store
from character_nexus.core.config import Settings
from character_nexus.interfaces.character_scraper import ICharacterScraper
from character_nexus.interfaces.image_store import IImageStore
from main import create_app


@pytest.fixture
def scraper():
    return AsyncMock(spec=ICharacterScraper)


@pytest.fixture
def images():
    mock = AsyncMock(spec=IImageStore)
    mock.download.return_value = "downloaded.webp"
    mock.delete.return_value = True
    return mock


@pytest.fixture
def app(db, tmp_path, scraper, images):
    settings = Settings(ENVIRONMENT="test", IMAGE_DIR=str(tmp_path / "images"))
    application = create_app(settings)
    application.state.db = db
    application.dependency_overrides[get_character_scraper] = lambda: scraper
    application.dependency_overrides[get_image_store] = lambda: images
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
