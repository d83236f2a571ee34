"""
Character Nexus - Main Application Entry Point

Self-hosted character library: characters, conversations and imports.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from character_nexus.api.errors import register_exception_handlers
from character_nexus.core.config import Settings, get_settings
from character_nexus.core.logging_config import setup_logging
from character_nexus.infrastructure.local.database import Database
from character_nexus.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings: Settings = app.state.settings
    logger.info("Starting Character Nexus in %s mode...", settings.ENVIRONMENT)

    db = Database(settings.DATABASE_URL, echo=settings.DEBUG)
    await db.init()
    app.state.db = db

    try:
        yield
    finally:
        logger.info("Shutting down Character Nexus...")
        await db.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Character Nexus",
        description="Character library with conversations, chat export and imports",
        version=settings.VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )
    app.state.settings = settings

    register_exception_handlers(app)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from character_nexus.api import characters, chats, imports

    app.include_router(characters.router, prefix="/api/characters", tags=["characters"])
    app.include_router(chats.router, prefix="/api/chats", tags=["chats"])
    app.include_router(imports.router, prefix="/api/import", tags=["import"])

    # Stored avatars
    app.mount(
        "/images",
        StaticFiles(directory=settings.IMAGE_DIR, check_dir=False),
        name="images",
    )

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "timestamp": now_utc().isoformat(),
            "environment": settings.ENVIRONMENT,
            "version": settings.VERSION,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
