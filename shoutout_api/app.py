"""FastAPI application factory"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shoutout_api import __version__
from shoutout_api.core.config import get_settings
from shoutout_api.core.dependencies import close_twitch_api
from shoutout_api.core.logging import setup_logging
from shoutout_api.routers import shoutout_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle startup and shutdown"""
    settings = get_settings()

    logger.info("Starting Twitch Shoutout API")
    logger.info(f"Environment: {settings.environment}")
    if not settings.has_twitch_credentials:
        logger.warning("Twitch credentials not configured, shoutouts will use the fallback message")

    yield

    logger.info("Shutting down Twitch Shoutout API")
    try:
        await close_twitch_api()
    except Exception as e:
        logger.exception(f"Error during shutdown: {e}")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()

    # Setup logging first
    setup_logging(settings)

    app = FastAPI(
        title="Twitch Shoutout API",
        description="Shoutout messages with the streamer's last played game",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    app.include_router(shoutout_router.router)

    logger.info("FastAPI application configured")

    return app
