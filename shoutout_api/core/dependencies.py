"""Dependency injection utilities for FastAPI"""

import logging

from shoutout_api.core.config import get_settings
from shoutout_api.services import (
    CategoryResolver,
    MessageComposer,
    ShoutoutService,
    TwitchAPIClient,
)

logger = logging.getLogger(__name__)


# ============================================
# Service Dependencies
# ============================================


_twitch_api: TwitchAPIClient | None = None


def get_twitch_api() -> TwitchAPIClient:
    """Get shared TwitchAPIClient singleton (connection reuse + token cache)."""
    global _twitch_api
    if _twitch_api is None:
        settings = get_settings()
        if not settings.has_twitch_credentials:
            logger.warning("TWITCH_CLIENT_ID / TWITCH_CLIENT_SECRET not set, lookups will fail")
        _twitch_api = TwitchAPIClient(
            client_id=settings.twitch_client_id,
            client_secret=settings.twitch_client_secret,
            timeout=settings.request_timeout,
            refresh_margin=settings.token_refresh_margin,
        )
    return _twitch_api


async def close_twitch_api() -> None:
    """Close the shared TwitchAPIClient. Call on app shutdown."""
    global _twitch_api
    if _twitch_api is not None:
        await _twitch_api.close()
        _twitch_api = None


_composer = MessageComposer()


def get_shoutout_service() -> ShoutoutService:
    """Get ShoutoutService instance (dependency injection)"""
    settings = get_settings()
    twitch = get_twitch_api()
    resolver = CategoryResolver(
        twitch,
        history_limit=settings.broadcast_history_limit,
        min_broadcast_minutes=settings.min_broadcast_minutes,
    )
    return ShoutoutService(twitch, resolver=resolver, composer=_composer)
