"""Twitch Helix client service.

All reads use the app access token from ``AppTokenCache``. Lookups fail soft:
transport errors, timeouts, bad statuses and unparseable bodies are logged
and come back as ``None`` (or ``[]`` for lists), so callers only ever branch
on missing data. ``ConfigurationError`` is the one exception that escapes.
"""

import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from shoutout_api.core.exceptions import UpstreamError
from shoutout_api.models import BroadcastRecord, ChannelInfo, StreamSnapshot, UserProfile

from .token_cache import AppTokenCache

logger = logging.getLogger(__name__)

HELIX_BASE = "https://api.twitch.tv/helix"

_Record = TypeVar("_Record", UserProfile, StreamSnapshot, ChannelInfo, BroadcastRecord)


class TwitchAPIClient:
    """Client for the Twitch Helix read endpoints.

    Manages a shared httpx client for connection reuse and an
    ``AppTokenCache`` so the app token is fetched once and shared.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        timeout: float = 10.0,
        refresh_margin: float = 60.0,
        http: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client_id = client_id

        # Shared HTTP client, reuses TCP connections across requests
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self.tokens = AppTokenCache(
            self._http,
            client_id,
            client_secret,
            refresh_margin=refresh_margin,
            clock=clock,
        )

    async def close(self) -> None:
        """Close the shared HTTP client. Call on app shutdown."""
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _app_headers(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}", "Client-Id": self.client_id}

    async def _helix_data(self, path: str, params: dict[str, Any]) -> list[dict] | None:
        """GET a Helix resource and return its ``data`` list, or None on failure."""
        try:
            token = await self.tokens.get_token()
        except UpstreamError as e:
            logger.warning(f"Helix GET /{path} skipped, no app token: {e}")
            return None

        try:
            response = await self._http.get(
                f"{HELIX_BASE}/{path}",
                params=params,
                headers=self._app_headers(token),
            )
        except httpx.TimeoutException:
            logger.warning(f"Helix GET /{path} timed out")
            return None
        except httpx.HTTPError as e:
            logger.warning(f"Helix GET /{path} error: {type(e).__name__}: {e}")
            return None

        if response.status_code == 401:
            # Token revoked or expired early; force a refresh next time
            self.tokens.invalidate()
        if response.status_code != 200:
            logger.error(f"Helix GET /{path} failed: {response.status_code}")
            return None

        try:
            data = response.json().get("data")
        except (ValueError, AttributeError) as e:
            logger.error(f"Helix GET /{path} returned malformed JSON: {e}")
            return None

        if not isinstance(data, list):
            logger.error(f"Helix GET /{path} response has no data list")
            return None
        return data

    async def _helix_first(self, path: str, params: dict[str, Any]) -> dict | None:
        data = await self._helix_data(path, params)
        if not data or not isinstance(data[0], dict):
            return None
        return data[0]

    @staticmethod
    def _parse(model: type[_Record], payload: dict, path: str) -> _Record | None:
        """Build a record from a Helix payload; None when a field is malformed."""
        try:
            return model.from_helix(payload)
        except (ValueError, TypeError) as e:
            logger.error(f"Helix /{path} returned a malformed record: {e}")
            return None

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user_by_login(self, login: str) -> UserProfile | None:
        """Look up a Twitch user by login name."""
        user = await self._helix_first("users", {"login": login})
        if user is None:
            logger.debug(f"No user found for login: {login}")
            return None
        return self._parse(UserProfile, user, "users")

    # ------------------------------------------------------------------
    # Streams / channels
    # ------------------------------------------------------------------

    async def get_stream(self, user_id: str) -> StreamSnapshot | None:
        """Get the live stream for a user; None when offline."""
        stream = await self._helix_first("streams", {"user_id": user_id})
        return self._parse(StreamSnapshot, stream, "streams") if stream else None

    async def get_channel_info(self, user_id: str) -> ChannelInfo | None:
        """Get channel information, including the last category set."""
        channel = await self._helix_first("channels", {"broadcaster_id": user_id})
        return self._parse(ChannelInfo, channel, "channels") if channel else None

    # ------------------------------------------------------------------
    # Videos / VODs
    # ------------------------------------------------------------------

    async def get_recent_broadcasts(self, user_id: str, first: int = 10) -> list[BroadcastRecord]:
        """Get archived broadcasts for a user, newest first."""
        videos = await self._helix_data(
            "videos",
            {"user_id": user_id, "type": "archive", "first": min(first, 100)},
        )
        if not videos:
            return []
        records = (self._parse(BroadcastRecord, v, "videos") for v in videos if isinstance(v, dict))
        return [r for r in records if r is not None]
