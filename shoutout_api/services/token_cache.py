"""App access token cache (client credentials grant).

One credential is shared by every request. Refreshes are single-flight:
callers that find the token expired all await one refresh task, so the
identity endpoint sees one request and every caller gets its result or error.
"""

import asyncio
import logging
import time
from collections.abc import Callable

import httpx

from shoutout_api.core.exceptions import ConfigurationError, UpstreamError
from shoutout_api.models import Credential

logger = logging.getLogger(__name__)

OAUTH_BASE = "https://id.twitch.tv/oauth2"


class AppTokenCache:
    """Caches the Twitch app access token and refreshes it on demand."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        *,
        refresh_margin: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._http = http
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_margin = refresh_margin
        self._clock = clock

        self._credential: Credential | None = None
        # In-flight refresh shared by every caller that finds the token stale
        self._refresh: asyncio.Task[str] | None = None

    @property
    def credential(self) -> Credential | None:
        return self._credential

    def invalidate(self) -> None:
        """Drop the cached token so the next call refreshes."""
        if self._credential is not None:
            logger.debug("App token invalidated")
        self._credential = None

    def _cached_token(self) -> str | None:
        credential = self._credential
        if credential and credential.is_valid(self._clock()):
            return credential.token
        return None

    async def get_token(self) -> str:
        """Return a cached app access token, refreshing only when expired."""
        token = self._cached_token()
        if token:
            return token

        if self._refresh is None:
            self._refresh = asyncio.create_task(self._run_refresh())

        # shield: one caller giving up must not cancel the refresh for the rest
        return await asyncio.shield(self._refresh)

    async def _run_refresh(self) -> str:
        try:
            self._credential = await self._fetch_credential()
            return self._credential.token
        finally:
            self._refresh = None

    async def _fetch_credential(self) -> Credential:
        if not self.client_id or not self.client_secret:
            raise ConfigurationError("Twitch credentials not configured")

        now = self._clock()
        try:
            response = await self._http.post(
                f"{OAUTH_BASE}/token",
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "client_credentials",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"App token request failed: {type(e).__name__}: {e}")
            raise UpstreamError(f"App token request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Failed to get app token: {response.status_code}")
            raise UpstreamError(
                f"App token request returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            access_token = data["access_token"]
            expires_in = float(data["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Malformed app token response: {e}")
            raise UpstreamError("Malformed app token response") from e

        if not access_token:
            raise UpstreamError("No access_token in app token response")

        # Twitch returns expires_in in seconds; refresh a margin early
        expires_at = now + max(expires_in - self.refresh_margin, 0)
        logger.debug(f"App token refreshed, valid for {expires_at - now:.0f}s")
        return Credential(token=str(access_token), expires_at=expires_at)
