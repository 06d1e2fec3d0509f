"""Shoutout service: validation, category lookup and message rendering.

``resolve_shoutout`` never raises. Bad input and unknown users become
explanatory text, and any other failure degrades to a plain
"Check out <user>" sentence so the command keeps working when Twitch is down.
"""

import logging
import re
from dataclasses import asdict
from datetime import UTC, datetime
from typing import Any

from shoutout_api.core.exceptions import ConfigurationError, NotFoundError, ValidationError
from shoutout_api.models import ShoutoutResult, UserProfile

from .category_resolver import CategoryResolver
from .message_composer import MessageComposer
from .twitch_api import TwitchAPIClient

logger = logging.getLogger(__name__)

USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{4,25}$")

MISSING_USERNAME_MESSAGE = "Please provide a username with ?user=USERNAME"
INVALID_USERNAME_MESSAGE = (
    "Invalid username format. Twitch usernames must be 4-25 characters "
    "and contain only letters, numbers, and underscores."
)

FEATURES = ["@ symbol removal", "real game detection", "fallback handling"]

# Broadcasts echoed back by the debug endpoint
DEBUG_BROADCAST_COUNT = 3


def normalize_username(raw: str | None) -> str:
    """Trim whitespace and strip one leading ``@``."""
    username = (raw or "").strip()
    if username.startswith("@"):
        username = username[1:]
    return username


def validate_username(raw: str | None) -> str:
    """Return the normalized username or raise ``ValidationError``."""
    username = normalize_username(raw)
    if not username:
        raise ValidationError(MISSING_USERNAME_MESSAGE)
    if not USERNAME_RE.match(username):
        raise ValidationError(INVALID_USERNAME_MESSAGE)
    return username


class ShoutoutService:
    """Entry points used by the HTTP routes."""

    def __init__(
        self,
        twitch: TwitchAPIClient,
        resolver: CategoryResolver | None = None,
        composer: MessageComposer | None = None,
    ) -> None:
        self.twitch = twitch
        self.resolver = resolver or CategoryResolver(twitch)
        self.composer = composer or MessageComposer()

    async def _lookup_user(self, username: str) -> UserProfile:
        user = await self.twitch.get_user_by_login(username)
        if user is None:
            raise NotFoundError(username)
        return user

    async def resolve_shoutout(self, raw_username: str | None) -> ShoutoutResult:
        """Build the shoutout sentence for *raw_username*."""
        try:
            username = validate_username(raw_username)
        except ValidationError as e:
            return ShoutoutResult(str(e))

        try:
            user = await self._lookup_user(username)
            resolution = await self.resolver.resolve(user.id)
            message = self.composer.compose(username, resolution.category, resolution.is_live)
            logger.info(
                f"Shoutout for {username}: {resolution.category.kind.value} "
                f"({resolution.source}, live={resolution.is_live})"
            )
            return ShoutoutResult(message)

        except NotFoundError as e:
            logger.info(f"Shoutout requested for unknown user {username}")
            return ShoutoutResult(str(e))
        except Exception as e:
            logger.exception(f"Error processing shoutout for {username}: {e}")
            return ShoutoutResult(self.composer.fallback(username))

    async def debug_shoutout(self, raw_username: str | None) -> dict[str, Any]:
        """Everything the shoutout is based on, for troubleshooting."""
        try:
            username = validate_username(raw_username)
        except ValidationError as e:
            return {"error": str(e)}

        try:
            user = await self._lookup_user(username)
            stream = await self.twitch.get_stream(user.id)
            channel = await self.twitch.get_channel_info(user.id)
            broadcasts = await self.twitch.get_recent_broadcasts(
                user.id, first=self.resolver.history_limit
            )
        except NotFoundError:
            return {"error": "User not found"}
        except ConfigurationError as e:
            return {"error": str(e)}
        except Exception as e:
            logger.exception(f"Error collecting debug data for {username}: {e}")
            return {"error": str(e)}

        resolution = self.resolver.classify(stream, channel, broadcasts)
        category = resolution.category

        return {
            "user": asdict(user),
            "current_stream": (
                {**asdict(stream), "is_live": True} if stream else {"is_live": False}
            ),
            "channel_info": asdict(channel) if channel else None,
            "recent_videos": [asdict(b) for b in broadcasts[:DEBUG_BROADCAST_COUNT]],
            "detected_category": {"kind": category.kind.value, "name": category.name},
            "detected_from": resolution.source,
            "final_message": self.composer.compose(username, category, resolution.is_live),
        }

    def health_check(self) -> dict[str, Any]:
        return {
            "status": "ok",
            "timestamp": datetime.now(UTC).isoformat(),
            "features": FEATURES,
        }
