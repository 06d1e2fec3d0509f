"""Shared pytest fixtures for shoutout API tests.

Fixture summary
---------------
clock           Manually advanced monotonic clock.
fake_twitch     In-memory stand-in for TwitchAPIClient with call counters.
composer        MessageComposer with a seeded RNG.

All tests run without network access; HTTP is mocked with respx or
httpx.MockTransport.
"""

from __future__ import annotations

import os
import random

import pytest

# ---------------------------------------------------------------------------
# Test environment bootstrap
# ---------------------------------------------------------------------------
# Set env vars before application modules are imported so Settings() sees
# deterministic values regardless of the developer's shell or .env file.

_TEST_ENV_DEFAULTS: dict[str, str] = {
    "TWITCH_CLIENT_ID": "test-client-id",
    "TWITCH_CLIENT_SECRET": "test-client-secret",
    "ENVIRONMENT": "test",
    "LOG_LEVEL": "WARNING",
}

for _key, _value in _TEST_ENV_DEFAULTS.items():
    os.environ[_key] = _value

from shoutout_api.core.config import get_settings  # noqa: E402
from shoutout_api.models import (  # noqa: E402
    BroadcastRecord,
    ChannelInfo,
    StreamSnapshot,
    UserProfile,
)
from shoutout_api.services.message_composer import MessageComposer  # noqa: E402

# Clear the lru_cache so Settings() re-reads from the patched environment.
get_settings.cache_clear()


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTwitch:
    """Serves canned Helix results and counts calls per operation."""

    def __init__(
        self,
        *,
        users: dict[str, UserProfile] | None = None,
        stream: StreamSnapshot | None = None,
        channel: ChannelInfo | None = None,
        broadcasts: list[BroadcastRecord] | None = None,
    ) -> None:
        self.users = users or {}
        self.stream = stream
        self.channel = channel
        self.broadcasts = broadcasts or []
        self.calls: dict[str, int] = {
            "user": 0,
            "stream": 0,
            "channel": 0,
            "broadcasts": 0,
        }
        self.history_requests: list[int] = []

    async def get_user_by_login(self, login: str) -> UserProfile | None:
        self.calls["user"] += 1
        return self.users.get(login.lower())

    async def get_stream(self, user_id: str) -> StreamSnapshot | None:
        self.calls["stream"] += 1
        return self.stream

    async def get_channel_info(self, user_id: str) -> ChannelInfo | None:
        self.calls["channel"] += 1
        return self.channel

    async def get_recent_broadcasts(self, user_id: str, first: int = 10) -> list[BroadcastRecord]:
        self.calls["broadcasts"] += 1
        self.history_requests.append(first)
        return self.broadcasts[:first]


def make_user(login: str, user_id: str = "1001") -> UserProfile:
    return UserProfile(id=user_id, login=login, display_name=login, view_count=0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_twitch() -> FakeTwitch:
    return FakeTwitch()


@pytest.fixture
def composer() -> MessageComposer:
    return MessageComposer(random.Random(1234))
