"""Data models for Twitch lookups and category resolution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

GENERIC_CATEGORY_NAME = "games"


@dataclass
class Credential:
    """App access token and the monotonic time at which it stops being used."""

    token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


@dataclass(frozen=True)
class UserProfile:
    """Twitch user record from ``helix/users``."""

    id: str
    login: str
    display_name: str
    view_count: int = 0

    @classmethod
    def from_helix(cls, payload: dict[str, Any]) -> UserProfile:
        login = payload.get("login") or ""
        return cls(
            id=str(payload.get("id") or ""),
            login=login,
            display_name=payload.get("display_name") or login,
            view_count=int(payload.get("view_count") or 0),
        )


@dataclass(frozen=True)
class StreamSnapshot:
    """Live stream record from ``helix/streams``."""

    category_name: str
    title: str = ""
    viewer_count: int = 0

    @classmethod
    def from_helix(cls, payload: dict[str, Any]) -> StreamSnapshot:
        return cls(
            category_name=payload.get("game_name") or "",
            title=payload.get("title") or "",
            viewer_count=int(payload.get("viewer_count") or 0),
        )


@dataclass(frozen=True)
class ChannelInfo:
    """Channel record from ``helix/channels``; keeps the last category set."""

    category_name: str
    title: str = ""

    @classmethod
    def from_helix(cls, payload: dict[str, Any]) -> ChannelInfo:
        return cls(
            category_name=payload.get("game_name") or "",
            title=payload.get("title") or "",
        )


@dataclass(frozen=True)
class BroadcastRecord:
    """Archived broadcast (VOD) from ``helix/videos``."""

    title: str
    duration: str
    type: str = "archive"
    created_at: str = ""

    @classmethod
    def from_helix(cls, payload: dict[str, Any]) -> BroadcastRecord:
        return cls(
            title=payload.get("title") or "",
            duration=payload.get("duration") or "",
            type=payload.get("type") or "",
            created_at=payload.get("created_at") or "",
        )


class CategoryKind(str, Enum):
    SPECIFIC = "specific"
    GENERIC = "generic"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ResolvedCategory:
    """Best guess at what a channel plays.

    Exactly one of three shapes: ``specific(name)``, ``generic()`` (streams
    games, title unknown) or ``unknown()``. Build through the classmethods.
    """

    kind: CategoryKind
    name: str | None = None

    @classmethod
    def specific(cls, name: str) -> ResolvedCategory:
        return cls(CategoryKind.SPECIFIC, name)

    @classmethod
    def generic(cls) -> ResolvedCategory:
        return cls(CategoryKind.GENERIC, GENERIC_CATEGORY_NAME)

    @classmethod
    def unknown(cls) -> ResolvedCategory:
        return cls(CategoryKind.UNKNOWN)


@dataclass(frozen=True)
class Resolution:
    """Resolver output handed to the message composer."""

    category: ResolvedCategory
    is_live: bool = False
    # One of "stream", "channel", "broadcasts", "none"
    source: str = "none"


@dataclass(frozen=True)
class ShoutoutResult:
    message: str
