"""Category detection: what is a channel known for playing?

Order of evidence, first match wins:

1. the live stream's category,
2. the channel's persisted last category,
3. archived broadcast titles (heuristic).

"Just Chatting" is never reported as a category. Broadcast titles only
produce a specific game when a known title appears in them; otherwise a
qualifying broadcast yields the generic "games" signal.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from typing import Protocol

from shoutout_api.models import (
    BroadcastRecord,
    ChannelInfo,
    Resolution,
    ResolvedCategory,
    StreamSnapshot,
)

logger = logging.getLogger(__name__)

CHATTING_CATEGORY = "Just Chatting"

# Accepts ISO-8601 "PT1H2M3S" and Helix's "1h2m3s"
_DURATION_RE = re.compile(
    r"^(?:PT)?(?=\d)(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?$",
    re.IGNORECASE,
)

NON_GAMEPLAY_KEYWORDS: tuple[str, ...] = (
    "react",
    "irl",
    "chat",
    "talk",
    "podcast",
    "interview",
    "music",
)

# (title pattern, category name as Twitch lists it)
KNOWN_GAMES: tuple[tuple[str, str], ...] = (
    (r"minecraft", "Minecraft"),
    (r"valorant", "VALORANT"),
    (r"fortnite", "Fortnite"),
    (r"league of legends", "League of Legends"),
    (r"apex(?: legends)?", "Apex Legends"),
    (r"counter[- ]?strike|cs2|cs:?go", "Counter-Strike"),
    (r"grand theft auto|gta ?v|gta ?rp|gta", "Grand Theft Auto V"),
    (r"world of warcraft|wow classic", "World of Warcraft"),
    (r"overwatch(?: 2)?", "Overwatch 2"),
    (r"dota ?2", "Dota 2"),
    (r"rocket league", "Rocket League"),
    (r"call of duty|warzone", "Call of Duty: Warzone"),
    (r"elden ring", "Elden Ring"),
    (r"baldur'?s gate(?: 3)?", "Baldur's Gate 3"),
    (r"rust", "Rust"),
    (r"escape from tarkov|tarkov", "Escape from Tarkov"),
    (r"dead by daylight|dbd", "Dead by Daylight"),
    (r"hearthstone", "Hearthstone"),
    (r"teamfight tactics|tft", "Teamfight Tactics"),
    (r"pok[eé]mon", "Pokémon"),
    (r"stardew valley", "Stardew Valley"),
    (r"terraria", "Terraria"),
    (r"among us", "Among Us"),
    (r"lethal company", "Lethal Company"),
    (r"path of exile", "Path of Exile"),
    (r"diablo(?: iv| 4)?", "Diablo IV"),
    (r"sea of thieves", "Sea of Thieves"),
    (r"the sims|sims ?4", "The Sims 4"),
    (r"super mario|mario kart|mario", "Super Mario"),
    (r"zelda", "The Legend of Zelda"),
)

_KNOWN_GAME_PATTERNS = tuple(
    (re.compile(rf"\b(?:{pattern})\b", re.IGNORECASE), name) for pattern, name in KNOWN_GAMES
)


class BroadcastSource(Protocol):
    """The subset of ``TwitchAPIClient`` the resolver depends on."""

    async def get_stream(self, user_id: str) -> StreamSnapshot | None: ...

    async def get_channel_info(self, user_id: str) -> ChannelInfo | None: ...

    async def get_recent_broadcasts(
        self, user_id: str, first: int = 10
    ) -> list[BroadcastRecord]: ...


def parse_duration_minutes(duration: str) -> int | None:
    """Parse a broadcast duration ("PT1H5M", "1h5m3s") to whole minutes.

    Seconds are dropped. Returns None when the string is not a duration.
    """
    m = _DURATION_RE.match(duration.strip()) if duration else None
    if not m:
        return None
    hours = int(m.group(1) or 0)
    minutes = int(m.group(2) or 0)
    return hours * 60 + minutes


def is_specific_category(name: str | None) -> bool:
    return bool(name and name.strip()) and name.strip().lower() != CHATTING_CATEGORY.lower()


def has_non_gameplay_keyword(title: str) -> bool:
    lowered = title.lower()
    return any(word in lowered for word in NON_GAMEPLAY_KEYWORDS)


def match_known_game(title: str) -> str | None:
    """Return the first known game whose name appears in *title*."""
    for pattern, name in _KNOWN_GAME_PATTERNS:
        if pattern.search(title):
            return name
    return None


def category_from_stream(stream: StreamSnapshot | None) -> ResolvedCategory | None:
    if stream and is_specific_category(stream.category_name):
        return ResolvedCategory.specific(stream.category_name.strip())
    return None


def category_from_channel(channel: ChannelInfo | None) -> ResolvedCategory | None:
    if channel and is_specific_category(channel.category_name):
        return ResolvedCategory.specific(channel.category_name.strip())
    return None


def category_from_broadcasts(
    broadcasts: Iterable[BroadcastRecord],
    *,
    min_minutes: int = 30,
) -> ResolvedCategory | None:
    """Guess a category from archived broadcasts, newest first.

    A broadcast qualifies when it is an archive, runs longer than
    *min_minutes* and its title has no non-gameplay keyword.
    """
    for broadcast in broadcasts:
        if broadcast.type != "archive":
            continue

        minutes = parse_duration_minutes(broadcast.duration)
        if minutes is None or minutes <= min_minutes:
            continue

        if has_non_gameplay_keyword(broadcast.title):
            continue

        game = match_known_game(broadcast.title)
        if game:
            return ResolvedCategory.specific(game)
        return ResolvedCategory.generic()

    return None


class CategoryResolver:
    """Runs the fallback chain against Twitch, one lookup at a time."""

    def __init__(
        self,
        twitch: BroadcastSource,
        *,
        history_limit: int = 10,
        min_broadcast_minutes: int = 30,
    ) -> None:
        self.twitch = twitch
        self.history_limit = history_limit
        self.min_broadcast_minutes = min_broadcast_minutes

    async def resolve(self, user_id: str) -> Resolution:
        stream = await self.twitch.get_stream(user_id)
        is_live = stream is not None

        category = category_from_stream(stream)
        if category:
            return Resolution(category, is_live, "stream")

        category = category_from_channel(await self.twitch.get_channel_info(user_id))
        if category:
            return Resolution(category, is_live, "channel")

        broadcasts = await self.twitch.get_recent_broadcasts(user_id, first=self.history_limit)
        category = self.classify_broadcasts(broadcasts)
        if category:
            return Resolution(category, is_live, "broadcasts")

        logger.debug(f"No category found for user {user_id}")
        return Resolution(ResolvedCategory.unknown(), is_live, "none")

    def classify_broadcasts(self, broadcasts: Sequence[BroadcastRecord]) -> ResolvedCategory | None:
        return category_from_broadcasts(
            broadcasts[: self.history_limit],
            min_minutes=self.min_broadcast_minutes,
        )

    def classify(
        self,
        stream: StreamSnapshot | None,
        channel: ChannelInfo | None,
        broadcasts: Sequence[BroadcastRecord],
    ) -> Resolution:
        """Apply the fallback chain to data that was already fetched."""
        is_live = stream is not None
        for source, category in (
            ("stream", category_from_stream(stream)),
            ("channel", category_from_channel(channel)),
            ("broadcasts", self.classify_broadcasts(broadcasts)),
        ):
            if category:
                return Resolution(category, is_live, source)
        return Resolution(ResolvedCategory.unknown(), is_live, "none")
