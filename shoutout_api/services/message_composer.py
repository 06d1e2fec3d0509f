"""Shoutout sentence templates"""

import random

from shoutout_api.models import CategoryKind, ResolvedCategory

CHANNEL_URL = "https://twitch.tv/{login}"

# Keyed by (category kind, is_live). Every template ends with the channel URL.
TEMPLATES: dict[tuple[CategoryKind, bool], tuple[str, ...]] = {
    (CategoryKind.SPECIFIC, True): (
        "Check out {login}, they are playing {category} right now at {url}!",
        "{login} is live with {category}! Go show some love at {url}",
        "Go say hi to {login}, currently streaming {category} at {url}!",
        "Drop a follow for {login}, live in {category} at {url}!",
    ),
    (CategoryKind.SPECIFIC, False): (
        "Check out {login}, they are playing {category} at {url}!",
        "Go give {login} a follow! They were last seen playing {category} at {url}",
        "{login} streams {category}, check them out at {url}!",
        "Show some love to {login}, last playing {category} at {url}!",
    ),
    (CategoryKind.GENERIC, True): (
        "Check out {login}, live now with great gaming content at {url}!",
        "{login} is live and gaming! Stop by at {url}",
        "Go say hi to {login}, streaming games right now at {url}!",
    ),
    (CategoryKind.GENERIC, False): (
        "Check out {login}, great gaming content at {url}!",
        "{login} streams all kinds of games, give them a follow at {url}!",
        "Looking for gaming streams? Check out {login} at {url}!",
    ),
    (CategoryKind.UNKNOWN, True): (
        "Check out {login}, they are live right now at {url}!",
        "{login} is live! Go say hi at {url}",
        "Stop by and show {login} some love, live at {url}!",
    ),
    (CategoryKind.UNKNOWN, False): (
        "Check out {login} at {url}!",
        "Go give {login} a follow at {url}!",
        "Show some love to {login} at {url}!",
    ),
}

FALLBACK_TEMPLATE = "Check out {login} at {url}!"


def channel_url(login: str) -> str:
    return CHANNEL_URL.format(login=login)


class MessageComposer:
    """Picks a phrasing variant and fills in login, category and URL.

    Randomness only changes the wording; the facts come from the inputs.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def compose(self, login: str, category: ResolvedCategory, is_live: bool) -> str:
        variants = TEMPLATES[(category.kind, bool(is_live))]
        template = self._rng.choice(variants)
        return template.format(
            login=login,
            category=category.name or "",
            url=channel_url(login),
        )

    def fallback(self, login: str) -> str:
        """Sentence used when nothing could be looked up."""
        return FALLBACK_TEMPLATE.format(login=login, url=channel_url(login))
