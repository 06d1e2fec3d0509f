"""Exception hierarchy for the shoutout service.

Hierarchy::

    ShoutoutError
    ├── ConfigurationError
    ├── ValidationError
    ├── UpstreamError      (status_code: int | None)
    └── NotFoundError      (username: str)

Only ``ConfigurationError`` is allowed to escape the Twitch client; the
others are recovered inside the services layer.
"""

from __future__ import annotations


class ShoutoutError(Exception):
    """Base class for all shoutout service errors."""


class ConfigurationError(ShoutoutError):
    """Twitch client credentials are missing."""


class ValidationError(ShoutoutError):
    """A username failed normalization or format checks.

    The message is user-facing and is rendered as-is.
    """


class UpstreamError(ShoutoutError):
    """A Twitch request failed or returned an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(ShoutoutError):
    """Twitch has no user with the requested login."""

    def __init__(self, username: str) -> None:
        super().__init__(
            f'User "{username}" not found on Twitch. '
            "Please check the username and try again."
        )
        self.username = username
