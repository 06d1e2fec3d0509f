"""Services layer - Business logic

This module provides service classes for the shoutout pipeline.
Services are initialized with their dependencies and accessed through dependency injection.
"""

from .category_resolver import CategoryResolver
from .message_composer import MessageComposer
from .shoutout_service import ShoutoutService
from .token_cache import AppTokenCache
from .twitch_api import TwitchAPIClient

__all__ = [
    "AppTokenCache",
    "CategoryResolver",
    "MessageComposer",
    "ShoutoutService",
    "TwitchAPIClient",
]
