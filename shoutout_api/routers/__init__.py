"""API Routers package

This package contains all API route handlers.
"""

from . import shoutout_router

__all__ = ["shoutout_router"]
