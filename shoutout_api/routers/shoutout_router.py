"""Shoutout API routes"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from shoutout_api.core.dependencies import get_shoutout_service
from shoutout_api.services import ShoutoutService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["shoutout"])


class HealthStatus(BaseModel):
    status: str
    timestamp: str
    features: list[str]


@router.get("/", response_class=PlainTextResponse)
async def shoutout(
    user: str = Query(default="", description="Twitch username, with or without @"),
    service: ShoutoutService = Depends(get_shoutout_service),
) -> str:
    """Shoutout sentence as plain text. Always 200, errors are explained in the body."""
    result = await service.resolve_shoutout(user)
    return result.message


@router.get("/debug")
async def debug(
    user: str = Query(default=""),
    service: ShoutoutService = Depends(get_shoutout_service),
) -> dict[str, Any]:
    """Raw Twitch data and the detected category for a user"""
    if not user:
        return {"error": "No username provided"}
    return await service.debug_shoutout(user)


@router.get("/health")
async def health(service: ShoutoutService = Depends(get_shoutout_service)) -> HealthStatus:
    """Liveness check, no Twitch dependency"""
    return HealthStatus(**service.health_check())
