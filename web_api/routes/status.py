"""
Service status route.

Endpoints:
- GET /api/status - Storage backend and configured integrations
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter

from core.config import get_capabilities, get_operator_discord_ids, get_target_timezone
from core.notifications.channels.discord import is_ready as discord_ready
from core.repositories import get_repository

router = APIRouter(prefix="/api", tags=["status"])


@router.get("/status")
async def status_endpoint() -> dict[str, Any]:
    """Which backend serves data and which capabilities are configured."""
    try:
        backend = get_repository().backend_name
    except RuntimeError:
        backend = None

    return {
        "storage": backend,
        **get_capabilities(),
        "discordConnected": discord_ready(),
        "operatorCount": len(get_operator_discord_ids()),
        "timezone": get_target_timezone(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
