"""
Health and Info Endpoints
"""

import time
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from mcp_adapter import __version__
from mcp_adapter.bridge import Bridge
from mcp_adapter.configs.logging import get_logger
from mcp_adapter.controllers.http.deps import get_bridge

logger = get_logger("http.health")

router = APIRouter()


# --- Response Models ---


class AdapterInfo(BaseModel):
    """Runtime information for GET /info. Override values are never exposed."""
    version: str
    command: str
    args: list[str]
    env_keys: list[str]
    pid: Optional[int] = None
    state: str
    pending_requests: int
    frames_read: int = 0
    frames_dropped: int = 0
    idle_seconds: float
    uptime_seconds: float


# --- Endpoints ---


@router.get("/health", response_class=PlainTextResponse)
def health(bridge: Bridge = Depends(get_bridge)) -> PlainTextResponse:
    """200 while the subprocess runs and was active recently, else 503."""
    status = bridge.health.check(bridge.settings.inactivity_limit)
    if not status.healthy:
        logger.debug(f"Health check failed: {status.reason}")
        return PlainTextResponse(status.reason, status_code=503)
    return PlainTextResponse("OK")


@router.get("/info")
def info(bridge: Bridge = Depends(get_bridge)) -> AdapterInfo:
    """Build and runtime information."""
    uptime = time.time() - bridge.started_at if bridge.started_at else 0.0
    reader = bridge.reader
    return AdapterInfo(
        version=__version__,
        command=bridge.settings.command,
        args=bridge.settings.args,
        env_keys=sorted(bridge.settings.env_overrides),
        pid=bridge.channel.pid,
        state=bridge.channel.state.value,
        pending_requests=bridge.router.pending_count,
        frames_read=reader.frames_read if reader else 0,
        frames_dropped=reader.frames_dropped if reader else 0,
        idle_seconds=round(bridge.health.idle_seconds(), 3),
        uptime_seconds=round(uptime, 3),
    )
