"""
Stream Bridge

SSE session: a two-step handshake (initialize, tools/list) forwarded as
identified events, then comment-only keepalives until the client leaves.

The subprocess has no way to push further events after the handshake.
"""

import asyncio
from typing import AsyncIterator

from sse_starlette import ServerSentEvent

from mcp_adapter.bridge.runtime import Bridge
from mcp_adapter.configs.constants import SSE_INIT_ID, SSE_TOOLS_LIST_ID
from mcp_adapter.configs.logging import get_logger
from mcp_adapter.exceptions import AdapterError
from mcp_adapter.process.envelope import build_request, id_key

logger = get_logger("bridge.stream")

SSE_SEP = "\n"
KEEPALIVE_COMMENT = "keepalive"

HANDSHAKE = (
    (SSE_INIT_ID, "initialize"),
    (SSE_TOOLS_LIST_ID, "tools/list"),
)


class StreamBridge:
    """Produces the event sequence for one SSE connection."""

    def __init__(self, bridge: Bridge):
        self._bridge = bridge

    async def events(self) -> AsyncIterator[ServerSentEvent]:
        """
        Yield handshake events, then keepalives.

        Any handshake failure ends the stream silently. Cancellation of the
        consuming task (client disconnect) ends it as well.
        """
        settings = self._bridge.settings
        ticker = asyncio.create_task(self._refresh_activity(settings.activity_interval))
        try:
            for request_id, method in HANDSHAKE:
                reply = await self._handshake_step(request_id, method, settings.handshake_timeout)
                if reply is None:
                    logger.info(f"Failed to process '{method}' sequence; closing SSE stream")
                    return
                yield ServerSentEvent(
                    data=reply.decode("utf-8", errors="replace"),
                    id=request_id,
                    sep=SSE_SEP,
                )
                self._bridge.health.touch()

            logger.info("Initial messages (initialize, tools/list) sent")

            while not self._bridge.terminated:
                await asyncio.sleep(settings.keepalive_interval)
                yield ServerSentEvent(comment=KEEPALIVE_COMMENT, sep=SSE_SEP)
        except asyncio.CancelledError:
            logger.info("SSE client disconnected")
            raise
        finally:
            ticker.cancel()

    async def _handshake_step(self, request_id: str, method: str, timeout: float) -> bytes | None:
        try:
            payload = build_request(request_id, method, {})
        except (TypeError, ValueError) as e:
            logger.error(f"Error marshalling {method} request: {e}")
            return None

        logger.debug(f"Sending {method} request to MCP: {payload!r}")
        try:
            return await self._bridge.exchange_async(payload, id_key(request_id), timeout)
        except AdapterError as e:
            logger.warning(f"SSE {method} failed: {e}")
            return None

    async def _refresh_activity(self, interval: float) -> None:
        """Keep last-activity fresh while the session is open."""
        while True:
            await asyncio.sleep(interval)
            self._bridge.health.touch()
