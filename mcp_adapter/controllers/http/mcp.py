"""
MCP Protocol Endpoints

POST /mcp forwards one JSON-RPC message and returns the reply.
GET /mcp opens an SSE session (handshake events, then keepalives).
"""

from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from mcp_adapter.bridge import Bridge, RequestBridge, StreamBridge
from mcp_adapter.configs.logging import get_logger
from mcp_adapter.controllers.http.deps import get_bridge

logger = get_logger("http.mcp")

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "Access-Control-Allow-Origin": "*",
}


@router.post("")
async def post_message(request: Request, bridge: Bridge = Depends(get_bridge)) -> Response:
    """
    Forward a JSON-RPC message verbatim.

    204 for notifications, otherwise the subprocess reply as application/json.
    Failures are mapped to 500/504 by the app's AdapterError handler.
    """
    body = await request.body()
    reply = await run_in_threadpool(RequestBridge(bridge).forward, body)
    if reply is None:
        return Response(status_code=204)
    return Response(content=reply, media_type="application/json")


@router.get("")
async def open_stream(bridge: Bridge = Depends(get_bridge)) -> StreamingResponse:
    """Server-Sent Events session."""
    logger.info("SSE connection established; sending initial messages")
    return StreamingResponse(
        _encode(StreamBridge(bridge)),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


async def _encode(stream: StreamBridge) -> AsyncIterator[bytes]:
    async for event in stream.events():
        yield event.encode()
