"""
MCP Adapter HTTP Server

FastAPI app exposing the subprocess over POST, SSE and health endpoints.
"""

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from mcp_adapter import __version__
from mcp_adapter.bridge import Bridge
from mcp_adapter.configs.logging import get_logger
from mcp_adapter.controllers.http.health import router as health_router
from mcp_adapter.controllers.http.mcp import router as mcp_router
from mcp_adapter.exceptions import (
    AdapterError,
    ChannelClosedError,
    ResponseTimeoutError,
    WriteError,
)
from mcp_adapter.process import ChannelState

logger = get_logger("http")

# Most specific first
ERROR_RESPONSES: list[tuple[type[AdapterError], int, str]] = [
    (WriteError, 500, "Failed to write to MCP server"),
    (ChannelClosedError, 500, "MCP server closed the connection"),
    (ResponseTimeoutError, 504, "Request to MCP server timed out"),
]


def error_response(exc: AdapterError) -> PlainTextResponse:
    """Map an AdapterError to its HTTP status and plain-text body."""
    for error_type, status_code, message in ERROR_RESPONSES:
        if isinstance(exc, error_type):
            return PlainTextResponse(message, status_code=status_code)
    return PlainTextResponse("Internal adapter error", status_code=500)


def create_app(bridge: Bridge) -> FastAPI:
    """Build the FastAPI app bound to a Bridge."""
    app = FastAPI(
        title="MCP Adapter",
        description="HTTP and SSE access to a stdio JSON-RPC server",
        version=__version__,
    )
    app.state.bridge = bridge

    @app.exception_handler(AdapterError)
    async def handle_adapter_error(request: Request, exc: AdapterError) -> PlainTextResponse:
        logger.warning(f"{request.method} {request.url.path} failed: {exc}")
        return error_response(exc)

    app.include_router(health_router, tags=["health"])
    app.include_router(mcp_router, prefix="/mcp", tags=["mcp"])
    return app


def run_server(bridge: Bridge, host: str = "0.0.0.0", port: int = 8080) -> None:
    """
    Run the HTTP server until interrupted or the subprocess dies.

    On subprocess termination uvicorn is asked to exit gracefully so
    in-flight responses are finished first.
    """
    server = uvicorn.Server(
        uvicorn.Config(
            create_app(bridge),
            host=host,
            port=port,
            log_level="warning",
            timeout_graceful_shutdown=int(bridge.settings.shutdown_timeout),
        )
    )

    def _on_state(state: ChannelState) -> None:
        if state is ChannelState.TERMINATED:
            server.should_exit = True

    bridge.channel.add_listener(_on_state)
    if bridge.terminated:
        return

    logger.info(f"Starting HTTP server on {host}:{port}")
    server.run()
