"""
Request-scoped access to the running Bridge.
"""

from fastapi import Request

from mcp_adapter.bridge import Bridge


def get_bridge(request: Request) -> Bridge:
    """Bridge attached to the app by create_app()."""
    return request.app.state.bridge
