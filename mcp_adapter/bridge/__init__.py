"""
HTTP-facing bridges over the subprocess runtime.
"""

from mcp_adapter.bridge.request import RequestBridge
from mcp_adapter.bridge.runtime import Bridge
from mcp_adapter.bridge.stream import StreamBridge

__all__ = ["Bridge", "RequestBridge", "StreamBridge"]
