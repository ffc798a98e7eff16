"""
Subprocess Side

Child process ownership, frame reading, reply routing and health tracking.
"""

from mcp_adapter.process.channel import ChannelState, SubprocessChannel
from mcp_adapter.process.envelope import EnvelopeError, RPCEnvelope, build_request, id_key
from mcp_adapter.process.health import HealthState, HealthStatus
from mcp_adapter.process.reader import FrameReader
from mcp_adapter.process.router import ResponseRouter

__all__ = [
    "ChannelState",
    "SubprocessChannel",
    "EnvelopeError",
    "RPCEnvelope",
    "build_request",
    "id_key",
    "HealthState",
    "HealthStatus",
    "FrameReader",
    "ResponseRouter",
]
