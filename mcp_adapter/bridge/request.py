"""
Request Bridge

Synchronous JSON-RPC over HTTP POST: forward the body verbatim, then wait
for the matching reply.
"""

from typing import Optional

from mcp_adapter.bridge.runtime import Bridge
from mcp_adapter.configs.logging import get_logger
from mcp_adapter.process.envelope import EnvelopeError, RPCEnvelope

logger = get_logger("bridge.request")


class RequestBridge:
    """Forwards one POST body and returns the subprocess reply."""

    def __init__(self, bridge: Bridge):
        self._bridge = bridge

    def forward(self, body: bytes) -> Optional[bytes]:
        """
        Forward a request body to the subprocess.

        A body that does not parse is still forwarded and still awaits a
        reply; only a parsed envelope with an absent or null id is treated
        as a notification.

        Args:
            body: Raw HTTP request body, written unchanged plus a newline

        Returns:
            Reply frame, or None for notifications

        Raises:
            WriteError: Writing to the subprocess failed
            ChannelClosedError: The subprocess went away while waiting
            ResponseTimeoutError: No reply within the request timeout
        """
        logger.debug(f"Received request: {body!r}")

        key = None
        is_notification = False
        try:
            envelope = RPCEnvelope.parse(body)
        except EnvelopeError as e:
            logger.warning(f"Could not parse JSON-RPC request to check for ID: {e}")
        else:
            is_notification = envelope.is_notification
            key = envelope.key

        self._bridge.health.touch()

        reply = self._bridge.exchange(
            body,
            key,
            timeout=self._bridge.settings.request_timeout,
            expect_reply=not is_notification,
        )
        if is_notification:
            logger.debug("Request is a notification; not waiting for a reply")
            return None

        self._bridge.health.touch()
        logger.debug(f"Received response from MCP: {reply!r}")
        return reply
