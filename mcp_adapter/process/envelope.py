"""
JSON-RPC Envelope Helpers

Only what the adapter needs to know about JSON-RPC: whether a message is a
notification, and which id it carries so replies can be routed back.
Payload bytes are never re-serialized on their way to the subprocess.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

JSONRPC_VERSION = "2.0"


class EnvelopeError(ValueError):
    """Bytes could not be parsed as a JSON-RPC object."""

    pass


@dataclass(frozen=True)
class RPCEnvelope:
    """Parsed view of a single JSON-RPC message."""

    raw: dict

    @classmethod
    def parse(cls, data: bytes) -> "RPCEnvelope":
        """
        Parse bytes as a JSON-RPC object.

        Raises:
            EnvelopeError: If the bytes are not JSON or not a JSON object
                (batches are not interpreted)
        """
        try:
            message = json.loads(data)
        except ValueError as e:
            raise EnvelopeError(f"Invalid JSON: {e}")
        if not isinstance(message, dict):
            raise EnvelopeError(f"Expected a JSON object, got {type(message).__name__}")
        return cls(message)

    @property
    def id(self) -> Any:
        return self.raw.get("id")

    @property
    def method(self) -> Optional[str]:
        method = self.raw.get("method")
        return method if isinstance(method, str) else None

    @property
    def is_notification(self) -> bool:
        """Absent or null id: by protocol no reply will follow."""
        return self.id is None

    @property
    def is_reply(self) -> bool:
        """Replies carry a result or error and no method."""
        return "method" not in self.raw

    @property
    def key(self) -> Optional[str]:
        """Routing key for the id, or None when there is no usable id."""
        return id_key(self.id)


def id_key(request_id: Any) -> Optional[str]:
    """
    Canonical routing key for a JSON-RPC id.

    Keeps 1 and "1" distinct. Returns None for a missing/null id.
    """
    if request_id is None:
        return None
    return json.dumps(request_id, sort_keys=True, separators=(",", ":"))


def build_request(request_id: Any, method: str, params: Any = None) -> bytes:
    """Serialize a JSON-RPC request for adapter-originated calls."""
    message = {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "method": method,
        "params": {} if params is None else params,
    }
    return json.dumps(message, separators=(",", ":")).encode("utf-8")
