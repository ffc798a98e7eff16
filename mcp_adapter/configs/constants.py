"""
MCP Adapter Constants

Static configuration values: environment variable names, HTTP defaults,
queue bounds and timeout configuration.
"""

# --- Environment Variables ---
# Keys consumed by the adapter itself and filtered out of the child environment

ENV_COMMAND = "MCP_COMMAND"
ENV_ARGS = "MCP_ARGS"
ENV_OVERRIDE_PREFIX = "MCP_ENV_"

# --- HTTP Server ---

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080

# --- SSE Handshake ---
# Fixed request ids for the synthetic handshake sent on every SSE connection

SSE_INIT_ID = "sse_init"
SSE_TOOLS_LIST_ID = "sse_tools_list"

# --- Timeout Configuration ---
# Centralized timeout values (in seconds)

TIMEOUTS = {
    "request": 10,  # POST /mcp wait for a reply
    "handshake": 15,  # Each SSE handshake step
    "keepalive": 20,  # SSE comment-only keepalive period
    "activity_tick": 30,  # SSE session refresh of last activity
    "inactivity": 60,  # /health reports inactive past this
    "shutdown": 5,  # Child terminate -> kill grace period
}


def get_timeout(key: str, default: int | float | None = None) -> int | float:
    """
    Get a timeout value by key.

    Args:
        key: Timeout key from TIMEOUTS dict
        default: Default value if key not found

    Returns:
        Timeout value in seconds
    """
    if default is None:
        default = TIMEOUTS["request"]
    return TIMEOUTS.get(key, default)
