"""
MCP Adapter Exception Hierarchy

Centralized exception classes for structured error handling across the adapter.
All adapter-specific exceptions inherit from AdapterError.

Usage:
    from mcp_adapter.exceptions import ChannelClosedError, ResponseTimeoutError

    try:
        frame = bridge.forward(body)
    except ResponseTimeoutError as e:
        logger.warning(f"No reply: {e}")
"""


class AdapterError(Exception):
    """Base exception for all adapter errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(AdapterError):
    """Error in adapter configuration."""

    pass


class MissingConfigError(ConfigurationError):
    """Required configuration value is missing."""

    pass


# =============================================================================
# Subprocess Errors
# =============================================================================


class SubprocessError(AdapterError):
    """Base class for errors talking to the child process."""

    pass


class SpawnError(SubprocessError):
    """The child process could not be started."""

    pass


class WriteError(SubprocessError):
    """Writing a frame to the child's stdin failed."""

    pass


class ChannelClosedError(SubprocessError):
    """The child's output stream is closed; no further replies will arrive."""

    pass


# =============================================================================
# Delivery Errors
# =============================================================================


class DeliveryError(AdapterError):
    """Base class for reply delivery failures."""

    pass


class ResponseTimeoutError(DeliveryError):
    """No reply arrived within the allotted time."""

    pass

