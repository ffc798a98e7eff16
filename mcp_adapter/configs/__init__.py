"""
MCP Adapter Configuration Module

Re-exports commonly used functions for cleaner imports across the codebase.
"""

# Logging (most commonly used)
from mcp_adapter.configs.logging import get_logger, setup_logging

# Constants
from mcp_adapter.configs.constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    TIMEOUTS,
    get_timeout,
)

# YAML config
from mcp_adapter.configs.yaml_config import (
    get_config_path,
    load_yaml_config,
)

# Settings
from mcp_adapter.configs.settings import (
    Settings,
    build_child_env,
    load_settings,
    resolve_reference,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # Constants
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "TIMEOUTS",
    "get_timeout",
    # YAML config
    "get_config_path",
    "load_yaml_config",
    # Settings
    "Settings",
    "build_child_env",
    "load_settings",
    "resolve_reference",
]
