"""
MCP Adapter YAML Configuration

Optional config file named by MCP_ADAPTER_CONFIG. Environment variables
still win over anything set here.
"""

import os
from pathlib import Path
from typing import Optional

import yaml

from mcp_adapter.exceptions import ConfigurationError

ENV_CONFIG_PATH = "MCP_ADAPTER_CONFIG"


def get_config_path() -> Optional[Path]:
    """Get the config file path from MCP_ADAPTER_CONFIG, if set."""
    value = os.environ.get(ENV_CONFIG_PATH)
    if not value:
        return None
    return Path(value).expanduser()


def load_yaml_config(path: Optional[Path] = None) -> dict:
    """
    Load configuration from a YAML file.

    Args:
        path: Explicit file path. Defaults to MCP_ADAPTER_CONFIG.

    Returns:
        Configuration dictionary (empty if no file is configured)

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a mapping
    """
    if path is None:
        path = get_config_path()
    if path is None:
        return {}

    try:
        content = path.read_text()
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file: {e}", {"path": str(path)})

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML: {e}", {"path": str(path)})

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a mapping", {"path": str(path)})
    return data
