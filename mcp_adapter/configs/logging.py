"""
MCP Adapter Logging Configuration

Configures logging based on environment variables:
- MCP_ADAPTER_DEBUG: Enable debug logging (default: false)
- MCP_ADAPTER_LOG_FILE: Optional log file path (default: stderr only)
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional


def setup_logging(
    debug: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for the adapter.

    Args:
        debug: Enable debug level. Defaults to MCP_ADAPTER_DEBUG env var.
        log_file: Log file path. Defaults to MCP_ADAPTER_LOG_FILE env var,
                  stderr only if not set.

    Returns:
        Root logger for the adapter
    """
    # Read from env if not provided
    if debug is None:
        debug = os.environ.get("MCP_ADAPTER_DEBUG", "").lower() in ("true", "1", "yes")
    if log_file is None:
        log_file = os.environ.get("MCP_ADAPTER_LOG_FILE") or None

    level = logging.DEBUG if debug else logging.INFO

    # Create formatter with component tags
    formatter = logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger = logging.getLogger("mcp_adapter")
    logger.setLevel(level)

    # Clear existing handlers
    logger.handlers.clear()

    # stderr is the primary sink; the container runtime collects it
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(level)
    logger.addHandler(stderr_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)
        logger.info(f"Logging to file: {log_file}")

    return logger


def get_logger(component: str) -> logging.Logger:
    """
    Get a logger for a specific component.

    Args:
        component: Component name (e.g., "reader", "bridge", "http")

    Returns:
        Logger instance for the component
    """
    return logging.getLogger(f"mcp_adapter.{component}")
