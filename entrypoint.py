#!/usr/bin/env python3
"""
MCP Adapter Container Entrypoint

Dispatches to the appropriate mode based on command line argument.

Modes:
  serve         - Start the MCP server subprocess and the HTTP adapter (default)
  check-config  - Resolve configuration, print it, and exit
"""

import sys


def serve() -> int:
    """Run the adapter. Returns the process exit code."""
    from mcp_adapter.bridge import Bridge
    from mcp_adapter.configs import get_logger, load_settings, setup_logging
    from mcp_adapter.controllers.http import run_server
    from mcp_adapter.exceptions import ConfigurationError, SpawnError

    # Initialize logging (must be called before get_logger)
    setup_logging()
    logger = get_logger("entrypoint")

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    bridge = Bridge(settings)
    try:
        bridge.start()
    except SpawnError as e:
        logger.error(str(e))
        return 1

    try:
        run_server(bridge, host=settings.host, port=settings.port)
    finally:
        terminated = bridge.terminated
        bridge.stop()

    if terminated:
        # Let the supervisor restart the whole adapter
        logger.error("MCP server process ended, exiting adapter")
        return 1
    logger.info("Adapter stopped")
    return 0


def check_config() -> int:
    """Print resolved settings. Override values are never printed."""
    from mcp_adapter.configs import load_settings
    from mcp_adapter.exceptions import ConfigurationError

    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    print(f"command:     {settings.command}")
    print(f"args:        {settings.args}")
    print(f"env keys:    {sorted(settings.env_overrides)}")
    print(f"listen:      {settings.host}:{settings.port}")
    print(f"timeouts:    request={settings.request_timeout}s handshake={settings.handshake_timeout}s "
          f"keepalive={settings.keepalive_interval}s inactivity={settings.inactivity_limit}s")
    return 0


def main():
    mode = sys.argv[1] if len(sys.argv) > 1 else "serve"

    if mode == "serve":
        sys.exit(serve())

    elif mode == "check-config":
        sys.exit(check_config())

    else:
        print(f"Unknown mode: {mode}", file=sys.stderr)
        print("Usage: entrypoint.py [serve|check-config]", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
