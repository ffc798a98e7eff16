"""
MCP Adapter Settings

Resolves the adapter configuration once at startup.
Combines defaults, the optional YAML file and environment variables
(highest wins), and builds the child process environment.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from mcp_adapter.configs.constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    ENV_ARGS,
    ENV_COMMAND,
    ENV_OVERRIDE_PREFIX,
    TIMEOUTS,
)
from mcp_adapter.configs.yaml_config import load_yaml_config
from mcp_adapter.exceptions import ConfigurationError, MissingConfigError


@dataclass(frozen=True)
class Settings:
    """Immutable adapter configuration."""

    command: str
    args: list[str] = field(default_factory=list)
    env_overrides: dict[str, str] = field(default_factory=dict)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    request_timeout: float = TIMEOUTS["request"]
    handshake_timeout: float = TIMEOUTS["handshake"]
    keepalive_interval: float = TIMEOUTS["keepalive"]
    activity_interval: float = TIMEOUTS["activity_tick"]
    inactivity_limit: float = TIMEOUTS["inactivity"]
    shutdown_timeout: float = TIMEOUTS["shutdown"]


def parse_args(value: str) -> list[str]:
    """Split a comma-separated argument list. Empty string means no args."""
    if not value:
        return []
    return value.split(",")


def collect_env_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    """Collect MCP_ENV_<KEY>=<value> pairs as {KEY: value}."""
    return {
        key[len(ENV_OVERRIDE_PREFIX):]: value
        for key, value in environ.items()
        if key.startswith(ENV_OVERRIDE_PREFIX)
    }


def resolve_reference(value: str, environ: Mapping[str, str]) -> str:
    """
    Resolve a "${NAME}" indirection against the adapter's own environment.

    Values not of that exact form are returned unchanged. An unset NAME
    resolves to the empty string.
    """
    if value.startswith("${") and value.endswith("}"):
        return environ.get(value[2:-1], "")
    return value


def is_adapter_key(key: str) -> bool:
    """True for environment keys the adapter consumes itself."""
    return key in (ENV_COMMAND, ENV_ARGS) or key.startswith(ENV_OVERRIDE_PREFIX)


def build_child_env(
    overrides: Mapping[str, str],
    environ: Optional[Mapping[str, str]] = None,
) -> dict[str, str]:
    """
    Build the environment for the child process.

    Starts from the adapter's environment with adapter keys filtered out,
    then applies overrides with "${NAME}" references resolved.

    Args:
        overrides: Child-specific variables
        environ: Adapter environment (defaults to os.environ)

    Returns:
        Complete child environment mapping
    """
    if environ is None:
        environ = os.environ
    env = {key: value for key, value in environ.items() if not is_adapter_key(key)}
    for key, value in overrides.items():
        env[key] = resolve_reference(value, environ)
    return env


def _number(raw: Any, name: str, cast: type) -> Any:
    """Convert a config value to int/float or raise ConfigurationError."""
    try:
        return cast(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}")


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    yaml_config: Optional[dict] = None,
) -> Settings:
    """
    Load settings merged from defaults, YAML, and environment.

    Priority (highest wins):
    1. Environment variables
    2. YAML config file (MCP_ADAPTER_CONFIG)
    3. Defaults

    Raises:
        MissingConfigError: If no command is configured
        ConfigurationError: If a value is malformed
    """
    if environ is None:
        environ = os.environ
    if yaml_config is None:
        yaml_config = load_yaml_config()

    command = environ.get(ENV_COMMAND) or yaml_config.get("command")
    if not command:
        raise MissingConfigError(f"{ENV_COMMAND} environment variable not set")

    if ENV_ARGS in environ:
        args = parse_args(environ[ENV_ARGS])
    else:
        args = [str(a) for a in yaml_config.get("args") or []]

    overrides = {str(k): "" if v is None else str(v) for k, v in (yaml_config.get("env") or {}).items()}
    overrides.update(collect_env_overrides(environ))

    timeouts = dict(TIMEOUTS)
    for key, value in (yaml_config.get("timeouts") or {}).items():
        if key in timeouts:
            timeouts[key] = _number(value, f"timeouts.{key}", float)
    if environ.get("MCP_REQUEST_TIMEOUT"):
        timeouts["request"] = _number(environ["MCP_REQUEST_TIMEOUT"], "MCP_REQUEST_TIMEOUT", float)

    port = environ.get("MCP_ADAPTER_PORT") or yaml_config.get("port", DEFAULT_PORT)

    return Settings(
        command=str(command),
        args=args,
        env_overrides=overrides,
        host=environ.get("MCP_ADAPTER_HOST") or yaml_config.get("host", DEFAULT_HOST),
        port=_number(port, "port", int),
        request_timeout=timeouts["request"],
        handshake_timeout=timeouts["handshake"],
        keepalive_interval=timeouts["keepalive"],
        activity_interval=timeouts["activity_tick"],
        inactivity_limit=timeouts["inactivity"],
        shutdown_timeout=timeouts["shutdown"],
    )
