"""
Subprocess Channel

Owns the child process and its stdin/stdout pipes. The only place that
spawns, writes to, or reaps the child.
"""

import enum
import subprocess
import threading
from typing import IO, Callable, Optional

from mcp_adapter.configs.constants import get_timeout
from mcp_adapter.configs.logging import get_logger
from mcp_adapter.exceptions import SpawnError, WriteError

logger = get_logger("channel")


class ChannelState(enum.Enum):
    """Subprocess lifecycle. TERMINATED is absorbing."""

    STARTING = "starting"
    RUNNING = "running"
    TERMINATED = "terminated"


StateListener = Callable[[ChannelState], None]


class SubprocessChannel:
    """
    Child process speaking newline-delimited JSON-RPC on stdio.

    Writes are serialized: one frame is written and flushed under a lock, so
    concurrent callers never interleave bytes on the pipe.

    Example:
        channel = SubprocessChannel()
        channel.start("npx", ["-y", "some-mcp-server"], env)
        channel.write(b'{"jsonrpc":"2.0","id":1,"method":"ping"}')
    """

    def __init__(self, shutdown_timeout: float = get_timeout("shutdown")):
        self._shutdown_timeout = shutdown_timeout
        self._proc: Optional[subprocess.Popen] = None
        self._state = ChannelState.STARTING
        self._state_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> ChannelState:
        with self._state_lock:
            return self._state

    @property
    def pid(self) -> Optional[int]:
        return self._proc.pid if self._proc else None

    @property
    def stdout(self) -> IO[bytes]:
        if self._proc is None or self._proc.stdout is None:
            raise RuntimeError("Subprocess not started")
        return self._proc.stdout

    def add_listener(self, listener: StateListener) -> None:
        """Call listener(state) on every lifecycle transition."""
        self._listeners.append(listener)

    def start(self, command: str, args: list[str], env: dict[str, str]) -> None:
        """
        Spawn the child with piped stdin/stdout; stderr passes through.

        Raises:
            SpawnError: If the executable is missing or cannot be spawned
            RuntimeError: If the channel was already started
        """
        if self._proc is not None:
            raise RuntimeError("Subprocess already started")

        logger.info(f"Starting MCP server: command='{command}', args={args}")
        try:
            self._proc = subprocess.Popen(
                [command, *args],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                env=env,
            )
        except OSError as e:
            raise SpawnError(f"Failed to start MCP server: {e}", {"command": command})

        logger.info(f"MCP server started (pid={self._proc.pid})")
        self._transition(ChannelState.RUNNING)

    def write(self, payload: bytes) -> None:
        """
        Write one frame: payload plus a trailing newline.

        Raises:
            WriteError: If the channel is not running or the pipe is broken
        """
        if self.state is not ChannelState.RUNNING or self._proc is None or self._proc.stdin is None:
            raise WriteError("MCP server is not running")

        with self._write_lock:
            try:
                self._proc.stdin.write(payload + b"\n")
                self._proc.stdin.flush()
            except (OSError, ValueError) as e:
                raise WriteError(f"Failed to write to MCP server: {e}")

    def mark_terminated(self) -> bool:
        """Move to TERMINATED. Returns True only for the first transition."""
        return self._transition(ChannelState.TERMINATED)

    def stop(self) -> Optional[int]:
        """
        Stop and reap the child: close stdin -> terminate -> wait(timeout) -> kill.

        Returns:
            The child's exit code, or None if it was never started
        """
        proc = self._proc
        if proc is None:
            return None

        if proc.poll() is None:
            logger.debug("stopping MCP server...")
            if proc.stdin:
                try:
                    proc.stdin.close()
                except OSError:
                    pass
            proc.terminate()
            try:
                proc.wait(timeout=self._shutdown_timeout)
            except subprocess.TimeoutExpired:
                logger.warning(
                    f"MCP server did not terminate within {self._shutdown_timeout}s, "
                    "sending SIGKILL"
                )
                proc.kill()
                proc.wait()

        self.mark_terminated()
        logger.info(f"MCP server exited (code={proc.returncode})")
        return proc.returncode

    def _transition(self, new_state: ChannelState) -> bool:
        with self._state_lock:
            if self._state is ChannelState.TERMINATED or self._state is new_state:
                return False
            self._state = new_state

        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception as e:
                logger.error(f"State listener failed: {e}")
        return True
