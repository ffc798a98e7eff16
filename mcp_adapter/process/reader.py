"""
Frame Reader

Dedicated thread draining the subprocess stdout for the life of the child.
Every non-empty trimmed line is one frame, handed to the ResponseRouter.
"""

import threading
from typing import IO, Callable, Optional

from mcp_adapter.configs.logging import get_logger
from mcp_adapter.process.health import HealthState
from mcp_adapter.process.router import ResponseRouter

logger = get_logger("reader")


class FrameReader:
    """
    Background reader for newline-delimited frames.

    On end-of-stream or read error the on_closed callback runs exactly once
    with the error (None for a clean EOF).
    """

    def __init__(
        self,
        stream: IO[bytes],
        router: ResponseRouter,
        health: HealthState,
        on_closed: Optional[Callable[[Optional[BaseException]], None]] = None,
    ):
        self._stream = stream
        self._router = router
        self._health = health
        self._on_closed = on_closed
        self._thread: Optional[threading.Thread] = None
        self.frames_read = 0
        self.frames_dropped = 0

    def start(self) -> None:
        """Start the reader thread."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run_loop, daemon=True, name="frame-reader")
        self._thread.start()
        logger.debug("Frame reader started")

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread:
            self._thread.join(timeout=timeout)

    def _run_loop(self) -> None:
        """Main read loop."""
        error: Optional[BaseException] = None
        try:
            for line in iter(self._stream.readline, b""):
                frame = line.strip()
                if not frame:
                    continue

                self._health.touch()
                self.frames_read += 1
                logger.debug(f"Received line from MCP: {frame!r}")
                if not self._router.deliver(frame):
                    self.frames_dropped += 1
        except (OSError, ValueError) as e:
            error = e
            logger.error(f"Error reading from MCP server stdout: {e}")
        else:
            logger.warning("MCP server stdout closed (EOF)")
        finally:
            if self._on_closed:
                self._on_closed(error)
