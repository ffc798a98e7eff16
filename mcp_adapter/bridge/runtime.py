"""
Bridge Runtime

Wires the subprocess channel, frame reader, reply router and health state
together and offers one send/await primitive for both HTTP bridges.
"""

import asyncio
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from mcp_adapter.configs.logging import get_logger
from mcp_adapter.configs.settings import Settings, build_child_env
from mcp_adapter.exceptions import ResponseTimeoutError, WriteError
from mcp_adapter.process import (
    ChannelState,
    FrameReader,
    HealthState,
    ResponseRouter,
    SubprocessChannel,
)

logger = get_logger("runtime")


class Bridge:
    """
    Runtime owning every component of one adapter process.

    Subprocess death is terminal: health goes to not-running, every waiter
    is released with ChannelClosedError, and the channel moves to
    TERMINATED so listeners (the HTTP server) can shut down.
    """

    def __init__(
        self,
        settings: Settings,
        health: Optional[HealthState] = None,
        channel: Optional[SubprocessChannel] = None,
    ):
        self.settings = settings
        self.health = health or HealthState()
        self.channel = channel or SubprocessChannel(shutdown_timeout=settings.shutdown_timeout)
        self.router = ResponseRouter()
        self.reader: Optional[FrameReader] = None
        self.started_at: Optional[float] = None

    @property
    def terminated(self) -> bool:
        return self.channel.state is ChannelState.TERMINATED

    def start(self) -> None:
        """
        Spawn the subprocess and start reading its output.

        Raises:
            SpawnError: If the subprocess cannot be started
        """
        env = build_child_env(self.settings.env_overrides)
        logger.info(
            f"Loaded MCP configuration: command='{self.settings.command}', "
            f"args={self.settings.args}, env_keys_to_pass={sorted(self.settings.env_overrides)}"
        )
        self.channel.start(self.settings.command, self.settings.args, env)
        self.health.touch()
        self.started_at = time.time()

        self.reader = FrameReader(
            self.channel.stdout,
            self.router,
            self.health,
            on_closed=self._on_output_closed,
        )
        self.reader.start()

    def stop(self) -> Optional[int]:
        """Stop the subprocess and release any waiters."""
        code = self.channel.stop()
        if self.reader:
            self.reader.join(timeout=1.0)
        self.router.close()
        self.health.mark_stopped()
        return code

    def _on_output_closed(self, error: Optional[BaseException]) -> None:
        """Subprocess output ended: fatal for the whole bridge."""
        self.health.mark_stopped()
        self.router.close()
        if self.channel.mark_terminated():
            logger.error("MCP server process ended, shutting down adapter")

    # --- Send / await ---

    def exchange(
        self,
        payload: bytes,
        key: Optional[str],
        timeout: float,
        expect_reply: bool = True,
    ) -> Optional[bytes]:
        """
        Write a frame and block until its reply arrives.

        The reply handle is registered before writing so a fast reply
        cannot be missed.

        Returns:
            The reply frame, or None when expect_reply is False

        Raises:
            WriteError, ChannelClosedError, ResponseTimeoutError
        """
        future = self.router.expect(key) if expect_reply else None
        self._write(payload, future)
        if future is None:
            return None

        try:
            return future.result(timeout=timeout)
        except FuturesTimeoutError:
            raise ResponseTimeoutError(f"No reply from MCP server within {timeout}s", {"id": key})
        finally:
            self.router.discard(future)

    async def exchange_async(self, payload: bytes, key: Optional[str], timeout: float) -> bytes:
        """
        Async variant of exchange() for handlers that must stay cancellable.

        Cancellation of the awaiting task (client disconnect) releases the
        reply handle.
        """
        future = self.router.expect(key)
        try:
            await run_in_threadpool(self._write, payload, future)
            try:
                return await asyncio.wait_for(asyncio.wrap_future(future), timeout=timeout)
            except asyncio.TimeoutError:
                raise ResponseTimeoutError(f"No reply from MCP server within {timeout}s", {"id": key})
        finally:
            self.router.discard(future)

    def _write(self, payload: bytes, future: Optional[Future]) -> None:
        try:
            self.channel.write(payload)
        except WriteError:
            if future is not None:
                self.router.discard(future)
            raise
