"""
Response Router

Hands frames read from the subprocess to the callers waiting for them.

Each caller registers a pending handle before its request is written. Frames
are matched to handles by JSON-RPC id; handles for requests whose id could not
be read (malformed bodies, batches) are served FIFO from frames that match no
id. The reader never blocks here: a frame nobody is waiting for is dropped.
"""

from collections import deque
from concurrent.futures import Future, InvalidStateError
from threading import Lock
from typing import Optional

from mcp_adapter.configs.logging import get_logger
from mcp_adapter.exceptions import ChannelClosedError
from mcp_adapter.process.envelope import EnvelopeError, RPCEnvelope

logger = get_logger("router")


class ResponseRouter:
    """
    Pending reply handles keyed by request id.

    Handles are concurrent.futures.Future objects so both threadpool handlers
    (future.result) and async handlers (asyncio.wrap_future) can wait on them.
    """

    def __init__(self):
        self._lock = Lock()
        self._by_key: dict[str, deque[Future]] = {}
        self._uncorrelated: deque[Future] = deque()
        self._count = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    @property
    def pending_count(self) -> int:
        with self._lock:
            return self._count

    def expect(self, key: Optional[str]) -> Future:
        """
        Register interest in the reply for a request id.

        Args:
            key: Routing key from envelope.id_key(), or None for uncorrelated

        Raises:
            ChannelClosedError: If the subprocess output is already closed
        """
        future: Future = Future()
        with self._lock:
            if self._closed:
                raise ChannelClosedError("MCP server closed the connection")
            if key is None:
                self._uncorrelated.append(future)
            else:
                self._by_key.setdefault(key, deque()).append(future)
            self._count += 1
        return future

    def discard(self, future: Future) -> None:
        """Forget a handle (timeout, cancellation or write failure)."""
        with self._lock:
            if self._remove(future):
                self._count -= 1
        future.cancel()

    def deliver(self, frame: bytes) -> bool:
        """
        Resolve the waiter a frame belongs to. Never blocks.

        Returns:
            True if a waiter received the frame, False if it was dropped
        """
        key = None
        try:
            envelope = RPCEnvelope.parse(frame)
        except EnvelopeError:
            envelope = None
        else:
            if not envelope.is_reply:
                logger.info(f"Dropping subprocess-initiated message: {envelope.method}")
                return False
            key = envelope.key

        while True:
            future = self._claim(key)
            if future is None:
                waiting = self._pending_keys()
                if waiting:
                    logger.warning(
                        f"Reply id {key} matches no waiting request (waiting for ids {waiting}); discarding"
                    )
                else:
                    logger.warning(f"No receiver for frame (id={key}); discarding")
                logger.debug(f"Discarded frame: {frame!r}")
                return False
            try:
                future.set_result(frame)
                return True
            except InvalidStateError:
                # Waiter gave up between claim and delivery; try the next one
                continue

    def close(self) -> None:
        """Fail every pending handle. Later expect() calls fail immediately."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            waiters = [f for queue in self._by_key.values() for f in queue]
            waiters.extend(self._uncorrelated)
            self._by_key.clear()
            self._uncorrelated.clear()
            self._count = 0

        for future in waiters:
            try:
                future.set_exception(ChannelClosedError("MCP server closed the connection"))
            except InvalidStateError:
                pass
        if waiters:
            logger.info(f"Released {len(waiters)} pending waiters after channel close")

    # --- Internal ---

    def _claim(self, key: Optional[str]) -> Optional[Future]:
        """Pop the oldest live waiter for key, falling back to uncorrelated."""
        with self._lock:
            queue = self._by_key.get(key) if key is not None else None
            for source in (queue, self._uncorrelated):
                while source:
                    future = source.popleft()
                    self._count -= 1
                    if source is queue and not queue:
                        del self._by_key[key]
                    if not future.done():
                        return future
        return None

    def _remove(self, future: Future) -> bool:
        if future in self._uncorrelated:
            self._uncorrelated.remove(future)
            return True
        for key, queue in self._by_key.items():
            if future in queue:
                queue.remove(future)
                if not queue:
                    del self._by_key[key]
                return True
        return False

    def _pending_keys(self) -> list[str]:
        with self._lock:
            return sorted(self._by_key)
