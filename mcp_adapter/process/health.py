"""
Health State

Liveness and last-activity record shared by the reader, both bridges and the
health endpoint. Owned by the Bridge runtime and passed to collaborators.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from mcp_adapter.configs.constants import get_timeout

REASON_NOT_RUNNING = "MCP server not running"
REASON_INACTIVE = "MCP server inactive"


@dataclass(frozen=True)
class HealthStatus:
    """Result of a health check."""

    healthy: bool
    reason: Optional[str] = None
    idle_seconds: float = 0.0


class HealthState:
    """
    Thread-safe liveness record.

    is_running goes True -> False exactly once and never back.
    last_activity never moves backwards, even if the clock does.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._running = True
        self._last_activity = clock()

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    @property
    def last_activity(self) -> float:
        with self._lock:
            return self._last_activity

    def touch(self) -> None:
        """Record activity now."""
        now = self._clock()
        with self._lock:
            if now > self._last_activity:
                self._last_activity = now

    def mark_stopped(self) -> bool:
        """Mark the subprocess as gone. Returns True only on the first call."""
        with self._lock:
            was_running = self._running
            self._running = False
            return was_running

    def idle_seconds(self) -> float:
        with self._lock:
            last = self._last_activity
        return max(0.0, self._clock() - last)

    def check(self, inactivity_limit: float = get_timeout("inactivity")) -> HealthStatus:
        """
        Healthy iff running and the last activity is under inactivity_limit ago.
        """
        with self._lock:
            running = self._running
            last = self._last_activity
        idle = max(0.0, self._clock() - last)

        if not running:
            return HealthStatus(False, REASON_NOT_RUNNING, idle)
        if idle >= inactivity_limit:
            return HealthStatus(False, REASON_INACTIVE, idle)
        return HealthStatus(True, None, idle)
