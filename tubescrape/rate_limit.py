"""Per-caller sliding-window admission control."""

import logging
import threading
import time
from collections import deque
from typing import Callable

logger = logging.getLogger(__name__)


class AdmissionLimiter:
    """Allows at most ``max_requests`` per caller in any trailing ``window`` seconds.

    Timestamps older than the window are pruned on every check. Callers
    without an identity are not limited. Once per window the whole map is
    swept, so callers that stop calling do not keep an entry around.
    """

    def __init__(
        self,
        max_requests: int = 30,
        window: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window = window
        self._clock = clock
        self._windows: dict[str, deque[float]] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def allow(self, caller_id: str | None) -> bool:
        if not caller_id:
            return True
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.window:
                self._sweep(now)
            timestamps = self._windows.get(caller_id)
            if timestamps is None:
                timestamps = self._windows[caller_id] = deque()
            while timestamps and now - timestamps[0] >= self.window:
                timestamps.popleft()
            if len(timestamps) >= self.max_requests:
                return False
            timestamps.append(now)
            return True

    def _sweep(self, now: float):
        # a deque whose newest timestamp has aged out is entirely stale
        stale = [c for c, ts in self._windows.items() if not ts or now - ts[-1] >= self.window]
        for caller_id in stale:
            del self._windows[caller_id]
        self._last_sweep = now
        if stale:
            logger.debug("Dropped %d idle rate limit windows", len(stale))

    def __len__(self) -> int:
        """Number of callers currently tracked."""
        with self._lock:
            return len(self._windows)
