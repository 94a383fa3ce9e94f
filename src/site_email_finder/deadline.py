"""Run-wide time budget shared by fetches and backoff waits."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable


class Deadline:
    """A monotonic deadline that can also be cancelled from another thread."""

    def __init__(self, seconds: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._expires_at = clock() + seconds
        self._cancelled = threading.Event()

    def remaining(self) -> float:
        if self._cancelled.is_set():
            return 0.0
        return max(self._expires_at - self._clock(), 0.0)

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def cancel(self) -> None:
        self._cancelled.set()

    def sleep(self, seconds: float) -> bool:
        """Wait up to ``seconds``; return False if the deadline cut the wait short."""
        remaining = self.remaining()
        if remaining <= 0:
            return False
        if self._cancelled.wait(min(seconds, remaining)):
            return False
        return seconds < remaining
