"""Deadline — one time budget shared by every network call of a run."""

from __future__ import annotations

import time

from trackpush.errors import InvocationTimeoutError

DEFAULT_TIMEOUT_SECONDS = 120.0


class Deadline:
    """Tracks the time left before the whole invocation must be abandoned."""

    def __init__(self, seconds: float = DEFAULT_TIMEOUT_SECONDS, clock=time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self._expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(self._expires_at - self._clock(), 0.0)

    def check(self) -> float:
        """Return the seconds left, raising once the deadline has passed."""
        left = self.remaining()
        if left <= 0:
            raise InvocationTimeoutError(f"timed out after {self.seconds:g}s")
        return left
