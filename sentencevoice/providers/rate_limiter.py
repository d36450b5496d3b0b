"""Rate limiting abstraction for provider calls.

Responsibilities:
- Provide a single hook to enforce provider request pacing.
- Keep pacing policy independent from provider adapters so tests can run with
  a zero interval or a fake clock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from time import monotonic, sleep
from typing import Callable


@dataclass(slots=True)
class RateLimiter:
    """Per-key minimum-interval limiter used around provider requests.

    `acquire` blocks until the key is allowed and reserves the next slot.
    `hold` restarts the interval from now, which callers use after a slow
    request completes so the floor is measured from the end of the work.
    """

    min_interval_seconds: float = 1.0
    clock: Callable[[], float] = monotonic
    sleeper: Callable[[float], None] = sleep
    _next_allowed_at: dict[str, float] = field(default_factory=dict)

    def acquire(self, key: str) -> None:
        """Block until request key is allowed under the interval policy."""

        if self.min_interval_seconds <= 0.0:
            return
        now = self.clock()
        next_allowed = self._next_allowed_at.get(key, 0.0)
        wait_seconds = next_allowed - now
        if wait_seconds > 0.0:
            self.sleeper(wait_seconds)
            now = self.clock()
        self._next_allowed_at[key] = now + self.min_interval_seconds

    def hold(self, key: str) -> None:
        """Push the next allowed request for key to one full interval from now."""

        if self.min_interval_seconds <= 0.0:
            return
        self._next_allowed_at[key] = self.clock() + self.min_interval_seconds
