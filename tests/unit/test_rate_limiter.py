"""Unit tests for provider pacing."""

from __future__ import annotations

import pytest

from sentencevoice.providers import RateLimiter


class _FakeClock:
    """Manual clock whose sleeps advance time instantly."""

    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_rate_limiter_spaces_consecutive_acquires() -> None:
    """Second acquire within the interval should sleep for the remaining time."""

    clock = _FakeClock()
    limiter = RateLimiter(min_interval_seconds=1.0, clock=clock, sleeper=clock.sleep)

    limiter.acquire("openai:speech")
    clock.now += 0.25
    limiter.acquire("openai:speech")

    assert clock.sleeps == pytest.approx([0.75])


def test_rate_limiter_hold_measures_interval_from_end_of_work() -> None:
    """After `hold`, the next acquire should wait a full interval from the hold time."""

    clock = _FakeClock()
    limiter = RateLimiter(min_interval_seconds=1.0, clock=clock, sleeper=clock.sleep)

    limiter.acquire("openai:speech")
    clock.now += 3.0
    limiter.hold("openai:speech")
    clock.now += 0.4
    limiter.acquire("openai:speech")

    assert clock.sleeps == pytest.approx([0.6])


def test_rate_limiter_keys_are_independent_and_zero_interval_never_sleeps() -> None:
    """Different keys should not block each other; a zero interval disables pacing."""

    clock = _FakeClock()
    limiter = RateLimiter(min_interval_seconds=1.0, clock=clock, sleeper=clock.sleep)
    limiter.acquire("openai:speech")
    limiter.acquire("deepl:translate")
    assert clock.sleeps == []

    disabled = RateLimiter(min_interval_seconds=0.0, clock=clock, sleeper=clock.sleep)
    disabled.acquire("openai:speech")
    disabled.hold("openai:speech")
    disabled.acquire("openai:speech")
    assert clock.sleeps == []

