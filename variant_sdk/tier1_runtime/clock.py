"""
variant_sdk.tier1_runtime.clock
────────────────────────────────
Mockable time source. Signing and freshness checks read the time from a
Clock instead of time.time() directly, so expiry is fully controllable in
tests.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# ── Clock implementation ───────────────────────────────────────────────────

class Clock:
    """Mockable clock. Override _now_fn to control time in tests."""

    def __init__(self, now_fn: Callable[[], datetime] | None = None) -> None:
        self._now_fn = now_fn or (lambda: datetime.now(tz=timezone.utc))

    def now(self) -> datetime:
        """Return the current UTC datetime."""
        return self._now_fn()

    def timestamp(self) -> float:
        """Return the current Unix timestamp (float seconds)."""
        return self.now().timestamp()

    def timestamp_ms(self) -> int:
        """Return the current Unix timestamp in milliseconds (exact, no float)."""
        delta = self.now() - _EPOCH
        return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000

    def freeze(self, dt: datetime) -> "Clock":
        """Return a new Clock frozen at the given datetime."""
        return Clock(now_fn=lambda: dt)

    def advance(self, seconds: float) -> "Clock":
        """Return a new Clock advanced by *seconds* from current time."""
        base = self.now()
        moved = base + timedelta(seconds=seconds)
        return Clock(now_fn=lambda: moved)

    @classmethod
    def at_ms(cls, timestamp_ms: int) -> "Clock":
        """Return a Clock frozen at an exact epoch-millisecond instant."""
        dt = _EPOCH + timedelta(milliseconds=timestamp_ms)
        return cls(now_fn=lambda: dt)


# ── Module-level singleton ─────────────────────────────────────────────────

_clock = Clock()


def get_clock() -> Clock:
    """Return the global clock instance."""
    return _clock


def set_clock(clock: Clock) -> None:
    """Replace the global clock (use in tests)."""
    global _clock
    _clock = clock


def now() -> datetime:
    """Return the current UTC datetime."""
    return _clock.now()


def timestamp_ms() -> int:
    """Return the current Unix timestamp in milliseconds."""
    return _clock.timestamp_ms()


__all__ = ["Clock", "get_clock", "set_clock", "now", "timestamp_ms"]
