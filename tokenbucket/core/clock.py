"""Time sources used by the token bucket"""
import asyncio
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union

Duration = Union[timedelta, int, float]


def to_timedelta(value: Duration) -> timedelta:
    """
    Normalize a duration argument.

    Args:
        value: timedelta, or a number of seconds

    Returns:
        The duration as a timedelta
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected timedelta or seconds, got {type(value).__name__}")
    return timedelta(seconds=value)


class Clock(ABC):
    """Abstract time source: current time plus a blocking sleep"""

    @abstractmethod
    def now(self) -> datetime:
        pass

    @abstractmethod
    def sleep(self, duration: Duration):
        """Block the calling thread for at least `duration`"""
        pass

    async def asleep(self, duration: Duration):
        """Event-loop friendly sleep, same semantics as sleep()"""
        seconds = to_timedelta(duration).total_seconds()
        if seconds > 0:
            await asyncio.sleep(seconds)


class StandardClock(Clock):
    """
    Real-time clock.

    Readings are a UTC anchor taken at construction plus monotonic elapsed
    time, so system clock adjustments do not move "now".
    """

    def __init__(self):
        self._anchor = datetime.now(timezone.utc)
        self._anchor_monotonic = time.monotonic()

    def now(self) -> datetime:
        return self._anchor + timedelta(seconds=time.monotonic() - self._anchor_monotonic)

    def sleep(self, duration: Duration):
        seconds = to_timedelta(duration).total_seconds()
        if seconds > 0:
            time.sleep(seconds)


class MockClock(Clock):
    """
    Manually driven clock for deterministic tests.

    "Now" is a fixed base instant plus a simulated offset that only moves
    when set_offset() or advance() is called. Sleeping never blocks; the
    requested durations are recorded in `sleeps` instead.
    """

    def __init__(self, base: Optional[datetime] = None):
        self._base = base or datetime.now(timezone.utc)
        self._offset = timedelta(0)
        self._lock = threading.Lock()
        self.sleeps: List[timedelta] = []

    @property
    def base(self) -> datetime:
        return self._base

    @property
    def offset(self) -> timedelta:
        with self._lock:
            return self._offset

    def set_offset(self, offset: Duration):
        """Place "now" at base + offset"""
        with self._lock:
            self._offset = to_timedelta(offset)

    def advance(self, delta: Duration):
        """Move "now" forward by delta"""
        with self._lock:
            self._offset += to_timedelta(delta)

    def now(self) -> datetime:
        with self._lock:
            return self._base + self._offset

    def sleep(self, duration: Duration):
        duration = to_timedelta(duration)
        if duration <= timedelta(0):
            return
        with self._lock:
            self.sleeps.append(duration)

    async def asleep(self, duration: Duration):
        self.sleep(duration)
