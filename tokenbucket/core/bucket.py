"""
Token bucket rate limiter

Tokens are refilled lazily: every operation converts the time elapsed since
the bucket was created into whole fill intervals ("ticks") and tops the
balance up for the ticks seen since the last operation. There is no
background timer.

Callers that have to wait reserve their tokens immediately, which can drive
the balance below zero. Later callers are then queued behind the debt
instead of competing for the same future tokens. The lock only covers this
bookkeeping; the actual wait happens after it is released.
"""
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

from loguru import logger

from .clock import Clock, Duration, StandardClock, to_timedelta
from .errors import InvalidBucketError, ProhibitOverflowError


@dataclass
class BucketOptions:
    """Construction-time settings, applied once"""
    clock: Optional[Clock] = None
    prohibit_overflow: bool = False


OptionFunc = Callable[[BucketOptions], None]


def with_clock(clock: Clock) -> OptionFunc:
    """Use a custom time source, e.g. a MockClock in tests"""
    def apply(opt: BucketOptions):
        opt.clock = clock
    return apply


def with_prohibit_overflow() -> OptionFunc:
    """Reject any single request for more tokens than the capacity"""
    def apply(opt: BucketOptions):
        opt.prohibit_overflow = True
    return apply


def load_options(*options: OptionFunc) -> BucketOptions:
    opt = BucketOptions()
    for apply in options:
        apply(opt)
    if opt.clock is None:
        opt.clock = StandardClock()
    return opt


class TokenBucket:
    """Thread-safe token bucket with reservation-based waiting"""

    def __init__(
        self,
        capacity: int,
        quantum: int,
        fill_interval: Duration,
        *options: OptionFunc,
        clock: Optional[Clock] = None,
        prohibit_overflow: Optional[bool] = None
    ):
        """
        Args:
            capacity: Maximum number of tokens the bucket holds
            quantum: Tokens added every fill interval
            fill_interval: Time between fills (timedelta or seconds)
            *options: Option functions (with_clock, with_prohibit_overflow)
            clock: Keyword shortcut for with_clock()
            prohibit_overflow: Keyword shortcut for with_prohibit_overflow()

        Raises:
            InvalidBucketError: if capacity, quantum or fill_interval is not > 0
        """
        capacity = _whole_number("capacity", capacity)
        quantum = _whole_number("quantum", quantum)
        requested_interval = fill_interval
        fill_interval = to_timedelta(fill_interval)
        if capacity <= 0:
            raise InvalidBucketError("capacity is not > 0")
        if quantum <= 0:
            raise InvalidBucketError("quantum is not > 0")
        if fill_interval <= timedelta(0):
            if not isinstance(requested_interval, timedelta) and requested_interval > 0:
                raise InvalidBucketError(
                    f"fill interval {requested_interval}s is below the 1 microsecond resolution of timedelta"
                )
            raise InvalidBucketError("fill interval is not > 0")

        if clock is not None:
            options = options + (with_clock(clock),)
        if prohibit_overflow is not None:
            options = options + (_set_prohibit_overflow(prohibit_overflow),)
        opt = load_options(*options)

        self._clock: Clock = opt.clock
        self._prohibit_overflow = opt.prohibit_overflow
        self._capacity = capacity
        self._quantum = quantum
        self._fill_interval = fill_interval
        self._create_time: datetime = self._clock.now()
        self._last_now = self._create_time
        self._available_tokens = self._capacity
        self._last_tick = 0
        self._lock = threading.Lock()

        logger.debug(f"Token bucket created: {self!r}")

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def quantum(self) -> int:
        return self._quantum

    @property
    def fill_interval(self) -> timedelta:
        return self._fill_interval

    @property
    def prohibit_overflow(self) -> bool:
        return self._prohibit_overflow

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def rate(self) -> float:
        """Steady-state refill rate in tokens per second"""
        return self._quantum / self._fill_interval.total_seconds()

    def __repr__(self) -> str:
        return (
            f"TokenBucket(capacity={self._capacity}, quantum={self._quantum}, "
            f"fill_interval={self._fill_interval}, prohibit_overflow={self._prohibit_overflow})"
        )

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def available(self) -> int:
        """Number of tokens that can be taken right now without waiting"""
        with self._lock:
            self._refill(self._now())
            return max(0, self._available_tokens)

    def take(self, count: int) -> timedelta:
        """
        Take `count` tokens, sleeping until they are granted.

        Returns:
            The duration slept (zero if the tokens were already there)

        Raises:
            ProhibitOverflowError: overflow is prohibited and count > capacity
        """
        wait = self.reserve(count)
        self._clock.sleep(wait)
        return wait

    def try_take(self, count: int, max_wait: Duration) -> bool:
        """
        Take `count` tokens if that needs a wait of at most `max_wait`.

        On success the required wait has already been slept when this
        returns. On failure nothing is reserved and nothing is slept.
        """
        wait = self.try_reserve(count, max_wait)
        if wait is None:
            return False
        self._clock.sleep(wait)
        return True

    def take_available(self, count: int) -> int:
        """Take up to `count` tokens without blocking; returns how many were taken"""
        if count <= 0:
            return 0
        with self._lock:
            self._refill(self._now())
            if self._available_tokens <= 0:
                return 0
            granted = min(count, self._available_tokens)
            self._available_tokens -= granted
            return granted

    def reserve(self, count: int) -> timedelta:
        """
        Reserve `count` tokens without sleeping.

        The caller must wait for the returned duration before using the
        tokens. take() is reserve() followed by clock.sleep().

        Raises:
            ProhibitOverflowError: overflow is prohibited and count > capacity
        """
        with self._lock:
            wait, granted = self._take(count, self._now(), None)
        if not granted:
            logger.warning(f"Rejected request for {count} tokens (capacity {self._capacity}, overflow prohibited)")
            raise ProhibitOverflowError(count, self._capacity)
        if wait > timedelta(0):
            logger.debug(f"Reserved {count} tokens, wait {wait.total_seconds():.3f}s")
        return wait

    def try_reserve(self, count: int, max_wait: Duration) -> Optional[timedelta]:
        """
        Reserve `count` tokens without sleeping if the wait is at most `max_wait`.

        Returns:
            The wait the caller must honour, or None if nothing was reserved
        """
        max_wait = to_timedelta(max_wait)
        with self._lock:
            wait, granted = self._take(count, self._now(), max_wait)
        if not granted:
            logger.debug(f"Could not reserve {count} tokens within {max_wait.total_seconds():.3f}s")
            return None
        if wait > timedelta(0):
            logger.debug(f"Reserved {count} tokens, wait {wait.total_seconds():.3f}s")
        return wait

    # ------------------------------------------------------------------
    # Bookkeeping (caller holds the lock)
    # ------------------------------------------------------------------

    def _current_tick(self, now: datetime) -> int:
        """Whole fill intervals elapsed since creation"""
        return (now - self._create_time) // self._fill_interval

    def _now(self) -> datetime:
        """Clock reading that never goes backwards"""
        now = self._clock.now()
        if now < self._last_now:
            return self._last_now
        self._last_now = now
        return now

    def _refill(self, now: datetime) -> int:
        tick = self._current_tick(now)
        self._adjust_available_tokens(tick)
        return tick

    def _adjust_available_tokens(self, tick: int):
        last_tick = self._last_tick
        self._last_tick = tick
        if self._available_tokens >= self._capacity:
            return
        self._available_tokens += (tick - last_tick) * self._quantum
        if self._available_tokens > self._capacity:
            self._available_tokens = self._capacity

    def _take(self, count: int, now: datetime, max_wait: Optional[timedelta]) -> Tuple[timedelta, bool]:
        """
        Core acquisition step.

        Args:
            count: Tokens requested
            now: Current time
            max_wait: Longest acceptable wait, None for unbounded

        Returns:
            (wait, granted). When granted is True the tokens have been
            deducted, even if the caller still has to wait.
        """
        if count <= 0:
            return timedelta(0), True
        if self._prohibit_overflow and count > self._capacity:
            return timedelta(0), False

        tick = self._refill(now)
        new_available = self._available_tokens - count
        if new_available >= 0:
            self._available_tokens = new_available
            return timedelta(0), True

        # Tick at which enough tokens will have been added to pay off the debt
        end_tick = tick + (-new_available + self._quantum - 1) // self._quantum
        expected_end_time = self._create_time + self._fill_interval * end_tick
        wait = expected_end_time - now
        if max_wait is None or wait <= max_wait:
            self._available_tokens = new_available
            return wait, True
        return timedelta(0), False


def _whole_number(name: str, value) -> int:
    """Reject bools and fractional values instead of truncating them"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidBucketError(f"{name} must be an integer, got {type(value).__name__}")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidBucketError(f"{name} must be a whole number, got {value}")
    return int(value)


def _set_prohibit_overflow(value: bool) -> OptionFunc:
    def apply(opt: BucketOptions):
        opt.prohibit_overflow = bool(value)
    return apply
