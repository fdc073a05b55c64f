"""asyncio front end for TokenBucket"""
from datetime import timedelta
from typing import Optional

from .bucket import TokenBucket
from .clock import Duration


class AsyncTokenBucket:
    """
    Awaitable wrapper around a TokenBucket.

    Reservations go through the wrapped bucket (same lock, same balance),
    so sync and async callers can share one bucket. Waits are awaited with
    clock.asleep() and never block the event loop.
    """

    def __init__(self, bucket: TokenBucket):
        self._bucket = bucket

    @property
    def bucket(self) -> TokenBucket:
        return self._bucket

    def available(self) -> int:
        return self._bucket.available()

    def take_available(self, count: int) -> int:
        return self._bucket.take_available(count)

    async def take(self, count: int) -> timedelta:
        """Take `count` tokens, awaiting until they are granted"""
        wait = self._bucket.reserve(count)
        await self._bucket.clock.asleep(wait)
        return wait

    async def try_take(self, count: int, max_wait: Duration) -> bool:
        """Take `count` tokens if the wait is at most `max_wait`"""
        wait: Optional[timedelta] = self._bucket.try_reserve(count, max_wait)
        if wait is None:
            return False
        await self._bucket.clock.asleep(wait)
        return True
