"""
Unit tests for the asyncio front end.
"""
import asyncio
import time
from datetime import timedelta

import pytest

from tokenbucket.core.async_bucket import AsyncTokenBucket
from tokenbucket.core.bucket import TokenBucket, with_prohibit_overflow
from tokenbucket.core.errors import ProhibitOverflowError


@pytest.fixture
def async_bucket(make_bucket):
    return AsyncTokenBucket(make_bucket(1, 1))


class TestAsyncTokenBucket:
    """Test awaitable take/try_take"""

    @pytest.mark.asyncio
    async def test_take_queues(self, async_bucket, mock_clock):
        assert await async_bucket.take(1) == timedelta(0)
        assert await async_bucket.take(1) == timedelta(seconds=1)
        assert mock_clock.sleeps == [timedelta(seconds=1)]

    @pytest.mark.asyncio
    async def test_gathered_takers(self, async_bucket):
        waits = await asyncio.gather(*(async_bucket.take(1) for _ in range(5)))
        assert sorted(waits) == [timedelta(seconds=i) for i in range(5)]

    @pytest.mark.asyncio
    async def test_try_take(self, async_bucket, mock_clock):
        await async_bucket.take(1)
        assert not await async_bucket.try_take(1, 0.5)
        assert await async_bucket.try_take(1, 1)
        assert mock_clock.sleeps == [timedelta(seconds=1)]

    @pytest.mark.asyncio
    async def test_shares_state_with_sync_bucket(self, async_bucket):
        async_bucket.bucket.take(1)
        assert async_bucket.available() == 0
        assert async_bucket.take_available(1) == 0

    @pytest.mark.asyncio
    async def test_prohibit_overflow(self, make_bucket):
        bucket = AsyncTokenBucket(make_bucket(2, 1, 1.0, with_prohibit_overflow()))
        with pytest.raises(ProhibitOverflowError):
            await bucket.take(3)
        assert not await bucket.try_take(3, 100)
        assert bucket.available() == 2

    @pytest.mark.asyncio
    async def test_real_clock_does_not_block_loop(self):
        bucket = AsyncTokenBucket(TokenBucket(1, 1, 0.2))
        await bucket.take(1)

        ticks = 0

        async def ticker():
            nonlocal ticks
            while True:
                ticks += 1
                await asyncio.sleep(0.01)

        task = asyncio.create_task(ticker())
        start = time.monotonic()
        await bucket.take(1)
        elapsed = time.monotonic() - start
        task.cancel()

        assert elapsed >= 0.1
        assert ticks > 3
