"""
Core package - token bucket, clocks and errors
"""
from .clock import Clock, StandardClock, MockClock, to_timedelta
from .errors import TokenBucketError, InvalidBucketError, ProhibitOverflowError
from .bucket import TokenBucket, BucketOptions, with_clock, with_prohibit_overflow
from .async_bucket import AsyncTokenBucket
from .factory import bucket_from_config

__all__ = [
    'Clock',
    'StandardClock',
    'MockClock',
    'to_timedelta',
    'TokenBucketError',
    'InvalidBucketError',
    'ProhibitOverflowError',
    'TokenBucket',
    'BucketOptions',
    'with_clock',
    'with_prohibit_overflow',
    'AsyncTokenBucket',
    'bucket_from_config'
]
