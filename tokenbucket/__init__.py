"""In-process token bucket rate limiter"""
from .core import (
    AsyncTokenBucket,
    Clock,
    InvalidBucketError,
    MockClock,
    ProhibitOverflowError,
    StandardClock,
    TokenBucket,
    TokenBucketError,
    bucket_from_config,
    with_clock,
    with_prohibit_overflow,
)

__version__ = "0.1.0"

__all__ = [
    'AsyncTokenBucket',
    'Clock',
    'InvalidBucketError',
    'MockClock',
    'ProhibitOverflowError',
    'StandardClock',
    'TokenBucket',
    'TokenBucketError',
    'bucket_from_config',
    'with_clock',
    'with_prohibit_overflow'
]
