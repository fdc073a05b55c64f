"""Exceptions raised by the token bucket"""


class TokenBucketError(Exception):
    """Base class for token bucket errors"""


class InvalidBucketError(TokenBucketError, ValueError):
    """Bucket parameters are out of range; no bucket is created"""


class ProhibitOverflowError(TokenBucketError):
    """More tokens than capacity were requested from an overflow-prohibited bucket"""

    def __init__(self, count: int, capacity: int):
        self.count = count
        self.capacity = capacity
        super().__init__(f"prohibit overflow: requested {count} tokens, capacity is {capacity}")
