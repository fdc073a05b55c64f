"""Build buckets from the YAML configuration"""
from typing import Optional

from loguru import logger

from .bucket import TokenBucket, with_clock, with_prohibit_overflow
from .clock import Clock
from ..utils.config import Config, config as default_config


def bucket_from_config(name: str, cfg: Optional[Config] = None, clock: Optional[Clock] = None) -> TokenBucket:
    """
    Create the bucket described by `rate_limits.<name>`.

    Args:
        name: Section name under rate_limits
        cfg: Config to read from (defaults to the global instance)
        clock: Optional time source override

    Raises:
        KeyError: section is missing
        ValueError: section is incomplete or has out-of-range values
    """
    settings = (cfg or default_config).rate_limit(name)

    options = []
    if clock is not None:
        options.append(with_clock(clock))
    if settings.prohibit_overflow:
        options.append(with_prohibit_overflow())

    bucket = TokenBucket(settings.capacity, settings.quantum, settings.fill_interval_seconds, *options)
    logger.info(
        f"Rate limit '{name}' - capacity {bucket.capacity}, "
        f"{bucket.quantum} tokens every {bucket.fill_interval.total_seconds()}s"
    )
    return bucket
