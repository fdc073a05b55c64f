"""
Shared fixtures for all test modules.
"""
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure project root is in path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tokenbucket.core.bucket import TokenBucket, with_clock
from tokenbucket.core.clock import MockClock


@pytest.fixture
def mock_clock():
    """MockClock pinned to a fixed instant"""
    return MockClock(base=datetime(2024, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def make_bucket(mock_clock):
    """Factory for buckets driven by the shared mock clock"""
    def _make(capacity, quantum, fill_interval=1.0, *options):
        return TokenBucket(capacity, quantum, fill_interval, with_clock(mock_clock), *options)
    return _make
