"""
Unit tests for configuration and config-driven buckets.
"""
import textwrap

import pytest

from tokenbucket.core.clock import MockClock
from tokenbucket.core.errors import InvalidBucketError
from tokenbucket.core.factory import bucket_from_config
from tokenbucket.utils.config import Config, RateLimitSettings


CONFIG_YAML = textwrap.dedent("""
    logging:
      level: DEBUG
    rate_limits:
      default:
        capacity: 10
        quantum: 2
        fill_interval_seconds: 0.5
      strict:
        capacity: 3
        quantum: 1
        fill_interval_seconds: 12
        prohibit_overflow: true
      incomplete:
        capacity: 3
      broken:
        capacity: lots
        quantum: 1
        fill_interval_seconds: 1
      zero:
        capacity: 0
        quantum: 1
        fill_interval_seconds: 1
""")


@pytest.fixture
def cfg(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML)
    return Config(str(path))


class TestConfig:
    """Test YAML loading and dot-notation access"""

    def test_get(self, cfg):
        assert cfg.get("logging.level") == "DEBUG"
        assert cfg.get("rate_limits.default.capacity") == 10
        assert cfg.get("rate_limits.nope.capacity", 5) == 5
        assert cfg.get("logging.level.deeper", "x") == "x"

    def test_missing_file(self, tmp_path):
        cfg = Config(str(tmp_path / "missing.yaml"))
        assert cfg.config == {}
        assert cfg.rate_limit_names() == []

    def test_env_selects_file(self, tmp_path, monkeypatch):
        path = tmp_path / "other.yaml"
        path.write_text("logging:\n  level: WARNING\n")
        monkeypatch.setenv("TOKENBUCKET_CONFIG", str(path))
        assert Config().get("logging.level") == "WARNING"

    def test_set_nested(self, cfg):
        cfg.set("rate_limits.new.capacity", 4)
        assert cfg.get("rate_limits.new.capacity") == 4
        assert "new" in cfg.rate_limit_names()

    def test_reload(self, cfg):
        cfg.set("logging.level", "ERROR")
        cfg.reload()
        assert cfg.get("logging.level") == "DEBUG"

    def test_rate_limit_names(self, cfg):
        assert cfg.rate_limit_names() == ["broken", "default", "incomplete", "strict", "zero"]

    def test_rate_limit(self, cfg):
        assert cfg.rate_limit("strict") == RateLimitSettings(
            name="strict",
            capacity=3,
            quantum=1,
            fill_interval_seconds=12.0,
            prohibit_overflow=True,
        )

    def test_rate_limit_missing_section(self, cfg):
        with pytest.raises(KeyError):
            cfg.rate_limit("nope")

    def test_rate_limit_missing_keys(self, cfg):
        with pytest.raises(ValueError, match="quantum"):
            cfg.rate_limit("incomplete")

    def test_rate_limit_bad_value(self, cfg):
        with pytest.raises(ValueError, match="invalid value"):
            cfg.rate_limit("broken")


class TestBucketFromConfig:
    """Test building buckets from rate limit sections"""

    def test_default(self, cfg):
        clock = MockClock()
        bucket = bucket_from_config("default", cfg, clock=clock)
        assert bucket.capacity == 10
        assert bucket.quantum == 2
        assert bucket.fill_interval.total_seconds() == 0.5
        assert bucket.rate == pytest.approx(4.0)
        assert bucket.clock is clock
        assert not bucket.prohibit_overflow

    def test_prohibit_overflow(self, cfg):
        bucket = bucket_from_config("strict", cfg, clock=MockClock())
        assert bucket.prohibit_overflow
        assert not bucket.try_take(4, 1000)

    def test_out_of_range(self, cfg):
        with pytest.raises(InvalidBucketError):
            bucket_from_config("zero", cfg)

    def test_shipped_config(self):
        from pathlib import Path

        shipped = Path(__file__).parent.parent / "config" / "config.yaml"
        cfg = Config(str(shipped))
        for name in cfg.rate_limit_names():
            bucket = bucket_from_config(name, cfg, clock=MockClock())
            assert bucket.available() == bucket.capacity
