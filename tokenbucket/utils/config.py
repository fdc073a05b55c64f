"""Configuration management

Rate limits are declared in YAML under `rate_limits.<name>`:

    rate_limits:
      default:
        capacity: 10
        quantum: 1
        fill_interval_seconds: 1.0
        prohibit_overflow: false

Environment variables (optionally from a .env file) select the file and
override logging: TOKENBUCKET_CONFIG, TOKENBUCKET_LOG_LEVEL.
"""
import yaml
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, List, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_CONFIG_PATH = "config/config.yaml"


@dataclass
class RateLimitSettings:
    """One `rate_limits.<name>` section"""
    name: str
    capacity: int
    quantum: int
    fill_interval_seconds: float
    prohibit_overflow: bool = False


class Config:
    """YAML + environment configuration"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path or os.getenv("TOKENBUCKET_CONFIG", DEFAULT_CONFIG_PATH))
        self.config: Dict[str, Any] = {}
        self.load_config()

    def load_config(self):
        """Load YAML file; a missing file means an empty configuration"""
        if self.config_path.exists():
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self.config = yaml.safe_load(f) or {}
        else:
            self.config = {}

    def reload(self):
        self.load_config()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value using dot notation (e.g., 'rate_limits.default.capacity')"""
        value = self.config
        for k in key.split('.'):
            if not isinstance(value, dict):
                return default
            value = value.get(k)
            if value is None:
                return default
        return value

    def set(self, key: str, value: Any):
        """Set a value in memory (not written back to the file)"""
        keys = key.split('.')
        node = self.config
        for k in keys[:-1]:
            node = node.setdefault(k, {})
        node[keys[-1]] = value

    def get_env(self, key: str, default: Any = None) -> Optional[str]:
        return os.getenv(key, default)

    def rate_limit_names(self) -> List[str]:
        return sorted((self.get("rate_limits") or {}).keys())

    def rate_limit(self, name: str) -> RateLimitSettings:
        """
        Read the `rate_limits.<name>` section.

        Raises:
            KeyError: section is missing
            ValueError: a required key is missing or not numeric
        """
        section = self.get(f"rate_limits.{name}")
        if not isinstance(section, dict):
            raise KeyError(f"No rate limit section 'rate_limits.{name}' in {self.config_path}")

        missing = [k for k in ("capacity", "quantum", "fill_interval_seconds") if k not in section]
        if missing:
            raise ValueError(f"rate_limits.{name} is missing {', '.join(missing)}")

        try:
            return RateLimitSettings(
                name=name,
                capacity=int(section["capacity"]),
                quantum=int(section["quantum"]),
                fill_interval_seconds=float(section["fill_interval_seconds"]),
                prohibit_overflow=bool(section.get("prohibit_overflow", False)),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"rate_limits.{name} has an invalid value: {e}") from e


# Global config instance
config = Config()
