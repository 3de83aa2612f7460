"""Cache configuration management."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_CACHE_DIR = Path.home() / ".feedcache"


@dataclass
class CacheConfig:
    """Configuration for the local feed cache.

    Attributes:
        store_path: File holding the cached feed record
        max_cache_age_days: Number of calendar days a cached feed stays fresh
        lock_timeout: Seconds to wait for the store's file lock
        request_timeout: Seconds before a remote feed request is abandoned
    """

    store_path: Path = DEFAULT_CACHE_DIR / "feed-store.json"
    max_cache_age_days: int = 7
    lock_timeout: float = 30.0
    request_timeout: float = 30.0

    def __post_init__(self):
        """Ensure store_path is an expanded Path object."""
        if self.store_path is None:
            self.store_path = DEFAULT_CACHE_DIR / "feed-store.json"
        self.store_path = Path(self.store_path).expanduser()

        if self.max_cache_age_days < 0:
            raise ValueError(
                f"max_cache_age_days must be non-negative, got {self.max_cache_age_days}"
            )

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "CacheConfig":
        """Load configuration from file.

        Args:
            config_path: Path to config file. If None, uses default location.

        Returns:
            CacheConfig instance
        """
        if config_path is None:
            config_path = DEFAULT_CACHE_DIR / "config.json"

        config_path = Path(config_path)
        if not config_path.exists():
            return cls()

        with open(config_path, "r") as f:
            data = json.load(f)

        if "store_path" in data:
            data["store_path"] = Path(data["store_path"])

        return cls(**data)

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save configuration to file.

        Args:
            config_path: Path to config file. If None, writes config.json next
                to the store file.
        """
        if config_path is None:
            config_path = self.store_path.parent / "config.json"

        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "store_path": str(self.store_path),
            "max_cache_age_days": self.max_cache_age_days,
            "lock_timeout": self.lock_timeout,
            "request_timeout": self.request_timeout,
        }

        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)


# Global cache configuration instance
_global_config: Optional[CacheConfig] = None


def get_global_config() -> CacheConfig:
    """Get global cache configuration.

    Loads the default config file on first use, falling back to defaults.

    Returns:
        Global CacheConfig instance
    """
    global _global_config
    if _global_config is None:
        _global_config = CacheConfig.load()
    return _global_config


def set_global_config(config: Optional[CacheConfig]) -> None:
    """Set global cache configuration.

    Args:
        config: CacheConfig instance to use globally, or None to reload the
            default on next access
    """
    global _global_config
    _global_config = config
