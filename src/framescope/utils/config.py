"""Helpers for loading the user configuration file (~/.framescope/config.json)."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

CONFIG_DIR = Path.home() / ".framescope"
CONFIG_FILE = CONFIG_DIR / "config.json"
CONFIG_ENV_VAR = "FRAMESCOPE_CONFIG"

DEFAULT_TIMEOUT = 60.0
DEFAULT_LOG_LEVEL = "WARNING"


def default_workers() -> int:
    """Worker count used when neither CLI nor config sets one."""
    return min(os.cpu_count() or 1, 8)


def config_path() -> Path:
    """Resolve the configuration file path (env override first)."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return CONFIG_FILE


@lru_cache(maxsize=1)
def load_config() -> dict[str, Any]:
    """Load configuration data from disk (cached)."""

    path = config_path()
    if not path.exists():
        return {}

    try:
        raw = path.read_text()
    except OSError:
        return {}

    try:
        data = json.loads(raw)
    except ValueError:
        return {}

    if isinstance(data, dict):
        return data

    return {}


def get_config_value(key: str, default: Any | None = None) -> Any | None:
    """Fetch a configuration value by key."""

    return load_config().get(key, default)


def reload_config() -> None:
    """Force the cached configuration to be reloaded on next access."""

    load_config.cache_clear()


def get_workers(override: int | None = None) -> int:
    """Resolve the batch worker count (CLI > config > default)."""
    if override is not None:
        return max(1, override)

    value = get_config_value("workers")
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value

    return default_workers()


def get_timeout(override: float | None = None) -> float:
    """Resolve the per-application time budget in seconds."""
    if override is not None:
        return override

    value = get_config_value("timeout")
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
        return float(value)

    return DEFAULT_TIMEOUT


def get_log_level(override: str | None = None) -> str:
    """Resolve the log level name."""
    if override:
        return override.upper()

    value = get_config_value("log_level")
    if isinstance(value, str) and value:
        return value.upper()

    return DEFAULT_LOG_LEVEL
