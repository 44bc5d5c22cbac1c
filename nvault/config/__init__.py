"""Configuration management for nvault.

Only the command line layer reads configuration; engine functions take
explicit paths. The main entry points are:
- get_config(): Get the cached configuration instance
- reset_config(): Clear the cached configuration
- load_config(): Load configuration from file
- save_config(): Save configuration to file
"""

from __future__ import annotations

from .io import ENV_LOG_LEVEL, init_config, load_config, save_config
from .models import (
    DEFAULT_CONFIG_YAML,
    DEFAULT_LIBRARY_ROOT,
    VALID_LOG_LEVELS,
    Config,
)
from .parsers import (
    ENV_LIBRARY,
    expand_path,
    get_config_path,
    get_default_library_root,
    parse_log_level,
    parse_scan_workers,
)

# Cached config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the configuration instance.

    Loads config on first call, returns cached instance thereafter.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Config) -> None:
    """Replace the cached configuration (used by the CLI --library option)."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the cached configuration (useful for testing)."""
    global _config
    _config = None


__all__ = [
    "DEFAULT_CONFIG_YAML",
    "DEFAULT_LIBRARY_ROOT",
    "ENV_LIBRARY",
    "ENV_LOG_LEVEL",
    "VALID_LOG_LEVELS",
    "Config",
    "expand_path",
    "get_config",
    "get_config_path",
    "get_default_library_root",
    "init_config",
    "load_config",
    "parse_log_level",
    "parse_scan_workers",
    "reset_config",
    "save_config",
    "set_config",
]
