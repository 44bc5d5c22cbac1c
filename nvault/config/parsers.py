"""Configuration parsing functions for nvault."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from .models import DEFAULT_LIBRARY_ROOT, VALID_LOG_LEVELS, Config

ENV_LIBRARY = "NVAULT_LIBRARY"


def expand_path(path: str | Path) -> Path:
    """Expand ~ and environment variables in a path."""
    path_str = str(path)
    # Expand environment variables
    path_str = os.path.expandvars(path_str)
    # Expand ~
    return Path(path_str).expanduser()


def get_default_library_root() -> Path:
    """Get the default library directory."""
    # Check environment variable first
    env_root = os.environ.get(ENV_LIBRARY)
    if env_root:
        return expand_path(env_root)
    return DEFAULT_LIBRARY_ROOT


def get_config_path(library_root: Path | None = None) -> Path:
    """Get the path to the config file."""
    if library_root is None:
        library_root = get_default_library_root()
    return library_root / ".nvault" / "config.yaml"


def parse_log_level(value: Any) -> str:
    """Normalize a log level name.

    Raises:
        ValueError: If the level is not one of VALID_LOG_LEVELS.

    """
    level = str(value).strip().upper()
    if level not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log_level '{value}'. Valid: {', '.join(VALID_LOG_LEVELS)}"
        )
    return level


def parse_scan_workers(value: Any) -> int:
    """Parse scan_workers, which must be a positive integer.

    Raises:
        ValueError: If the value is not a positive integer.

    """
    try:
        workers = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"scan_workers must be an integer, got {value!r}") from None
    if workers < 1:
        raise ValueError(f"scan_workers must be at least 1, got {workers}")
    return workers


def parse_config_data(data: dict[str, Any], library_root: Path) -> Config:
    """Build a Config from parsed YAML data, filling in defaults."""
    defaults = Config(library_root=library_root)
    icon = data.get("default_icon", defaults.default_icon)
    return Config(
        library_root=library_root,
        default_icon=str(icon) if icon else None,
        scan_workers=parse_scan_workers(data.get("scan_workers", defaults.scan_workers)),
        log_level=parse_log_level(data.get("log_level", defaults.log_level)),
        date_format=str(data.get("date_format", defaults.date_format)),
    )
