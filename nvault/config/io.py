"""Configuration I/O functions for nvault."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .models import DEFAULT_CONFIG_YAML, Config
from .parsers import (
    expand_path,
    get_config_path,
    get_default_library_root,
    parse_config_data,
    parse_log_level,
)

ENV_LOG_LEVEL = "NVAULT_LOG_LEVEL"


def load_config(
    config_path: Path | None = None, library_root: Path | None = None
) -> Config:
    """Load configuration from YAML file.

    The library root is resolved in this order: explicit library_root
    argument, `library_root` in the config file, NVAULT_LIBRARY, then
    ~/Notebooks. A missing config file means all defaults.

    Environment variables from <library>/.nvault/.env are loaded without
    overriding variables already set in the shell; NVAULT_LOG_LEVEL then
    overrides the configured log level.
    """
    if config_path is None:
        config_path = get_config_path(library_root)

    if config_path.exists():
        with config_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    if library_root is not None:
        root = expand_path(library_root)
    elif "library_root" in data:
        root = expand_path(data["library_root"])
    else:
        root = get_default_library_root()

    env_file = root / ".nvault" / ".env"
    if env_file.exists():
        load_dotenv(env_file, override=False)

    config = parse_config_data(data, root)

    env_level = os.environ.get(ENV_LOG_LEVEL)
    if env_level:
        config.log_level = parse_log_level(env_level)

    return config


def save_config(config: Config) -> None:
    """Save configuration to the library's config.yaml."""
    data = {
        "library_root": str(config.library_root),
        "default_icon": config.default_icon,
        "scan_workers": config.scan_workers,
        "log_level": config.log_level,
        "date_format": config.date_format,
    }
    config.config_dir.mkdir(parents=True, exist_ok=True)
    with config.config_path.open("w", encoding="utf-8") as f:
        f.write("# nvault configuration\n\n")
        yaml.safe_dump(
            data, f, default_flow_style=False, sort_keys=False, allow_unicode=True
        )


def init_config(library_root: Path | None = None) -> Config:
    """Initialize configuration for first-time setup.

    Creates the library directory and a default config file if missing.
    """
    if library_root is None:
        library_root = get_default_library_root()

    config_path = get_config_path(library_root)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    if not config_path.exists():
        # Parse default config and point it at the actual library
        default_data = yaml.safe_load(DEFAULT_CONFIG_YAML)
        default_data["library_root"] = str(library_root)
        with config_path.open("w", encoding="utf-8") as f:
            f.write("# nvault configuration\n\n")
            yaml.safe_dump(
                default_data,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )

    return load_config(config_path, library_root=library_root)
