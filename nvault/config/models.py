"""Configuration dataclass models for nvault."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from nvault.models import DEFAULT_ICON


@dataclass
class Config:
    """Application configuration."""

    library_root: Path
    default_icon: str | None = DEFAULT_ICON  # Icon for newly discovered notebooks
    scan_workers: int = 1  # Notebooks indexed in parallel by `nvault scan`
    log_level: str = "WARNING"
    date_format: str = "%Y-%m-%d %H:%M"  # Timestamps in CLI tables

    @property
    def config_dir(self) -> Path:
        """Return path to .nvault configuration directory."""
        return self.library_root / ".nvault"

    @property
    def config_path(self) -> Path:
        """Return path to config file."""
        return self.config_dir / "config.yaml"

    @property
    def env_path(self) -> Path:
        """Return path to the library's .env file."""
        return self.config_dir / ".env"

    def notebook_path(self, name: str) -> Path:
        """Get the filesystem path for a notebook."""
        return self.library_root / name


# Default configuration values
DEFAULT_LIBRARY_ROOT = Path.home() / "Notebooks"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

DEFAULT_CONFIG_YAML = """\
# nvault configuration

# Library directory holding the notebooks
library_root: ~/Notebooks

# Icon given to notebooks the first time they are indexed
default_icon: 📓

# Number of notebooks indexed in parallel by `nvault scan`
scan_workers: 1

# Logging level: DEBUG, INFO, WARNING or ERROR
log_level: WARNING

# Timestamp format used in CLI tables
date_format: "%Y-%m-%d %H:%M"
"""
