"""Tests for nvault.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from nvault import config as config_module
from nvault.config import (
    ENV_LIBRARY,
    ENV_LOG_LEVEL,
    Config,
    get_config,
    init_config,
    load_config,
    parse_log_level,
    parse_scan_workers,
    reset_config,
    save_config,
)
from nvault.models import DEFAULT_ICON


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults_without_file(self, library: Path):
        config = load_config(library_root=library)

        assert config.library_root == library
        assert config.default_icon == DEFAULT_ICON
        assert config.scan_workers == 1
        assert config.log_level == "WARNING"

    def test_reads_yaml(self, library: Path):
        config_dir = library / ".nvault"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text(
            "default_icon: 📚\nscan_workers: 4\nlog_level: info\n", encoding="utf-8"
        )

        config = load_config(library_root=library)

        assert config.default_icon == "📚"
        assert config.scan_workers == 4
        assert config.log_level == "INFO"

    def test_invalid_values(self, library: Path):
        config_dir = library / ".nvault"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("scan_workers: 0\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_config(library_root=library)

    def test_library_from_env(self, library: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv(ENV_LIBRARY, str(library))
        assert load_config().library_root == library

    def test_log_level_env_override(
        self, library: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv(ENV_LOG_LEVEL, "debug")
        assert load_config(library_root=library).log_level == "DEBUG"

    def test_dotenv_file(self, library: Path, monkeypatch: pytest.MonkeyPatch):
        # Registers the variable so monkeypatch removes what load_dotenv sets
        monkeypatch.setenv(ENV_LOG_LEVEL, "placeholder")
        monkeypatch.delenv(ENV_LOG_LEVEL)
        config_dir = library / ".nvault"
        config_dir.mkdir()
        (config_dir / ".env").write_text(f"{ENV_LOG_LEVEL}=ERROR\n", encoding="utf-8")

        assert load_config(library_root=library).log_level == "ERROR"


class TestSaveAndInit:
    """Tests for save_config and init_config."""

    def test_init_creates_file(self, tmp_path: Path):
        root = tmp_path / "NewLibrary"

        config = init_config(root)

        assert config.config_path.exists()
        assert config.library_root == root
        assert config.default_icon == DEFAULT_ICON

    def test_save_round_trip(self, library: Path):
        config = Config(library_root=library, scan_workers=3, log_level="ERROR")

        save_config(config)
        loaded = load_config(library_root=library)

        assert loaded.scan_workers == 3
        assert loaded.log_level == "ERROR"


class TestParsers:
    """Tests for value parsers."""

    def test_log_level(self):
        assert parse_log_level(" warning ") == "WARNING"
        with pytest.raises(ValueError):
            parse_log_level("LOUD")

    def test_scan_workers(self):
        assert parse_scan_workers("2") == 2
        with pytest.raises(ValueError):
            parse_scan_workers("many")


def test_get_config_is_cached(library: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(ENV_LIBRARY, str(library))
    reset_config()

    first = get_config()

    assert get_config() is first
    assert config_module._config is first
