"""Shared fixtures for nvault tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from nvault import config as config_module
from nvault.config import ENV_LIBRARY, ENV_LOG_LEVEL


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Keep config and logging state from leaking between tests."""
    monkeypatch.delenv(ENV_LIBRARY, raising=False)
    monkeypatch.delenv(ENV_LOG_LEVEL, raising=False)
    config_module.reset_config()

    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level

    yield

    # CLI runs reconfigure the root logger onto CliRunner's temporary streams
    root.handlers[:] = handlers
    root.setLevel(level)
    config_module.reset_config()


@pytest.fixture
def library(tmp_path: Path) -> Path:
    """Create an empty library directory."""
    root = tmp_path / "Library"
    root.mkdir()
    return root


@pytest.fixture
def create_notebook_dir(library: Path) -> Callable[[str], Path]:
    """Factory fixture to create bare notebook directories."""

    def _create(name: str) -> Path:
        path = library / name
        path.mkdir(parents=True, exist_ok=True)
        return path

    return _create


@pytest.fixture
def create_note(library: Path):
    """Factory fixture to create note files.

    mtime, when given, is applied with os.utime so ordering tests do not
    depend on how fast files are written.
    """

    def _create_note(
        notebook: str,
        filename: str,
        content: str,
        *,
        mtime: float | None = None,
    ) -> Path:
        note_dir = library / notebook
        note_dir.mkdir(parents=True, exist_ok=True)
        note_path = note_dir / filename
        note_path.write_text(content, encoding="utf-8")
        if mtime is not None:
            os.utime(note_path, (mtime, mtime))
        return note_path

    return _create_note


# =============================================================================
# CLI Test Fixtures
# =============================================================================


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def invoke(cli_runner: CliRunner, library: Path):
    """Invoke the CLI against the test library (via --library)."""
    from nvault.cli import cli

    def _invoke(*args: str, input: str | None = None):
        return cli_runner.invoke(cli, ["--library", str(library), *args], input=input)

    return _invoke
