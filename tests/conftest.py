"""Pytest fixtures for mole tests."""

import io
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Isolate config, cache dirs and module-level state per test."""
    from mole import errors
    from mole.config import clear_config_cache
    from mole.ui import traps

    monkeypatch.setenv("MOLE_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("MOLE_CACHE_DIR", str(tmp_path / "cache"))
    for var in ("MO_DEBUG", "MO_DRY_RUN", "MO_COLOR", "MO_TIMEOUT", "MO_BIN_DIR"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.delenv(traps.FORCE_CHAR_VAR, raising=False)

    clear_config_cache()
    errors.clear_error()
    traps._context = None

    yield

    if traps._context is not None:
        traps.cleanup()
    clear_config_cache()
    errors.clear_error()


class FakeTTY(io.StringIO):
    """StringIO that claims to be a terminal."""

    def isatty(self) -> bool:
        return True


@pytest.fixture
def tty_stream():
    return FakeTTY()


@pytest.fixture
def bin_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty binary directory wired in through MO_BIN_DIR."""
    path = tmp_path / "bin"
    path.mkdir()
    monkeypatch.setenv("MO_BIN_DIR", str(path))
    return path


@pytest.fixture
def make_script():
    """Factory writing small shell scripts that stand in for the binaries."""

    def _make(path: Path, body: str, executable: bool = True) -> Path:
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(0o755 if executable else 0o644)
        return path

    return _make
