"""Key/value files shared with the analysis binaries (one <key>.dat per key)."""

from __future__ import annotations

import os
import re
from pathlib import Path

from mole.errors import ErrorCode, record_error

_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def get_shared_cache_dir() -> Path:
    """Cache directory, respecting MOLE_CACHE_DIR. Created best-effort."""
    override = os.environ.get("MOLE_CACHE_DIR")
    cache_dir = Path(override) if override else Path.home() / ".cache" / "mole"
    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        pass
    return cache_dir


def _data_file(key: str) -> Path | None:
    if not _KEY_RE.match(key):
        record_error(f"Invalid shared data key: {key!r}", ErrorCode.INVALID_ARG)
        return None
    return get_shared_cache_dir() / f"{key}.dat"


def write_shared_data(key: str, value: str) -> ErrorCode:
    data_file = _data_file(key)
    if data_file is None:
        return ErrorCode.INVALID_ARG
    try:
        data_file.write_text(f"{value}\n")
    except OSError:
        record_error(f"Failed to write shared data: {key}", ErrorCode.COMMAND_FAILED)
        return ErrorCode.COMMAND_FAILED
    return ErrorCode.SUCCESS


def read_shared_data(key: str) -> str:
    """Value for key, or '' when missing or unreadable."""
    data_file = _data_file(key)
    if data_file is None or not data_file.is_file():
        return ""
    try:
        return data_file.read_text().removesuffix("\n")
    except OSError:
        return ""


def clear_shared_data(key: str | None = None) -> None:
    """Remove one key, or every .dat file when key is None."""
    if key is not None:
        data_file = _data_file(key)
        targets = [data_file] if data_file is not None else []
    else:
        targets = list(get_shared_cache_dir().glob("*.dat"))

    for path in targets:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            pass
