"""Locate and run the bundled analysis binaries.

Environment contract passed to the binaries:
    MO_ANALYZE_PATH  path for analyze-go to scan
    MO_DEBUG         "1" when debug mode is on, unset otherwise
    MO_DRY_RUN       "1" when dry run is on, unset otherwise
    MO_TIMEOUT       timeout in seconds (default 300)
    MO_COLOR         auto | always | never

Exit codes coming back: 0 success, 130 cancelled by the user, anything
else is a failure surfaced with its numeric code.
"""

from __future__ import annotations

import os
import platform
import subprocess
import sys
from enum import Enum
from pathlib import Path

from mole.config import Config
from mole.errors import ErrorCode, record_error
from mole.log import debug_log, log_warning

VERSION_TIMEOUT = 5


class Binary(Enum):
    """Known analysis binaries."""

    ANALYZE = "analyze"
    STATUS = "status"

    @property
    def filename(self) -> str:
        return f"{self.value}-go"


def _resolve(name: str | Binary) -> Binary | None:
    if isinstance(name, Binary):
        return name
    try:
        return Binary(name)
    except ValueError:
        return None


def get_bin_dir(config: Config | None = None) -> Path:
    """Directory holding the binaries: bin_dir setting, else <package>/bin."""
    config = config or Config.load()
    if config.bin_dir:
        return Path(config.bin_dir).expanduser()
    return Path(__file__).resolve().parent / "bin"


def binary_path(name: str | Binary, config: Config | None = None) -> Path | None:
    binary = _resolve(name)
    if binary is None:
        return None
    return get_bin_dir(config) / binary.filename


def validate_binary(name: str | Binary, config: Config | None = None) -> ErrorCode:
    """Check a binary exists and is executable, recording why not."""
    path = binary_path(name, config)
    if path is None:
        record_error(f"Unknown binary: {name}", ErrorCode.INVALID_ARG)
        return ErrorCode.INVALID_ARG
    if not path.is_file():
        record_error(f"Binary not found: {path}", ErrorCode.FILE_NOT_FOUND)
        return ErrorCode.FILE_NOT_FOUND
    if not os.access(path, os.X_OK):
        record_error(f"Binary not executable: {path}", ErrorCode.PERMISSION_DENIED)
        return ErrorCode.PERMISSION_DENIED
    return ErrorCode.SUCCESS


def build_environment(
    config: Config | None = None,
    target_path: str | Path | None = None,
    is_tty: bool | None = None,
    base: dict[str, str] | None = None,
) -> dict[str, str]:
    """Build the environment for a binary invocation.

    Args:
        config: Config to read debug/dry_run/timeout/color from
        target_path: Value for MO_ANALYZE_PATH, omitted when None
        is_tty: Whether stdout is a terminal (auto-detected when None)
        base: Starting environment (defaults to os.environ)
    """
    config = config or Config.load()
    env = dict(os.environ if base is None else base)

    for key, enabled in (("MO_DEBUG", config.debug), ("MO_DRY_RUN", config.dry_run)):
        if enabled:
            env[key] = "1"
        else:
            env.pop(key, None)

    if is_tty is None:
        is_tty = sys.stdout.isatty()
    color = str(config.color).lower()
    if color not in ("always", "never"):
        color = "auto" if is_tty else "never"
    env["MO_COLOR"] = color

    env["MO_TIMEOUT"] = str(config.timeout)

    if target_path is not None:
        env["MO_ANALYZE_PATH"] = str(target_path)
    return env


def _normalize_exit_code(returncode: int) -> int:
    """Map 'killed by signal N' (-N) to the shell convention 128+N."""
    if returncode < 0:
        return 128 - returncode
    return returncode


def run_binary(
    name: str | Binary,
    target_path: str | Path | None = None,
    config: Config | None = None,
) -> int:
    """Run a binary in the foreground and return its exit code."""
    config = config or Config.load()
    code = validate_binary(name, config)
    if code != ErrorCode.SUCCESS:
        return int(code)

    binary = _resolve(name)
    path = binary_path(binary, config)
    env = build_environment(config, target_path)

    debug_log(f"Running {binary.filename}" + (f" with path: {target_path}" if target_path else ""))
    try:
        returncode = _normalize_exit_code(subprocess.run([str(path)], env=env).returncode)
    except OSError as e:
        record_error(f"Failed to start {binary.filename}: {e}", ErrorCode.COMMAND_FAILED)
        return int(ErrorCode.COMMAND_FAILED)

    if returncode == ErrorCode.SUCCESS:
        debug_log(f"{binary.filename} completed successfully")
    elif returncode == ErrorCode.USER_CANCELLED:
        debug_log(f"{binary.filename} cancelled by user")
    else:
        record_error(f"{binary.filename} failed with exit code {returncode}", returncode)
    return returncode


def run_analyze(target_path: str | Path | None = None, config: Config | None = None) -> int:
    """Run analyze-go on a path (current directory by default)."""
    return run_binary(Binary.ANALYZE, target_path or os.getcwd(), config)


def run_status(config: Config | None = None) -> int:
    return run_binary(Binary.STATUS, None, config)


# --- Platform ---


def get_arch_suffix() -> str:
    """Architecture suffix used in binary release names (arm64, amd64)."""
    arch = platform.machine().lower()
    if arch in ("arm64", "aarch64"):
        return "arm64"
    if arch in ("x86_64", "amd64"):
        return "amd64"
    return arch


def is_apple_silicon() -> bool:
    return platform.machine() == "arm64"


# --- Installation info ---


def get_binary_version(name: str | Binary, config: Config | None = None) -> str:
    """Return '--version' output, or 'installed' / 'not installed' / 'unknown'."""
    path = binary_path(name, config)
    if path is None:
        return "unknown"
    if not (path.is_file() and os.access(path, os.X_OK)):
        return "not installed"

    try:
        result = subprocess.run(
            [str(path), "--version"],
            capture_output=True,
            text=True,
            timeout=VERSION_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired):
        return "installed"

    version = result.stdout.strip() if result.returncode == 0 else ""
    return version or "installed"


def verify_installation(config: Config | None = None) -> bool:
    """Check every known binary, warning about each missing one."""
    all_valid = True
    for binary in Binary:
        if validate_binary(binary, config) != ErrorCode.SUCCESS:
            log_warning(f"{binary.filename} binary not available")
            all_valid = False

    if all_valid:
        debug_log("All binaries verified")
    return all_valid
