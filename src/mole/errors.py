"""Standardized error codes and last-error bookkeeping."""

from __future__ import annotations

import os
import shutil
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any


class ErrorCode(IntEnum):
    """Exit codes shared by every mole command and the analysis binaries."""

    SUCCESS = 0
    GENERAL = 1
    INVALID_ARG = 2
    FILE_NOT_FOUND = 3
    PERMISSION_DENIED = 4
    COMMAND_FAILED = 5
    TIMEOUT = 6
    NETWORK = 7
    DEPENDENCY = 8
    USER_CANCELLED = 130


@dataclass(frozen=True)
class ErrorContext:
    """Where and why the last recorded error happened."""

    message: str = ""
    code: int = ErrorCode.SUCCESS
    func: str = ""
    file: str = ""
    line: int = 0

    def describe(self) -> str:
        location = f"{self.func}() at {self.file}:{self.line}" if self.func else "unknown"
        return f"ERROR[{self.code}] in {location}: {self.message}"


class MoleError(Exception):
    """Failure carrying a numeric exit code."""

    def __init__(self, message: str, code: int = ErrorCode.GENERAL):
        super().__init__(message)
        self.message = message
        self.code = int(code)


_last_error = ErrorContext()


def record_error(message: str, code: int = ErrorCode.GENERAL) -> ErrorContext:
    """Record an error with the caller's location.

    Emits a debug log line when debug mode is enabled.
    """
    global _last_error

    frame = sys._getframe(1)
    _last_error = ErrorContext(
        message=message,
        code=int(code),
        func=frame.f_code.co_name,
        file=frame.f_code.co_filename,
        line=frame.f_lineno,
    )

    from mole.log import debug_log

    debug_log(_last_error.describe())
    return _last_error


def get_last_error() -> str:
    return _last_error.message


def get_last_error_code() -> int:
    return _last_error.code


def get_error_context() -> ErrorContext:
    return _last_error


def clear_error() -> None:
    """Reset the error state."""
    global _last_error
    _last_error = ErrorContext()


def show_last_error() -> None:
    """Print the last error, if any, as a short message with its code."""
    if not _last_error.message:
        return

    from mole.log import log_error

    log_error(f"{_last_error.message} (code {_last_error.code})")


def ignore_errors(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call func and return None instead of raising.

    Explicit alternative to scattering try/except around best-effort calls.
    """
    try:
        return func(*args, **kwargs)
    except Exception:
        return None


# --- Validation helpers ---


def require_file(path: str | Path, description: str = "file") -> ErrorCode:
    if not Path(path).is_file():
        record_error(f"Required {description} not found: {path}", ErrorCode.FILE_NOT_FOUND)
        return ErrorCode.FILE_NOT_FOUND
    return ErrorCode.SUCCESS


def require_dir(path: str | Path, description: str = "directory") -> ErrorCode:
    if not Path(path).is_dir():
        record_error(f"Required {description} not found: {path}", ErrorCode.FILE_NOT_FOUND)
        return ErrorCode.FILE_NOT_FOUND
    return ErrorCode.SUCCESS


def require_command(command: str, hint: str = "") -> ErrorCode:
    """Check that a command is on PATH.

    Args:
        command: Executable name
        hint: Install hint appended to the error message
    """
    if shutil.which(command) is None:
        message = f"Required command not found: {command}"
        if hint:
            message += f". Install with: {hint}"
        record_error(message, ErrorCode.DEPENDENCY)
        return ErrorCode.DEPENDENCY
    return ErrorCode.SUCCESS


def require_writable(path: str | Path) -> ErrorCode:
    if not os.access(path, os.W_OK):
        record_error(f"Permission denied: cannot write to {path}", ErrorCode.PERMISSION_DENIED)
        return ErrorCode.PERMISSION_DENIED
    return ErrorCode.SUCCESS
