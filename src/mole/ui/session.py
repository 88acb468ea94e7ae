"""Raw-mode terminal session: save, switch and restore TTY state.

Every terminal mutation here is best-effort. Failing to change a setting
(non-interactive stdin, exotic terminal) degrades to plain output and is
reported through ApplyResult instead of an exception.
"""

from __future__ import annotations

import os
import sys
from enum import Enum
from typing import TextIO

from mole.log import debug_log

from .terminal import (
    ANSI_CLEAR_SCREEN,
    ANSI_CURSOR_HOME,
    ANSI_ENTER_ALT_SCREEN,
    ANSI_HIDE_CURSOR,
    ANSI_LEAVE_ALT_SCREEN,
    ANSI_SHOW_CURSOR,
)

if os.name != "nt":
    import termios
else:
    termios = None

CTRL_C = b"\x03"


class ApplyResult(Enum):
    """Outcome of a best-effort terminal operation."""

    APPLIED = "applied"
    SKIPPED = "skipped"  # not a TTY, no termios, or nothing left to do
    FAILED_IGNORED = "failed-ignored"


class SessionState(Enum):
    NORMAL = "normal"
    SAVING = "saving"
    RAW_ACTIVE = "raw-active"
    RESTORING = "restoring"


class TerminalState:
    """Opaque snapshot of the original termios attributes."""

    __slots__ = ("_attrs",)

    def __init__(self, attrs: list):
        # Deep enough copy that later tcgetattr/tcsetattr calls cannot alias it
        self._attrs = [list(a) if isinstance(a, list) else a for a in attrs]

    @property
    def attrs(self) -> list:
        return [list(a) if isinstance(a, list) else a for a in self._attrs]


def _is_tty(fd: int) -> bool:
    try:
        return os.isatty(fd)
    except (OSError, ValueError):
        return False


def _stream_is_tty(stream: TextIO) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


class TerminalSession:
    """One raw-mode session on the controlling terminal.

    State machine: NORMAL -> SAVING -> RAW_ACTIVE -> RESTORING -> NORMAL.
    end() is run-once: the first caller restores, later callers see
    "already clean" and touch nothing.
    """

    def __init__(self, fd: int | None = None, stream: TextIO | None = None):
        self.fd = fd if fd is not None else _stdin_fd()
        self.stream = stream if stream is not None else sys.stderr
        self.state = SessionState.NORMAL
        self.saved: TerminalState | None = None
        self.use_alt_screen = False
        self._cleaned = True
        self.restore_count = 0

    @property
    def active(self) -> bool:
        return not self._cleaned

    def begin(self, use_alt_screen: bool = True) -> ApplyResult:
        """Switch to no-echo, non-canonical input and prepare the screen.

        Returns the result of the TTY attribute change; screen setup is
        written regardless so plain-output mode still gets a clean frame.
        """
        if not self._cleaned:
            raise RuntimeError("terminal session already active")

        self._cleaned = False
        self.use_alt_screen = use_alt_screen
        self.state = SessionState.SAVING
        self.saved = self._save_state()

        result = self._enter_raw_mode() if self.saved is not None else ApplyResult.SKIPPED
        if use_alt_screen:
            self._write_control(ANSI_ENTER_ALT_SCREEN)
            self._write_control(ANSI_CLEAR_SCREEN)
        else:
            self._write_control(ANSI_CURSOR_HOME)
        self._write_control(ANSI_HIDE_CURSOR)

        self.state = SessionState.RAW_ACTIVE
        debug_log(f"terminal session started (raw={result.value}, alt_screen={use_alt_screen})")
        return result

    def end(self, used_alt_screen: bool | None = None) -> ApplyResult:
        """Restore the terminal. Safe to call any number of times."""
        if self._cleaned:
            return ApplyResult.SKIPPED
        # Flag first: a signal landing mid-restore must not restore twice
        self._cleaned = True
        self.state = SessionState.RESTORING
        self.restore_count += 1

        if used_alt_screen is None:
            used_alt_screen = self.use_alt_screen

        self._write_control(ANSI_SHOW_CURSOR)
        result = self._restore_attrs()
        if used_alt_screen:
            self._write_control(ANSI_LEAVE_ALT_SCREEN)

        self.saved = None
        self.state = SessionState.NORMAL
        return result

    # --- TTY attributes ---

    def _save_state(self) -> TerminalState | None:
        if termios is None or not _is_tty(self.fd):
            return None
        try:
            return TerminalState(termios.tcgetattr(self.fd))
        except (termios.error, OSError):
            return None

    def _enter_raw_mode(self) -> ApplyResult:
        try:
            attrs = termios.tcgetattr(self.fd)
            # lflag: no echo, no line buffering; ISIG stays so Ctrl-C raises SIGINT
            attrs[3] &= ~(termios.ECHO | termios.ICANON)
            attrs[3] |= termios.ISIG
            cc = attrs[6]
            cc[termios.VINTR] = CTRL_C
            cc[termios.VMIN] = 1
            cc[termios.VTIME] = 0
            termios.tcsetattr(self.fd, termios.TCSANOW, attrs)
        except (termios.error, OSError, IndexError) as e:
            debug_log(f"raw mode not applied: {e}")
            return ApplyResult.FAILED_IGNORED
        return ApplyResult.APPLIED

    def _restore_attrs(self) -> ApplyResult:
        """Apply the saved attributes, with one sane-reset fallback tier."""
        if termios is None or not _is_tty(self.fd):
            return ApplyResult.SKIPPED

        if self.saved is not None:
            try:
                termios.tcsetattr(self.fd, termios.TCSADRAIN, self.saved.attrs)
                return ApplyResult.APPLIED
            except (termios.error, OSError) as e:
                debug_log(f"restoring saved tty state failed: {e}")

        return self._sane_reset()

    def _sane_reset(self) -> ApplyResult:
        try:
            attrs = termios.tcgetattr(self.fd)
            attrs[3] |= termios.ECHO | termios.ICANON | termios.ISIG
            termios.tcsetattr(self.fd, termios.TCSADRAIN, attrs)
        except (termios.error, OSError) as e:
            debug_log(f"sane tty reset failed: {e}")
            return ApplyResult.FAILED_IGNORED
        return ApplyResult.APPLIED

    # --- Screen control ---

    def _write_control(self, sequence: str) -> ApplyResult:
        """Write a cursor/screen sequence, only when output is a terminal."""
        if not _stream_is_tty(self.stream):
            return ApplyResult.SKIPPED
        try:
            self.stream.write(sequence)
            self.stream.flush()
        except (OSError, ValueError):
            return ApplyResult.FAILED_IGNORED
        return ApplyResult.APPLIED


def _stdin_fd() -> int:
    try:
        return sys.stdin.fileno()
    except (AttributeError, OSError, ValueError):
        return 0


def begin_session(
    use_alt_screen: bool = True,
    fd: int | None = None,
    stream: TextIO | None = None,
) -> TerminalSession:
    """Start a raw-mode session and return its handle."""
    session = TerminalSession(fd=fd, stream=stream)
    session.begin(use_alt_screen)
    return session


def end_session(session: TerminalSession, used_alt_screen: bool | None = None) -> ApplyResult:
    """Restore the terminal for a session. Idempotent."""
    return session.end(used_alt_screen)
