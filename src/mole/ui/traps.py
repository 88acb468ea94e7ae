"""Signal and exit traps that guarantee the terminal is restored once.

A signal handler cannot see call-local state, so the live session and its
alt-screen choice are kept in one process-wide cell, _context. It is
written by setup_traps() at session start and consumed by cleanup().

The handler itself never touches the terminal. It raises SystemExit(130)
so the stack unwinds through any in-flight key read (which puts back its
own snapshot of the tty) before menu_session() restores the saved state.
Anything that escapes that path is caught by the atexit hook.
"""

from __future__ import annotations

import atexit
import os
import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, TextIO

from mole.errors import ErrorCode
from mole.log import debug_log

from .session import ApplyResult, TerminalSession

TRAPPED_SIGNALS = (signal.SIGINT, signal.SIGTERM)

# Ephemeral per-session overrides, unset on cleanup
FORCE_CHAR_VAR = "MOLE_READ_KEY_FORCE_CHAR"
SESSION_OVERRIDE_VARS = (FORCE_CHAR_VAR,)


@dataclass
class TrapContext:
    """What the cleanup routine needs, wherever it is called from."""

    session: TerminalSession
    use_alt_screen: bool = True
    previous_handlers: dict[int, Any] = field(default_factory=dict)
    cleaning: bool = False
    cleaned: bool = False
    pending_signal: int | None = None


_context: TrapContext | None = None


def get_trap_context() -> TrapContext | None:
    return _context


def setup_traps(session: TerminalSession, use_alt_screen: bool = True) -> TrapContext:
    """Install SIGINT/SIGTERM handlers and an exit hook for a session.

    Call before the terminal is switched to raw mode so no signal can land
    in between. Raises RuntimeError if another session still owns the
    traps; that is a caller bug, not a terminal condition.
    """
    global _context

    if _context is not None and not _context.cleaned:
        raise RuntimeError("menu traps already installed for another session")

    context = TrapContext(session=session, use_alt_screen=use_alt_screen)
    _context = context

    atexit.register(_cleanup_at_exit)
    if threading.current_thread() is threading.main_thread():
        for signum in TRAPPED_SIGNALS:
            context.previous_handlers[signum] = signal.signal(signum, _handle_signal)
    else:
        debug_log("not on main thread, signal traps skipped")
    return context


def _clear_traps(context: TrapContext) -> None:
    atexit.unregister(_cleanup_at_exit)
    for signum, previous in context.previous_handlers.items():
        try:
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        except (OSError, ValueError):
            pass
    context.previous_handlers.clear()


@contextmanager
def _signals_blocked() -> Iterator[None]:
    """Hold SIGINT/SIGTERM pending for the duration of the block."""
    if not hasattr(signal, "pthread_sigmask"):
        yield
        return
    previous = signal.pthread_sigmask(signal.SIG_BLOCK, TRAPPED_SIGNALS)
    try:
        yield
    finally:
        signal.pthread_sigmask(signal.SIG_SETMASK, previous)


def cleanup(context: TrapContext | None = None) -> ApplyResult:
    """Restore the terminal, tear down traps, drop session overrides.

    Runs at most once per context and never raises. The restore runs with
    the trapped signals blocked; one arriving meanwhile is recorded in
    context.pending_signal once our handler sees it.
    """
    global _context

    if context is None:
        context = _context
    if context is None or context.cleaned or context.cleaning:
        return ApplyResult.SKIPPED
    context.cleaning = True

    with _signals_blocked():
        try:
            result = context.session.end(context.use_alt_screen)
        except Exception:
            result = ApplyResult.FAILED_IGNORED

    # Handlers stay ours until here so a signal released above is recorded
    try:
        _clear_traps(context)
    except Exception:
        pass

    for name in SESSION_OVERRIDE_VARS:
        os.environ.pop(name, None)

    context.cleaned = True
    if _context is context:
        _context = None
    return result


def _handle_signal(signum: int, frame: Any) -> None:
    context = _context
    if context is not None:
        context.pending_signal = signum
        if context.cleaning:
            # Restore already under way; menu_session() exits once it is done
            return
    raise SystemExit(int(ErrorCode.USER_CANCELLED))


def _cleanup_at_exit() -> None:
    cleanup()


@contextmanager
def menu_session(
    use_alt_screen: bool = True,
    fd: int | None = None,
    stream: TextIO | None = None,
) -> Iterator[TerminalSession]:
    """Scoped raw-mode session: restored on return, error or signal.

    A trapped signal ends the block with SystemExit(130) after the
    terminal has been restored.
    """
    session = TerminalSession(fd=fd, stream=stream)
    context = setup_traps(session, use_alt_screen)
    try:
        session.begin(use_alt_screen)
        yield session
    finally:
        cleanup(context)
        if context.pending_signal is not None:
            raise SystemExit(int(ErrorCode.USER_CANCELLED))
