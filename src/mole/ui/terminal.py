"""Terminal dimensions and ANSI control sequences."""

from __future__ import annotations

import os
import sys

# ANSI escape sequences
ANSI_CLEAR_LINE = "\r\033[2K"
ANSI_CLEAR_SCREEN = "\033[2J\033[H"
ANSI_CLEAR_BELOW = "\033[J"
ANSI_CURSOR_HOME = "\033[H"
ANSI_HIDE_CURSOR = "\033[?25l"
ANSI_SHOW_CURSOR = "\033[?25h"
ANSI_ENTER_ALT_SCREEN = "\033[?1049h"
ANSI_LEAVE_ALT_SCREEN = "\033[?1049l"

# Colors used by the menu renderer
CYAN = "\033[0;36m"
DIM = "\033[2m"
NC = "\033[0m"

DEFAULT_HEIGHT = 24
DEFAULT_WIDTH = 80
DEFAULT_RESERVED_LINES = 6
MAX_ITEMS_PER_PAGE = 50


def _query_live_size() -> os.terminal_size | None:
    """Ask the controlling terminal for its size.

    Tries stdin, stderr and stdout first, then /dev/tty so the answer is
    still right when the standard streams are redirected.
    """
    for stream in (sys.stdin, sys.stderr, sys.stdout):
        try:
            return os.get_terminal_size(stream.fileno())
        except (AttributeError, OSError, ValueError):
            continue

    try:
        fd = os.open("/dev/tty", os.O_RDONLY)
    except OSError:
        return None
    try:
        return os.get_terminal_size(fd)
    except OSError:
        return None
    finally:
        os.close(fd)


def _query_env(name: str) -> int:
    try:
        return int(os.environ.get(name, ""))
    except ValueError:
        return 0


def _query_terminfo(capability: str) -> int:
    """Read a numeric capability ('lines', 'cols') from the terminfo database."""
    try:
        import curses

        curses.setupterm()
        return curses.tigetnum(capability)
    except Exception:
        return 0


def get_height() -> int:
    """Return terminal height in rows, never less than 1.

    Fallback chain: live size query, $LINES, terminfo, DEFAULT_HEIGHT.
    """
    size = _query_live_size()
    if size is not None and size.lines > 0:
        return size.lines

    for value in (_query_env("LINES"), _query_terminfo("lines")):
        if value > 0:
            return value
    return DEFAULT_HEIGHT


def get_width() -> int:
    """Return terminal width in columns, never less than 1.

    Fallback chain: live size query, $COLUMNS, terminfo, DEFAULT_WIDTH.
    """
    size = _query_live_size()
    if size is not None and size.columns > 0:
        return size.columns

    for value in (_query_env("COLUMNS"), _query_terminfo("cols")):
        if value > 0:
            return value
    return DEFAULT_WIDTH


def items_per_page(reserved_lines: int = DEFAULT_RESERVED_LINES, height: int | None = None) -> int:
    """Number of list rows that fit once header/footer lines are reserved.

    Always in [1, MAX_ITEMS_PER_PAGE].
    """
    if height is None:
        height = get_height()
    available = height - reserved_lines
    return max(1, min(available, MAX_ITEMS_PER_PAGE))
