"""Line rendering for menus: items, checkboxes and wrapped footer hints.

Functions here only turn strings into terminal output. They never touch
selection or cursor state.
"""

from __future__ import annotations

import re
import sys
from collections.abc import Iterable, Iterator
from enum import Enum
from typing import TextIO

from .terminal import ANSI_CLEAR_LINE, CYAN, DIM, NC, get_width

ICON_ARROW = "➤"
ICON_SOLID = "●"
ICON_EMPTY = "○"

_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")


class CheckboxStyle(Enum):
    CIRCLE = "circle"
    SQUARE = "square"
    NONE = "none"


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences."""
    return _ANSI_RE.sub("", text)


def visible_length(text: str) -> int:
    """Length of text as displayed, escape sequences excluded."""
    return len(strip_ansi(text))


def checkbox_glyph(is_selected: bool, style: CheckboxStyle) -> str:
    if style is CheckboxStyle.CIRCLE:
        return ICON_SOLID if is_selected else ICON_EMPTY
    if style is CheckboxStyle.SQUARE:
        return "[x]" if is_selected else "[ ]"
    return ""


def render_item(
    text: str,
    is_selected: bool,
    is_current: bool,
    checkbox_style: CheckboxStyle = CheckboxStyle.CIRCLE,
    *,
    enabled: bool = True,
    color: bool = True,
) -> str:
    """Render one menu row as a single cleared line (no trailing newline).

    The current row gets a pointer and highlight color, others are
    indented two spaces so text columns line up.
    """
    checkbox = checkbox_glyph(is_selected, checkbox_style)
    body = f"{checkbox} {text}" if checkbox else text

    if is_current:
        line = f"{ICON_ARROW} {body}"
        if color:
            line = f"{CYAN}{line}{NC}"
    else:
        line = f"  {body}"
        if color and not enabled:
            line = f"{DIM}{line}{NC}"

    return f"{ANSI_CLEAR_LINE}{line}"


def print_cleared_line(text: str, stream: TextIO | None = None) -> None:
    """Write text on a freshly cleared line, followed by a newline."""
    out = stream if stream is not None else sys.stderr
    if text.startswith(ANSI_CLEAR_LINE):
        out.write(f"{text}\n")
    else:
        out.write(f"{ANSI_CLEAR_LINE}{text}\n")


def wrap_footer_segments(separator: str, segments: Iterable[str], width: int) -> Iterator[str]:
    """Greedily pack segments into lines no wider than width.

    Width decisions use visible length, so colored segments count only
    their printable characters. A segment wider than the terminal gets a
    line of its own. The last partial line is always yielded.
    """
    line = ""
    for segment in segments:
        candidate = f"{line}{separator}{segment}" if line else segment
        if line and visible_length(candidate) > width:
            yield line
            line = segment
        else:
            line = candidate
    yield line


def print_footer_controls(
    separator: str,
    segments: Iterable[str],
    width: int | None = None,
    stream: TextIO | None = None,
) -> int:
    """Print footer hints, wrapping at the terminal width.

    Returns the number of lines written.
    """
    if width is None:
        width = get_width()
    count = 0
    for line in wrap_footer_segments(separator, segments, width):
        print_cleared_line(line, stream)
        count += 1
    return count
