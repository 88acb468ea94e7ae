"""Paginated multi-select menu drawn with raw ANSI control."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

import readchar

from mole.log import debug_log

from .panel_builder import Paginator, format_scroll_indicator
from .render import (
    CheckboxStyle,
    print_cleared_line,
    render_item,
    wrap_footer_segments,
)
from .selection import apply_preselection, init_selection
from .terminal import ANSI_CLEAR_BELOW, ANSI_CURSOR_HOME, get_width, items_per_page
from .traps import FORCE_CHAR_VAR, menu_session

# Title + blank line + two scroll hint lines + one spare row
RESERVED_BASE_LINES = 5
FOOTER_SEPARATOR = " | "

ENTER_KEYS = ("\r", "\n")
CANCEL_KEYS = (readchar.key.ESC,)


@dataclass(frozen=True)
class MenuItem:
    """One selectable row."""

    text: str
    enabled: bool = True


class MenuAction(Enum):
    CONTINUE = "continue"
    CONFIRM = "confirm"
    CANCEL = "cancel"


def _as_items(items: Sequence[MenuItem | str]) -> list[MenuItem]:
    return [item if isinstance(item, MenuItem) else MenuItem(str(item)) for item in items]


class MultiSelectMenu:
    """Interactive list with checkboxes and paging.

    Example:
        menu = MultiSelectMenu(["Caches", "Logs", "Trash"], preselected="0,2")
        indices = menu.show()  # e.g. [0, 2], or None if cancelled
    """

    def __init__(
        self,
        items: Sequence[MenuItem | str],
        title: str = "",
        preselected: str = "",
        checkbox_style: CheckboxStyle | str = CheckboxStyle.CIRCLE,
        use_alt_screen: bool = True,
        multi: bool = True,
        read_key: Callable[[], str] | None = None,
        stream: TextIO | None = None,
        color: bool | None = None,
    ):
        """Initialize the menu.

        Args:
            items: MenuItem objects or plain strings.
            title: Header text.
            preselected: Comma-separated indices selected on open.
            checkbox_style: CheckboxStyle or its value ("circle", "square", "none").
            use_alt_screen: Draw on the alternate screen buffer.
            multi: Space toggles items; False turns Enter into "pick current".
            read_key: Key source, defaults to readchar.readkey.
            stream: Output stream, defaults to stderr so stdout stays clean.
            color: Force color on/off; None follows the color config.
        """
        self.items = _as_items(items)
        self.title = title
        self.checkbox_style = CheckboxStyle(checkbox_style)
        self.use_alt_screen = use_alt_screen
        self.multi = multi
        self.read_key = read_key or readchar.readkey
        self.stream = stream if stream is not None else sys.stderr
        if color is None:
            from mole.config import Config

            color = Config.load().color_enabled(self.stream)
        self.color = color

        self.selection = init_selection(len(self.items))
        apply_preselection(preselected, self.selection)
        # Preselection never selects a disabled item
        for i, item in enumerate(self.items):
            if not item.enabled:
                self.selection.set(i, False)

        self.paginator = Paginator(len(self.items), 1)

    # --- Model ---

    @property
    def current_index(self) -> int:
        return self.paginator.absolute_index

    def result(self) -> list[int]:
        if self.multi:
            return self.selection.indices()
        return [self.current_index] if self.items else []

    def _enabled_indices(self) -> list[int]:
        return [i for i, item in enumerate(self.items) if item.enabled]

    def handle_key(self, key: str) -> MenuAction:
        """Apply one key press to the selection/cursor model."""
        letters = os.environ.get(FORCE_CHAR_VAR) != "1"
        pager = self.paginator

        if not key:
            # EOF on a non-interactive stdin
            return MenuAction.CANCEL
        if key == readchar.key.UP or (letters and key == "k"):
            pager.move_up()
        elif key == readchar.key.DOWN or (letters and key == "j"):
            pager.move_down()
        elif key in (readchar.key.LEFT, readchar.key.PAGE_UP):
            pager.page_up()
        elif key in (readchar.key.RIGHT, readchar.key.PAGE_DOWN):
            pager.page_down()
        elif key == readchar.key.HOME or (letters and key == "g"):
            pager.home()
        elif key == readchar.key.END or (letters and key == "G"):
            pager.end()
        elif key == readchar.key.SPACE and self.multi:
            index = self.current_index
            if self.items and self.items[index].enabled:
                self.selection.toggle(index)
        elif letters and key == "a" and self.multi:
            self.selection.select_all(self._enabled_indices())
        elif letters and key == "n" and self.multi:
            self.selection.select_none()
        elif key in ENTER_KEYS:
            if not self.multi and self.items and not self.items[self.current_index].enabled:
                return MenuAction.CONTINUE
            return MenuAction.CONFIRM
        elif key in CANCEL_KEYS or (letters and key == "q"):
            return MenuAction.CANCEL
        return MenuAction.CONTINUE

    # --- View ---

    def footer_segments(self) -> list[str]:
        if self.multi:
            return [
                "↑↓ navigate",
                "←→ page",
                "Space select",
                "a all",
                "n none",
                "Enter confirm",
                "q quit",
            ]
        return ["↑↓ navigate", "←→ page", "Enter select", "q quit"]

    def _sync_page_size(self, width: int) -> None:
        footer = wrap_footer_segments(FOOTER_SEPARATOR, self.footer_segments(), width)
        footer_lines = sum(1 for _ in footer)
        per_page = items_per_page(RESERVED_BASE_LINES + footer_lines)
        if per_page != self.paginator.per_page:
            debug_log(f"menu page size {self.paginator.per_page} -> {per_page}")
            self.paginator.resize(per_page)

    def _header(self) -> str:
        parts = [self.title] if self.title else []
        if self.multi:
            parts.append(f"{len(self.selection.indices())}/{len(self.items)} selected")
        if self.paginator.page_count > 1:
            parts.append(f"page {self.paginator.page_number}/{self.paginator.page_count}")
        return "  ".join(parts)

    def render(self) -> None:
        """Draw one full frame from the current model."""
        width = get_width()
        self._sync_page_size(width)
        window = self.paginator.window
        out = self.stream

        out.write(ANSI_CURSOR_HOME)
        print_cleared_line(self._header(), out)
        print_cleared_line("", out)

        above, below = format_scroll_indicator(window.offset, len(self.items) - window.end)
        print_cleared_line(above or "", out)
        if not self.items:
            print_cleared_line("  (no items)", out)
        style = self.checkbox_style if self.multi else CheckboxStyle.NONE
        for row, index in enumerate(window.indices()):
            item = self.items[index]
            line = render_item(
                item.text,
                self.selection.is_selected(index),
                row == self.paginator.cursor,
                style,
                enabled=item.enabled,
                color=self.color,
            )
            print_cleared_line(line, out)
        print_cleared_line(below or "", out)

        for line in wrap_footer_segments(FOOTER_SEPARATOR, self.footer_segments(), width):
            print_cleared_line(line, out)
        out.write(ANSI_CLEAR_BELOW)
        out.flush()

    # --- Loop ---

    def show(self) -> list[int] | None:
        """Run the menu. Returns chosen indices, or None if cancelled."""
        if not self.items:
            return [] if self.multi else None

        with menu_session(self.use_alt_screen, stream=self.stream):
            while True:
                self.render()
                try:
                    key = self.read_key()
                except KeyboardInterrupt:
                    return None
                action = self.handle_key(key)
                if action is MenuAction.CONFIRM:
                    return self.result()
                if action is MenuAction.CANCEL:
                    return None
