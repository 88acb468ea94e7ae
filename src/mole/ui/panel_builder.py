"""Pagination for scrolling lists: visible windows, cursor movement, hints."""

from __future__ import annotations

from dataclasses import dataclass

from .selection import clamp_cursor


@dataclass(frozen=True)
class PageWindow:
    """Contiguous slice of items currently on screen."""

    offset: int
    size: int

    @property
    def end(self) -> int:
        return self.offset + self.size

    def indices(self) -> range:
        return range(self.offset, self.end)


def page_window(offset: int, total: int, per_page: int) -> PageWindow:
    """Build a window that always satisfies offset + size <= total.

    Args:
        offset: Requested first visible index
        total: Total number of items
        per_page: Items that fit on screen

    Returns:
        PageWindow with size == min(per_page, total - offset)
    """
    if total <= 0:
        return PageWindow(0, 0)
    per_page = max(1, per_page)
    offset = max(0, min(offset, total - 1))
    return PageWindow(offset, min(per_page, total - offset))


class Paginator:
    """Maps a cursor over N items onto a fixed-size visible window.

    The cursor is relative to the window (0 is the first visible row);
    absolute_index is the item it points at.
    """

    def __init__(self, total: int, per_page: int):
        self.total = max(0, total)
        self.per_page = max(1, per_page)
        self.offset = 0
        self.cursor = 0

    @property
    def window(self) -> PageWindow:
        return page_window(self.offset, self.total, self.per_page)

    @property
    def absolute_index(self) -> int:
        return self.offset + self.cursor

    @property
    def page_count(self) -> int:
        return max(1, -(-self.total // self.per_page))

    @property
    def page_number(self) -> int:
        return self.absolute_index // self.per_page + 1

    def _max_offset(self) -> int:
        return max(0, self.total - self.per_page)

    def _normalize(self) -> None:
        self.offset = max(0, min(self.offset, self._max_offset()))
        self.cursor = clamp_cursor(self.cursor, self.window.size)

    def move_up(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1
        elif self.offset > 0:
            self.offset -= 1
        self._normalize()

    def move_down(self) -> None:
        if self.cursor < self.window.size - 1:
            self.cursor += 1
        elif self.window.end < self.total:
            self.offset += 1
        self._normalize()

    def page_up(self) -> None:
        if self.offset == 0:
            self.cursor = 0
        else:
            self.offset = max(0, self.offset - self.per_page)
        self._normalize()

    def page_down(self) -> None:
        if self.offset >= self._max_offset():
            self.cursor = self.window.size - 1
        else:
            self.offset = min(self.offset + self.per_page, self._max_offset())
        self._normalize()

    def home(self) -> None:
        self.offset = 0
        self.cursor = 0
        self._normalize()

    def end(self) -> None:
        self.offset = self._max_offset()
        self.cursor = self.window.size - 1
        self._normalize()

    def resize(self, per_page: int) -> None:
        """Change the page size, keeping the current item on screen."""
        absolute = self.absolute_index
        self.per_page = max(1, per_page)
        if absolute < self.offset:
            self.offset = absolute
        elif absolute >= self.offset + self.per_page:
            self.offset = absolute - self.per_page + 1
        self.offset = max(0, min(self.offset, self._max_offset()))
        self.cursor = clamp_cursor(absolute - self.offset, self.window.size)


def format_scroll_indicator(hidden_above: int, hidden_below: int) -> tuple[str | None, str | None]:
    """Format scroll indicators.

    Returns:
        Tuple of (above_indicator, below_indicator) - None if no items hidden
    """
    above = f"  ↑ {hidden_above} more" if hidden_above > 0 else None
    below = f"  ↓ {hidden_below} more" if hidden_below > 0 else None
    return above, below
