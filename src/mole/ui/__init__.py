"""UI module."""

from .base import MenuUI
from .menu import MenuAction, MenuItem, MultiSelectMenu
from .panel_builder import PageWindow, Paginator, format_scroll_indicator, page_window
from .render import CheckboxStyle, print_footer_controls, render_item, visible_length
from .selection import (
    SelectionSet,
    apply_preselection,
    clamp_cursor,
    count_selected,
    init_selection,
    selected_indices,
)
from .session import ApplyResult, TerminalSession, begin_session, end_session
from .terminal import get_height, get_width, items_per_page
from .terminal_menu import TerminalMenuUI
from .traps import cleanup, menu_session, setup_traps

__all__ = [
    "ApplyResult",
    "CheckboxStyle",
    "MenuAction",
    "MenuItem",
    "MenuUI",
    "MultiSelectMenu",
    "PageWindow",
    "Paginator",
    "SelectionSet",
    "TerminalMenuUI",
    "TerminalSession",
    "apply_preselection",
    "begin_session",
    "clamp_cursor",
    "cleanup",
    "count_selected",
    "end_session",
    "format_scroll_indicator",
    "get_height",
    "get_width",
    "init_selection",
    "items_per_page",
    "menu_session",
    "page_window",
    "print_footer_controls",
    "render_item",
    "selected_indices",
    "setup_traps",
    "visible_length",
]
