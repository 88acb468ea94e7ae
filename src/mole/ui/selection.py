"""Selection state and cursor bounds for list menus."""

from __future__ import annotations

from collections.abc import Iterator


class SelectionSet:
    """Selected/unselected flag for each item index 0..count-1.

    Addressing an index outside the range is a no-op, never an error.
    """

    def __init__(self, count: int):
        self._flags = [False] * max(0, count)

    def __len__(self) -> int:
        return len(self._flags)

    def __iter__(self) -> Iterator[bool]:
        return iter(self._flags)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SelectionSet):
            return NotImplemented
        return self._flags == other._flags

    def __repr__(self) -> str:
        return f"SelectionSet({len(self)}, selected=[{selected_indices(self)}])"

    def _in_range(self, index: int) -> bool:
        return 0 <= index < len(self._flags)

    def is_selected(self, index: int) -> bool:
        return self._in_range(index) and self._flags[index]

    def set(self, index: int, selected: bool = True) -> None:
        if self._in_range(index):
            self._flags[index] = selected

    def toggle(self, index: int) -> None:
        if self._in_range(index):
            self._flags[index] = not self._flags[index]

    def select_all(self, indices: list[int] | None = None) -> None:
        for i in range(len(self._flags)) if indices is None else indices:
            self.set(i, True)

    def select_none(self) -> None:
        self._flags = [False] * len(self._flags)

    def indices(self) -> list[int]:
        """Selected indices in ascending order."""
        return [i for i, flag in enumerate(self._flags) if flag]


def init_selection(count: int) -> SelectionSet:
    """Create a selection with every item unselected."""
    return SelectionSet(count)


def apply_preselection(indices_csv: str, selection: SelectionSet) -> None:
    """Mark indices from a comma-separated string as selected.

    Malformed tokens, negatives and indices past the end are dropped
    silently; preselection strings come from callers and may be stale.
    """
    if not indices_csv:
        return

    cleaned = "".join(indices_csv.split())
    for token in cleaned.split(","):
        if token.isdigit() and token.isascii():
            selection.set(int(token), True)


def count_selected(selection: SelectionSet) -> int:
    return sum(1 for flag in selection if flag)


def selected_indices(selection: SelectionSet) -> str:
    """Canonical form: ascending indices joined by commas ('' when none)."""
    return ",".join(str(i) for i in selection.indices())


def clamp_cursor(cursor: int, visible_count: int) -> int:
    """Clamp a cursor into [0, visible_count - 1]; 0 for an empty view."""
    if visible_count <= 0:
        return 0
    return max(0, min(cursor, visible_count - 1))
