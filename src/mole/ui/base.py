"""Menu front-end protocol used by the interactive launcher."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class MenuUI(Protocol):
    """Anything that can ask the user to pick from a list of options.

    Index results always refer to positions in the options list passed in.
    """

    def select(self, options: list[str], title: str = "") -> int | None:
        """Pick one option. None when the user backs out."""
        ...

    def multi_select(
        self, options: list[str], selected: list[bool], title: str = ""
    ) -> list[int] | None:
        """Toggle options starting from the selected flags.

        Returns ascending indices, [] for an empty confirm, None on cancel.
        """
        ...

    def confirm(self, message: str) -> bool:
        ...
