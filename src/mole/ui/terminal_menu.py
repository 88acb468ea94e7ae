"""MenuUI implementation on top of the raw-mode paginated menu."""

from .menu import MultiSelectMenu
from .render import CheckboxStyle


class TerminalMenuUI:
    """MenuUI backed by MultiSelectMenu."""

    def __init__(
        self,
        checkbox_style: CheckboxStyle | str = CheckboxStyle.CIRCLE,
        use_alt_screen: bool = True,
    ):
        self.checkbox_style = CheckboxStyle(checkbox_style)
        self.use_alt_screen = use_alt_screen

    def select(self, options: list[str], title: str = "") -> int | None:
        if not options:
            return None
        menu = MultiSelectMenu(
            options,
            title=title,
            multi=False,
            use_alt_screen=self.use_alt_screen,
        )
        result = menu.show()
        return result[0] if result else None

    def multi_select(
        self, options: list[str], selected: list[bool], title: str = ""
    ) -> list[int] | None:
        if not options:
            return []
        preselected = ",".join(str(i) for i, s in enumerate(selected) if s)
        menu = MultiSelectMenu(
            options,
            title=title,
            preselected=preselected,
            checkbox_style=self.checkbox_style,
            use_alt_screen=self.use_alt_screen,
        )
        return menu.show()

    def confirm(self, message: str) -> bool:
        return self.select(["Yes", "No"], title=message) == 0
