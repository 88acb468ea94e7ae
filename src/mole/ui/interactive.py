"""Interactive main menu shown when running bare 'mole'."""

import readchar

from mole.config import Config
from mole.errors import ErrorCode, show_last_error
from mole.log import console

from .terminal_menu import TerminalMenuUI

MAIN_OPTIONS = [
    "Analyze disk usage",
    "System status",
    "Doctor",
    "Exit",
]


def _wait_for_key() -> None:
    console.print("[dim]Press any key to return to the menu[/dim]")
    try:
        readchar.readkey()
    except KeyboardInterrupt:
        pass


def interactive_menu() -> int:
    """Loop over the main menu until the user exits. Returns an exit code."""
    from mole.cli import print_doctor_report
    from mole.runner import run_analyze, run_status

    cfg = Config.load()
    ui = TerminalMenuUI(checkbox_style=cfg.checkbox_style, use_alt_screen=cfg.alt_screen)

    while True:
        choice = ui.select(MAIN_OPTIONS, title="mole")

        if choice is None or choice == 3:
            return int(ErrorCode.SUCCESS)

        if choice == 0:
            code = run_analyze(config=cfg)
        elif choice == 1:
            code = run_status(config=cfg)
        else:
            code = ErrorCode.SUCCESS if print_doctor_report(cfg) else ErrorCode.DEPENDENCY

        if code not in (ErrorCode.SUCCESS, ErrorCode.USER_CANCELLED):
            show_last_error()
        _wait_for_key()
