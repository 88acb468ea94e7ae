"""Logging setup and colorized user messages."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

LOGGER_NAME = "mole"

# User-facing messages go to stderr so stdout stays free for command results
console = Console(stderr=True, highlight=False)

_configured = False


def get_logger(area: str | None = None) -> logging.Logger:
    """Return the 'mole' logger or a 'mole.<area>' child."""
    return logging.getLogger(f"{LOGGER_NAME}.{area}" if area else LOGGER_NAME)


def configure_logging(debug: bool = False) -> None:
    """Attach a single Rich handler to the 'mole' logger."""
    global _configured

    logger = get_logger()
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    if _configured:
        return

    handler = RichHandler(console=console, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    _configured = True


def _debug_enabled() -> bool:
    from mole.config import Config

    return bool(Config.load().debug)


def debug_log(message: str, area: str = "debug") -> None:
    """Log a debug line when debug mode is on. Never raises."""
    try:
        if not _debug_enabled():
            return
        configure_logging(debug=True)
        get_logger(area).debug(message)
    except Exception:
        pass


def log_info(message: str) -> None:
    console.print(f"[blue]→[/blue] {escape(message)}")


def log_success(message: str) -> None:
    console.print(f"[green]✓[/green] {escape(message)}")


def log_warning(message: str) -> None:
    console.print(f"[yellow]![/yellow] {escape(message)}")


def log_error(message: str) -> None:
    console.print(f"[red]✗[/red] {escape(message)}")
