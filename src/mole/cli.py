"""CLI commands."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.table import Table

from mole.errors import ErrorCode, MoleError, show_last_error
from mole.log import configure_logging, log_error, log_success

if TYPE_CHECKING:
    from mole.config import Config

app = typer.Typer(
    name="mole",
    help="Interactive terminal menus and launcher for the mole analysis tools.",
    no_args_is_help=False,
)
config_app = typer.Typer(name="config", help="Show or change settings.")
app.add_typer(config_app)
cache_app = typer.Typer(name="cache", help="Shared key/value data used by the analysis tools.")
app.add_typer(cache_app)

console = Console()


def _get_config() -> Config:
    """Lazy import and load config."""
    from mole.config import Config

    return Config.load()


def _finish(code: int) -> None:
    """Exit with code, printing the recorded error for real failures."""
    if code not in (ErrorCode.SUCCESS, ErrorCode.USER_CANCELLED):
        show_last_error()
    if code != ErrorCode.SUCCESS:
        raise typer.Exit(int(code))


def _parse_style(style: str | None, default: str) -> str:
    from mole.config import CHECKBOX_STYLES

    value = (style or default).lower()
    if value not in CHECKBOX_STYLES:
        raise MoleError(
            f"Invalid checkbox style '{value}' (expected {'|'.join(CHECKBOX_STYLES)})",
            ErrorCode.INVALID_ARG,
        )
    return value


def _read_items_from_stdin() -> list[str]:
    """Read menu items piped on stdin, then reattach stdin to the terminal for keys."""
    items = [line.rstrip("\n") for line in sys.stdin if line.strip()]
    if not items:
        return items
    try:
        sys.stdin = open("/dev/tty")  # noqa: SIM115 - lives for the rest of the process
    except OSError:
        raise MoleError(
            "No terminal available for interactive selection", ErrorCode.GENERAL
        ) from None
    return items


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    debug: Annotated[bool, typer.Option("--debug", help="Enable debug logging")] = False,
):
    """Launch interactive menu if no command given."""
    if debug:
        os.environ["MO_DEBUG"] = "1"
        from mole.config import clear_config_cache

        clear_config_cache()

    configure_logging(_get_config().debug)

    if ctx.invoked_subcommand is None:
        from mole.ui.interactive import interactive_menu

        _finish(interactive_menu())


@app.command()
def select(
    items: Annotated[
        list[str] | None, typer.Argument(help="Menu items (read from stdin when omitted)")
    ] = None,
    preselect: Annotated[
        str, typer.Option("--preselect", "-p", help="Comma-separated indices selected on open")
    ] = "",
    style: Annotated[
        str | None, typer.Option("--style", "-s", help="Checkbox style (circle|square|none)")
    ] = None,
    title: Annotated[str, typer.Option("--title", "-t", help="Menu title")] = "",
    single: Annotated[bool, typer.Option("--single", help="Pick exactly one item")] = False,
    alt_screen: Annotated[
        bool | None,
        typer.Option("--alt-screen/--no-alt-screen", help="Use the alternate screen buffer"),
    ] = None,
):
    """Show a paginated menu and print the chosen indices (comma-separated)."""
    from mole.ui.menu import MultiSelectMenu

    cfg = _get_config()
    try:
        checkbox_style = _parse_style(style, cfg.checkbox_style)
        if not items and not sys.stdin.isatty():
            items = _read_items_from_stdin()
    except MoleError as e:
        log_error(e.message)
        raise typer.Exit(e.code)

    if not items:
        log_error("No menu items given")
        raise typer.Exit(int(ErrorCode.INVALID_ARG))

    menu = MultiSelectMenu(
        items,
        title=title,
        preselected=preselect,
        checkbox_style=checkbox_style,
        use_alt_screen=cfg.alt_screen if alt_screen is None else alt_screen,
        multi=not single,
    )
    result = menu.show()
    if result is None:
        raise typer.Exit(int(ErrorCode.USER_CANCELLED))

    typer.echo(",".join(str(i) for i in result))


@app.command()
def analyze(
    path: Annotated[Path | None, typer.Argument(help="Directory to analyze (default: cwd)")] = None,
):
    """Run the disk usage analyzer."""
    from mole.runner import run_analyze

    _finish(run_analyze(path, _get_config()))


@app.command()
def status():
    """Show live system status."""
    from mole.runner import run_status

    _finish(run_status(_get_config()))


def print_doctor_report(config: Config) -> bool:
    """Print platform and binary installation details. Returns True if complete."""
    from mole.runner import (
        Binary,
        binary_path,
        get_arch_suffix,
        get_bin_dir,
        get_binary_version,
        is_apple_silicon,
        verify_installation,
    )

    table = Table(show_header=True, header_style="bold")
    table.add_column("Binary")
    table.add_column("Path", style="dim")
    table.add_column("Version")
    for binary in Binary:
        table.add_row(
            binary.filename,
            str(binary_path(binary, config)),
            get_binary_version(binary, config),
        )

    console.print(f"[bold]Architecture:[/bold] {get_arch_suffix()}")
    console.print(f"[bold]Apple Silicon:[/bold] {'yes' if is_apple_silicon() else 'no'}")
    console.print(f"[bold]Binary directory:[/bold] {get_bin_dir(config)}")
    console.print(table)

    ok = verify_installation(config)
    if ok:
        log_success("All binaries installed")
    return ok


@app.command()
def doctor():
    """Check that the analysis binaries are installed."""
    if not print_doctor_report(_get_config()):
        raise typer.Exit(int(ErrorCode.DEPENDENCY))


@config_app.callback(invoke_without_command=True)
def config_show(ctx: typer.Context):
    """Show configuration values."""
    if ctx.invoked_subcommand is not None:
        return
    cfg = _get_config()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Key")
    table.add_column("Value")
    table.add_column("Description", style="dim")
    for name, desc, enabled in cfg.get_toggles():
        table.add_row(name, "on" if enabled else "off", desc)
    for name, desc, value in cfg.get_settings():
        table.add_row(name, str(value) if value != "" else "-", desc)

    console.print(f"[dim]{cfg.config_dir / 'config.json'}[/dim]")
    console.print(table)


@config_app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Setting name (see 'mole config')")],
    value: Annotated[str, typer.Argument(help="New value")],
):
    """Persist a setting to config.json."""
    from mole.config import clear_config_cache

    cfg = _get_config()
    try:
        parsed = cfg.parse_value(key, value)
    except KeyError:
        log_error(f"Unknown setting: {key}")
        raise typer.Exit(int(ErrorCode.INVALID_ARG))
    except ValueError as e:
        log_error(f"Invalid value for {key}: {e}")
        raise typer.Exit(int(ErrorCode.INVALID_ARG))

    cfg.set(key, parsed)
    clear_config_cache()
    log_success(f"{key} = {parsed}")


@cache_app.command("get")
def cache_get(key: Annotated[str, typer.Argument(help="Data key")]):
    """Print the value stored for a key (empty when missing)."""
    from mole.shared_data import read_shared_data

    typer.echo(read_shared_data(key))


@cache_app.command("set")
def cache_set(
    key: Annotated[str, typer.Argument(help="Data key")],
    value: Annotated[str, typer.Argument(help="Value to store")],
):
    """Store a value for a key."""
    from mole.shared_data import write_shared_data

    _finish(write_shared_data(key, value))


@cache_app.command("clear")
def cache_clear(
    key: Annotated[str | None, typer.Argument(help="Data key (all keys when omitted)")] = None,
):
    """Remove one key or all shared data."""
    from mole.shared_data import clear_shared_data

    clear_shared_data(key)
