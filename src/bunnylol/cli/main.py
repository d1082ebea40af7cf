"""CLI entry point for bunnylol.

Invoked as::

    bunnylol [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m bunnylol.cli.main

Commands
--------
- open      Resolve a command and open it in the browser
- bindings  List every loaded command
- serve     Start the redirect server with live reload
- history   Show or clear recent command history
- init      Write a default configuration file
- version   Show version information
"""
from __future__ import annotations

import logging
import sys
import webbrowser
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

from bunnylol.config.config_loader import BunnylolConfig, ConfigLoader
from bunnylol.history.logger import History

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_config(config_path: str | None) -> BunnylolConfig:
    """Load the config, reporting problems and falling back to defaults."""
    loader = ConfigLoader()
    try:
        if config_path is None:
            return loader.load_default_location()
        return loader.load(Path(config_path))
    except (FileNotFoundError, ValueError) as exc:
        err_console.print(f"[yellow]Warning:[/yellow] {exc}")
        err_console.print("[yellow]Using default configuration.[/yellow]")
        return loader.defaults()


def _history_for(config: BunnylolConfig) -> History | None:
    if not config.history.enabled:
        return None
    return History(config.history.resolved_path(), max_entries=config.history.max_entries)


def _print_bindings(config: BunnylolConfig) -> None:
    from bunnylol.convenience import Bunnylol
    from bunnylol.server.server import sort_commands

    commands = sort_commands(Bunnylol(config).list_commands())
    if not commands:
        console.print("[yellow]No commands loaded.[/yellow]")
        return

    table = Table(title="Bunnylol Commands", box=box.SIMPLE)
    table.add_column("Command", style="cyan", no_wrap=True)
    table.add_column("Aliases", style="magenta")
    table.add_column("Description")
    table.add_column("Example", style="dim")
    table.add_column("Origin", style="green")
    for info in commands:
        table.add_row(
            info.primary,
            ", ".join(info.aliases),
            info.description,
            info.example,
            info.origin,
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="bunnylol")
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Path to config.yaml (default: system or XDG location).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log plugin loading and dispatch details.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Bunnylol — smart browser bookmarks with pluggable commands."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _config_from(ctx: click.Context) -> BunnylolConfig:
    return _load_config(ctx.obj.get("config_path"))


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from bunnylol import __version__

    console.print(
        Panel(
            f"[bold]bunnylol[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Smart browser bookmarks with pluggable commands.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# open
# ---------------------------------------------------------------------------


@cli.command(name="open")
@click.argument("words", nargs=-1, required=True)
@click.option("--dry-run", is_flag=True, help="Print the URL without opening a browser.")
@click.pass_context
def open_command(ctx: click.Context, words: tuple[str, ...], dry_run: bool) -> None:
    """Resolve a command and open the resulting URL."""
    config = _config_from(ctx)

    if len(words) == 1 and words[0] == "list":
        _print_bindings(config)
        return

    from bunnylol.convenience import Bunnylol

    command = " ".join(words)
    url = Bunnylol(config).resolve(command)
    console.print(url, markup=False, highlight=False, soft_wrap=True)

    history = _history_for(config)
    if history is not None:
        try:
            history.add(command)
        except OSError as exc:
            logger.warning("Failed to save history: %s", exc)

    if dry_run:
        return
    try:
        browser = webbrowser.get(config.browser) if config.browser else webbrowser.get()
        browser.open(url)
    except webbrowser.Error as exc:
        err_console.print(f"[red]Could not open browser:[/red] {exc}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# bindings
# ---------------------------------------------------------------------------


@cli.command(name="bindings")
@click.pass_context
def bindings_command(ctx: click.Context) -> None:
    """List every loaded command with its aliases and origin."""
    _print_bindings(_config_from(ctx))


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command(name="serve")
@click.option("--port", "-p", default=None, type=int, help="Port to listen on (default: from config, 8085).")
@click.option("--address", "-a", default=None, help="Address to bind (default: from config, 127.0.0.1).")
@click.pass_context
def serve_command(ctx: click.Context, port: int | None, address: str | None) -> None:
    """Start the redirect server with live plugin reload."""
    from bunnylol.convenience import Bunnylol
    from bunnylol.server.server import BunnylolServer

    config = _config_from(ctx)
    port = port if port is not None else config.server.port
    address = address if address is not None else config.server.address
    logging.getLogger("bunnylol").setLevel(config.server.log_level.upper())

    with Bunnylol(config) as app:
        watching = config.watch and app.start_watching()
        server = BunnylolServer(
            app=app,
            host=address,
            port=port,
            history=_history_for(config),
            display_url=config.server.display_url(),
        )
        reload_note = "Live reload: [green]on[/green]" if watching else "Live reload: [yellow]off[/yellow]"
        console.print(
            Panel(
                f"Serving bunnylol at [link=http://{address}:{port}/]http://{address}:{port}/[/link]\n"
                f"Commands loaded: [cyan]{len(app.list_commands())}[/cyan]\n"
                f"{reload_note}\n"
                "Press Ctrl-C to stop.",
                title="Server",
                border_style="green",
            )
        )
        server.start()


# ---------------------------------------------------------------------------
# history
# ---------------------------------------------------------------------------


@cli.command(name="history")
@click.option("--last", "-n", default=20, show_default=True, type=int, help="Number of recent entries to show.")
@click.option("--clear", is_flag=True, help="Delete all recorded history.")
@click.pass_context
def history_command(ctx: click.Context, last: int, clear: bool) -> None:
    """Show or clear recent command history."""
    config = _config_from(ctx)
    history = History(config.history.resolved_path(), max_entries=config.history.max_entries)

    if clear:
        history.clear()
        console.print("[green]History cleared.[/green]")
        return

    records = history.last_n(last)
    if not records:
        console.print("[yellow]No history entries found.[/yellow]")
        return

    table = Table(title=f"Last {last} Commands", box=box.SIMPLE)
    table.add_column("Timestamp", style="dim", no_wrap=True)
    table.add_column("User", style="magenta")
    table.add_column("Command", style="cyan")

    for record in records:
        ts = str(record.get("timestamp", ""))[:19].replace("T", " ")
        table.add_row(ts, str(record.get("user", "")), str(record.get("command", "")))

    console.print(table)
    console.print(f"  Total history records: [cyan]{history.count()}[/cyan]")


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


@cli.command(name="init")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output config file path (default: XDG config location).",
)
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
def init_command(output: str | None, force: bool) -> None:
    """Write a default configuration file."""
    loader = ConfigLoader()
    output_path = Path(output) if output else loader.user_path()
    if output_path.exists() and not force:
        err_console.print(
            f"[red]Config already exists:[/red] {output_path} (use --force to overwrite)"
        )
        sys.exit(1)

    loader.write(loader.defaults(), output_path)
    console.print(f"[green]Initialised[/green] bunnylol config: [bold]{output_path}[/bold]")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
