"""
Watch command for CLI.
"""

import asyncio
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel

from ...capture.log_source import InteractionLogSource
from ...client import create_client
from ...config import config
from ...transport import endpoint_from_origin

console = Console()


class TerminalPage:
    """Stands in for the host page; a reload request is printed."""

    def __init__(self, origin: str):
        self.origin = origin
        self.reloads = 0

    def reload(self) -> None:
        self.reloads += 1
        console.print(
            Panel(
                f"[yellow]Server requested a page reload[/yellow] (#{self.reloads})",
                title="Reload",
            )
        )


async def run_watch(log_file: Path, origin: str, from_start: bool) -> None:
    """Run a client fed by the interaction log until cancelled."""
    source = InteractionLogSource(log_file, from_start=from_start)
    client = create_client(TerminalPage(origin), source)
    source.start()

    console.print(f"Watching [cyan]{log_file}[/cyan] -> [green]{client.url}[/green]")
    console.print("Press Ctrl+C to stop...\n")

    try:
        await asyncio.Event().wait()
    finally:
        source.stop()
        client.dispose()


@click.command("watch")
@click.argument("log_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--origin", "-o", default=config.origin, show_default=True, help="Page origin")
@click.option(
    "--from-start/--from-end",
    default=True,
    help="Replay interactions already in the log before following it",
)
def watch_command(log_file: Path, origin: str, from_start: bool):
    """
    Stream interactions from a JSONL log to the collecting server.

    Each line is {"kind": "click"|"submit"|"input"|"change", "target": {...}}.
    """
    try:
        endpoint_from_origin(origin)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if not log_file.parent.is_dir():
        console.print(f"[red]Error: directory {log_file.parent} does not exist[/red]", soft_wrap=True)
        sys.exit(1)

    try:
        asyncio.run(run_watch(log_file, origin, from_start))
    except KeyboardInterrupt:
        console.print("\n✅ Stopped")
