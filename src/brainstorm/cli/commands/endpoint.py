"""
Endpoint command for CLI.
"""

import sys

import click
from rich.console import Console

from ...config import config
from ...transport import endpoint_from_origin

console = Console()


@click.command("endpoint")
@click.option("--origin", "-o", default=config.origin, show_default=True, help="Page origin")
def endpoint_command(origin: str):
    """Show the websocket endpoint derived from a page origin."""
    try:
        console.print(endpoint_from_origin(origin))
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
