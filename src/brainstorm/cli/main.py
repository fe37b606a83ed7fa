"""
CLI entry point.
"""

import logging

import click

from .. import __version__
from ..config import config
from .commands.endpoint import endpoint_command
from .commands.watch import watch_command


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    default=config.log_level,
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity",
)
def cli(log_level: str):
    """
    Brainstorm telemetry client CLI

    Replays recorded page interactions to a collecting server.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register commands
cli.add_command(watch_command)
cli.add_command(endpoint_command)


def main():
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
