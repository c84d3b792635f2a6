"""
Command-line interface for positionflow.

Provides the CLI command group and registers individual subcommands.
"""

from __future__ import annotations

from typing import Optional

import click

from .. import __version__
from ..config import LOG_LEVELS, configure_logging
from .chains import chains_command
from .positions import positions_command
from .summary import summary_command


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging verbosity (defaults to $POSITIONFLOW_LOG_LEVEL or WARNING).",
)
def main(log_level: Optional[str]):
    """PositionFlow - Options position and roll chain analysis tool."""
    configure_logging(log_level)


# Register CLI subcommands
main.add_command(positions_command)
main.add_command(chains_command)
main.add_command(summary_command)


if __name__ == "__main__":
    main()
