"""
Command-line interface for CFGAAP.

Provides CLI commands for deriving and reconciling cash flow statements and
for checking line-item input.
"""

import logging

import click

from . import __version__
from .commands.inputs import input_group
from .commands.report import report_group
from .config import setup_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="cfgaap")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose (DEBUG level) logging."
)
@click.pass_context
def main(ctx, verbose):
    """
    CFGAAP - Indirect-Method Cash Flow Statements.

    A command-line tool for deriving GAAP-style Statements of Cash Flows
    from two periods of financial statements, with exact reconciliation
    against the change in cash.
    """
    # Set up logging
    setup_logging(verbose)

    # Store verbose flag in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    logger.debug(f"CFGAAP version {__version__}")


main.add_command(report_group)
main.add_command(input_group)


if __name__ == "__main__":
    main()
