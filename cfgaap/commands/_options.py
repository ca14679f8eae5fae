"""
Shared Click option decorators for cfgaap command groups.

Each decorator factory wraps a single Click option so it can be reused
across multiple commands without repeating the option definition.
"""

from pathlib import Path

import click


def prior_file_option(func):
    """--prior/-p: required path to the prior-period input file."""
    return click.option(
        "--prior",
        "-p",
        "prior_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        required=True,
        help="Prior-period line items (.json or .csv).",
    )(func)


def current_file_option(func):
    """--current/-c: required path to the current-period input file."""
    return click.option(
        "--current",
        "-c",
        "current_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        required=True,
        help="Current-period line items (.json or .csv).",
    )(func)


def label_map_option(required: bool = False):
    """--label-map/-l: path to the label alias JSON file."""
    def decorator(func):
        return click.option(
            "--label-map",
            "-l",
            "label_map_file",
            type=click.Path(dir_okay=False, path_type=Path),
            required=required,
            default=None,
            help="Label alias JSON file extending the built-in account labels.",
        )(func)
    return decorator


def format_option(choices: tuple = ("text", "json", "csv")):
    """--format: output format selector."""
    def decorator(func):
        return click.option(
            "--format",
            type=click.Choice(list(choices), case_sensitive=False),
            default=choices[0],
            help=f"Output format (default: {choices[0]}).",
        )(func)
    return decorator
