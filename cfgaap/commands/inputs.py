"""
Input command group for cfgaap.

Commands: check, categories, alias
"""

import logging
import sys
from pathlib import Path

import click

from ..label_map import LabelMap
from ..period_io import load_period
from ..taxonomy import (
    CATEGORY_INFO,
    CLASSIFICATION_RULES,
    AccountCategory,
    describe_rule,
)
from ..validate import collect_input_problems
from ._options import label_map_option
from .report import load_label_map

logger = logging.getLogger(__name__)


@click.group(name="input")
def input_group():
    """Line-item input checking and label management."""


@input_group.command(name="check")
@click.option(
    "--file",
    "-f",
    "period_files",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    multiple=True,
    help="Period input file (.json or .csv). May be given more than once.",
)
@label_map_option()
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Only show errors, suppress warnings.",
)
def check(period_files, label_map_file, quiet):
    """
    Check period input files for data-entry problems.

    Lists every problem in each file instead of stopping at the first:
    - Unrecognized account labels
    - Accounts entered twice
    - Amounts that are not finite numbers
    - Missing cash balance (warning)

    Exit codes:
    - 0: No errors found (warnings allowed)
    - 1: Errors found
    """
    logger.info("=== CFGAAP Input Check ===")

    try:
        label_map = load_label_map(label_map_file)

        total_errors = 0
        for period_file in period_files:
            period = load_period(period_file)
            result = collect_input_problems(period.items, period.period_label, label_map)
            result.log_summary()
            total_errors += result.error_count

            click.echo(f"\n{period_file} (period '{period.period_label}', {result.item_count} items)")
            click.echo("-" * 80)

            shown = [
                p for p in result.problems
                if not (quiet and p.severity == "warning")
            ]
            if not shown:
                click.echo("  [OK] No problems found")
            for problem in shown:
                click.echo(f"  {problem}")

        click.echo()
        if total_errors:
            click.echo(f"[FAIL] {total_errors} error(s) found")
            sys.exit(1)

        click.echo("[OK] Input is ready for derivation")
        sys.exit(0)

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error during input check: {e}", exc_info=True)
        click.echo(f"\n[ERROR] {e}")
        sys.exit(1)


@input_group.command(name="categories")
@click.option(
    "--labels",
    is_flag=True,
    help="Also list every recognized input label.",
)
def categories(labels):
    """
    List the account taxonomy and its classification rules.
    """
    click.echo(f"\n{'Category':<32} {'Kind':<8} {'Rule'}")
    click.echo("-" * 100)

    for category in AccountCategory:
        info = CATEGORY_INFO[category]
        kind = info.kind.value + ("*" if info.contra else "")
        click.echo(f"{category.value:<32} {kind:<8} {describe_rule(CLASSIFICATION_RULES[category])}")
        if labels:
            click.echo(f"{'':<32} labels: {', '.join((info.display_name,) + info.aliases)}")

    click.echo("\n* contra account: enter as a positive amount")


@input_group.command(name="alias")
@label_map_option(required=True)
@click.argument("label")
@click.argument("category")
def alias(label_map_file, label, category):
    """
    Map LABEL to account CATEGORY in the label map file.

    CATEGORY may be a category name (e.g. Inventory) or any label the
    taxonomy already recognizes. The file is created if it does not exist.
    """
    try:
        label_map = LabelMap.load(label_map_file)
        resolved = label_map.add_alias(label, category)
        label_map.save(label_map_file)
    except ValueError as e:
        click.echo(f"[ERROR] {e}")
        click.echo("Run 'cfgaap input categories' to see valid categories.")
        sys.exit(1)

    click.echo(f"[OK] '{label}' -> {resolved.value} (saved to {label_map_file})")
