"""
Report command group for cfgaap.

Commands: cash-flow, reconcile
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from ..config import CFGAAPConfig
from ..engine import build_statement, derive_cash_flow_statement
from ..errors import (
    InputError,
    ReconciliationMismatchError,
    UnclassifiableCategoryError,
)
from ..label_map import LabelMap
from ..normalize import normalize_period
from ..period_io import load_period
from ..reconcile import check_reconciliation
from ..reports.cash_flow import format_as_csv, format_as_json, format_as_text
from ..taxonomy import AccountCategory
from ._options import current_file_option, format_option, label_map_option, prior_file_option

logger = logging.getLogger(__name__)


def load_label_map(label_map_file: Optional[Path]) -> Optional[LabelMap]:
    """Load the label map if a path was given."""
    if label_map_file is None:
        return None
    return LabelMap.load(label_map_file)


def _echo_input_error(e: InputError) -> None:
    click.echo(f"\n[ERROR] {e}")
    click.echo("\nCorrect the entered line items and try again.")
    click.echo("Use 'cfgaap input check --file <period file>' to list every input problem.")


@click.group(name="report")
def report_group():
    """Cash flow statement generation commands."""


@report_group.command(name="cash-flow")
@prior_file_option
@current_file_option
@label_map_option()
@format_option()
@click.option(
    "--currency",
    type=str,
    default="USD",
    help="Currency code shown on the statement (default: USD).",
)
@click.option(
    "--include-zero-lines",
    is_flag=True,
    help="Keep lines whose amount is zero.",
)
def cash_flow(prior_file, current_file, label_map_file, format, currency, include_zero_lines):
    """
    Generate an indirect-method Statement of Cash Flows.

    Derives the statement from the prior and current period line items
    (balance sheet balances plus net income, depreciation and other
    income statement items).

    IMPORTANT: The statement is only printed if it reconciles exactly:
    beginning cash + net change in cash = ending cash.

    The report will fail if:
    - Any label is not a recognized account
    - An account is entered twice in one period
    - An amount is not a finite number
    - The derived cash flows do not tie out to the cash balances
    """
    logger.info("=== CFGAAP Statement of Cash Flows ===")

    try:
        config = CFGAAPConfig(
            default_currency=currency.upper(),
            include_zero_lines=include_zero_lines,
        )
        label_map = load_label_map(label_map_file)
        prior = load_period(prior_file)
        current = load_period(current_file)

        statement = derive_cash_flow_statement(
            prior.items,
            current.items,
            prior_label=prior.period_label,
            current_label=current.period_label,
            label_map=label_map,
            config=config,
        )

        if format.lower() == "csv":
            output = format_as_csv(statement)
        elif format.lower() == "json":
            output = format_as_json(statement)
        else:
            output = format_as_text(statement)

        click.echo()
        click.echo(output)
        sys.exit(0)

    except ReconciliationMismatchError as e:
        click.echo(f"\n[FAIL] CASH DOES NOT RECONCILE (discrepancy: {e.discrepancy:,})")
        click.echo(f"  Beginning cash:     {e.beginning_cash:>15,}")
        click.echo(f"  Net change in cash: {e.net_change_in_cash:>15,}")
        click.echo(f"  Ending cash:        {e.ending_cash:>15,}")
        click.echo("\nThe two periods, as entered, are inconsistent.")
        click.echo("Use 'cfgaap report reconcile' to review the derived figures.")
        sys.exit(1)
    except InputError as e:
        logger.error(f"Invalid input: {e}")
        _echo_input_error(e)
        sys.exit(1)
    except UnclassifiableCategoryError as e:
        logger.error(f"Internal taxonomy error: {e}", exc_info=True)
        click.echo(f"\n[ERROR] Internal error: {e}")
        sys.exit(1)
    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Could not read input: {e}")
        click.echo(f"\n[ERROR] {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error generating cash flow statement: {e}", exc_info=True)
        sys.exit(1)


@report_group.command(name="reconcile")
@prior_file_option
@current_file_option
@label_map_option()
def reconcile(prior_file, current_file, label_map_file):
    """
    Check whether two periods reconcile to their cash balances.

    Derives the cash flows without presenting a statement and shows:
    - Net cash from operating, investing and financing activities
    - Beginning and ending cash
    - The discrepancy, if the periods do not tie out
    """
    logger.info("=== CFGAAP Cash Reconciliation Check ===")

    try:
        label_map = load_label_map(label_map_file)
        prior_input = load_period(prior_file)
        current_input = load_period(current_file)

        prior = normalize_period(prior_input.items, prior_input.period_label, label_map)
        current = normalize_period(current_input.items, current_input.period_label, label_map)

        statement = build_statement(prior, current)
        result = check_reconciliation(
            statement,
            prior.get(AccountCategory.CASH_AND_EQUIVALENTS),
            current.get(AccountCategory.CASH_AND_EQUIVALENTS),
        )

        click.echo("\n" + "=" * 80)
        click.echo(f"CASH RECONCILIATION - {prior.period_label} to {current.period_label}")
        click.echo("=" * 80)
        click.echo(f"{'Net cash from operating activities':<50} {statement.net_operating:>20,}")
        click.echo(f"{'Net cash from investing activities':<50} {statement.net_investing:>20,}")
        click.echo(f"{'Net cash from financing activities':<50} {statement.net_financing:>20,}")
        click.echo("-" * 80)
        click.echo(f"{'Derived net change in cash':<50} {result.net_change_in_cash:>20,}")
        click.echo(f"{'Actual change in cash':<50} {result.actual_change_in_cash:>20,}")
        click.echo(f"{'Beginning cash':<50} {result.beginning_cash:>20,}")
        click.echo(f"{'Ending cash':<50} {result.ending_cash:>20,}")
        click.echo("=" * 80)

        if result.reconciled:
            click.echo("✓ RECONCILED - Beginning cash + Net change = Ending cash")
            sys.exit(0)
        else:
            click.echo(f"✗ NOT RECONCILED - Discrepancy: {result.discrepancy:,}")
            click.echo("  Review the entered balances of both periods.")
            sys.exit(1)

    except InputError as e:
        logger.error(f"Invalid input: {e}")
        _echo_input_error(e)
        sys.exit(1)
    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error during reconciliation check: {e}", exc_info=True)
        click.echo(f"\n✗ Reconciliation check failed: {e}")
        sys.exit(1)
