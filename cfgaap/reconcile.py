"""
Cash reconciliation for derived cash flow statements.

The derived net change in cash must tie out exactly to the movement of the
CashAndEquivalents balance between the two periods:

    beginning_cash + net_change_in_cash == ending_cash

There is no tolerance and no adjustment. A statement that does not tie out
is reported with its discrepancy so the entered data can be corrected.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .errors import ReconciliationMismatchError
from .money import ZERO, exact_context
from .normalize import LineItem
from .reports.cash_flow import CashFlowStatement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationResult:
    """
    Outcome of a cash reconciliation check.

    Attributes:
        beginning_cash: Prior-period cash balance.
        ending_cash: Current-period cash balance.
        net_change_in_cash: Net change reported by the statement.
        discrepancy: beginning_cash + net_change_in_cash - ending_cash.
    """

    beginning_cash: Decimal
    ending_cash: Decimal
    net_change_in_cash: Decimal
    discrepancy: Decimal

    @property
    def reconciled(self) -> bool:
        """True if the statement ties out exactly."""
        return self.discrepancy == 0

    @property
    def actual_change_in_cash(self) -> Decimal:
        """ending_cash - beginning_cash."""
        with exact_context():
            return self.ending_cash - self.beginning_cash


def cash_amount(item: Optional[LineItem], period_name: str) -> Decimal:
    """
    Amount of a cash line item; zero (with a warning) if the period has none.
    """
    if item is None:
        logger.warning(f"No cash balance supplied for the {period_name} period; using 0")
        return ZERO
    return item.amount


def check_reconciliation(
    statement: CashFlowStatement,
    prior_cash: Optional[LineItem],
    current_cash: Optional[LineItem]
) -> ReconciliationResult:
    """
    Check a statement against the cash balances without raising.

    Args:
        statement: Assembled CashFlowStatement.
        prior_cash: Prior-period CashAndEquivalents line item (None if absent).
        current_cash: Current-period CashAndEquivalents line item (None if absent).

    Returns:
        ReconciliationResult with the computed discrepancy.
    """
    beginning_cash = cash_amount(prior_cash, "prior")
    ending_cash = cash_amount(current_cash, "current")

    if statement.beginning_cash != beginning_cash or statement.ending_cash != ending_cash:
        logger.warning(
            f"Statement cash balances ({statement.beginning_cash} -> {statement.ending_cash}) "
            f"differ from the cash line items ({beginning_cash} -> {ending_cash}); "
            f"reconciling against the line items"
        )

    with exact_context():
        discrepancy = beginning_cash + statement.net_change_in_cash - ending_cash

    return ReconciliationResult(
        beginning_cash=beginning_cash,
        ending_cash=ending_cash,
        net_change_in_cash=statement.net_change_in_cash,
        discrepancy=discrepancy,
    )


def reconcile_statement(
    statement: CashFlowStatement,
    prior_cash: Optional[LineItem],
    current_cash: Optional[LineItem]
) -> ReconciliationResult:
    """
    Verify that a statement ties out to the cash balances.

    Args:
        statement: Assembled CashFlowStatement.
        prior_cash: Prior-period CashAndEquivalents line item (None if absent).
        current_cash: Current-period CashAndEquivalents line item (None if absent).

    Returns:
        ReconciliationResult (always reconciled).

    Raises:
        ReconciliationMismatchError: If beginning + net change != ending, or
            the statement carries cash balances other than the line items'.
    """
    logger.info("Verifying cash reconciliation (Beginning cash + Net change = Ending cash)")

    result = check_reconciliation(statement, prior_cash, current_cash)

    carries_other_balances = (
        statement.beginning_cash != result.beginning_cash
        or statement.ending_cash != result.ending_cash
    )

    if not result.reconciled or carries_other_balances:
        error = ReconciliationMismatchError(
            discrepancy=result.discrepancy,
            beginning_cash=result.beginning_cash,
            net_change_in_cash=result.net_change_in_cash,
            ending_cash=result.ending_cash,
        )
        logger.error(str(error))
        raise error

    logger.info("[OK] Cash reconciled exactly")
    return result
