"""
Error types raised by the CFGAAP derivation engine.

Input errors are recoverable by correcting the entered statements.
UnclassifiableCategoryError is an internal taxonomy defect.
ReconciliationMismatchError means the two periods, as entered, do not tie out
to the actual change in cash.
"""

from decimal import Decimal
from typing import Any, Optional


class CashFlowError(Exception):
    """Base class for every error surfaced by the derivation engine."""


class InputError(CashFlowError, ValueError):
    """Base class for errors the caller fixes by correcting input data."""


class UnmappedAccountError(InputError):
    """
    A line-item label does not match any account in the taxonomy.

    Attributes:
        label: The label as entered.
        period_label: Period the label was entered for, if known.
    """

    def __init__(self, label: str, period_label: Optional[str] = None):
        self.label = label
        self.period_label = period_label
        where = f" in period '{period_label}'" if period_label else ""
        super().__init__(
            f"Unknown account label '{label}'{where}. "
            f"Use a recognized label or add an alias to the label map."
        )


class DuplicateAccountError(InputError):
    """
    Two line items resolve to the same account category within one period.

    Attributes:
        category: The AccountCategory supplied twice.
        first_label: Label of the first occurrence.
        second_label: Label of the conflicting occurrence.
        period_label: Period the labels were entered for, if known.
    """

    def __init__(
        self,
        category,
        first_label: str,
        second_label: str,
        period_label: Optional[str] = None
    ):
        self.category = category
        self.first_label = first_label
        self.second_label = second_label
        self.period_label = period_label
        where = f" in period '{period_label}'" if period_label else ""
        super().__init__(
            f"Account '{category.value}' supplied twice{where}: "
            f"'{first_label}' and '{second_label}'"
        )


class InvalidAmountError(InputError):
    """
    A line-item amount is not a finite number in the supported range.

    Attributes:
        label: Label of the offending line item.
        amount: The raw amount as supplied.
        reason: Short explanation of why the amount was rejected.
    """

    def __init__(self, label: str, amount: Any, reason: str = "not a finite number"):
        self.label = label
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid amount {amount!r} for '{label}': {reason}")


class UnclassifiableCategoryError(CashFlowError, RuntimeError):
    """
    An account category has no registered classification rule.

    This indicates a gap in the taxonomy and is a defect, not a data-entry
    problem.
    """

    def __init__(self, category):
        self.category = category
        name = getattr(category, "value", category)
        super().__init__(f"No classification rule registered for category '{name}'")


class ReconciliationMismatchError(CashFlowError, ValueError):
    """
    The derived net change in cash does not tie out to the cash balances.

    Attributes:
        discrepancy: beginning_cash + net_change_in_cash - ending_cash.
        beginning_cash: Prior-period cash balance.
        net_change_in_cash: Sum of operating, investing and financing cash flows.
        ending_cash: Current-period cash balance.
    """

    def __init__(
        self,
        discrepancy: Decimal,
        beginning_cash: Decimal,
        net_change_in_cash: Decimal,
        ending_cash: Decimal
    ):
        self.discrepancy = discrepancy
        self.beginning_cash = beginning_cash
        self.net_change_in_cash = net_change_in_cash
        self.ending_cash = ending_cash
        super().__init__(
            f"CASH RECONCILIATION FAILED: statement does not tie out!\n"
            f"Beginning cash: {beginning_cash:,}\n"
            f"Net change in cash: {net_change_in_cash:,}\n"
            f"Ending cash: {ending_cash:,}\n"
            f"Discrepancy (beginning + net change - ending): {discrepancy:,}\n"
            f"Check the entered balances of both periods."
        )
