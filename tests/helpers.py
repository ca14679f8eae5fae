"""
Shared test helpers for CFGAAP unit tests.

Provides factory functions for creating normalized periods, deltas and
cash flow lines without going through the label normalizer.
"""

from __future__ import annotations

from decimal import Decimal

from cfgaap.classify import CashFlowLine
from cfgaap.deltas import AccountDelta
from cfgaap.normalize import LineItem, StatementPeriod
from cfgaap.taxonomy import AccountCategory, Section


def D(value) -> Decimal:
    """Shorthand for an exact Decimal."""
    return Decimal(str(value))


def make_period(period_label: str, amounts: dict[AccountCategory, object]) -> StatementPeriod:
    """Create a StatementPeriod from category -> amount, labelled by category value."""
    return StatementPeriod(
        period_label=period_label,
        line_items={
            category: LineItem(
                account_label=category.value,
                category=category,
                amount=D(amount),
            )
            for category, amount in amounts.items()
        },
    )


def make_delta(
    category: AccountCategory,
    prior=0,
    current=0,
    in_prior: bool = True,
    in_current: bool = True,
) -> AccountDelta:
    """Create an AccountDelta with delta = current - prior."""
    return AccountDelta(
        category=category,
        prior_amount=D(prior),
        current_amount=D(current),
        delta=D(current) - D(prior),
        in_prior=in_prior,
        in_current=in_current,
    )


def make_line(
    amount,
    section: Section = Section.OPERATING,
    category: AccountCategory = AccountCategory.NET_INCOME,
    label: str = "Test line",
) -> CashFlowLine:
    """Create a CashFlowLine."""
    return CashFlowLine(label=label, amount=D(amount), section=section, category=category)


def amounts_by_label(lines) -> dict[str, Decimal]:
    """Map line label -> amount."""
    return {line.label: line.amount for line in lines}
