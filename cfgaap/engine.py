"""
Cash flow statement derivation pipeline.

Normalizer -> Delta Calculator -> Classification Engine -> Statement Assembler,
followed by the mandatory cash reconciliation. Only statements that tie out
exactly are returned.

The pipeline is a pure function of its inputs: it holds no state between
calls and never mutates the caller's data, so concurrent derivations need no
coordination.
"""

import logging
from typing import Optional

from .classify import classify_deltas
from .config import CFGAAPConfig
from .deltas import compute_deltas
from .label_map import LabelMap
from .normalize import RawItems, StatementPeriod, normalize_period
from .reconcile import reconcile_statement
from .reports.cash_flow import CashFlowStatement, assemble_statement
from .taxonomy import AccountCategory

logger = logging.getLogger(__name__)


def build_statement(
    prior: StatementPeriod,
    current: StatementPeriod,
    config: Optional[CFGAAPConfig] = None
) -> CashFlowStatement:
    """
    Derive a Statement of Cash Flows without the reconciliation check.

    The returned statement may not tie out; callers presenting it as final
    must use derive_from_periods instead.

    Args:
        prior: Prior-period statement.
        current: Current-period statement.
        config: Optional configuration; uses default if not provided.

    Returns:
        CashFlowStatement (possibly with a non-zero discrepancy).

    Raises:
        UnclassifiableCategoryError: If a category has no classification rule.
    """
    if config is None:
        from .config import default_config
        config = default_config

    logger.info(
        f"Deriving Statement of Cash Flows: {prior.period_label} -> {current.period_label}"
    )

    # STEP 1: Period deltas
    logger.info("Step 1: Computing account deltas")
    deltas = compute_deltas(prior, current)

    # STEP 2: Classification
    logger.info("Step 2: Classifying deltas into cash flow lines")
    lines = classify_deltas(deltas, config)

    # STEP 3: Assembly
    logger.info("Step 3: Assembling statement")
    return assemble_statement(
        lines,
        beginning_cash=prior.amount(AccountCategory.CASH_AND_EQUIVALENTS),
        ending_cash=current.amount(AccountCategory.CASH_AND_EQUIVALENTS),
        prior_label=prior.period_label,
        current_label=current.period_label,
        currency=config.default_currency,
    )


def derive_from_periods(
    prior: StatementPeriod,
    current: StatementPeriod,
    config: Optional[CFGAAPConfig] = None
) -> CashFlowStatement:
    """
    Derive a reconciled Statement of Cash Flows from two normalized periods.

    Args:
        prior: Prior-period statement.
        current: Current-period statement.
        config: Optional configuration; uses default if not provided.

    Returns:
        CashFlowStatement that ties out to the cash balances.

    Raises:
        UnclassifiableCategoryError: If a category has no classification rule.
        ReconciliationMismatchError: If the statement does not tie out.
    """
    statement = build_statement(prior, current, config)

    # STEP 4: MANDATORY cash reconciliation
    logger.info("Step 4: Reconciling against cash balances")
    reconcile_statement(
        statement,
        prior.get(AccountCategory.CASH_AND_EQUIVALENTS),
        current.get(AccountCategory.CASH_AND_EQUIVALENTS),
    )

    logger.info(f"Net change in cash: {statement.net_change_in_cash}")

    return statement


def derive_cash_flow_statement(
    prior_items: RawItems,
    current_items: RawItems,
    prior_label: str = "Prior",
    current_label: str = "Current",
    label_map: Optional[LabelMap] = None,
    config: Optional[CFGAAPConfig] = None
) -> CashFlowStatement:
    """
    Derive a reconciled Statement of Cash Flows from raw line items.

    Args:
        prior_items: Prior period (label, amount) pairs or label -> amount mapping.
        current_items: Current period (label, amount) pairs or label -> amount mapping.
        prior_label: Prior period name.
        current_label: Current period name.
        label_map: Optional user aliases extending the built-in labels.
        config: Optional configuration; uses default if not provided.

    Returns:
        CashFlowStatement that ties out to the cash balances.

    Raises:
        UnmappedAccountError: If a label is not in the taxonomy.
        DuplicateAccountError: If a category is supplied twice in one period.
        InvalidAmountError: If an amount is non-numeric or non-finite.
        UnclassifiableCategoryError: If a category has no classification rule.
        ReconciliationMismatchError: If the statement does not tie out.
    """
    prior = normalize_period(prior_items, prior_label, label_map, config)
    current = normalize_period(current_items, current_label, label_map, config)
    return derive_from_periods(prior, current, config)
