"""
Cash flow classification engine.

Maps each account delta to cash flow statement lines using the fixed rule
table in taxonomy.CLASSIFICATION_RULES. Sign conventions:

- Net income passes through to operating as reported.
- Non-cash expenses are added back at their current-period amount.
- Working-capital assets: an increase uses cash (-delta).
- Working-capital liabilities: an increase provides cash (+delta).
- Long-lived assets: an increase is an investing outflow (-delta).
- Debt and paid-in capital: an increase is a financing inflow (+delta).
- Treasury stock and dividends are financing outflows.
- Cash itself is never classified; it is the reconciliation target.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from .config import CFGAAPConfig
from .deltas import AccountDelta
from .errors import UnclassifiableCategoryError
from .money import ZERO, exact_context
from .taxonomy import (
    CATEGORY_ORDER,
    SECTION_ORDER,
    AccountCategory,
    Basis,
    ClassificationRule,
    Effect,
    RollForward,
    RuleKind,
    Section,
    get_rule,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CashFlowLine:
    """
    A single line of the cash flow statement.

    Attributes:
        label: Line description.
        amount: Signed cash effect (positive = source of cash).
        section: Operating, Investing or Financing.
        category: Account category the line was derived from.
    """

    label: str
    amount: Decimal
    section: Section
    category: AccountCategory


def _figure(delta: AccountDelta, basis: Basis) -> Decimal:
    """Select the figure an effect is computed from."""
    if basis is Basis.DELTA:
        return delta.delta
    if basis is Basis.CURRENT:
        return delta.current_amount
    return delta.current_amount.copy_abs()


def _signed(sign: int, value: Decimal) -> Decimal:
    with exact_context():
        return value if sign > 0 else ZERO - value


def _line(effect: Effect, value: Decimal, category: AccountCategory) -> CashFlowLine:
    return CashFlowLine(
        label=effect.label,
        amount=_signed(effect.sign, value),
        section=effect.section,
        category=category,
    )


def _apply_roll_forward(
    delta: AccountDelta,
    roll_forward: RollForward,
    deltas_by_category: dict[AccountCategory, AccountDelta]
) -> CashFlowLine:
    """
    Classify a balance whose movement is explained by period flows.

    With the primary flow supplied, only the unexplained residual is
    classified. Without it, the movement not explained by the remaining
    flows stands in for the primary flow.
    """
    primary, *others = roll_forward.drivers

    with exact_context():
        explained_by_others = ZERO
        for driver in others:
            driver_delta = deltas_by_category.get(driver.category)
            if driver_delta is not None and driver_delta.in_current:
                explained_by_others += _signed(driver.sign, _figure(driver_delta, driver.basis))

        primary_delta = deltas_by_category.get(primary.category)
        if primary_delta is not None and primary_delta.in_current:
            explained = explained_by_others + _signed(
                primary.sign, _figure(primary_delta, primary.basis)
            )
            residual = delta.delta - explained
            logger.debug(
                f"{delta.category.value}: movement {delta.delta}, explained {explained}, "
                f"residual {residual}"
            )
            return _line(roll_forward.residual, residual, delta.category)

        derived = delta.delta - explained_by_others

    logger.info(
        f"{primary.category.value} not supplied; deriving it from the change in "
        f"{delta.category.value} ({derived})"
    )
    return _line(roll_forward.fallback, derived, delta.category)


def classify_delta(
    delta: AccountDelta,
    deltas_by_category: dict[AccountCategory, AccountDelta],
    rule: Optional[ClassificationRule] = None
) -> list[CashFlowLine]:
    """
    Classify a single account delta.

    Args:
        delta: The delta to classify.
        deltas_by_category: All deltas of the derivation, for roll-forward rules.
        rule: Rule to apply; looked up in the rule table if not given.

    Returns:
        Cash flow lines produced by the rule (may be empty for excluded categories).

    Raises:
        UnclassifiableCategoryError: If the category has no registered rule.
    """
    if rule is None:
        rule = get_rule(delta.category)
    if rule is None:
        logger.error(
            f"TAXONOMY DEFECT: category {delta.category.value} has no classification rule"
        )
        raise UnclassifiableCategoryError(delta.category)

    if rule.kind is RuleKind.EXCLUDED:
        return []

    if rule.roll_forward is not None:
        return [_apply_roll_forward(delta, rule.roll_forward, deltas_by_category)]

    return [_line(effect, _figure(delta, effect.basis), delta.category) for effect in rule.effects]


def classify_deltas(
    deltas: Iterable[AccountDelta],
    config: Optional[CFGAAPConfig] = None
) -> tuple[CashFlowLine, ...]:
    """
    Classify all account deltas into cash flow lines.

    Args:
        deltas: Account deltas of one derivation.
        config: Optional configuration; uses default if not provided.

    Returns:
        Lines ordered by section (operating, investing, financing), then by
        taxonomy order within each section.

    Raises:
        UnclassifiableCategoryError: If a category has no registered rule.
    """
    if config is None:
        from .config import default_config
        config = default_config

    ordered = sorted(deltas, key=lambda d: CATEGORY_ORDER[d.category])
    deltas_by_category = {d.category: d for d in ordered}

    lines: list[CashFlowLine] = []
    for delta in ordered:
        for line in classify_delta(delta, deltas_by_category):
            if line.amount == 0 and not config.include_zero_lines:
                logger.debug(f"Skipping zero line: {line.label}")
                continue
            lines.append(line)

    # Stable sort keeps taxonomy order within each section
    lines.sort(key=lambda line: SECTION_ORDER[line.section])

    logger.info(f"Classified {len(deltas_by_category)} deltas into {len(lines)} cash flow lines")

    return tuple(lines)
