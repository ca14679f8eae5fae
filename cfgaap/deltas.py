"""
Period-over-period delta calculation.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from .money import ZERO, exact_sub
from .normalize import StatementPeriod
from .taxonomy import CATEGORY_ORDER, AccountCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountDelta:
    """
    Movement of one account between the prior and current period.

    Attributes:
        category: Account category.
        prior_amount: Prior-period amount (zero if the prior period lacks it).
        current_amount: Current-period amount (zero if the current period lacks it).
        delta: current_amount - prior_amount.
        in_prior: True if the prior period supplied this category.
        in_current: True if the current period supplied this category.
    """

    category: AccountCategory
    prior_amount: Decimal
    current_amount: Decimal
    delta: Decimal
    in_prior: bool = True
    in_current: bool = True


def compute_deltas(
    prior: StatementPeriod,
    current: StatementPeriod
) -> tuple[AccountDelta, ...]:
    """
    Compute deltas for every category present in either period.

    A category missing from one period is treated as zero there: a newly
    opened account has delta = current amount, a closed one delta = -prior.

    Args:
        prior: Prior-period statement.
        current: Current-period statement.

    Returns:
        One AccountDelta per category, in taxonomy order.
    """
    categories = set(prior.line_items) | set(current.line_items)

    deltas = []
    for category in sorted(categories, key=CATEGORY_ORDER.__getitem__):
        prior_item = prior.get(category)
        current_item = current.get(category)

        prior_amount = prior_item.amount if prior_item is not None else ZERO
        current_amount = current_item.amount if current_item is not None else ZERO

        delta = AccountDelta(
            category=category,
            prior_amount=prior_amount,
            current_amount=current_amount,
            delta=exact_sub(current_amount, prior_amount),
            in_prior=prior_item is not None,
            in_current=current_item is not None,
        )
        deltas.append(delta)

        if prior_item is None or current_item is None:
            logger.debug(
                f"{category.value} present only in "
                f"{'current' if prior_item is None else 'prior'} period; "
                f"missing side treated as zero"
            )

    logger.info(
        f"Computed {len(deltas)} account deltas "
        f"({prior.period_label} -> {current.period_label})"
    )

    return tuple(deltas)
