"""
Line-item normalization.

Turns one period's raw (label, amount) pairs into a StatementPeriod of typed
line items keyed by account category. Unknown labels, duplicate categories
and non-numeric or non-finite amounts are rejected, never dropped.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from .config import CFGAAPConfig
from .errors import DuplicateAccountError, InvalidAmountError, UnmappedAccountError
from .label_map import LabelMap
from .money import ZERO, to_decimal
from .taxonomy import CATEGORY_ORDER, AccountCategory, is_contra, resolve_builtin_label

logger = logging.getLogger(__name__)

RawItems = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]


@dataclass(frozen=True)
class LineItem:
    """
    A single normalized statement line.

    Attributes:
        account_label: Label as entered by the user.
        category: Canonical account category.
        amount: Exact amount. Contra accounts hold their magnitude.
    """

    account_label: str
    category: AccountCategory
    amount: Decimal


@dataclass(frozen=True)
class StatementPeriod:
    """
    One period's normalized statement data.

    Attributes:
        period_label: Human-readable period name (e.g. "FY2024").
        line_items: Read-only mapping of category to line item.
    """

    period_label: str
    line_items: Mapping[AccountCategory, LineItem]

    def __post_init__(self):
        """Freeze the line-item mapping."""
        object.__setattr__(self, "line_items", MappingProxyType(dict(self.line_items)))

    def __hash__(self):
        return hash((self.period_label, frozenset(self.line_items.items())))

    def get(self, category: AccountCategory) -> Optional[LineItem]:
        """Line item for a category, or None if the period does not have it."""
        return self.line_items.get(category)

    def amount(self, category: AccountCategory) -> Decimal:
        """Amount for a category; zero if the period does not have it."""
        item = self.line_items.get(category)
        return item.amount if item is not None else ZERO

    @property
    def categories(self) -> list[AccountCategory]:
        """Categories present in this period, in taxonomy order."""
        return sorted(self.line_items, key=CATEGORY_ORDER.__getitem__)


def iter_raw_items(raw_items: RawItems) -> Iterator[tuple[Any, Any]]:
    """
    Iterate (label, amount) pairs from a mapping or an iterable of pairs.

    Raises:
        TypeError: If an element is not a two-item pair.
    """
    if isinstance(raw_items, Mapping):
        yield from raw_items.items()
        return

    for entry in raw_items:
        if isinstance(entry, (str, bytes)) or len(entry) != 2:
            raise TypeError(f"Expected a (label, amount) pair, got {entry!r}")
        label, amount = entry
        yield label, amount


def resolve_category(
    label: Any,
    label_map: Optional[LabelMap] = None,
    period_label: Optional[str] = None
) -> AccountCategory:
    """
    Resolve a raw label to its account category.

    Raises:
        UnmappedAccountError: If the label is not in the taxonomy or label map.
    """
    if not isinstance(label, str) or not label.strip():
        raise UnmappedAccountError(str(label), period_label)

    if label_map is not None:
        category = label_map.resolve(label)
    else:
        category = resolve_builtin_label(label)

    if category is None:
        raise UnmappedAccountError(label, period_label)
    return category


def parse_amount(
    label: str,
    raw_amount: Any,
    category: AccountCategory,
    config: CFGAAPConfig
) -> Decimal:
    """
    Convert a raw amount to an exact Decimal for the given category.

    Contra accounts are stored as magnitudes: a negative entry is read as
    its absolute value, or rejected when config.strict_contra_sign is set.

    Raises:
        InvalidAmountError: If the amount is non-numeric, non-finite or out of range.
    """
    try:
        amount = to_decimal(raw_amount)
    except (TypeError, ValueError) as e:
        raise InvalidAmountError(label, raw_amount, str(e)) from None

    if is_contra(category) and amount < 0:
        if config.strict_contra_sign:
            raise InvalidAmountError(
                label, raw_amount,
                f"{category.value} is a contra account; enter it as a positive amount"
            )
        logger.debug(f"Contra account '{label}' entered as {amount}; using magnitude")
        amount = amount.copy_abs()

    return amount


def normalize_item(
    label: Any,
    raw_amount: Any,
    label_map: Optional[LabelMap] = None,
    config: Optional[CFGAAPConfig] = None,
    period_label: Optional[str] = None
) -> LineItem:
    """
    Normalize a single (label, amount) pair.

    Raises:
        UnmappedAccountError: Unknown label.
        InvalidAmountError: Non-numeric or non-finite amount.
    """
    if config is None:
        from .config import default_config
        config = default_config

    category = resolve_category(label, label_map, period_label)
    amount = parse_amount(label, raw_amount, category, config)
    return LineItem(account_label=label, category=category, amount=amount)


def normalize_period(
    raw_items: RawItems,
    period_label: str,
    label_map: Optional[LabelMap] = None,
    config: Optional[CFGAAPConfig] = None
) -> StatementPeriod:
    """
    Normalize one period's raw line items.

    Args:
        raw_items: Mapping of label to amount, or iterable of (label, amount).
        period_label: Name of the period, used in messages and output.
        label_map: Optional user aliases extending the built-in labels.
        config: Optional configuration; uses default if not provided.

    Returns:
        StatementPeriod with one line item per category.

    Raises:
        UnmappedAccountError: If a label is not in the taxonomy.
        DuplicateAccountError: If two labels resolve to the same category.
        InvalidAmountError: If an amount is non-numeric or non-finite.
    """
    if config is None:
        from .config import default_config
        config = default_config

    line_items: dict[AccountCategory, LineItem] = {}

    for label, raw_amount in iter_raw_items(raw_items):
        item = normalize_item(label, raw_amount, label_map, config, period_label)

        existing = line_items.get(item.category)
        if existing is not None:
            raise DuplicateAccountError(
                item.category, existing.account_label, item.account_label, period_label
            )

        line_items[item.category] = item
        logger.debug(f"[{period_label}] '{label}' -> {item.category.value} = {item.amount}")

    logger.info(f"Normalized {len(line_items)} line items for period '{period_label}'")

    return StatementPeriod(period_label=period_label, line_items=line_items)
