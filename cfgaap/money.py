"""
Exact decimal arithmetic helpers.

All monetary figures are Decimal. Arithmetic runs in a context that traps
Inexact and Rounded, so a figure that cannot be represented exactly raises
instead of being silently rounded.
"""

from decimal import (
    Context,
    Decimal,
    Inexact,
    InvalidOperation,
    Overflow,
    Rounded,
    localcontext,
)
from typing import Any, Iterable

ZERO = Decimal("0")

EXACT_CONTEXT = Context(
    prec=60,
    traps=[InvalidOperation, Overflow, Inexact, Rounded]
)

# Input amounts stay inside this window so that any sum of a period's
# figures still fits the 60 digits of EXACT_CONTEXT.
AMOUNT_LIMIT = Decimal("1E+30")
MAX_DECIMAL_PLACES = 20


def exact_context():
    """Return a context manager running decimal arithmetic without rounding."""
    return localcontext(EXACT_CONTEXT)


def to_decimal(value: Any) -> Decimal:
    """
    Convert a raw amount to Decimal.

    Floats are converted through their shortest repr, so 0.1 becomes
    Decimal("0.1") rather than the binary expansion.

    Raises:
        TypeError: For bool, None and non-numeric types.
        ValueError: For text that is not a number, for NaN/Infinity, or for
            amounts outside the range exact arithmetic can carry.
    """
    if isinstance(value, bool) or value is None:
        raise TypeError(f"expected a number, got {type(value).__name__}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("empty amount")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"'{value}' is not a number") from None
    else:
        raise TypeError(f"expected a number, got {type(value).__name__}")

    if not result.is_finite():
        raise ValueError("amount must be finite")

    if result.copy_abs() >= AMOUNT_LIMIT:
        raise ValueError(f"amount must be smaller than {AMOUNT_LIMIT} in magnitude")

    if result.as_tuple().exponent < -MAX_DECIMAL_PLACES:
        raise ValueError(f"amount has more than {MAX_DECIMAL_PLACES} decimal places")

    return result


def exact_sum(values: Iterable[Decimal]) -> Decimal:
    """Sum Decimal values exactly."""
    total = ZERO
    with exact_context():
        for value in values:
            total = total + value
    return total


def exact_sub(a: Decimal, b: Decimal) -> Decimal:
    """Subtract b from a exactly."""
    with exact_context():
        return a - b
