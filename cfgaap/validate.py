"""
Input validation for CFGAAP.

Runs the same checks as the line-item normalizer, but collects every problem
in a period's input instead of stopping at the first one. Useful for listing
all data-entry mistakes at once before attempting a derivation:
- Unknown account labels
- Accounts supplied twice
- Non-numeric or non-finite amounts
- Missing cash balance (warning; treated as zero during derivation)
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .config import CFGAAPConfig
from .errors import InputError
from .label_map import LabelMap
from .normalize import RawItems, iter_raw_items, normalize_item
from .taxonomy import AccountCategory

logger = logging.getLogger(__name__)


@dataclass
class ValidationProblem:
    """
    Represents a single validation issue.

    Attributes:
        severity: "error" or "warning".
        message: Human-readable description of the problem.
        context: Optional additional context (e.g., the offending label).
    """

    severity: str  # "error" or "warning"
    message: str
    context: Optional[str] = None

    def __post_init__(self):
        """Validate severity value."""
        if self.severity not in ("error", "warning"):
            raise ValueError(
                f"Invalid severity: {self.severity}. Must be 'error' or 'warning'."
            )

    def __str__(self) -> str:
        """Format problem for display."""
        severity_upper = self.severity.upper()
        if self.context:
            return f"[{severity_upper}] {self.message} (Context: {self.context})"
        else:
            return f"[{severity_upper}] {self.message}"


@dataclass
class ValidationResult:
    """
    Results from validating one period's input.

    Attributes:
        problems: List of all validation problems found.
        item_count: Number of (label, amount) pairs examined.
    """

    problems: list[ValidationProblem] = field(default_factory=list)
    item_count: int = 0

    @property
    def has_errors(self) -> bool:
        """True if at least one problem has severity "error"."""
        return any(p.severity == "error" for p in self.problems)

    @property
    def has_warnings(self) -> bool:
        """True if at least one problem has severity "warning"."""
        return any(p.severity == "warning" for p in self.problems)

    @property
    def error_count(self) -> int:
        """Count of errors."""
        return sum(1 for p in self.problems if p.severity == "error")

    @property
    def warning_count(self) -> int:
        """Count of warnings."""
        return sum(1 for p in self.problems if p.severity == "warning")

    def add_error(self, message: str, context: Optional[str] = None) -> None:
        """Add an error to the validation results."""
        self.problems.append(ValidationProblem("error", message, context))

    def add_warning(self, message: str, context: Optional[str] = None) -> None:
        """Add a warning to the validation results."""
        self.problems.append(ValidationProblem("warning", message, context))

    def log_summary(self) -> None:
        """
        Log a summary of validation results.

        Logs all problems and provides counts.
        """
        if not self.problems:
            logger.info("✓ Validation passed with no issues")
            return

        logger.info(f"Validation completed: {self.error_count} error(s), {self.warning_count} warning(s)")

        for problem in self.problems:
            if problem.severity == "error":
                logger.error(str(problem))
            else:
                logger.warning(str(problem))

        if self.has_errors:
            logger.error(f"✗ Validation FAILED with {self.error_count} error(s)")
        else:
            logger.info(f"✓ Validation passed (with {self.warning_count} warning(s))")


def collect_input_problems(
    raw_items: RawItems,
    period_label: str,
    label_map: Optional[LabelMap] = None,
    config: Optional[CFGAAPConfig] = None
) -> ValidationResult:
    """
    Validate one period's raw line items, collecting every problem.

    Args:
        raw_items: Mapping of label to amount, or iterable of (label, amount).
        period_label: Name of the period, used as problem context.
        label_map: Optional user aliases extending the built-in labels.
        config: Optional configuration; uses default if not provided.

    Returns:
        ValidationResult with all problems found.
    """
    if config is None:
        from .config import default_config
        config = default_config

    logger.info(f"Validating input for period '{period_label}'")

    result = ValidationResult()
    seen: dict[AccountCategory, str] = {}

    for label, raw_amount in iter_raw_items(raw_items):
        result.item_count += 1

        try:
            item = normalize_item(label, raw_amount, label_map, config, period_label)
        except InputError as e:
            result.add_error(str(e), context=period_label)
            continue

        first_label = seen.get(item.category)
        if first_label is not None:
            result.add_error(
                f"Account '{item.category.value}' supplied twice: "
                f"'{first_label}' and '{item.account_label}'",
                context=period_label
            )
            continue

        seen[item.category] = item.account_label

    if AccountCategory.CASH_AND_EQUIVALENTS not in seen:
        result.add_warning(
            "No cash balance supplied; it will be treated as 0 when reconciling",
            context=period_label
        )

    logger.info(f"Examined {result.item_count} line items")

    return result
