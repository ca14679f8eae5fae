"""
Account taxonomy and cash flow classification rules.

Every account category the engine understands is declared here, in canonical
presentation order, together with:
- its statement kind (balance sheet balance or income statement flow),
- whether it is a contra account (entered and stored as a magnitude),
- the labels users may enter for it (English and Japanese),
- the rule that turns its period movement into cash flow lines.

The rule table is plain data so each category can be audited and tested on
its own. Adding a category means adding an enum member, a CATEGORY_INFO
entry and a CLASSIFICATION_RULES entry.
"""

import logging
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class AccountCategory(Enum):
    """Canonical account categories, in presentation order."""

    # Balance sheet: assets
    CASH_AND_EQUIVALENTS = "CashAndEquivalents"
    ACCOUNTS_RECEIVABLE = "AccountsReceivable"
    ALLOWANCE_FOR_DOUBTFUL_ACCOUNTS = "AllowanceForDoubtfulAccounts"
    INVENTORY = "Inventory"
    PREPAID_EXPENSES = "PrepaidExpenses"
    OTHER_CURRENT_ASSETS = "OtherCurrentAssets"
    PROPERTY_PLANT_EQUIPMENT = "PropertyPlantEquipment"
    ACCUMULATED_DEPRECIATION = "AccumulatedDepreciation"
    INTANGIBLE_ASSETS = "IntangibleAssets"
    ACCUMULATED_AMORTIZATION = "AccumulatedAmortization"
    LONG_TERM_INVESTMENTS = "LongTermInvestments"

    # Balance sheet: liabilities
    ACCOUNTS_PAYABLE = "AccountsPayable"
    ACCRUED_LIABILITIES = "AccruedLiabilities"
    INCOME_TAXES_PAYABLE = "IncomeTaxesPayable"
    DEFERRED_REVENUE = "DeferredRevenue"
    SHORT_TERM_DEBT = "ShortTermDebt"
    LONG_TERM_DEBT = "LongTermDebt"

    # Balance sheet: equity
    PAID_IN_CAPITAL = "PaidInCapital"
    TREASURY_STOCK = "TreasuryStock"
    RETAINED_EARNINGS = "RetainedEarnings"

    # Income statement and other period flows
    NET_INCOME = "NetIncome"
    DEPRECIATION_EXPENSE = "DepreciationExpense"
    AMORTIZATION_EXPENSE = "AmortizationExpense"
    GAIN_LOSS_ON_DISPOSAL = "GainLossOnDisposal"
    DIVIDENDS_PAID = "DividendsPaid"


class StatementKind(Enum):
    """Whether a category is a point-in-time balance or a period flow."""

    BALANCE = "balance"
    FLOW = "flow"


class Section(Enum):
    """Cash flow statement sections, in presentation order."""

    OPERATING = "Operating"
    INVESTING = "Investing"
    FINANCING = "Financing"


class Basis(Enum):
    """Which figure of an AccountDelta an effect is computed from."""

    DELTA = "delta"          # current - prior
    CURRENT = "current"      # current-period amount, signed as reported
    MAGNITUDE = "magnitude"  # absolute current-period amount


class RuleKind(Enum):
    """Descriptive classification of a rule, used for listings and audits."""

    EXCLUDED = "excluded"
    PASS_THROUGH = "pass-through"
    ADD_BACK = "add-back"
    WORKING_CAPITAL = "working-capital"
    INVESTING = "investing"
    FINANCING = "financing"
    DISPOSAL = "disposal"
    ROLL_FORWARD = "roll-forward"


SECTION_ORDER = {section: index for index, section in enumerate(Section)}
CATEGORY_ORDER = {category: index for index, category in enumerate(AccountCategory)}


@dataclass(frozen=True)
class Effect:
    """
    One cash flow line produced by a category.

    The line amount is sign * (the figure selected by basis).

    Attributes:
        section: Statement section the line belongs to.
        sign: +1 or -1.
        basis: Figure of the AccountDelta the amount is computed from.
        label: Line label on the statement.
    """

    section: Section
    sign: int
    basis: Basis
    label: str

    def __post_init__(self):
        """Validate sign value."""
        if self.sign not in (1, -1):
            raise ValueError(f"Invalid effect sign: {self.sign}. Must be 1 or -1.")


@dataclass(frozen=True)
class Driver:
    """A flow category that explains part of a balance movement."""

    category: AccountCategory
    sign: int
    basis: Basis


@dataclass(frozen=True)
class RollForward:
    """
    Balance whose movement is explained by period flows.

    Movement = sum(driver.sign * driver figure) + residual. The first driver
    is the primary flow: when it is supplied for the current period, only the
    residual is classified (via ``residual``); when it is missing, the
    movement not explained by the other drivers stands in for it (via
    ``fallback``).

    Attributes:
        drivers: Flow categories explaining the balance movement, primary first.
        residual: Effect applied to the unexplained part of the movement.
        fallback: Effect applied when the primary flow is not supplied.
    """

    drivers: tuple[Driver, ...]
    residual: Effect
    fallback: Effect


@dataclass(frozen=True)
class ClassificationRule:
    """
    Fixed classification rule for a category.

    Attributes:
        kind: Descriptive rule kind.
        effects: Direct effects, applied in order.
        roll_forward: Roll-forward definition for balances explained by flows.
    """

    kind: RuleKind
    effects: tuple[Effect, ...] = ()
    roll_forward: Optional[RollForward] = None


@dataclass(frozen=True)
class CategoryInfo:
    """
    Static description of a category.

    Attributes:
        kind: Balance or flow.
        display_name: Human-readable account name.
        contra: True for contra accounts, stored as non-negative magnitudes.
        aliases: Input labels recognized for this category (besides the
                 display name and the enum value/name).
    """

    kind: StatementKind
    display_name: str
    contra: bool = False
    aliases: tuple[str, ...] = ()


_B = StatementKind.BALANCE
_F = StatementKind.FLOW

CATEGORY_INFO: dict[AccountCategory, CategoryInfo] = {
    AccountCategory.CASH_AND_EQUIVALENTS: CategoryInfo(
        _B, "Cash and cash equivalents",
        aliases=("Cash", "Cash and equivalents", "Cash & cash equivalents",
                 "現金及び預金", "現金預金", "現金及び現金同等物"),
    ),
    AccountCategory.ACCOUNTS_RECEIVABLE: CategoryInfo(
        _B, "Accounts receivable",
        aliases=("Receivables", "Trade receivables", "A/R", "Notes and accounts receivable",
                 "売掛金", "売上債権", "受取手形及び売掛金"),
    ),
    AccountCategory.ALLOWANCE_FOR_DOUBTFUL_ACCOUNTS: CategoryInfo(
        _B, "Allowance for doubtful accounts", contra=True,
        aliases=("Allowance for bad debts", "Allowance for credit losses", "貸倒引当金"),
    ),
    AccountCategory.INVENTORY: CategoryInfo(
        _B, "Inventory",
        aliases=("Inventories", "Merchandise inventory", "棚卸資産", "商品及び製品"),
    ),
    AccountCategory.PREPAID_EXPENSES: CategoryInfo(
        _B, "Prepaid expenses",
        aliases=("Prepaids", "Prepaid items", "前払費用"),
    ),
    AccountCategory.OTHER_CURRENT_ASSETS: CategoryInfo(
        _B, "Other current assets",
        aliases=("その他流動資産",),
    ),
    AccountCategory.PROPERTY_PLANT_EQUIPMENT: CategoryInfo(
        _B, "Property, plant and equipment",
        aliases=("PP&E", "PPE", "Fixed assets", "Tangible fixed assets", "有形固定資産"),
    ),
    AccountCategory.ACCUMULATED_DEPRECIATION: CategoryInfo(
        _B, "Accumulated depreciation", contra=True,
        aliases=("減価償却累計額",),
    ),
    AccountCategory.INTANGIBLE_ASSETS: CategoryInfo(
        _B, "Intangible assets",
        aliases=("Intangibles", "無形固定資産"),
    ),
    AccountCategory.ACCUMULATED_AMORTIZATION: CategoryInfo(
        _B, "Accumulated amortization", contra=True,
        aliases=("無形固定資産償却累計額",),
    ),
    AccountCategory.LONG_TERM_INVESTMENTS: CategoryInfo(
        _B, "Long-term investments",
        aliases=("Investments", "Investment securities", "投資有価証券"),
    ),
    AccountCategory.ACCOUNTS_PAYABLE: CategoryInfo(
        _B, "Accounts payable",
        aliases=("Payables", "Trade payables", "A/P", "買掛金", "仕入債務"),
    ),
    AccountCategory.ACCRUED_LIABILITIES: CategoryInfo(
        _B, "Accrued liabilities",
        aliases=("Accrued expenses", "Accruals", "未払費用", "未払金"),
    ),
    AccountCategory.INCOME_TAXES_PAYABLE: CategoryInfo(
        _B, "Income taxes payable",
        aliases=("Taxes payable", "未払法人税等"),
    ),
    AccountCategory.DEFERRED_REVENUE: CategoryInfo(
        _B, "Deferred revenue",
        aliases=("Unearned revenue", "Customer advances", "前受金", "前受収益"),
    ),
    AccountCategory.SHORT_TERM_DEBT: CategoryInfo(
        _B, "Short-term debt",
        aliases=("Short-term borrowings", "Short-term loans", "短期借入金"),
    ),
    AccountCategory.LONG_TERM_DEBT: CategoryInfo(
        _B, "Long-term debt",
        aliases=("Long-term borrowings", "Long-term loans", "Bonds payable", "長期借入金"),
    ),
    AccountCategory.PAID_IN_CAPITAL: CategoryInfo(
        _B, "Paid-in capital",
        aliases=("Common stock", "Share capital", "Capital stock", "資本金"),
    ),
    AccountCategory.TREASURY_STOCK: CategoryInfo(
        _B, "Treasury stock", contra=True,
        aliases=("Treasury shares", "自己株式"),
    ),
    AccountCategory.RETAINED_EARNINGS: CategoryInfo(
        _B, "Retained earnings",
        aliases=("利益剰余金", "繰越利益剰余金"),
    ),
    AccountCategory.NET_INCOME: CategoryInfo(
        _F, "Net income",
        aliases=("Net profit", "Net earnings", "Profit for the period", "当期純利益"),
    ),
    AccountCategory.DEPRECIATION_EXPENSE: CategoryInfo(
        _F, "Depreciation expense",
        aliases=("Depreciation", "減価償却費"),
    ),
    AccountCategory.AMORTIZATION_EXPENSE: CategoryInfo(
        _F, "Amortization expense",
        aliases=("Amortization", "無形固定資産償却費"),
    ),
    AccountCategory.GAIN_LOSS_ON_DISPOSAL: CategoryInfo(
        _F, "Gain (loss) on disposal of assets",
        aliases=("Gain on disposal", "Gain on sale of assets", "Gain/loss on disposal",
                 "固定資産売却損益"),
    ),
    AccountCategory.DIVIDENDS_PAID: CategoryInfo(
        _F, "Dividends paid",
        aliases=("Dividends", "Dividends declared", "配当金の支払額", "支払配当金"),
    ),
}


def _working_capital_asset(label: str) -> ClassificationRule:
    return ClassificationRule(
        RuleKind.WORKING_CAPITAL,
        (Effect(Section.OPERATING, -1, Basis.DELTA, label),),
    )


def _working_capital_liability(label: str) -> ClassificationRule:
    return ClassificationRule(
        RuleKind.WORKING_CAPITAL,
        (Effect(Section.OPERATING, 1, Basis.DELTA, label),),
    )


def _investing_asset(label: str) -> ClassificationRule:
    return ClassificationRule(
        RuleKind.INVESTING,
        (Effect(Section.INVESTING, -1, Basis.DELTA, label),),
    )


def _financing_source(label: str) -> ClassificationRule:
    return ClassificationRule(
        RuleKind.FINANCING,
        (Effect(Section.FINANCING, 1, Basis.DELTA, label),),
    )


def _non_cash_add_back(label: str) -> ClassificationRule:
    return ClassificationRule(
        RuleKind.ADD_BACK,
        (Effect(Section.OPERATING, 1, Basis.MAGNITUDE, label),),
    )


def _accumulated_contra(expense: AccountCategory, noun: str) -> ClassificationRule:
    return ClassificationRule(
        RuleKind.ROLL_FORWARD,
        roll_forward=RollForward(
            drivers=(Driver(expense, 1, Basis.MAGNITUDE),),
            residual=Effect(
                Section.INVESTING, 1, Basis.DELTA,
                f"Accumulated {noun} on disposed assets",
            ),
            fallback=Effect(
                Section.OPERATING, 1, Basis.DELTA,
                f"{noun.capitalize()} (derived from change in accumulated {noun})",
            ),
        ),
    )


CLASSIFICATION_RULES: dict[AccountCategory, ClassificationRule] = {
    AccountCategory.CASH_AND_EQUIVALENTS: ClassificationRule(RuleKind.EXCLUDED),

    # Operating: income and non-cash adjustments
    AccountCategory.NET_INCOME: ClassificationRule(
        RuleKind.PASS_THROUGH,
        (Effect(Section.OPERATING, 1, Basis.CURRENT, "Net income"),),
    ),
    AccountCategory.DEPRECIATION_EXPENSE: _non_cash_add_back("Depreciation expense"),
    AccountCategory.AMORTIZATION_EXPENSE: _non_cash_add_back("Amortization expense"),
    AccountCategory.GAIN_LOSS_ON_DISPOSAL: ClassificationRule(
        RuleKind.DISPOSAL,
        (
            Effect(Section.OPERATING, -1, Basis.CURRENT, "(Gain) loss on disposal of assets"),
            Effect(Section.INVESTING, 1, Basis.CURRENT, "Gain (loss) realized in disposal proceeds"),
        ),
    ),

    # Operating: working capital
    AccountCategory.ACCOUNTS_RECEIVABLE: _working_capital_asset(
        "(Increase) decrease in accounts receivable"
    ),
    AccountCategory.ALLOWANCE_FOR_DOUBTFUL_ACCOUNTS: _working_capital_liability(
        "Increase (decrease) in allowance for doubtful accounts"
    ),
    AccountCategory.INVENTORY: _working_capital_asset("(Increase) decrease in inventory"),
    AccountCategory.PREPAID_EXPENSES: _working_capital_asset(
        "(Increase) decrease in prepaid expenses"
    ),
    AccountCategory.OTHER_CURRENT_ASSETS: _working_capital_asset(
        "(Increase) decrease in other current assets"
    ),
    AccountCategory.ACCOUNTS_PAYABLE: _working_capital_liability(
        "Increase (decrease) in accounts payable"
    ),
    AccountCategory.ACCRUED_LIABILITIES: _working_capital_liability(
        "Increase (decrease) in accrued liabilities"
    ),
    AccountCategory.INCOME_TAXES_PAYABLE: _working_capital_liability(
        "Increase (decrease) in income taxes payable"
    ),
    AccountCategory.DEFERRED_REVENUE: _working_capital_liability(
        "Increase (decrease) in deferred revenue"
    ),

    # Investing
    AccountCategory.PROPERTY_PLANT_EQUIPMENT: _investing_asset(
        "(Purchase) disposal of property, plant and equipment"
    ),
    AccountCategory.ACCUMULATED_DEPRECIATION: _accumulated_contra(
        AccountCategory.DEPRECIATION_EXPENSE, "depreciation"
    ),
    AccountCategory.INTANGIBLE_ASSETS: _investing_asset(
        "(Purchase) disposal of intangible assets"
    ),
    AccountCategory.ACCUMULATED_AMORTIZATION: _accumulated_contra(
        AccountCategory.AMORTIZATION_EXPENSE, "amortization"
    ),
    AccountCategory.LONG_TERM_INVESTMENTS: _investing_asset(
        "(Purchase) sale of long-term investments"
    ),

    # Financing
    AccountCategory.SHORT_TERM_DEBT: _financing_source(
        "Proceeds from (repayment of) short-term debt"
    ),
    AccountCategory.LONG_TERM_DEBT: _financing_source(
        "Proceeds from (repayment of) long-term debt"
    ),
    AccountCategory.PAID_IN_CAPITAL: _financing_source(
        "Proceeds from (return of) paid-in capital"
    ),
    AccountCategory.TREASURY_STOCK: ClassificationRule(
        RuleKind.FINANCING,
        (Effect(Section.FINANCING, -1, Basis.DELTA, "(Purchase) reissue of treasury stock"),),
    ),
    AccountCategory.DIVIDENDS_PAID: ClassificationRule(
        RuleKind.FINANCING,
        (Effect(Section.FINANCING, -1, Basis.MAGNITUDE, "Dividends paid"),),
    ),
    AccountCategory.RETAINED_EARNINGS: ClassificationRule(
        RuleKind.ROLL_FORWARD,
        roll_forward=RollForward(
            drivers=(
                Driver(AccountCategory.NET_INCOME, 1, Basis.CURRENT),
                Driver(AccountCategory.DIVIDENDS_PAID, -1, Basis.MAGNITUDE),
            ),
            residual=Effect(
                Section.FINANCING, 1, Basis.DELTA,
                "Other changes in retained earnings",
            ),
            fallback=Effect(
                Section.OPERATING, 1, Basis.DELTA,
                "Net income (derived from change in retained earnings)",
            ),
        ),
    ),
}


def canonical_key(label: str) -> str:
    """
    Reduce a line-item label to its lookup key.

    NFKC-normalizes (folding full-width characters), casefolds, reads "&" as
    "and" and drops everything that is not a letter or digit, so
    "Property, Plant & Equipment" and "property plant and equipment" share
    a key.
    """
    text = unicodedata.normalize("NFKC", label).casefold().replace("&", " and ")
    return "".join(ch for ch in text if ch.isalnum())


def _build_alias_index() -> dict[str, AccountCategory]:
    """
    Build the built-in label key → category index.

    Raises:
        RuntimeError: If two categories claim the same label key.
    """
    index: dict[str, AccountCategory] = {}
    for category, info in CATEGORY_INFO.items():
        labels = (category.value, category.name, info.display_name) + info.aliases
        for label in labels:
            key = canonical_key(label)
            existing = index.get(key)
            if existing is not None and existing is not category:
                raise RuntimeError(
                    f"Label '{label}' is claimed by both "
                    f"{existing.value} and {category.value}"
                )
            index[key] = category
    return index


BUILTIN_ALIASES: dict[str, AccountCategory] = _build_alias_index()


def resolve_builtin_label(label: str) -> Optional[AccountCategory]:
    """Return the category a label names in the built-in taxonomy, or None."""
    return BUILTIN_ALIASES.get(canonical_key(label))


def parse_category(name: str) -> AccountCategory:
    """
    Parse a category given by enum value, enum name or any recognized label.

    Raises:
        ValueError: If the name does not identify a category.
    """
    category = resolve_builtin_label(name)
    if category is None:
        raise ValueError(f"Unknown account category: '{name}'")
    return category


def is_contra(category: AccountCategory) -> bool:
    """True if the category is a contra account."""
    return CATEGORY_INFO[category].contra


def statement_kind(category: AccountCategory) -> StatementKind:
    """Balance or flow kind of a category."""
    return CATEGORY_INFO[category].kind


def get_rule(category: AccountCategory) -> Optional[ClassificationRule]:
    """Return the classification rule for a category, or None if unregistered."""
    return CLASSIFICATION_RULES.get(category)


def describe_rule(rule: ClassificationRule) -> str:
    """
    One-line description of a rule for listings.

    Example: "working-capital: Operating -delta".
    """
    if rule.kind is RuleKind.EXCLUDED:
        return "excluded (reconciliation target)"

    def _fmt(effect: Effect) -> str:
        sign = "+" if effect.sign > 0 else "-"
        return f"{effect.section.value} {sign}{effect.basis.value}"

    if rule.roll_forward is not None:
        rf = rule.roll_forward
        drivers = ", ".join(d.category.value for d in rf.drivers)
        return (
            f"{rule.kind.value} vs {drivers}: residual {_fmt(rf.residual)}; "
            f"without {rf.drivers[0].category.value}: {_fmt(rf.fallback)}"
        )

    return f"{rule.kind.value}: " + "; ".join(_fmt(e) for e in rule.effects)
