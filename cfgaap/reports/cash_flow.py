"""
Statement of Cash Flows assembly and formatting.

Groups classified cash flow lines into the operating, investing and
financing sections, computes section subtotals and the net change in cash,
and renders the finished statement as text, CSV or JSON.
"""

import csv
import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from io import StringIO
from typing import Iterable

from ..classify import CashFlowLine
from ..money import exact_context, exact_sum
from ..taxonomy import SECTION_ORDER, Section

logger = logging.getLogger(__name__)


SECTION_TITLES = {
    Section.OPERATING: "CASH FLOWS FROM OPERATING ACTIVITIES",
    Section.INVESTING: "CASH FLOWS FROM INVESTING ACTIVITIES",
    Section.FINANCING: "CASH FLOWS FROM FINANCING ACTIVITIES",
}

SECTION_TOTAL_LABELS = {
    Section.OPERATING: "Net cash provided by (used in) operating activities",
    Section.INVESTING: "Net cash provided by (used in) investing activities",
    Section.FINANCING: "Net cash provided by (used in) financing activities",
}


@dataclass(frozen=True)
class CashFlowStatement:
    """
    Indirect-method Statement of Cash Flows.

    Attributes:
        operating_lines: Operating activity lines, in presentation order.
        investing_lines: Investing activity lines, in presentation order.
        financing_lines: Financing activity lines, in presentation order.
        net_operating: Sum of operating lines.
        net_investing: Sum of investing lines.
        net_financing: Sum of financing lines.
        net_change_in_cash: net_operating + net_investing + net_financing.
        beginning_cash: Prior-period cash balance.
        ending_cash: Current-period cash balance.
        prior_label: Prior period name.
        current_label: Current period name.
        currency: Currency code (e.g., "USD").
    """

    operating_lines: tuple[CashFlowLine, ...]
    investing_lines: tuple[CashFlowLine, ...]
    financing_lines: tuple[CashFlowLine, ...]
    net_operating: Decimal
    net_investing: Decimal
    net_financing: Decimal
    net_change_in_cash: Decimal
    beginning_cash: Decimal
    ending_cash: Decimal
    prior_label: str = "Prior"
    current_label: str = "Current"
    currency: str = "USD"

    @property
    def lines(self) -> tuple[CashFlowLine, ...]:
        """All lines, operating first, then investing, then financing."""
        return self.operating_lines + self.investing_lines + self.financing_lines

    def section_lines(self, section: Section) -> tuple[CashFlowLine, ...]:
        """Lines of one section."""
        return {
            Section.OPERATING: self.operating_lines,
            Section.INVESTING: self.investing_lines,
            Section.FINANCING: self.financing_lines,
        }[section]

    def section_total(self, section: Section) -> Decimal:
        """Subtotal of one section."""
        return {
            Section.OPERATING: self.net_operating,
            Section.INVESTING: self.net_investing,
            Section.FINANCING: self.net_financing,
        }[section]

    @property
    def discrepancy(self) -> Decimal:
        """beginning_cash + net_change_in_cash - ending_cash (zero when the statement ties out)."""
        with exact_context():
            return self.beginning_cash + self.net_change_in_cash - self.ending_cash


def assemble_statement(
    lines: Iterable[CashFlowLine],
    beginning_cash: Decimal,
    ending_cash: Decimal,
    prior_label: str = "Prior",
    current_label: str = "Current",
    currency: str = "USD"
) -> CashFlowStatement:
    """
    Assemble classified lines into a Statement of Cash Flows.

    Groups lines by section (stable within each section), sums subtotals and
    the net change in cash. Does not check the cash reconciliation; see
    reconcile.reconcile_statement.

    Args:
        lines: Classified cash flow lines.
        beginning_cash: Prior-period cash balance.
        ending_cash: Current-period cash balance.
        prior_label: Prior period name.
        current_label: Current period name.
        currency: Currency code.

    Returns:
        CashFlowStatement instance.
    """
    grouped: dict[Section, list[CashFlowLine]] = {section: [] for section in Section}
    for line in sorted(lines, key=lambda line: SECTION_ORDER[line.section]):
        grouped[line.section].append(line)

    totals = {
        section: exact_sum(line.amount for line in section_lines)
        for section, section_lines in grouped.items()
    }
    net_change = exact_sum(totals.values())

    statement = CashFlowStatement(
        operating_lines=tuple(grouped[Section.OPERATING]),
        investing_lines=tuple(grouped[Section.INVESTING]),
        financing_lines=tuple(grouped[Section.FINANCING]),
        net_operating=totals[Section.OPERATING],
        net_investing=totals[Section.INVESTING],
        net_financing=totals[Section.FINANCING],
        net_change_in_cash=net_change,
        beginning_cash=beginning_cash,
        ending_cash=ending_cash,
        prior_label=prior_label,
        current_label=current_label,
        currency=currency,
    )

    logger.info(
        f"Assembled statement: operating {statement.net_operating}, "
        f"investing {statement.net_investing}, financing {statement.net_financing}, "
        f"net change {statement.net_change_in_cash}"
    )

    return statement


def format_as_text(statement: CashFlowStatement) -> str:
    """
    Format a Statement of Cash Flows as human-readable text.

    Args:
        statement: CashFlowStatement to format.

    Returns:
        Formatted text string.
    """
    output = StringIO()

    # Header
    output.write("=" * 80 + "\n")
    output.write("STATEMENT OF CASH FLOWS (INDIRECT METHOD)\n")
    output.write(f"Period: {statement.prior_label} to {statement.current_label}\n")
    output.write(f"Currency: {statement.currency}\n")
    output.write("=" * 80 + "\n\n")

    for section in Section:
        output.write(f"{SECTION_TITLES[section]}\n")
        output.write("-" * 80 + "\n")
        for line in statement.section_lines(section):
            output.write(f"  {line.label:<62} {line.amount:>15,.2f}\n")
        output.write("-" * 80 + "\n")
        output.write(
            f"{SECTION_TOTAL_LABELS[section]:<64} "
            f"{statement.section_total(section):>15,.2f}\n"
        )
        output.write("\n")

    # Summary
    output.write("=" * 80 + "\n")
    output.write(f"{'NET INCREASE (DECREASE) IN CASH':<64} {statement.net_change_in_cash:>15,.2f}\n")
    output.write(f"{'Cash at beginning of period':<64} {statement.beginning_cash:>15,.2f}\n")
    output.write(f"{'Cash at end of period':<64} {statement.ending_cash:>15,.2f}\n")
    output.write("=" * 80 + "\n")

    # Verification
    discrepancy = statement.discrepancy
    if discrepancy == 0:
        output.write("\n[OK] CASH RECONCILED: Beginning cash + Net change = Ending cash\n")
    else:
        output.write(f"\n[X] WARNING: Cash does not reconcile (discrepancy {discrepancy:,})\n")

    return output.getvalue()


def format_as_csv(statement: CashFlowStatement) -> str:
    """
    Format a Statement of Cash Flows as CSV.

    Amounts are written exactly as computed.

    Args:
        statement: CashFlowStatement to format.

    Returns:
        CSV string.
    """
    output = StringIO()
    writer = csv.writer(output)

    # Header rows
    writer.writerow(["Statement of Cash Flows"])
    writer.writerow([f"{statement.prior_label} to {statement.current_label}"])
    writer.writerow([f"Currency: {statement.currency}"])
    writer.writerow([])  # Blank row

    # Column headers
    writer.writerow(["Section", "Line", "Category", "Amount"])

    for section in Section:
        name = section.value.upper()
        for line in statement.section_lines(section):
            writer.writerow([name, line.label, line.category.value, str(line.amount)])
        writer.writerow([name, SECTION_TOTAL_LABELS[section], "", str(statement.section_total(section))])
        writer.writerow([])  # Blank row

    # Summary
    writer.writerow(["SUMMARY", "Net increase (decrease) in cash", "", str(statement.net_change_in_cash)])
    writer.writerow(["SUMMARY", "Cash at beginning of period", "", str(statement.beginning_cash)])
    writer.writerow(["SUMMARY", "Cash at end of period", "", str(statement.ending_cash)])

    return output.getvalue()


def statement_to_dict(statement: CashFlowStatement) -> dict:
    """
    Convert a statement to a JSON-ready dict.

    Amounts are strings so they survive serialization exactly.
    """
    def line_to_dict(line: CashFlowLine) -> dict:
        return {
            "label": line.label,
            "category": line.category.value,
            "amount": str(line.amount),
        }

    def section_to_dict(section: Section) -> dict:
        return {
            "line_items": [line_to_dict(line) for line in statement.section_lines(section)],
            "total": str(statement.section_total(section)),
        }

    discrepancy = statement.discrepancy

    return {
        "cash_flow_statement": {
            "prior_period": statement.prior_label,
            "current_period": statement.current_label,
            "currency": statement.currency,
            "method": "indirect",
            "operating": section_to_dict(Section.OPERATING),
            "investing": section_to_dict(Section.INVESTING),
            "financing": section_to_dict(Section.FINANCING),
            "summary": {
                "net_operating": str(statement.net_operating),
                "net_investing": str(statement.net_investing),
                "net_financing": str(statement.net_financing),
                "net_change_in_cash": str(statement.net_change_in_cash),
                "beginning_cash": str(statement.beginning_cash),
                "ending_cash": str(statement.ending_cash),
                "reconciled": discrepancy == 0,
                "discrepancy": str(discrepancy),
            },
        }
    }


def format_as_json(statement: CashFlowStatement) -> str:
    """
    Format a Statement of Cash Flows as JSON.

    Args:
        statement: CashFlowStatement to format.

    Returns:
        JSON string.
    """
    return json.dumps(statement_to_dict(statement), indent=2, ensure_ascii=False)
