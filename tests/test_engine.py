"""
Tests for cfgaap.engine.

End-to-end derivations from raw line items, including the properties every
derived statement must hold: exact tie-out, sign conventions, and
independence between derivations.
"""

import copy

import pytest

from cfgaap.config import CFGAAPConfig
from cfgaap.engine import build_statement, derive_cash_flow_statement, derive_from_periods
from cfgaap.errors import (
    DuplicateAccountError,
    InvalidAmountError,
    ReconciliationMismatchError,
    UnmappedAccountError,
)
from cfgaap.label_map import LabelMap
from cfgaap.normalize import normalize_period
from cfgaap.taxonomy import AccountCategory, Section
from tests.helpers import D, amounts_by_label, make_period

AC = AccountCategory


# ---------------------------------------------------------------------------
# Balanced scenario (conftest prior_items / current_items)
# ---------------------------------------------------------------------------


class TestBalancedDerivation:
    def test_section_totals(self, prior_items, current_items):
        statement = derive_cash_flow_statement(prior_items, current_items, "FY2023", "FY2024")
        assert statement.net_operating == D(105)
        assert statement.net_investing == D(-100)
        assert statement.net_financing == D(40)
        assert statement.net_change_in_cash == D(45)

    def test_ties_out(self, prior_items, current_items):
        statement = derive_cash_flow_statement(prior_items, current_items)
        assert statement.beginning_cash == D(100)
        assert statement.ending_cash == D(145)
        assert statement.beginning_cash + statement.net_change_in_cash == statement.ending_cash
        assert statement.discrepancy == 0

    def test_operating_lines(self, prior_items, current_items):
        statement = derive_cash_flow_statement(prior_items, current_items)
        operating = amounts_by_label(statement.operating_lines)
        assert operating == {
            "(Increase) decrease in accounts receivable": D(-20),
            "(Increase) decrease in inventory": D(10),
            "Increase (decrease) in accounts payable": D(15),
            "Net income": D(60),
            "Depreciation expense": D(40),
        }

    def test_fully_explained_roll_forwards_omitted(self, prior_items, current_items):
        statement = derive_cash_flow_statement(prior_items, current_items)
        labels = [line.label for line in statement.lines]
        assert "Other changes in retained earnings" not in labels
        assert "Accumulated depreciation on disposed assets" not in labels

    def test_labels_and_currency_carried(self, prior_items, current_items):
        statement = derive_cash_flow_statement(
            prior_items, current_items, "FY2023", "FY2024",
            config=CFGAAPConfig(default_currency="JPY"),
        )
        assert (statement.prior_label, statement.current_label) == ("FY2023", "FY2024")
        assert statement.currency == "JPY"

    def test_idempotent(self, prior_items, current_items):
        first = derive_cash_flow_statement(prior_items, current_items)
        second = derive_cash_flow_statement(prior_items, current_items)
        assert first == second

    def test_inputs_not_mutated(self, prior_items, current_items):
        prior_snapshot = copy.deepcopy(prior_items)
        current_snapshot = copy.deepcopy(current_items)
        derive_cash_flow_statement(prior_items, current_items)
        assert prior_items == prior_snapshot
        assert current_items == current_snapshot

    def test_pair_input_equivalent_to_mapping(self, prior_items, current_items):
        from_mapping = derive_cash_flow_statement(prior_items, current_items)
        from_pairs = derive_cash_flow_statement(
            list(prior_items.items()), list(current_items.items())
        )
        assert from_pairs == from_mapping


# ---------------------------------------------------------------------------
# Mismatches
# ---------------------------------------------------------------------------


class TestMismatch:
    def test_one_unit_discrepancy_detected(self, prior_items, current_items):
        # Payables one higher without a matching cash movement
        current_items = dict(current_items, **{"Accounts payable": 46})
        with pytest.raises(ReconciliationMismatchError) as exc_info:
            derive_cash_flow_statement(prior_items, current_items)
        assert exc_info.value.discrepancy == D(1)

    def test_lower_ending_cash_detected(self, prior_items, current_items):
        current_items = dict(current_items, Cash=144)
        with pytest.raises(ReconciliationMismatchError) as exc_info:
            derive_cash_flow_statement(prior_items, current_items)
        assert exc_info.value.discrepancy == D(1)
        assert exc_info.value.ending_cash == D(144)

    def test_unbalanced_periods_report_discrepancy(self):
        # Retained earnings +20 with no net income supplied: derived net income 20,
        # but cash moved by 40.
        prior = {"Cash": 100, "Accounts receivable": 50, "Retained earnings": 150}
        current = {"Cash": 140, "Accounts receivable": 25, "Retained earnings": 170}
        with pytest.raises(ReconciliationMismatchError) as exc_info:
            derive_cash_flow_statement(prior, current)
        error = exc_info.value
        assert error.net_change_in_cash == D(45)
        assert error.discrepancy == D(5)

    @pytest.mark.parametrize("net_income", [None, 20])
    def test_worked_example_off_by_five(self, net_income):
        # Working capital explains 45 of operating cash; cash moved by 40
        prior = {"Cash": 100, "Receivables": 50, "Payables": 30, "Retained earnings": 0}
        current = {"Cash": 140, "Receivables": 40, "Payables": 45, "Retained earnings": 20}
        if net_income is not None:
            current["Net income"] = net_income
        with pytest.raises(ReconciliationMismatchError) as exc_info:
            derive_cash_flow_statement(prior, current)
        error = exc_info.value
        assert error.net_change_in_cash == D(45)
        assert error.discrepancy == D(5)

    def test_build_statement_does_not_raise(self):
        prior = make_period("P", {AC.CASH_AND_EQUIVALENTS: 100, AC.RETAINED_EARNINGS: 150})
        current = make_period("C", {AC.CASH_AND_EQUIVALENTS: 140, AC.RETAINED_EARNINGS: 170})
        statement = build_statement(prior, current)
        assert statement.net_change_in_cash == D(20)
        assert statement.discrepancy == D(-20)


# ---------------------------------------------------------------------------
# Sign conventions and edge cases
# ---------------------------------------------------------------------------


class TestSignConventions:
    def test_receivables_increase_reduces_operating_cash(self):
        prior = make_period("P", {AC.CASH_AND_EQUIVALENTS: 100, AC.ACCOUNTS_RECEIVABLE: 50,
                                  AC.RETAINED_EARNINGS: 150})
        current = make_period("C", {AC.CASH_AND_EQUIVALENTS: 80, AC.ACCOUNTS_RECEIVABLE: 70,
                                    AC.RETAINED_EARNINGS: 150})
        statement = derive_from_periods(prior, current)
        assert statement.net_operating == D(-20)

    def test_payables_increase_raises_operating_cash(self):
        prior = make_period("P", {AC.CASH_AND_EQUIVALENTS: 100, AC.ACCOUNTS_PAYABLE: 30})
        current = make_period("C", {AC.CASH_AND_EQUIVALENTS: 115, AC.ACCOUNTS_PAYABLE: 45})
        statement = derive_from_periods(prior, current)
        assert statement.net_operating == D(15)

    def test_depreciation_add_back_independent_of_ppe(self):
        prior = make_period("P", {
            AC.CASH_AND_EQUIVALENTS: 100,
            AC.PROPERTY_PLANT_EQUIPMENT: 500,
            AC.ACCUMULATED_DEPRECIATION: 100,
            AC.RETAINED_EARNINGS: 500,
        })
        current = make_period("C", {
            AC.CASH_AND_EQUIVALENTS: 150,
            AC.PROPERTY_PLANT_EQUIPMENT: 500,
            AC.ACCUMULATED_DEPRECIATION: 150,
            AC.RETAINED_EARNINGS: 500,
            AC.NET_INCOME: 0,
            AC.DEPRECIATION_EXPENSE: 50,
        })
        statement = derive_from_periods(prior, current)
        assert amounts_by_label(statement.operating_lines)["Depreciation expense"] == D(50)
        assert statement.investing_lines == ()

    def test_new_account_delta_is_current_amount(self):
        prior = make_period("P", {AC.CASH_AND_EQUIVALENTS: 100, AC.LONG_TERM_DEBT: 0})
        current = make_period("C", {AC.CASH_AND_EQUIVALENTS: 70, AC.LONG_TERM_DEBT: 0,
                                    AC.LONG_TERM_INVESTMENTS: 30})
        statement = derive_from_periods(prior, current)
        assert statement.net_investing == D(-30)

    def test_disposal_with_gain(self):
        prior = make_period("P", {
            AC.CASH_AND_EQUIVALENTS: 100,
            AC.PROPERTY_PLANT_EQUIPMENT: 1000,
            AC.ACCUMULATED_DEPRECIATION: 400,
            AC.RETAINED_EARNINGS: 700,
        })
        current = make_period("C", {
            AC.CASH_AND_EQUIVALENTS: 150,
            AC.PROPERTY_PLANT_EQUIPMENT: 900,
            AC.ACCUMULATED_DEPRECIATION: 390,
            AC.RETAINED_EARNINGS: 660,
            AC.NET_INCOME: -40,
            AC.DEPRECIATION_EXPENSE: 50,
            AC.GAIN_LOSS_ON_DISPOSAL: 10,
        })
        statement = derive_from_periods(prior, current)
        assert statement.net_operating == 0
        assert statement.net_investing == D(50)
        assert statement.net_financing == 0
        investing = amounts_by_label(statement.investing_lines)
        assert investing == {
            "(Purchase) disposal of property, plant and equipment": D(100),
            "Accumulated depreciation on disposed assets": D(-60),
            "Gain (loss) realized in disposal proceeds": D(10),
        }

    def test_cash_only_periods(self):
        prior = make_period("P", {AC.CASH_AND_EQUIVALENTS: 100})
        current = make_period("C", {AC.CASH_AND_EQUIVALENTS: 100})
        statement = derive_from_periods(prior, current)
        assert statement.lines == ()
        assert statement.net_change_in_cash == 0

    def test_missing_cash_treated_as_zero(self):
        prior = make_period("P", {AC.PAID_IN_CAPITAL: 0})
        current = make_period("C", {AC.CASH_AND_EQUIVALENTS: 25, AC.PAID_IN_CAPITAL: 25})
        statement = derive_from_periods(prior, current)
        assert statement.beginning_cash == 0
        assert statement.net_financing == D(25)

    def test_exact_decimal_amounts(self):
        prior = {"Cash": "0.10", "Accounts payable": "0.20"}
        current = {"Cash": "0.40", "Accounts payable": "0.50"}
        statement = derive_cash_flow_statement(prior, current)
        assert statement.net_change_in_cash == D("0.30")


# ---------------------------------------------------------------------------
# Input errors surface unchanged
# ---------------------------------------------------------------------------


class TestInputErrors:
    def test_unknown_label(self, prior_items, current_items):
        current_items = dict(current_items, **{"Mystery": 1})
        with pytest.raises(UnmappedAccountError):
            derive_cash_flow_statement(prior_items, current_items)

    def test_duplicate_category(self, prior_items, current_items):
        prior_pairs = list(prior_items.items()) + [("Receivables", 1)]
        with pytest.raises(DuplicateAccountError):
            derive_cash_flow_statement(prior_pairs, current_items)

    def test_amount_too_large_for_exact_arithmetic(self):
        huge = "1" + "0" * 60 + ".5"
        with pytest.raises(InvalidAmountError) as exc_info:
            derive_cash_flow_statement(
                {"Cash": 0, "Accounts payable": 0},
                {"Cash": huge, "Accounts payable": huge},
            )
        assert exc_info.value.label == "Cash"

    def test_amounts_too_far_apart_in_scale(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            derive_cash_flow_statement(
                {"Cash": "1E+40", "Accounts payable": "1E-40"},
                {"Cash": "1E+40", "Accounts payable": "0"},
            )
        assert exc_info.value.label == "Cash"

    def test_label_map_applied_to_both_periods(self, prior_items, current_items):
        label_map = LabelMap()
        label_map.add_alias("Bank - Main", "CashAndEquivalents")
        prior_items = dict(prior_items)
        current_items = dict(current_items)
        prior_items["Bank - Main"] = prior_items.pop("Cash")
        current_items["Bank - Main"] = current_items.pop("Cash")
        statement = derive_cash_flow_statement(prior_items, current_items, label_map=label_map)
        assert statement.net_change_in_cash == D(45)

    def test_normalized_periods_can_be_reused(self, prior_items, current_items):
        prior = normalize_period(prior_items, "FY2023")
        current = normalize_period(current_items, "FY2024")
        assert derive_from_periods(prior, current) == derive_from_periods(prior, current)
        assert prior.amount(AC.CASH_AND_EQUIVALENTS) == D(100)


def test_lines_sorted_by_section(prior_items, current_items):
    statement = derive_cash_flow_statement(prior_items, current_items)
    order = [Section.OPERATING, Section.INVESTING, Section.FINANCING]
    indexes = [order.index(line.section) for line in statement.lines]
    assert indexes == sorted(indexes)
