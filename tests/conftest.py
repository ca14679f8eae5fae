"""
Shared pytest fixtures for CFGAAP tests.
"""

import json

import pytest

from cfgaap.config import CFGAAPConfig


@pytest.fixture
def sample_config() -> CFGAAPConfig:
    """Default CFGAAP configuration."""
    return CFGAAPConfig()


@pytest.fixture
def prior_items() -> dict:
    """
    Prior-period balance sheet that balances:

        Assets : Cash 100 + Receivables 50 + Inventory 80
                 + PP&E 500 - Accumulated depreciation 100     = 630
        L + E  : Payables 30 + Long-term debt 200
                 + Paid-in capital 300 + Retained earnings 100 = 630
    """
    return {
        "Cash": 100,
        "Accounts receivable": 50,
        "Inventory": 80,
        "Property, plant and equipment": 500,
        "Accumulated depreciation": 100,
        "Accounts payable": 30,
        "Long-term debt": 200,
        "Paid-in capital": 300,
        "Retained earnings": 100,
    }


@pytest.fixture
def current_items() -> dict:
    """
    Current period consistent with the prior period:

        Net income 60, depreciation 40, dividends 10
        Receivables +20, inventory -10, payables +15
        Capital expenditure 100, new long-term borrowing 50
        Retained earnings 100 + 60 - 10 = 150

        Operating  = 60 + 40 - 20 + 10 + 15 = 105
        Investing  = -100
        Financing  = 50 - 10                = 40
        Net change = 45  ->  Cash 100 -> 145
    """
    return {
        "Cash": 145,
        "Accounts receivable": 70,
        "Inventory": 70,
        "Property, plant and equipment": 600,
        "Accumulated depreciation": 140,
        "Accounts payable": 45,
        "Long-term debt": 250,
        "Paid-in capital": 300,
        "Retained earnings": 150,
        "Net income": 60,
        "Depreciation expense": 40,
        "Dividends paid": 10,
    }


@pytest.fixture
def period_files(tmp_path, prior_items, current_items):
    """Write the balanced prior/current periods to JSON files."""
    prior_path = tmp_path / "prior.json"
    current_path = tmp_path / "current.json"
    prior_path.write_text(
        json.dumps({"period": "FY2023", "items": prior_items}), encoding="utf-8"
    )
    current_path.write_text(
        json.dumps({"period": "FY2024", "items": current_items}), encoding="utf-8"
    )
    return prior_path, current_path
