"""
CFGAAP – Indirect-Method Cash Flow Statement Engine

Derives a GAAP-style Statement of Cash Flows (indirect method) from two
consecutive periods of balance sheet and income statement line items, with
strict reconciliation against the actual change in cash.
"""

__version__ = "0.1.0"
__author__ = "Conrad"
