"""
Reporting module for CFGAAP.

Provides the indirect-method Statement of Cash Flows and its text, CSV and
JSON renderers.
"""

from .cash_flow import CashFlowStatement, assemble_statement

__all__ = ["CashFlowStatement", "assemble_statement"]
