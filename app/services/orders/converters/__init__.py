"""
Converter services for transforming marketplace spreadsheet rows into orders.
"""

from .spreadsheet_reconciler import ImportPolicy, SpreadsheetReconciler

__all__ = ["ImportPolicy", "SpreadsheetReconciler"]
