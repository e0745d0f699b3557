"""Analysis module for cost allocation results.

This module provides tools for reporting per-product costs, including:
- Per-product cost tables (pandas DataFrame)
- Allocation summaries for logging
"""

from .cost_report import costs_to_dataframe, costs_to_row, summarize_allocation

__all__ = [
    "costs_to_dataframe",
    "costs_to_row",
    "summarize_allocation",
]
