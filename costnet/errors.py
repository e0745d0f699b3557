"""Error types raised by the costing engine.

Every failure of a cost recomputation derives from CostError so the
transaction layer can reject the event with a single except clause.
"""

from typing import Dict, Optional


class CostError(Exception):
    """Base exception for costing failures, with optional context."""

    def __init__(self, message: str, context: Optional[Dict] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with context."""
        msg = f"Costing Error: {self.message}"
        if self.context:
            msg += "\n\nContext:"
            for key, value in self.context.items():
                msg += f"\n  {key}: {value}"
        return msg


class MissingProductError(CostError):
    """A product referenced by an order or catalog lookup does not exist."""
    pass


class CostCategoryError(CostError):
    """A cost category string is missing or not in the category table."""
    pass


class NegativeTrackedValueError(CostError, ValueError):
    """A negative cost or quantity was passed to Costs.track()."""
    pass


class DivideByZeroError(CostError, ZeroDivisionError):
    """Division by zero under the strict division policy."""
    pass


class BucketUnderflowError(CostError):
    """A CostsBucket was asked to remove more entries than it holds."""
    pass
