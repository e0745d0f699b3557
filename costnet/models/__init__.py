"""Data models for the costing engine."""

from .costs import Costs
from .cost_tag import CostTagEntry, normalize_cost_tags
from .product import Product, ProductInput, Effort, EffortTime
from .order import (
    Order,
    ProductEntry,
    ProcessStatus,
    CostCategory,
    COST_CATEGORY_TABLE,
    COST_CATEGORY_TABLE_VERSION,
)
from .labor import LaborSpan

__all__ = [
    # Cost algebra
    "Costs",
    "CostTagEntry",
    "normalize_cost_tags",
    # Products
    "Product",
    "ProductInput",
    "Effort",
    "EffortTime",
    # Orders
    "Order",
    "ProductEntry",
    "ProcessStatus",
    "CostCategory",
    "COST_CATEGORY_TABLE",
    "COST_CATEGORY_TABLE_VERSION",
    # Labor
    "LaborSpan",
]
