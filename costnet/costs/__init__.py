"""Per-product cost allocation.

Key components:
- AllocationInputs / CostAllocationResult: Data models for an allocation
- allocate_costs: Ratio-based apportionment shared by both variants
- calculate_costs: Raw variant over order and labor history
- calculate_costs_with_aggregates: Variant over rolling aggregates
- CostCalculator: Variant selection with fallback
"""

from .cost_breakdown import AllocationInputs, CostAllocationResult
from .allocation import allocate_costs
from .raw_calculator import calculate_costs, collect_raw_inputs, elapsed_hours
from .aggregate_calculator import (
    calculate_costs_with_aggregates,
    collect_aggregate_inputs,
    finalized_sales,
    has_enough_history,
    insufficient_history_reason,
    window_elapsed_hours,
)
from .cost_calculator import CostCalculator

__all__ = [
    "AllocationInputs",
    "CostAllocationResult",
    "allocate_costs",
    "calculate_costs",
    "collect_raw_inputs",
    "elapsed_hours",
    "calculate_costs_with_aggregates",
    "collect_aggregate_inputs",
    "finalized_sales",
    "has_enough_history",
    "insufficient_history_reason",
    "window_elapsed_hours",
    "CostCalculator",
]
