"""Cost allocation data models.

Data classes carrying the sums an allocation is computed from and the
result of one allocation, for logging and reporting.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..models.costs import Costs


@dataclass
class AllocationInputs:
    """
    Company-level sums the apportionment works from.

    Both allocation variants reduce their source data (raw order/labor
    history or rolling tallies) to this shape.

    Attributes:
        elapsed_hours: Span of the order window in hours (floored)
        operating_costs: Labor plus Operating-category purchases
        input_costs: Inventory-category purchases
        avg_input_costs: Average Inventory line cost per input product
        produced: Units produced (sold) per product
    """
    elapsed_hours: float = 1.0
    operating_costs: Costs = field(default_factory=Costs)
    input_costs: Costs = field(default_factory=Costs)
    avg_input_costs: Dict[str, Costs] = field(default_factory=dict)
    produced: Dict[str, float] = field(default_factory=dict)

    def __str__(self) -> str:
        """String representation."""
        units = sum(self.produced[pid] for pid in sorted(self.produced))
        return (
            f"{self.elapsed_hours:.1f}h window, {len(self.produced)} products "
            f"({units:,.0f} units), {len(self.avg_input_costs)} inputs"
        )


@dataclass
class CostAllocationResult:
    """
    Outcome of one per-product cost allocation.

    Attributes:
        company_id: Company whose products were costed
        variant: "raw" or "aggregate"
        inputs: Sums the allocation was computed from
        product_costs: Per-unit costs by product id
        fallback_reason: Why the aggregate variant fell back to raw, if it did
    """
    company_id: str = ""
    variant: str = "raw"
    inputs: AllocationInputs = field(default_factory=AllocationInputs)
    product_costs: Dict[str, Costs] = field(default_factory=dict)
    fallback_reason: Optional[str] = None

    def total_allocated(self) -> Costs:
        """Sum over products of unit cost x units produced."""
        return Costs.sum(
            self.product_costs[pid] * self.inputs.produced.get(pid, 0.0)
            for pid in sorted(self.product_costs)
        )

    def total_costs(self) -> Costs:
        """Operating plus input costs of the window."""
        return self.inputs.operating_costs + self.inputs.input_costs

    def __str__(self) -> str:
        """String representation."""
        suffix = f" (fallback: {self.fallback_reason})" if self.fallback_reason else ""
        return (
            f"Cost allocation for {self.company_id or '?'} via {self.variant}{suffix}: "
            f"{len(self.product_costs)} products, {self.inputs}"
        )
