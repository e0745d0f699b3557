"""Cost calculator choosing between the raw and aggregate variants.

Wraps both allocation variants behind one object configured from a
CostingConfig, and reports which variant produced the numbers.
"""

import logging
from typing import Callable, Dict, List, Optional

from ..aggregates.store import AggregateStore
from ..config import CostingConfig
from ..models.labor import LaborSpan
from ..models.order import Order
from ..models.product import Product
from .aggregate_calculator import collect_aggregate_inputs, insufficient_history_reason
from .allocation import allocate_costs
from .cost_breakdown import CostAllocationResult
from .raw_calculator import collect_raw_inputs

logger = logging.getLogger(__name__)


class CostCalculator:
    """
    Per-unit product cost calculator for one configuration.

    Example:
        calculator = CostCalculator(CostingConfig())
        result = calculator.calculate(
            company_id="acme",
            products=catalog,
            store=aggregates,
            orders_incoming=sold,
            orders_outgoing=bought,
            labor=spans,
        )
        print(result)  # Shows variant and sums
    """

    def __init__(self, config: Optional[CostingConfig] = None):
        """
        Initialize cost calculator.

        Args:
            config: Division policy, threshold and variant selection
        """
        self.config = config or CostingConfig()

    def calculate_raw(
        self,
        company_id: str,
        products: Dict[str, Product],
        orders_incoming: List[Order],
        orders_outgoing: List[Order],
        labor: List[LaborSpan],
        is_resource: Optional[Callable[[str], bool]] = None,
        fallback_reason: Optional[str] = None,
    ) -> CostAllocationResult:
        """Allocate from raw order and labor history."""
        inputs = collect_raw_inputs(orders_incoming, orders_outgoing, labor, products, is_resource)
        product_costs = allocate_costs(products, inputs, self.config.division_policy)
        return CostAllocationResult(
            company_id=company_id,
            variant="raw",
            inputs=inputs,
            product_costs=product_costs,
            fallback_reason=fallback_reason,
        )

    def calculate_aggregate(
        self,
        store: AggregateStore,
        products: Dict[str, Product],
    ) -> CostAllocationResult:
        """
        Allocate from rolling aggregates, without any threshold check.

        Raises:
            CostCategoryError: If a PURCHASES key carries an unknown category
        """
        inputs = collect_aggregate_inputs(store)
        product_costs = allocate_costs(products, inputs, self.config.division_policy)
        return CostAllocationResult(
            company_id=store.company_id,
            variant="aggregate",
            inputs=inputs,
            product_costs=product_costs,
        )

    def calculate(
        self,
        company_id: str,
        products: Dict[str, Product],
        store: Optional[AggregateStore],
        orders_incoming: List[Order],
        orders_outgoing: List[Order],
        labor: List[LaborSpan],
        is_resource: Optional[Callable[[str], bool]] = None,
    ) -> CostAllocationResult:
        """
        Allocate with the aggregate variant when enabled and trustworthy.

        Falls back to the raw variant when aggregates are disabled, missing,
        or the incoming order window holds fewer than min_finalized sales.

        Returns:
            Allocation result, with fallback_reason set on fallback
        """
        if not self.config.use_aggregates:
            return self.calculate_raw(
                company_id, products, orders_incoming, orders_outgoing, labor, is_resource
            )

        if store is None:
            reason = "no aggregates stored"
        else:
            reason = insufficient_history_reason(store, self.config.min_finalized)
        if reason is None:
            return self.calculate_aggregate(store, products)

        logger.warning(f"{company_id}: {reason}, falling back to raw cost calculation")
        return self.calculate_raw(
            company_id,
            products,
            orders_incoming,
            orders_outgoing,
            labor,
            is_resource,
            fallback_reason=reason,
        )
