"""Raw cost allocation from a company's recent orders and labor.

Recomputes all company-level sums directly from the order and labor
histories. Used when the rolling aggregates are not yet trustworthy, and as
the reference the aggregate variant must agree with.
"""

import logging
from typing import Callable, Dict, List, Optional

from ..config import DivisionPolicy
from ..constants import MIN_ELAPSED_HOURS, SECONDS_PER_HOUR
from ..models.costs import Costs
from ..models.labor import LaborSpan
from ..models.order import CostCategory, Order
from ..models.product import Product
from .allocation import allocate_costs
from .cost_breakdown import AllocationInputs

logger = logging.getLogger(__name__)


def _never_resource(product_id: str) -> bool:
    return False


def elapsed_hours(orders: List[Order]) -> float:
    """Hours from the earliest order start to the latest order end, floored."""
    if not orders:
        return MIN_ELAPSED_HOURS
    start = min(order.created for order in orders)
    end = max(order.updated for order in orders)
    hours = (end - start).total_seconds() / SECONDS_PER_HOUR
    return max(hours, MIN_ELAPSED_HOURS)


def collect_raw_inputs(
    orders_incoming: List[Order],
    orders_outgoing: List[Order],
    labor: List[LaborSpan],
    products: Dict[str, Product],
    is_resource: Optional[Callable[[str], bool]] = None,
) -> AllocationInputs:
    """
    Reduce order and labor history to allocation sums.

    Args:
        orders_incoming: Finalized orders where the company is the seller
        orders_outgoing: Finalized orders where the company is the buyer
        labor: Closed labor spans of the company
        products: Catalog by product id
        is_resource: Predicate for resource products, whose purchased
            quantity is tracked alongside their cost

    Returns:
        AllocationInputs for allocate_costs
    """
    is_resource = is_resource or _never_resource
    inputs = AllocationInputs(
        elapsed_hours=elapsed_hours(list(orders_incoming) + list(orders_outgoing))
    )

    operating = Costs.sum(span.costs() for span in labor)
    input_costs = Costs()
    input_totals: Dict[str, Costs] = {}
    input_counts: Dict[str, int] = {}

    for order in orders_outgoing:
        order_costs = Costs()
        for entry in order.products:
            line = entry.line_costs()
            order_costs = order_costs + line
            if is_resource(entry.product_id):
                order_costs.track(entry.product_id, entry.quantity)
            if order.cost_category == CostCategory.INVENTORY:
                input_totals[entry.product_id] = input_totals.get(entry.product_id, Costs()) + line
                input_counts[entry.product_id] = input_counts.get(entry.product_id, 0) + 1

        if order.cost_category == CostCategory.INVENTORY:
            input_costs = input_costs + order_costs
        else:
            operating = operating + order_costs

    inputs.operating_costs = operating
    inputs.input_costs = input_costs
    inputs.avg_input_costs = {
        pid: input_totals[pid] / float(input_counts[pid]) for pid in sorted(input_totals)
    }

    produced: Dict[str, float] = {}
    for order in orders_incoming:
        for entry in order.products:
            produced[entry.product_id] = produced.get(entry.product_id, 0.0) + entry.quantity
    if not produced:
        # Nothing sold yet: cost one unit of every catalog product
        produced = {pid: 1.0 for pid in sorted(products)}
    inputs.produced = dict(sorted(produced.items()))

    return inputs


def calculate_costs(
    orders_incoming: List[Order],
    orders_outgoing: List[Order],
    labor: List[LaborSpan],
    products: Dict[str, Product],
    is_resource: Optional[Callable[[str], bool]] = None,
    policy: Optional[DivisionPolicy] = None,
) -> Dict[str, Costs]:
    """
    Per-unit costs of a company's products from raw history.

    Raises:
        MissingProductError: If a sold product is not in the catalog
        DivideByZeroError: On a zero divisor under DivisionPolicy.STRICT
    """
    inputs = collect_raw_inputs(orders_incoming, orders_outgoing, labor, products, is_resource)
    logger.debug(f"Raw allocation over {inputs}")
    return allocate_costs(products, inputs, policy)
