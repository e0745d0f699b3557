"""Ratio-based apportionment of company costs onto products.

Given a company's operating costs O, input costs I, and per-product
production, each produced product p gets:

    prod_ratio(p) = produced(p) / (elapsed_hours / effort_hours(p))
    inp_ratio(p)  = sum(avg_input_costs[i] for i in inputs(p)) * produced(p) / I

Both ratios are normalized across products, and then

    unit_cost(p) = (O * n_prod(p) + I * n_inp(p)) / produced(p)

so that sum(unit_cost(p) * produced(p)) == O + I wherever there is a basis for
allocating each slot. A slot with no basis at all (no product has a ratio
for it) normalizes to 0. Products with zero production cost nothing.

The input ratio uses each product's *current* declared inputs rather than the
inputs in effect when historical orders were placed. This approximation is
kept on purpose.
"""

import logging
from typing import Dict, Optional

from ..config import DivisionPolicy, get_division_policy
from ..errors import MissingProductError
from ..models.costs import Costs, divide_scalar
from ..models.product import Product
from .cost_breakdown import AllocationInputs

logger = logging.getLogger(__name__)


def allocate_costs(
    products: Dict[str, Product],
    inputs: AllocationInputs,
    policy: Optional[DivisionPolicy] = None,
) -> Dict[str, Costs]:
    """
    Apportion operating and input costs onto products.

    Args:
        products: Catalog by product id (must cover every produced product)
        inputs: Company-level sums
        policy: Division-by-zero policy (default: global policy)

    Returns:
        Per-unit Costs for every catalog or produced product

    Raises:
        MissingProductError: If a produced product is not in the catalog
        DivideByZeroError: On a zero divisor under DivisionPolicy.STRICT
    """
    policy = policy or get_division_policy()
    produced = inputs.produced

    missing = sorted(pid for pid in produced if pid not in products)
    if missing:
        raise MissingProductError(
            f"{len(missing)} produced products missing from catalog",
            {"product_ids": missing},
        )

    product_ids = sorted(set(products) | set(produced))
    has_inventory = bool(inputs.avg_input_costs)

    prod_ratios: Dict[str, float] = {}
    inp_ratios: Dict[str, Costs] = {}
    for pid in product_ids:
        quantity = produced.get(pid, 0.0)
        if quantity <= 0.0:
            continue
        product = products[pid]

        max_theoretical = divide_scalar(
            inputs.elapsed_hours, product.effort_hours, policy, f"effort:{pid}"
        )
        prod_ratios[pid] = divide_scalar(quantity, max_theoretical, policy, f"capacity:{pid}")

        if has_inventory:
            consumed = Costs.sum(
                inputs.avg_input_costs.get(item.product_id, Costs())
                for item in product.inputs
            )
            inp_ratios[pid] = (consumed * quantity).div(inputs.input_costs, policy)
        else:
            inp_ratios[pid] = Costs()

    prod_total = 0.0
    for pid in sorted(prod_ratios):
        prod_total += prod_ratios[pid]
    inp_total = Costs.sum(inp_ratios[pid] for pid in sorted(inp_ratios))

    product_costs: Dict[str, Costs] = {}
    for pid in product_ids:
        quantity = produced.get(pid, 0.0)
        if quantity <= 0.0:
            product_costs[pid] = Costs()
            continue

        # slots with no allocation basis normalize to 0 under either policy
        n_prod = prod_ratios[pid] / prod_total if prod_total != 0.0 else 0.0
        n_inp = inp_ratios[pid].div(inp_total, DivisionPolicy.LENIENT)

        total = inputs.operating_costs * n_prod + inputs.input_costs * n_inp
        product_costs[pid] = total.div(quantity, policy)

    logger.debug(
        f"Allocated costs to {len(product_costs)} products "
        f"({len(prod_ratios)} produced, inventory={'yes' if has_inventory else 'no'})"
    )
    return product_costs
