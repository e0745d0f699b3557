"""Cost allocation from a company's rolling aggregates.

Reads the company-level sums straight out of the tally maps instead of
walking order and labor history. Until the incoming order window holds
enough finalized sales the averages are too noisy to trust, and the raw
variant is used instead.
"""

import logging
from typing import Callable, Dict, Optional

from ..aggregates.maintenance import parse_purchase_key
from ..aggregates.store import AggregateStore
from ..aggregates.window import AggregatePurpose, WindowPurpose
from ..config import DivisionPolicy
from ..constants import MIN_ELAPSED_HOURS, MIN_FINALIZED, SECONDS_PER_HOUR
from ..models.costs import Costs
from ..models.order import CostCategory
from ..models.product import Product
from .allocation import allocate_costs
from .cost_breakdown import AllocationInputs

logger = logging.getLogger(__name__)


def window_elapsed_hours(store: AggregateStore) -> float:
    """Hours spanned by the company's order windows, floored."""
    spans = []
    for purpose in (WindowPurpose.ORDERS_INCOMING, WindowPurpose.ORDERS_OUTGOING):
        window = store.peek_window(purpose)
        if window is not None:
            span = window.span()
            if span is not None:
                spans.append(span)
    if not spans:
        return MIN_ELAPSED_HOURS
    start = min(span[0] for span in spans)
    end = max(span[1] for span in spans)
    return max((end - start).total_seconds() / SECONDS_PER_HOUR, MIN_ELAPSED_HOURS)


def finalized_sales(store: AggregateStore) -> int:
    """Number of finalized orders in the company's incoming order window."""
    window = store.peek_window(WindowPurpose.ORDERS_INCOMING)
    return len(window) if window is not None else 0


def has_enough_history(store: AggregateStore, min_finalized: int = MIN_FINALIZED) -> bool:
    """True once the incoming order window holds at least min_finalized orders."""
    return finalized_sales(store) >= min_finalized


def insufficient_history_reason(
    store: AggregateStore,
    min_finalized: int = MIN_FINALIZED,
) -> Optional[str]:
    """Why the aggregates cannot be trusted yet, or None when they can."""
    if has_enough_history(store, min_finalized):
        return None
    return f"{finalized_sales(store)} finalized sales < {min_finalized}"


def collect_aggregate_inputs(store: AggregateStore) -> AllocationInputs:
    """
    Reduce a company's tally maps to allocation sums.

    Raises:
        CostCategoryError: If a PURCHASES key carries an unknown category
    """
    operating = store.peek_tally(AggregatePurpose.LABOR).total()
    input_costs = Costs()
    for key, bucket in store.peek_tally(AggregatePurpose.PURCHASES).items():
        category, _ = parse_purchase_key(key)
        if category == CostCategory.INVENTORY:
            input_costs = input_costs + bucket.costs
        else:
            operating = operating + bucket.costs

    avg_input_costs = {
        pid: bucket.average()
        for pid, bucket in store.peek_tally(AggregatePurpose.INPUTS_BY_PRODUCT).items()
    }
    produced = {
        pid: bucket.costs.get(pid)
        for pid, bucket in store.peek_tally(AggregatePurpose.PRODUCTION).items()
    }

    return AllocationInputs(
        elapsed_hours=window_elapsed_hours(store),
        operating_costs=operating,
        input_costs=input_costs,
        avg_input_costs=avg_input_costs,
        produced=produced,
    )


def calculate_costs_with_aggregates(
    store: AggregateStore,
    products: Dict[str, Product],
    fallback: Callable[[], Dict[str, Costs]],
    policy: Optional[DivisionPolicy] = None,
    min_finalized: int = MIN_FINALIZED,
) -> Dict[str, Costs]:
    """
    Per-unit costs of a company's products from its rolling aggregates.

    Args:
        store: Company aggregates
        products: Catalog by product id
        fallback: Raw variant, called when history is too short
        policy: Division-by-zero policy
        min_finalized: Minimum finalized sales to trust the aggregates

    Raises:
        MissingProductError: If a produced product is not in the catalog
        CostCategoryError: If a PURCHASES key carries an unknown category
    """
    reason = insufficient_history_reason(store, min_finalized)
    if reason is not None:
        logger.warning(f"{store.company_id}: {reason}, falling back to raw cost calculation")
        return fallback()

    inputs = collect_aggregate_inputs(store)
    logger.debug(f"Aggregate allocation over {inputs}")
    return allocate_costs(products, inputs, policy)
