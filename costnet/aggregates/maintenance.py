"""Rolling-window maintenance of a company's tally maps.

Each qualifying event (labor span closed, order finalized) goes through the
same protocol:

1. Subtract the contributions previously recorded for the entry (updates)
2. Insert the entry into its rolling window; evict what no longer fits
3. Subtract the recorded contributions of every evicted entry
4. Add the entry's new contributions and record them on the window entry

Cost is fanned out over the entry's cost tags by weight (see
normalize_cost_tags). Work per event is proportional to the change in the
window, not its size.
"""

import logging
from typing import Callable, List, Tuple

from ..constants import PURCHASE_KEY_SEPARATOR
from ..errors import CostCategoryError
from ..models.costs import Costs
from ..models.cost_tag import CostTagEntry, normalize_cost_tags
from ..models.labor import LaborSpan
from ..models.order import CostCategory, Order
from .store import AggregateStore
from .window import AggregatePurpose, Contribution, RollingWindow, WindowEntry, WindowPurpose

logger = logging.getLogger(__name__)


def purchase_key(category: CostCategory, tag_id: str) -> str:
    """PURCHASES tally key for a category and cost tag."""
    return f"{category.encode()}{PURCHASE_KEY_SEPARATOR}{tag_id}"


def parse_purchase_key(key: str) -> Tuple[CostCategory, str]:
    """
    Split a PURCHASES tally key into (category, tag_id).

    Raises:
        CostCategoryError: If the key has no category or an unknown one
    """
    if PURCHASE_KEY_SEPARATOR not in key:
        raise CostCategoryError(
            f"Purchase tally key {key!r} has no cost category",
            {"separator": PURCHASE_KEY_SEPARATOR},
        )
    category, tag_id = key.split(PURCHASE_KEY_SEPARATOR, 1)
    return CostCategory.parse(category), tag_id


def fan_out(costs: Costs, cost_tags: List[CostTagEntry]) -> List[Tuple[str, Costs]]:
    """
    Split costs across weighted cost tags.

    Returns:
        (tag_id, costs * share) pairs sorted by tag_id
    """
    return [(tag_id, costs * share) for tag_id, share in normalize_cost_tags(cost_tags)]


def labor_contributions(span: LaborSpan) -> List[Contribution]:
    """Tally contributions of a closed labor span."""
    return [
        Contribution(purpose=AggregatePurpose.LABOR, key=tag_id, costs=share)
        for tag_id, share in fan_out(span.costs(), span.cost_tags)
    ]


def outgoing_order_contributions(
    order: Order,
    is_resource: Callable[[str], bool],
) -> List[Contribution]:
    """
    Tally contributions of a finalized order, for the buying company.

    The order's line costs (plus purchased quantity of resource products) go
    into PURCHASES under the order's category and cost tags. Inventory lines
    are also recorded per product in INPUTS_BY_PRODUCT, one entry per line, so
    bucket.costs / bucket.count is the average line cost of that input.
    """
    purchase_costs = Costs()
    per_line: List[Tuple[str, Costs]] = []
    for entry in order.products:
        line = entry.line_costs()
        purchase_costs = purchase_costs + line
        if is_resource(entry.product_id):
            purchase_costs.track(entry.product_id, entry.quantity)
        per_line.append((entry.product_id, line))

    contributions = [
        Contribution(
            purpose=AggregatePurpose.PURCHASES,
            key=purchase_key(order.cost_category, tag_id),
            costs=share,
        )
        for tag_id, share in fan_out(purchase_costs, order.cost_tags)
    ]

    if order.cost_category == CostCategory.INVENTORY:
        contributions.extend(
            Contribution(purpose=AggregatePurpose.INPUTS_BY_PRODUCT, key=product_id, costs=line)
            for product_id, line in per_line
        )
    return contributions


def incoming_order_contributions(order: Order) -> List[Contribution]:
    """Tally contributions of a finalized order, for the selling company."""
    return [
        Contribution(
            purpose=AggregatePurpose.PRODUCTION,
            key=entry.product_id,
            costs=Costs().track(entry.product_id, entry.quantity),
        )
        for entry in order.products
    ]


def _subtract_all(store: AggregateStore, contributions: List[Contribution]) -> None:
    for contribution in contributions:
        store.tally(contribution.purpose).subtract(contribution.key, contribution.costs)


def _add_all(store: AggregateStore, contributions: List[Contribution]) -> None:
    for contribution in contributions:
        store.tally(contribution.purpose).add(contribution.key, contribution.costs)


def apply_entry(store: AggregateStore, window: RollingWindow, entry: WindowEntry) -> List[str]:
    """
    Apply one entry to a store through its rolling window.

    Args:
        store: Company aggregates (mutated)
        window: Window the entry belongs to (mutated, part of store)
        entry: Entry with the contributions to add

    Returns:
        Ids of evicted entries, oldest first
    """
    previous = window.get(entry.id)
    if previous is not None:
        _subtract_all(store, previous.contributions)

    evicted = window.insert(entry)
    evicted_ids = [e.id for e in evicted]
    for old in evicted:
        if old.id != entry.id:
            _subtract_all(store, old.contributions)

    if entry.id not in evicted_ids:
        _add_all(store, entry.contributions)

    if evicted_ids:
        logger.debug(f"{store.company_id}: window evicted {evicted_ids}")
    return evicted_ids


def apply_labor(
    store: AggregateStore,
    span: LaborSpan,
    capacity: int,
    max_age=None,
) -> List[str]:
    """
    Fold a closed labor span into the company's LABOR tally.

    Raises:
        ValueError: If the span is not closed
    """
    if not span.is_closed():
        raise ValueError(f"Labor {span.id} is not closed")
    window = store.window(WindowPurpose.LABOR, capacity, max_age)
    entry = WindowEntry(
        id=span.id,
        start=span.start,
        end=span.end,
        contributions=labor_contributions(span),
    )
    return apply_entry(store, window, entry)


def apply_outgoing_order(
    store: AggregateStore,
    order: Order,
    is_resource: Callable[[str], bool],
    capacity: int,
    max_age=None,
) -> List[str]:
    """Fold a finalized order into the buyer's PURCHASES/INPUTS_BY_PRODUCT tallies."""
    window = store.window(WindowPurpose.ORDERS_OUTGOING, capacity, max_age)
    entry = WindowEntry(
        id=order.id,
        start=order.created,
        end=order.updated,
        contributions=outgoing_order_contributions(order, is_resource),
    )
    return apply_entry(store, window, entry)


def apply_incoming_order(
    store: AggregateStore,
    order: Order,
    capacity: int,
    max_age=None,
) -> List[str]:
    """Fold a finalized order into the seller's PRODUCTION tally."""
    window = store.window(WindowPurpose.ORDERS_INCOMING, capacity, max_age)
    entry = WindowEntry(
        id=order.id,
        start=order.created,
        end=order.updated,
        contributions=incoming_order_contributions(order),
    )
    return apply_entry(store, window, entry)


def rebuild_from_windows(store: AggregateStore) -> AggregateStore:
    """
    Recompute every tally map from the contributions recorded in the windows.

    Used to verify that incremental maintenance matches a from-scratch fold.
    """
    rebuilt = AggregateStore(
        company_id=store.company_id,
        windows={purpose: window.model_copy(deep=True) for purpose, window in store.windows.items()},
    )
    for purpose in sorted(rebuilt.windows, key=lambda p: p.value):
        for entry in rebuilt.windows[purpose].entries:
            _add_all(rebuilt, entry.contributions)
    return rebuilt
