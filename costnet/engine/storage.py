"""Storage collaborator for the costing engine.

CostingStorage is the interface the engine reads and writes through. The
in-memory implementation backs tests and single-process use; StagedStorage
layers uncommitted writes over any CostingStorage so that an event either
lands completely or not at all.

Objects handed out by the in-memory storage are copies: mutating a loaded
tally map or window has no effect until it is put back.
"""

import logging
from typing import Dict, List, Optional, Protocol, Set, Tuple, Union

from ..aggregates.bucket import CostsTallyMap
from ..aggregates.store import AggregateStore
from ..aggregates.window import AggregatePurpose, RollingWindow, WindowPurpose
from ..errors import MissingProductError
from ..models.costs import Costs
from ..models.labor import LaborSpan
from ..models.order import Order
from ..models.product import Product

logger = logging.getLogger(__name__)


class CostingStorage(Protocol):
    """Durable state the engine depends on."""

    def put_order(self, order: Order) -> None:
        ...

    def put_labor(self, span: LaborSpan) -> None:
        ...

    def get_recent_orders(self, company_id: str, direction: WindowPurpose) -> List[Order]:
        ...

    def get_recent_labor(self, company_id: str) -> List[LaborSpan]:
        ...

    def get_product_catalog(self, company_id: str) -> Dict[str, Product]:
        ...

    def get_product(self, product_id: str) -> Optional[Product]:
        ...

    def get_aggregate(self, company_id: str, purpose: AggregatePurpose) -> Optional[CostsTallyMap]:
        ...

    def put_aggregate(self, company_id: str, purpose: AggregatePurpose, tally: CostsTallyMap) -> None:
        ...

    def get_window(self, company_id: str, purpose: WindowPurpose) -> Optional[RollingWindow]:
        ...

    def put_window(self, company_id: str, purpose: WindowPurpose, window: RollingWindow) -> None:
        ...

    def is_resource(self, product_id: str) -> bool:
        ...

    def attach_product_costs(self, product_id: str, costs: Costs) -> None:
        ...


def load_aggregate_store(storage: CostingStorage, company_id: str) -> AggregateStore:
    """Assemble a company's tally maps and windows from storage."""
    store = AggregateStore(company_id=company_id)
    for purpose in AggregatePurpose:
        tally = storage.get_aggregate(company_id, purpose)
        if tally is not None:
            store.tallies[purpose] = tally
    for purpose in WindowPurpose:
        window = storage.get_window(company_id, purpose)
        if window is not None:
            store.windows[purpose] = window
    return store


def save_aggregate_store(storage: CostingStorage, store: AggregateStore) -> None:
    """Write every tally map and window of a store back to storage."""
    for purpose in sorted(store.tallies, key=lambda p: p.value):
        storage.put_aggregate(store.company_id, purpose, store.tallies[purpose])
    for purpose in sorted(store.windows, key=lambda p: p.value):
        storage.put_window(store.company_id, purpose, store.windows[purpose])


def load_costed_products(
    storage: CostingStorage,
    company_id: str,
    orders_incoming: List[Order],
) -> Dict[str, Product]:
    """
    Products to cost for a company.

    The company's active catalog plus every product sold on its recent
    incoming orders, so that a product deactivated after it was sold is
    still costed while its sales remain in the window. Sold products that
    no longer exist at all are left out.
    """
    products = storage.get_product_catalog(company_id)
    for order in orders_incoming:
        for entry in order.products:
            if entry.product_id in products:
                continue
            product = storage.get_product(entry.product_id)
            if product is not None:
                products[entry.product_id] = product
    return dict(sorted(products.items()))


def _direction(direction: Union[WindowPurpose, str]) -> WindowPurpose:
    direction = WindowPurpose(direction)
    if direction == WindowPurpose.LABOR:
        raise ValueError("Order direction must be orders_incoming or orders_outgoing")
    return direction


class InMemoryCostingStorage:
    """
    Dictionary-backed CostingStorage.

    Recent orders and labor are resolved through the stored rolling windows,
    so they are exactly the entries the aggregates currently cover.
    """

    def __init__(self):
        self.orders: Dict[str, Order] = {}
        self.labor: Dict[str, LaborSpan] = {}
        self.products: Dict[str, Product] = {}
        self.resources: Set[str] = set()
        self.aggregates: Dict[Tuple[str, AggregatePurpose], CostsTallyMap] = {}
        self.windows: Dict[Tuple[str, WindowPurpose], RollingWindow] = {}
        self.product_costs: Dict[str, Costs] = {}

    # Catalog

    def add_product(self, product: Product, resource: bool = False) -> None:
        """Register a product, optionally tagging it as a resource."""
        self.products[product.id] = product.model_copy(deep=True)
        if resource:
            self.tag_resource(product.id)

    def tag_resource(self, product_id: str) -> None:
        """Tag a product as a resource (purchased quantity is tracked)."""
        self.resources.add(product_id)

    def is_resource(self, product_id: str) -> bool:
        return product_id in self.resources

    def get_product_catalog(self, company_id: str) -> Dict[str, Product]:
        return {
            pid: self.products[pid].model_copy(deep=True)
            for pid in sorted(self.products)
            if self.products[pid].company_id == company_id and self.products[pid].active
        }

    def get_product(self, product_id: str) -> Optional[Product]:
        """A product by id, active or not; None if unknown."""
        product = self.products.get(product_id)
        return product.model_copy(deep=True) if product is not None else None

    def attach_product_costs(self, product_id: str, costs: Costs) -> None:
        if product_id not in self.products:
            raise MissingProductError(
                f"Cannot attach costs to unknown product {product_id!r}",
                {"product_id": product_id},
            )
        self.product_costs[product_id] = costs.copy()

    def get_product_costs(self, product_id: str) -> Optional[Costs]:
        """Last costs attached to a product, or None."""
        costs = self.product_costs.get(product_id)
        return costs.copy() if costs is not None else None

    # Records

    def put_order(self, order: Order) -> None:
        self.orders[order.id] = order.model_copy(deep=True)

    def put_labor(self, span: LaborSpan) -> None:
        self.labor[span.id] = span.model_copy(deep=True)

    def get_recent_orders(self, company_id: str, direction: WindowPurpose) -> List[Order]:
        window = self.get_window(company_id, _direction(direction))
        if window is None:
            return []
        return [self.orders[oid].model_copy(deep=True) for oid in window.ids() if oid in self.orders]

    def get_recent_labor(self, company_id: str) -> List[LaborSpan]:
        window = self.get_window(company_id, WindowPurpose.LABOR)
        if window is None:
            return []
        return [self.labor[lid].model_copy(deep=True) for lid in window.ids() if lid in self.labor]

    # Aggregates

    def get_aggregate(self, company_id: str, purpose: AggregatePurpose) -> Optional[CostsTallyMap]:
        tally = self.aggregates.get((company_id, purpose))
        return tally.model_copy(deep=True) if tally is not None else None

    def put_aggregate(self, company_id: str, purpose: AggregatePurpose, tally: CostsTallyMap) -> None:
        self.aggregates[(company_id, purpose)] = tally.model_copy(deep=True)

    def get_window(self, company_id: str, purpose: WindowPurpose) -> Optional[RollingWindow]:
        window = self.windows.get((company_id, purpose))
        return window.model_copy(deep=True) if window is not None else None

    def put_window(self, company_id: str, purpose: WindowPurpose, window: RollingWindow) -> None:
        self.windows[(company_id, purpose)] = window.model_copy(deep=True)

    def aggregate_store(self, company_id: str) -> AggregateStore:
        """Snapshot of a company's tally maps and windows."""
        return load_aggregate_store(self, company_id)

    def restore_aggregate_store(self, store: AggregateStore) -> None:
        """Replace a company's tally maps and windows with a snapshot."""
        for key in [k for k in self.aggregates if k[0] == store.company_id]:
            del self.aggregates[key]
        for key in [k for k in self.windows if k[0] == store.company_id]:
            del self.windows[key]
        save_aggregate_store(self, store)


class StagedStorage:
    """
    Write overlay over a CostingStorage.

    Reads see staged writes first, then the base storage. Nothing reaches the
    base storage until commit(); a discarded overlay leaves it untouched.
    """

    def __init__(self, base: CostingStorage):
        self.base = base
        self._orders: Dict[str, Order] = {}
        self._labor: Dict[str, LaborSpan] = {}
        self._aggregates: Dict[Tuple[str, AggregatePurpose], CostsTallyMap] = {}
        self._windows: Dict[Tuple[str, WindowPurpose], RollingWindow] = {}
        self._product_costs: Dict[str, Costs] = {}
        self.committed = False

    def put_order(self, order: Order) -> None:
        self._orders[order.id] = order.model_copy(deep=True)

    def put_labor(self, span: LaborSpan) -> None:
        self._labor[span.id] = span.model_copy(deep=True)

    @staticmethod
    def _merge(ids: List[str], staged: Dict, committed: List) -> List:
        # staged records shadow committed ones with the same id
        by_id = {record.id: record for record in committed}
        result = []
        for record_id in ids:
            if record_id in staged:
                result.append(staged[record_id].model_copy(deep=True))
            elif record_id in by_id:
                result.append(by_id[record_id])
        return result

    def get_recent_orders(self, company_id: str, direction: WindowPurpose) -> List[Order]:
        direction = _direction(direction)
        window = self._windows.get((company_id, direction))
        if window is None:
            return self.base.get_recent_orders(company_id, direction)
        return self._merge(
            window.ids(), self._orders, self.base.get_recent_orders(company_id, direction)
        )

    def get_recent_labor(self, company_id: str) -> List[LaborSpan]:
        window = self._windows.get((company_id, WindowPurpose.LABOR))
        if window is None:
            return self.base.get_recent_labor(company_id)
        return self._merge(window.ids(), self._labor, self.base.get_recent_labor(company_id))

    def get_product_catalog(self, company_id: str) -> Dict[str, Product]:
        return self.base.get_product_catalog(company_id)

    def get_product(self, product_id: str) -> Optional[Product]:
        return self.base.get_product(product_id)

    def is_resource(self, product_id: str) -> bool:
        return self.base.is_resource(product_id)

    def attach_product_costs(self, product_id: str, costs: Costs) -> None:
        self._product_costs[product_id] = costs.model_copy(deep=True)

    def get_aggregate(self, company_id: str, purpose: AggregatePurpose) -> Optional[CostsTallyMap]:
        tally = self._aggregates.get((company_id, purpose))
        if tally is not None:
            return tally.model_copy(deep=True)
        return self.base.get_aggregate(company_id, purpose)

    def put_aggregate(self, company_id: str, purpose: AggregatePurpose, tally: CostsTallyMap) -> None:
        self._aggregates[(company_id, purpose)] = tally.model_copy(deep=True)

    def get_window(self, company_id: str, purpose: WindowPurpose) -> Optional[RollingWindow]:
        window = self._windows.get((company_id, purpose))
        if window is not None:
            return window.model_copy(deep=True)
        return self.base.get_window(company_id, purpose)

    def put_window(self, company_id: str, purpose: WindowPurpose, window: RollingWindow) -> None:
        self._windows[(company_id, purpose)] = window.model_copy(deep=True)

    def commit(self) -> None:
        """Write every staged change through to the base storage."""
        if self.committed:
            raise RuntimeError("StagedStorage already committed")
        for oid in self._orders:
            self.base.put_order(self._orders[oid])
        for lid in self._labor:
            self.base.put_labor(self._labor[lid])
        for company_id, purpose in self._aggregates:
            self.base.put_aggregate(company_id, purpose, self._aggregates[(company_id, purpose)])
        for company_id, purpose in self._windows:
            self.base.put_window(company_id, purpose, self._windows[(company_id, purpose)])
        for pid in sorted(self._product_costs):
            self.base.attach_product_costs(pid, self._product_costs[pid])
        self.committed = True
        logger.debug(
            f"Committed {len(self._orders)} orders, {len(self._labor)} labor spans, "
            f"{len(self._aggregates)} tallies, {len(self._windows)} windows, "
            f"{len(self._product_costs)} product costs"
        )
