"""Costing engine: event entry points for the transaction layer.

Each event (order finalized, labor span closed) folds the new record into
the affected companies' rolling aggregates and then recomputes and attaches
per-unit product costs for those companies.

Events run against a StagedStorage overlay. If anything raises, the overlay
is discarded and the base storage is exactly as it was before the event.
"""

import logging
from typing import Dict, Optional

from ..aggregates.maintenance import apply_incoming_order, apply_labor, apply_outgoing_order
from ..aggregates.window import WindowPurpose
from ..config import CostingConfig
from ..costs.cost_breakdown import CostAllocationResult
from ..costs.cost_calculator import CostCalculator
from ..models.costs import Costs
from ..models.labor import LaborSpan
from ..models.order import Order
from .storage import (
    CostingStorage,
    StagedStorage,
    load_aggregate_store,
    load_costed_products,
    save_aggregate_store,
)

logger = logging.getLogger(__name__)


class CostingEngine:
    """
    Maintains rolling cost aggregates and per-product costs.

    The engine is single-threaded and non-reentrant per company; it takes no
    locks. Callers may process different companies in parallel only with
    storage that isolates them.

    Example:
        engine = CostingEngine(InMemoryCostingStorage(), CostingConfig())
        engine.on_labor_closed(span)
        engine.on_order_finalized(order)
        costs = engine.recompute_and_store("acme")
    """

    def __init__(self, storage: CostingStorage, config: Optional[CostingConfig] = None):
        """
        Initialize costing engine.

        Args:
            storage: Storage collaborator
            config: Engine configuration (defaults to CostingConfig())
        """
        self.storage = storage
        self.config = config or CostingConfig()
        self.calculator = CostCalculator(self.config)
        self.last_results: Dict[str, CostAllocationResult] = {}

        logger.info(
            f"CostingEngine initialized: division_policy={self.config.division_policy.value}, "
            f"window_capacity={self.config.window_capacity}, "
            f"min_finalized={self.config.min_finalized}, "
            f"use_aggregates={self.config.use_aggregates}"
        )

    def on_order_finalized(self, order: Order) -> Dict[str, Dict[str, Costs]]:
        """
        Fold a finalized order into buyer and seller aggregates and recompute both.

        Args:
            order: Order in a finalized state

        Returns:
            Product costs by company id (buyer and seller)

        Raises:
            ValueError: If the order is not finalized
            CostError: If aggregation or allocation fails (nothing is stored)
        """
        if not order.is_finalized():
            raise ValueError(
                f"Order {order.id} is not finalized (status: {order.process_status.value})"
            )

        staged = StagedStorage(self.storage)
        staged.put_order(order)

        buyer = load_aggregate_store(staged, order.company_id_from)
        apply_outgoing_order(
            buyer,
            order,
            staged.is_resource,
            self.config.window_capacity,
            self.config.window_max_age,
        )
        save_aggregate_store(staged, buyer)

        seller = load_aggregate_store(staged, order.company_id_to)
        apply_incoming_order(
            seller,
            order,
            self.config.window_capacity,
            self.config.window_max_age,
        )
        save_aggregate_store(staged, seller)

        results: Dict[str, CostAllocationResult] = {}
        for company_id in (order.company_id_from, order.company_id_to):
            results[company_id] = self._recompute(staged, company_id)

        self._commit(staged, results)
        logger.info(f"Order {order.id} applied ({order.company_id_from} -> {order.company_id_to})")
        return {company_id: result.product_costs for company_id, result in results.items()}

    def on_labor_closed(self, span: LaborSpan) -> Dict[str, Costs]:
        """
        Fold a closed labor span into the company's aggregates and recompute.

        Raises:
            ValueError: If the span is not closed
            CostError: If aggregation or allocation fails (nothing is stored)
        """
        if not span.is_closed():
            raise ValueError(f"Labor {span.id} is not closed")

        staged = StagedStorage(self.storage)
        staged.put_labor(span)

        store = load_aggregate_store(staged, span.company_id)
        apply_labor(store, span, self.config.window_capacity, self.config.window_max_age)
        save_aggregate_store(staged, store)

        result = self._recompute(staged, span.company_id)
        self._commit(staged, {span.company_id: result})
        logger.info(f"Labor {span.id} applied for {span.company_id} ({span.hours:.2f}h)")
        return result.product_costs

    def recompute_and_store(self, company_id: str) -> Dict[str, Costs]:
        """
        Recompute a company's per-unit product costs and attach them.

        Returns:
            Product id -> per-unit Costs
        """
        staged = StagedStorage(self.storage)
        result = self._recompute(staged, company_id)
        self._commit(staged, {company_id: result})
        return result.product_costs

    def _recompute(self, storage: CostingStorage, company_id: str) -> CostAllocationResult:
        orders_incoming = storage.get_recent_orders(company_id, WindowPurpose.ORDERS_INCOMING)
        products = load_costed_products(storage, company_id, orders_incoming)
        store = load_aggregate_store(storage, company_id)
        result = self.calculator.calculate(
            company_id=company_id,
            products=products,
            store=store,
            orders_incoming=orders_incoming,
            orders_outgoing=storage.get_recent_orders(company_id, WindowPurpose.ORDERS_OUTGOING),
            labor=storage.get_recent_labor(company_id),
            is_resource=storage.is_resource,
        )
        for product_id in sorted(result.product_costs):
            storage.attach_product_costs(product_id, result.product_costs[product_id])
        logger.debug(str(result))
        return result

    def _commit(self, staged: StagedStorage, results: Dict[str, CostAllocationResult]) -> None:
        staged.commit()
        self.last_results.update(results)
