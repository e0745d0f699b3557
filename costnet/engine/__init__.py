"""Costing engine and its storage collaborator.

Key components:
- CostingEngine: on_order_finalized / on_labor_closed / recompute_and_store
- CostingStorage: Storage protocol the engine depends on
- InMemoryCostingStorage: Dictionary-backed storage
- StagedStorage: Write overlay committed only when an event succeeds
"""

from .storage import (
    CostingStorage,
    InMemoryCostingStorage,
    StagedStorage,
    load_aggregate_store,
    load_costed_products,
    save_aggregate_store,
)
from .engine import CostingEngine

__all__ = [
    "CostingStorage",
    "InMemoryCostingStorage",
    "StagedStorage",
    "load_aggregate_store",
    "load_costed_products",
    "save_aggregate_store",
    "CostingEngine",
]
