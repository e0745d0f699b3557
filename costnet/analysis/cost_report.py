"""Tabular reporting of per-product cost allocations."""

from typing import Any, Dict, List

import pandas as pd

from ..costs.cost_breakdown import CostAllocationResult
from ..models.costs import Costs

#: Column prefixes for the two Costs axes
LABOR_PREFIX = "labor:"
PRODUCTS_PREFIX = "products:"


def costs_to_row(product_id: str, costs: Costs) -> Dict[str, Any]:
    """Flatten one product's Costs into a report row."""
    row: Dict[str, Any] = {"product_id": product_id}
    for occupation in costs.labor_keys():
        row[f"{LABOR_PREFIX}{occupation}"] = costs.labor[occupation]
    for pid in costs.product_keys():
        row[f"{PRODUCTS_PREFIX}{pid}"] = costs.products[pid]
    row["total"] = sum(costs.labor[k] for k in costs.labor_keys()) + sum(
        costs.products[k] for k in costs.product_keys()
    )
    return row


def costs_to_dataframe(product_costs: Dict[str, Costs]) -> pd.DataFrame:
    """Generate pandas DataFrame report.

    Args:
        product_costs: Per-unit Costs by product id

    Returns:
        DataFrame with one row per product (sorted by product_id), a column per
        labor occupation and tracked product (missing entries as 0.0), and a
        total column
    """
    rows: List[Dict[str, Any]] = [
        costs_to_row(pid, product_costs[pid]) for pid in sorted(product_costs)
    ]
    if not rows:
        return pd.DataFrame(columns=["product_id", "total"])

    df = pd.DataFrame(rows)
    labor_cols = sorted(c for c in df.columns if c.startswith(LABOR_PREFIX))
    product_cols = sorted(c for c in df.columns if c.startswith(PRODUCTS_PREFIX))
    value_cols = labor_cols + product_cols
    df = df.reindex(columns=["product_id"] + value_cols + ["total"])
    df[value_cols] = df[value_cols].fillna(0.0)
    return df


def summarize_allocation(result: CostAllocationResult) -> Dict[str, Any]:
    """Summary of one allocation for logging and reporting.

    The residual is what the allocation failed to attribute to a product
    (zero when every cost slot had a basis for allocation).
    """
    total = result.total_costs()
    allocated = result.total_allocated()
    residual = total - allocated

    return {
        "company_id": result.company_id,
        "variant": result.variant,
        "fallback_reason": result.fallback_reason,
        "elapsed_hours": result.inputs.elapsed_hours,
        "products": len(result.product_costs),
        "units_produced": sum(
            result.inputs.produced[pid] for pid in sorted(result.inputs.produced)
        ),
        "operating_costs": result.inputs.operating_costs.model_dump(),
        "input_costs": result.inputs.input_costs.model_dump(),
        "residual": residual.model_dump(),
    }
