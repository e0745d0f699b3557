"""Order data model: a purchase of products between two companies."""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from ..errors import CostCategoryError
from .cost_tag import CostTagEntry
from .costs import Costs


class CostCategory(Enum):
    """
    Top-level classification of an order from the buyer's point of view.

    INVENTORY purchases are inputs consumed by production. OPERATING
    purchases are overhead (rent, tools, services).
    """
    INVENTORY = "Inventory"
    OPERATING = "Operating"

    @classmethod
    def parse(cls, value: Optional[str]) -> "CostCategory":
        """
        Decode a stored category string.

        Raises:
            CostCategoryError: If value is empty or not in the category table
        """
        if not value:
            raise CostCategoryError("Missing cost category")
        try:
            return COST_CATEGORY_TABLE[value]
        except KeyError:
            raise CostCategoryError(
                f"Unknown cost category {value!r}",
                {
                    "known": sorted(COST_CATEGORY_TABLE),
                    "table_version": COST_CATEGORY_TABLE_VERSION,
                },
            ) from None

    def encode(self) -> str:
        """String stored in aggregates for this category."""
        return self.value


#: Bump when COST_CATEGORY_TABLE changes; stored aggregates depend on it
COST_CATEGORY_TABLE_VERSION = 1

COST_CATEGORY_TABLE = {
    "Inventory": CostCategory.INVENTORY,
    "Operating": CostCategory.OPERATING,
}


class ProcessStatus(str, Enum):
    """Lifecycle of an order."""
    UNKNOWN = "unknown"
    NEW = "new"
    ACCEPTED = "accepted"
    PROCESSING = "processing"
    COMPLETED = "completed"
    PROXIED = "proxied"
    CANCELED = "canceled"


class ProductEntry(BaseModel):
    """
    One line of an order.

    Attributes:
        product_id: Product purchased
        quantity: Units purchased
        costs: Per-unit costs of the product at the time of the order
    """
    product_id: str = Field(..., description="Product ID")
    quantity: float = Field(..., description="Units purchased", ge=0)
    costs: Costs = Field(default_factory=Costs, description="Per-unit costs")

    def line_costs(self) -> Costs:
        """Total costs of this line (per-unit costs x quantity)."""
        return self.costs * self.quantity


class Order(BaseModel):
    """
    An order placed by one company (buyer) with another (seller).

    Attributes:
        id: Unique order identifier
        company_id_from: Buying company
        company_id_to: Selling company
        cost_category: Buyer's classification of the purchase
        cost_tags: Buyer's cost tags for the purchase
        products: Order lines
        process_status: Lifecycle status
        created: When the order was placed (window start)
        updated: Last status change; finalization time once completed
    """
    id: str = Field(..., description="Unique order identifier")
    company_id_from: str = Field(..., description="Buyer company ID")
    company_id_to: str = Field(..., description="Seller company ID")
    cost_category: CostCategory = Field(
        default=CostCategory.OPERATING,
        description="Buyer's cost category"
    )
    cost_tags: List[CostTagEntry] = Field(
        default_factory=list,
        description="Buyer's cost tags"
    )
    products: List[ProductEntry] = Field(default_factory=list, description="Order lines")
    process_status: ProcessStatus = Field(
        default=ProcessStatus.NEW,
        description="Order status"
    )
    created: datetime = Field(..., description="Creation time")
    updated: datetime = Field(..., description="Last update time")

    def is_finalized(self) -> bool:
        """True once the order is completed."""
        return self.process_status == ProcessStatus.COMPLETED

    def __str__(self) -> str:
        """String representation."""
        return (
            f"Order {self.id}: {self.company_id_from} -> {self.company_id_to} "
            f"({len(self.products)} lines, {self.cost_category.value}, {self.process_status.value})"
        )
