"""Product data model with effort and bill of inputs."""

from enum import Enum
from typing import List
from pydantic import BaseModel, Field

from ..constants import (
    SECONDS_PER_HOUR,
    MINUTES_PER_HOUR,
    HOURS_PER_DAY,
    HOURS_PER_WEEK,
)
from .cost_tag import CostTagEntry


class EffortTime(str, Enum):
    """Time unit for product effort."""
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"


_HOURS_PER_UNIT = {
    EffortTime.SECONDS: 1.0 / SECONDS_PER_HOUR,
    EffortTime.MINUTES: 1.0 / MINUTES_PER_HOUR,
    EffortTime.HOURS: 1.0,
    EffortTime.DAYS: HOURS_PER_DAY,
    EffortTime.WEEKS: HOURS_PER_WEEK,
}


class Effort(BaseModel):
    """
    Labor time needed to produce one unit of a product.

    Attributes:
        time: Unit of the quantity
        quantity: Amount of time per unit produced
    """
    time: EffortTime = Field(default=EffortTime.HOURS, description="Time unit")
    quantity: float = Field(default=1.0, description="Time per unit", ge=0)

    def hours(self) -> float:
        """Effort converted to hours."""
        return self.quantity * _HOURS_PER_UNIT[self.time]


class ProductInput(BaseModel):
    """
    One line of a product's bill of inputs.

    Attributes:
        product_id: Product consumed
        quantity: Units consumed per unit produced
    """
    product_id: str = Field(..., description="Input product ID")
    quantity: float = Field(default=1.0, description="Units consumed per unit", ge=0)


class Product(BaseModel):
    """
    Represents a product made by a company.

    Attributes:
        id: Unique product identifier
        company_id: Producing company
        name: Product name
        effort: Labor time per unit
        inputs: Declared inputs consumed per unit
        cost_tags: Cost tags of the product
        active: False once the product is retired
    """
    id: str = Field(..., description="Unique product identifier")
    company_id: str = Field(..., description="Producing company ID")
    name: str = Field(default="", description="Product name")
    effort: Effort = Field(default_factory=Effort, description="Labor time per unit")
    inputs: List[ProductInput] = Field(
        default_factory=list,
        description="Inputs consumed per unit produced"
    )
    cost_tags: List[CostTagEntry] = Field(
        default_factory=list,
        description="Cost tags for this product"
    )
    active: bool = Field(default=True, description="Product is active")

    @property
    def effort_hours(self) -> float:
        """Labor hours per unit."""
        return self.effort.hours()

    def __str__(self) -> str:
        """String representation."""
        return f"{self.name or self.id} ({self.effort_hours:g}h/unit, {len(self.inputs)} inputs)"
