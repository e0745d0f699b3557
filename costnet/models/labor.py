"""Labor span data model: one clock-in/clock-out record."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from ..constants import SECONDS_PER_HOUR
from .cost_tag import CostTagEntry
from .costs import Costs


class LaborSpan(BaseModel):
    """
    Time worked by a company member.

    Attributes:
        id: Unique labor record identifier
        company_id: Employing company
        user_id: Worker
        occupation: Worker's occupation (labor cost key)
        start: Clock-in time
        end: Clock-out time (None while still open)
        cost_tags: Cost tags to attribute the hours to
    """
    id: str = Field(..., description="Unique labor record identifier")
    company_id: str = Field(..., description="Company ID")
    user_id: str = Field(default="", description="Worker user ID")
    occupation: str = Field(..., description="Occupation of the worker")
    start: datetime = Field(..., description="Clock-in time")
    end: Optional[datetime] = Field(None, description="Clock-out time")
    cost_tags: List[CostTagEntry] = Field(
        default_factory=list,
        description="Cost tags for this labor"
    )

    @model_validator(mode="after")
    def _check_span(self) -> "LaborSpan":
        if self.end is not None and self.end < self.start:
            raise ValueError(f"Labor {self.id}: end {self.end} is before start {self.start}")
        return self

    def is_closed(self) -> bool:
        """True once the span has an end time."""
        return self.end is not None

    @property
    def hours(self) -> float:
        """Hours worked (0.0 while open)."""
        if self.end is None:
            return 0.0
        return (self.end - self.start).total_seconds() / SECONDS_PER_HOUR

    def costs(self) -> Costs:
        """Labor costs of this span, keyed by occupation."""
        return Costs().track_labor(self.occupation, self.hours)

    def __str__(self) -> str:
        """String representation."""
        state = f"{self.hours:.2f}h" if self.is_closed() else "open"
        return f"Labor {self.id} ({self.occupation}, {state})"
