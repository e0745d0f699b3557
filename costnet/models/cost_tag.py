"""Cost tag entries used to fan an entry's cost out across tally buckets."""

from typing import List, Tuple
from pydantic import BaseModel, Field

from ..constants import UNCATEGORIZED_TAG


class CostTagEntry(BaseModel):
    """
    A weighted reference to a company cost tag.

    Attributes:
        id: Cost tag identifier
        weight: Relative share of the entry's cost assigned to this tag
    """
    id: str = Field(..., description="Cost tag ID")
    weight: float = Field(default=1.0, description="Relative weight", ge=0)

    def __str__(self) -> str:
        """String representation."""
        return f"{self.id} (x{self.weight:g})"


def normalize_cost_tags(cost_tags: List[CostTagEntry]) -> List[Tuple[str, float]]:
    """
    Turn weighted tags into (tag_id, share) pairs whose shares sum to 1.

    Duplicate tag ids are merged and the result is sorted by tag id. Entries
    with no tags, or whose weights sum to zero, are attributed entirely to
    UNCATEGORIZED_TAG.

    Args:
        cost_tags: Tag entries from an order, labor span or product

    Returns:
        List of (tag_id, share) sorted by tag_id
    """
    merged = {}
    for entry in cost_tags:
        merged[entry.id] = merged.get(entry.id, 0.0) + entry.weight

    total_weight = 0.0
    for tag_id in sorted(merged):
        total_weight += merged[tag_id]

    if total_weight <= 0.0:
        return [(UNCATEGORIZED_TAG, 1.0)]

    return [
        (tag_id, merged[tag_id] / total_weight)
        for tag_id in sorted(merged)
        if merged[tag_id] > 0.0
    ]
