"""Running-sum containers for categorized cost aggregates.

A CostsBucket pairs a Costs accumulator with the number of entries summed
into it. A CostsTallyMap keys buckets by tag (cost tag, purchase category
key, or product id) and represents one categorized aggregate of a company.
"""

from typing import Dict, Iterator, List, Optional, Tuple
from pydantic import BaseModel, Field

from ..errors import BucketUnderflowError
from ..models.costs import Costs


class CostsBucket(BaseModel):
    """
    Costs accumulator with a count of contributing entries.

    Attributes:
        costs: Sum of all contributions
        count: Number of contributions currently summed
    """
    costs: Costs = Field(default_factory=Costs, description="Accumulated costs")
    count: int = Field(default=0, description="Number of contributing entries", ge=0)

    def add(self, costs: Costs) -> None:
        """Fold one entry's costs into the bucket."""
        self.costs = self.costs + costs
        self.count += 1

    def subtract(self, costs: Costs) -> None:
        """
        Remove one previously added entry's costs.

        Raises:
            BucketUnderflowError: If the bucket holds no entries
        """
        if self.count <= 0:
            raise BucketUnderflowError(
                "Cannot subtract from an empty CostsBucket",
                {"count": self.count, "costs": str(costs)},
            )
        self.costs = self.costs - costs
        self.count -= 1

    def average(self) -> Costs:
        """Mean contribution (zero Costs for an empty bucket)."""
        if self.count == 0:
            return Costs()
        return self.costs / float(self.count)


class CostsTallyMap(BaseModel):
    """
    Mapping of tag -> CostsBucket.

    Buckets are created on first add and dropped once their count returns to
    zero, so an absent tag and an empty bucket are the same thing.

    Attributes:
        buckets: Buckets keyed by tag
    """
    buckets: Dict[str, CostsBucket] = Field(
        default_factory=dict,
        description="Buckets keyed by tag"
    )

    def add(self, tag: str, costs: Costs) -> None:
        """Add one entry's costs under tag."""
        bucket = self.buckets.get(tag)
        if bucket is None:
            bucket = CostsBucket()
            self.buckets[tag] = bucket
        bucket.add(costs)

    def subtract(self, tag: str, costs: Costs) -> None:
        """
        Remove one entry's costs from tag.

        Raises:
            BucketUnderflowError: If tag holds no entries
        """
        bucket = self.buckets.get(tag)
        if bucket is None:
            raise BucketUnderflowError(
                f"Cannot subtract from missing tally bucket {tag!r}",
                {"tags": sorted(self.buckets)},
            )
        bucket.subtract(costs)
        if bucket.count == 0:
            del self.buckets[tag]

    def get(self, tag: str) -> Optional[CostsBucket]:
        """Bucket for tag, or None."""
        return self.buckets.get(tag)

    def costs(self, tag: str) -> Costs:
        """Accumulated costs for tag (zero if absent)."""
        bucket = self.buckets.get(tag)
        return bucket.costs.model_copy(deep=True) if bucket else Costs()

    def total(self) -> Costs:
        """Sum of all buckets, folded in sorted tag order."""
        return Costs.sum(self.buckets[tag].costs for tag in sorted(self.buckets))

    def len(self, tag: Optional[str] = None) -> int:
        """Total entry count, or one bucket's count when tag is given."""
        if tag is not None:
            bucket = self.buckets.get(tag)
            return bucket.count if bucket else 0
        return sum(self.buckets[t].count for t in sorted(self.buckets))

    def tags(self) -> List[str]:
        """Tags with at least one entry, sorted."""
        return sorted(self.buckets)

    def items(self) -> Iterator[Tuple[str, CostsBucket]]:
        """(tag, bucket) pairs in sorted tag order."""
        for tag in sorted(self.buckets):
            yield tag, self.buckets[tag]

    def is_empty(self) -> bool:
        """True when no bucket holds an entry."""
        return not self.buckets

    def __str__(self) -> str:
        """String representation."""
        return f"CostsTallyMap({len(self.buckets)} tags, {self.len()} entries)"
