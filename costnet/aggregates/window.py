"""Capacity-bounded rolling window of recent entries.

Each entry remembers the exact contributions it made to the tally maps when
it was applied. Evicting or replacing an entry subtracts those recorded
contributions, never values recomputed from the current state (cost tag
weights may have changed since the entry was added).
"""

import bisect
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from ..constants import DEFAULT_WINDOW_CAPACITY
from ..models.costs import Costs

logger = logging.getLogger(__name__)


class AggregatePurpose(str, Enum):
    """Named tally maps kept per company."""
    LABOR = "labor"                          # key: cost tag id
    PURCHASES = "purchases"                  # key: "<Category>::<cost tag id>"
    INPUTS_BY_PRODUCT = "inputs_by_product"  # key: input product id
    PRODUCTION = "production"                # key: produced product id


class WindowPurpose(str, Enum):
    """Rolling windows kept per company."""
    LABOR = "labor"
    ORDERS_INCOMING = "orders_incoming"
    ORDERS_OUTGOING = "orders_outgoing"


class Contribution(BaseModel):
    """One add applied to a tally map on behalf of a window entry."""
    purpose: AggregatePurpose = Field(..., description="Tally map")
    key: str = Field(..., description="Tally key")
    costs: Costs = Field(..., description="Costs added")


class WindowEntry(BaseModel):
    """
    A member of a rolling window.

    Attributes:
        id: Order or labor record id
        start: Start of the entry (order created / clock-in)
        end: End of the entry (order finalized / clock-out); window order key
        contributions: Tally adds applied for this entry
    """
    id: str = Field(..., description="Entry ID")
    start: datetime = Field(..., description="Entry start time")
    end: datetime = Field(..., description="Entry end time")
    contributions: List[Contribution] = Field(
        default_factory=list,
        description="Applied tally contributions"
    )


class RollingWindow(BaseModel):
    """
    Time-ordered, capacity-bounded list of recent entries.

    Attributes:
        capacity: Maximum number of entries
        max_age: Optional age limit relative to the newest entry's end
        entries: Entries ordered by end time (oldest first)
    """
    capacity: int = Field(default=DEFAULT_WINDOW_CAPACITY, description="Maximum entries", ge=1)
    max_age: Optional[timedelta] = Field(None, description="Maximum entry age")
    entries: List[WindowEntry] = Field(default_factory=list, description="Entries, oldest first")

    def get(self, entry_id: str) -> Optional[WindowEntry]:
        """Entry with this id, or None."""
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def ids(self) -> List[str]:
        """Entry ids, oldest first."""
        return [entry.id for entry in self.entries]

    def insert(self, entry: WindowEntry) -> List[WindowEntry]:
        """
        Insert or replace an entry, then evict what no longer fits.

        An entry with an existing id replaces the old one (and is re-positioned
        by its new end time). Entries with equal end times keep insertion order.

        Returns:
            Evicted entries, oldest first. May include the inserted entry if it
            is older than everything in a full window.
        """
        self.entries = [e for e in self.entries if e.id != entry.id]
        ends = [e.end for e in self.entries]
        self.entries.insert(bisect.bisect_right(ends, entry.end), entry)
        return self._evict()

    def remove(self, entry_id: str) -> Optional[WindowEntry]:
        """Remove and return an entry, or None if absent."""
        for i, entry in enumerate(self.entries):
            if entry.id == entry_id:
                return self.entries.pop(i)
        return None

    def _evict(self) -> List[WindowEntry]:
        evicted: List[WindowEntry] = []
        while len(self.entries) > self.capacity:
            evicted.append(self.entries.pop(0))

        if self.max_age is not None and self.entries:
            cutoff = self.entries[-1].end - self.max_age
            while self.entries and self.entries[0].end < cutoff:
                evicted.append(self.entries.pop(0))

        if evicted:
            logger.debug(f"Evicted {len(evicted)} window entries: {[e.id for e in evicted]}")
        return evicted

    def span(self) -> Optional[tuple]:
        """(earliest start, latest end) over all entries, or None if empty."""
        if not self.entries:
            return None
        return (
            min(entry.start for entry in self.entries),
            max(entry.end for entry in self.entries),
        )

    def __len__(self) -> int:
        return len(self.entries)
