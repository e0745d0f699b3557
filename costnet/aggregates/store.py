"""Per-company aggregate store.

The store is an explicit value handed to every maintenance function and to
the aggregate allocation variant. It is never module-level state; the engine
loads one from its storage collaborator, mutates a copy, and writes it back
only when the whole event succeeds.
"""

from datetime import timedelta
from typing import Dict, Optional
from pydantic import BaseModel, Field

from ..constants import DEFAULT_WINDOW_CAPACITY
from .bucket import CostsTallyMap
from .window import AggregatePurpose, RollingWindow, WindowPurpose


class AggregateStore(BaseModel):
    """
    Tally maps and rolling windows for one company.

    Tally maps and windows are created lazily; a missing one is empty.

    Attributes:
        company_id: Company the aggregates belong to
        tallies: Tally maps by purpose
        windows: Rolling windows by purpose
    """
    company_id: str = Field(..., description="Company ID")
    tallies: Dict[AggregatePurpose, CostsTallyMap] = Field(
        default_factory=dict,
        description="Tally maps by purpose"
    )
    windows: Dict[WindowPurpose, RollingWindow] = Field(
        default_factory=dict,
        description="Rolling windows by purpose"
    )

    def tally(self, purpose: AggregatePurpose) -> CostsTallyMap:
        """Tally map for purpose, created empty if absent."""
        tally = self.tallies.get(purpose)
        if tally is None:
            tally = CostsTallyMap()
            self.tallies[purpose] = tally
        return tally

    def peek_tally(self, purpose: AggregatePurpose) -> CostsTallyMap:
        """Tally map for purpose without creating it (empty map if absent)."""
        return self.tallies.get(purpose) or CostsTallyMap()

    def window(
        self,
        purpose: WindowPurpose,
        capacity: int = DEFAULT_WINDOW_CAPACITY,
        max_age: Optional[timedelta] = None,
    ) -> RollingWindow:
        """
        Rolling window for purpose, created if absent.

        The window's capacity and max_age are set to the given values so that
        a configuration change takes effect on the next insert.
        """
        window = self.windows.get(purpose)
        if window is None:
            window = RollingWindow(capacity=capacity, max_age=max_age)
            self.windows[purpose] = window
        else:
            window.capacity = capacity
            window.max_age = max_age
        return window

    def peek_window(self, purpose: WindowPurpose) -> Optional[RollingWindow]:
        """Rolling window for purpose, or None."""
        return self.windows.get(purpose)

    def __str__(self) -> str:
        """String representation."""
        tallies = ", ".join(
            f"{purpose.value}={tally.len()}" for purpose, tally in sorted(
                self.tallies.items(), key=lambda item: item[0].value
            )
        )
        return f"AggregateStore {self.company_id} [{tallies}]"
