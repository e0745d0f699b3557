"""Rolling aggregates: tally maps, windows and their maintenance.

Key components:
- CostsBucket / CostsTallyMap: running sums with entry counts
- RollingWindow: capacity-bounded recent entries with their contributions
- AggregateStore: one company's tally maps and windows
- apply_labor / apply_outgoing_order / apply_incoming_order: event folding
"""

from .bucket import CostsBucket, CostsTallyMap
from .window import (
    AggregatePurpose,
    WindowPurpose,
    Contribution,
    WindowEntry,
    RollingWindow,
)
from .store import AggregateStore
from .maintenance import (
    apply_entry,
    apply_labor,
    apply_outgoing_order,
    apply_incoming_order,
    fan_out,
    purchase_key,
    parse_purchase_key,
    rebuild_from_windows,
)

__all__ = [
    "CostsBucket",
    "CostsTallyMap",
    "AggregatePurpose",
    "WindowPurpose",
    "Contribution",
    "WindowEntry",
    "RollingWindow",
    "AggregateStore",
    "apply_entry",
    "apply_labor",
    "apply_outgoing_order",
    "apply_incoming_order",
    "fan_out",
    "purchase_key",
    "parse_purchase_key",
    "rebuild_from_windows",
]
