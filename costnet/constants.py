"""Centralized constants for the costing engine.

Policy values shared by the aggregates, the allocation algorithm and the
engine. Defaults here can be overridden per engine via CostingConfig.
"""

# ============================================================================
# ROLLING WINDOW CONSTANTS
# ============================================================================

#: Maximum number of entries kept in one rolling window (per company and
#: window purpose). Inserting beyond this evicts the oldest entry.
DEFAULT_WINDOW_CAPACITY = 100

#: Tally key used when an entry carries no cost tags (or only zero weights)
UNCATEGORIZED_TAG = "_uncategorized"

#: Separator between category and cost tag in PURCHASES tally keys
#: e.g. "Inventory::7a1c..." or "Operating::_uncategorized"
PURCHASE_KEY_SEPARATOR = "::"


# ============================================================================
# ALLOCATION CONSTANTS
# ============================================================================

#: Minimum number of finalized output entries (PRODUCTION tally count) before
#: the aggregate variant is trusted over full raw recomputation
MIN_FINALIZED = 2

#: Floor for the elapsed-hours span of the order window
#: Keeps max theoretical production finite for very short or empty windows
MIN_ELAPSED_HOURS = 1.0


# ============================================================================
# TIME CONVERSION
# ============================================================================

SECONDS_PER_HOUR = 3_600.0
MINUTES_PER_HOUR = 60.0
HOURS_PER_DAY = 24.0
HOURS_PER_WEEK = 168.0
