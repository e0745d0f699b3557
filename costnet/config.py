"""Engine configuration and the global division-by-zero policy.

The division policy is a runtime switch rather than a build option so that
both behaviors can be exercised in the same process:

- LENIENT (default): a division by zero yields 0.0 for that slot
- STRICT: a division by zero raises DivideByZeroError

Costs.div() uses the global policy unless an explicit ``policy=`` is passed.
CostingEngine always passes the policy from its CostingConfig.
"""

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Iterator, Mapping, Optional

from .constants import DEFAULT_WINDOW_CAPACITY, MIN_FINALIZED

logger = logging.getLogger(__name__)


class DivisionPolicy(Enum):
    """How Costs division treats a zero divisor."""
    STRICT = "strict"
    LENIENT = "lenient"


_division_policy = DivisionPolicy.LENIENT


def get_division_policy() -> DivisionPolicy:
    """Return the process-wide division policy."""
    return _division_policy


def set_division_policy(policy: DivisionPolicy) -> None:
    """Set the process-wide division policy."""
    global _division_policy
    if not isinstance(policy, DivisionPolicy):
        policy = DivisionPolicy(policy)
    if policy != _division_policy:
        logger.info(f"Division policy changed: {_division_policy.value} -> {policy.value}")
    _division_policy = policy


@contextmanager
def division_policy(policy: DivisionPolicy) -> Iterator[DivisionPolicy]:
    """Temporarily switch the global division policy."""
    previous = get_division_policy()
    set_division_policy(policy)
    try:
        yield policy
    finally:
        set_division_policy(previous)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


@dataclass
class CostingConfig:
    """Configuration for a CostingEngine.

    Attributes:
        division_policy: Division-by-zero behavior for all Costs division
        window_capacity: Maximum entries per rolling window
        window_max_age: Optional age limit; entries ending more than this
            before the newest entry are evicted as well
        min_finalized: Minimum PRODUCTION tally count before aggregates are
            trusted over raw recomputation
        use_aggregates: If False, always use the raw variant
    """
    division_policy: DivisionPolicy = DivisionPolicy.LENIENT
    window_capacity: int = DEFAULT_WINDOW_CAPACITY
    window_max_age: Optional[timedelta] = None
    min_finalized: int = MIN_FINALIZED
    use_aggregates: bool = True

    def __post_init__(self):
        """Validate configuration."""
        if not isinstance(self.division_policy, DivisionPolicy):
            self.division_policy = DivisionPolicy(self.division_policy)
        if self.window_capacity < 1:
            raise ValueError(
                f"window_capacity must be >= 1 (got {self.window_capacity})"
            )
        if self.min_finalized < 0:
            raise ValueError(
                f"min_finalized must be >= 0 (got {self.min_finalized})"
            )
        if self.window_max_age is not None and self.window_max_age <= timedelta(0):
            raise ValueError(
                f"window_max_age must be positive (got {self.window_max_age})"
            )

    @classmethod
    def from_env(
        cls,
        prefix: str = "COSTNET_",
        environ: Optional[Mapping[str, str]] = None,
    ) -> "CostingConfig":
        """Build a config from environment variables.

        Recognized variables (with the default prefix):
            COSTNET_DIVISION_POLICY: "strict" or "lenient"
            COSTNET_WINDOW_CAPACITY: integer
            COSTNET_WINDOW_MAX_AGE_HOURS: float hours
            COSTNET_MIN_FINALIZED: integer
            COSTNET_USE_AGGREGATES: boolean

        Unset variables keep their defaults.

        Raises:
            ValueError: If a variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        policy = env.get(f"{prefix}DIVISION_POLICY")
        if policy:
            kwargs["division_policy"] = DivisionPolicy(policy.strip().lower())

        capacity = env.get(f"{prefix}WINDOW_CAPACITY")
        if capacity:
            kwargs["window_capacity"] = int(capacity)

        max_age = env.get(f"{prefix}WINDOW_MAX_AGE_HOURS")
        if max_age:
            kwargs["window_max_age"] = timedelta(hours=float(max_age))

        min_finalized = env.get(f"{prefix}MIN_FINALIZED")
        if min_finalized:
            kwargs["min_finalized"] = int(min_finalized)

        use_aggregates = env.get(f"{prefix}USE_AGGREGATES")
        if use_aggregates:
            kwargs["use_aggregates"] = _parse_bool(use_aggregates)

        return cls(**kwargs)
