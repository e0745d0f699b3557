"""Costs value type: a decomposed cost vector and its algebra.

A Costs splits an amount across two axes:
- labor: hours keyed by occupation
- products: amounts keyed by product id (used to track consumption of
  physical inputs, e.g. tonnes of coal, alongside their price)

Absent keys read as 0.0. Every operation walks keys in sorted order so that
floating point results are identical across independent executions.

Values may go negative as the result of subtraction ("remaining balance");
only track()/track_labor() reject negative input.
"""

from typing import Dict, Iterable, List, Optional, Union
from pydantic import BaseModel, Field

from ..config import DivisionPolicy, get_division_policy
from ..errors import DivideByZeroError, NegativeTrackedValueError


Scalar = Union[int, float]


def divide_scalar(
    numerator: float,
    denominator: float,
    policy: DivisionPolicy,
    label: str,
) -> float:
    """Divide two floats, applying the division policy to a zero denominator."""
    if denominator == 0.0:
        if policy == DivisionPolicy.STRICT:
            raise DivideByZeroError(
                "Division by zero",
                {"slot": label, "numerator": numerator},
            )
        return 0.0
    return numerator / denominator


class Costs(BaseModel):
    """
    Decomposed cost vector.

    Attributes:
        labor: Labor hours by occupation
        products: Amount by product id
    """
    labor: Dict[str, float] = Field(
        default_factory=dict,
        description="Labor hours keyed by occupation"
    )
    products: Dict[str, float] = Field(
        default_factory=dict,
        description="Amounts keyed by product id"
    )

    @classmethod
    def sum(cls, items: Iterable["Costs"]) -> "Costs":
        """Fold an iterable of Costs with +, in the order given."""
        total = cls()
        for item in items:
            total = total + item
        return total

    def track(self, product_id: str, value: float) -> "Costs":
        """
        Add value to the product entry, creating it at 0.0 if absent.

        Raises:
            NegativeTrackedValueError: If value < 0
        """
        if value < 0:
            raise NegativeTrackedValueError(
                "Costs.track() given value must be >= 0.0",
                {"product_id": product_id, "value": value},
            )
        self.products[product_id] = self.products.get(product_id, 0.0) + float(value)
        return self

    def track_labor(self, occupation: str, value: float) -> "Costs":
        """
        Add value to the labor entry, creating it at 0.0 if absent.

        Raises:
            NegativeTrackedValueError: If value < 0
        """
        if value < 0:
            raise NegativeTrackedValueError(
                "Costs.track_labor() given value must be >= 0.0",
                {"occupation": occupation, "value": value},
            )
        self.labor[occupation] = self.labor.get(occupation, 0.0) + float(value)
        return self

    def get(self, product_id: str) -> float:
        """Product entry, 0.0 if absent."""
        return self.products.get(product_id, 0.0)

    def get_labor(self, occupation: str) -> float:
        """Labor entry, 0.0 if absent."""
        return self.labor.get(occupation, 0.0)

    def copy(self) -> "Costs":
        """Independent deep copy."""
        return self.model_copy(deep=True)

    def labor_keys(self) -> List[str]:
        """Occupations present, sorted."""
        return sorted(self.labor)

    def product_keys(self) -> List[str]:
        """Product ids present, sorted."""
        return sorted(self.products)

    def is_zero(self) -> bool:
        """True unless some entry is strictly positive."""
        for value in self.labor.values():
            if value > 0.0:
                return False
        for value in self.products.values():
            if value > 0.0:
                return False
        return True

    def take(self, other: "Costs") -> "Costs":
        """
        Spend down this balance by up to ``other``, without overdrawing.

        For each key held here, subtracts min(self[key], other[key]) (never
        less than zero) from self and records it in the returned Costs.

        Returns:
            Costs holding exactly what was subtracted
        """
        taken = Costs()
        for key in sorted(self.labor):
            amount = max(0.0, min(self.labor[key], other.get_labor(key)))
            self.labor[key] -= amount
            taken.track_labor(key, amount)
        for key in sorted(self.products):
            amount = max(0.0, min(self.products[key], other.get(key)))
            self.products[key] -= amount
            taken.track(key, amount)
        return taken

    def add(self, other: "Costs") -> "Costs":
        """Key-wise sum; missing keys count as 0.0."""
        return Costs(
            labor=_union_apply(self.labor, other.labor, lambda a, b: a + b),
            products=_union_apply(self.products, other.products, lambda a, b: a + b),
        )

    def sub(self, other: "Costs") -> "Costs":
        """Key-wise difference; missing keys count as 0.0."""
        return Costs(
            labor=_union_apply(self.labor, other.labor, lambda a, b: a - b),
            products=_union_apply(self.products, other.products, lambda a, b: a - b),
        )

    def mul(self, other: Union["Costs", Scalar]) -> "Costs":
        """
        Multiply by a scalar, or key-wise by another Costs.

        Key-wise multiplication keeps this vector's keys; a key missing on the
        right multiplies by 0.0.
        """
        if isinstance(other, Costs):
            return Costs(
                labor={k: self.labor[k] * other.get_labor(k) for k in sorted(self.labor)},
                products={k: self.products[k] * other.get(k) for k in sorted(self.products)},
            )
        factor = float(other)
        return Costs(
            labor={k: self.labor[k] * factor for k in sorted(self.labor)},
            products={k: self.products[k] * factor for k in sorted(self.products)},
        )

    def div(
        self,
        other: Union["Costs", Scalar],
        policy: Optional[DivisionPolicy] = None,
    ) -> "Costs":
        """
        Divide by a scalar, or key-wise by another Costs.

        Key-wise division treats a key missing on the right as a zero divisor.
        Keys present only on the right appear in the result as 0.0, so the
        result's keys are the union of both operands.

        Args:
            other: Divisor
            policy: Division-by-zero policy (default: global policy)

        Raises:
            DivideByZeroError: On a zero divisor under DivisionPolicy.STRICT
        """
        policy = policy or get_division_policy()
        if isinstance(other, Costs):
            labor = {
                k: divide_scalar(self.labor[k], other.get_labor(k), policy, f"labor:{k}")
                for k in sorted(self.labor)
            }
            products = {
                k: divide_scalar(self.products[k], other.get(k), policy, f"products:{k}")
                for k in sorted(self.products)
            }
            for k in sorted(other.labor):
                labor.setdefault(k, 0.0)
            for k in sorted(other.products):
                products.setdefault(k, 0.0)
            return Costs(labor=dict(sorted(labor.items())), products=dict(sorted(products.items())))

        divisor = float(other)
        return Costs(
            labor={k: divide_scalar(self.labor[k], divisor, policy, f"labor:{k}") for k in sorted(self.labor)},
            products={k: divide_scalar(self.products[k], divisor, policy, f"products:{k}") for k in sorted(self.products)},
        )

    def __add__(self, other: "Costs") -> "Costs":
        if not isinstance(other, Costs):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: "Costs") -> "Costs":
        if not isinstance(other, Costs):
            return NotImplemented
        return self.sub(other)

    def __mul__(self, other: Union["Costs", Scalar]) -> "Costs":
        if not isinstance(other, (Costs, int, float)):
            return NotImplemented
        return self.mul(other)

    def __rmul__(self, other: Scalar) -> "Costs":
        if not isinstance(other, (int, float)):
            return NotImplemented
        return self.mul(other)

    def __truediv__(self, other: Union["Costs", Scalar]) -> "Costs":
        if not isinstance(other, (Costs, int, float)):
            return NotImplemented
        return self.div(other)

    def __str__(self) -> str:
        """String representation."""
        labor = ", ".join(f"{k}={v:.4f}" for k, v in sorted(self.labor.items()))
        products = ", ".join(f"{k}={v:.4f}" for k, v in sorted(self.products.items()))
        return f"Costs(labor[{labor}], products[{products}])"


def _union_apply(left: Dict[str, float], right: Dict[str, float], op) -> Dict[str, float]:
    keys = sorted(set(left) | set(right))
    return {k: op(left.get(k, 0.0), right.get(k, 0.0)) for k in keys}
