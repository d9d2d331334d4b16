from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .constants import DEFAULT_GAP_PRECISION, DEFAULT_INTEGER_PRECISION


def _as_integer(name: str, value) -> int:
    # 2.0 is accepted as 2, 1.7 is not truncated to 1
    as_int = int(value)
    if as_int != value:
        raise ValueError(f"{name} must be integers, got {value!r}")
    return as_int

@dataclass(frozen=True)
class KnapsackProblem:
    """A 0/1 knapsack instance together with its numeric tolerances.

    The instance is read-only for the whole search and is handed explicitly
    to the relaxation oracle, the branching rule and the pruning checks.

    A relaxation value ``v`` counts as integral when ``v <= integer_precision``
    or ``v >= 1 - integer_precision``. The search stops once the relative
    optimality gap is at most ``gap_precision``.
    """

    values: Tuple[int, ...]
    weights: Tuple[int, ...]
    capacity: int
    integer_precision: float = DEFAULT_INTEGER_PRECISION
    gap_precision: float = DEFAULT_GAP_PRECISION

    def __post_init__(self):
        for name in ("values", "weights"):
            seq = getattr(self, name)
            if isinstance(seq, (str, bytes)) or not isinstance(
                seq, (Sequence, np.ndarray)
            ):
                raise TypeError(
                    f"{name} must be a sequence, got {type(seq).__name__}"
                )

        # Normalise to tuples so the instance stays hashable and immutable
        object.__setattr__(
            self, "values", tuple(_as_integer("values", v) for v in self.values)
        )
        object.__setattr__(
            self, "weights", tuple(_as_integer("weights", w) for w in self.weights)
        )
        object.__setattr__(self, "capacity", _as_integer("capacity", self.capacity))

        if len(self.values) == 0:
            raise ValueError("A knapsack problem needs at least one object")
        if len(self.values) != len(self.weights):
            raise ValueError(
                f"values and weights must have the same length, got "
                f"{len(self.values)} and {len(self.weights)}"
            )
        if any(v < 0 for v in self.values):
            raise ValueError("values must be non-negative")
        if any(w < 0 for w in self.weights):
            raise ValueError("weights must be non-negative")
        if not 0.0 < self.integer_precision < 0.5:
            raise ValueError(
                f"integer_precision must be in (0, 0.5), got {self.integer_precision}"
            )
        if not self.gap_precision > 0.0:
            raise ValueError(f"gap_precision must be positive, got {self.gap_precision}")

    @property
    def n_objects(self) -> int:
        return len(self.values)

    @property
    def value_array(self) -> np.ndarray:
        return np.asarray(self.values, dtype=float)

    @property
    def weight_array(self) -> np.ndarray:
        return np.asarray(self.weights, dtype=float)

    def objective(self, x: Sequence[float]) -> float:
        return float(np.dot(self.value_array, np.asarray(x, dtype=float)))

    def is_integral(self, value: float) -> bool:
        return value <= self.integer_precision or value >= 1.0 - self.integer_precision

    def is_fractional(self, value: float) -> bool:
        return self.integer_precision < value < 1.0 - self.integer_precision

    def is_integer_solution(self, solution: Sequence[float]) -> bool:
        return all(self.is_integral(float(s)) for s in solution)
