from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Protocol

import numpy as np

from ..constants import LPStatus
from ..problem import KnapsackProblem


@dataclass(frozen=True)
class RelaxationResult:
    status: LPStatus
    objective: float
    solution: np.ndarray

    @classmethod
    def failed(cls, problem: KnapsackProblem, status: LPStatus) -> RelaxationResult:
        """A non-optimal result: no objective and an all-zero solution."""
        return cls(
            status=status,
            objective=float("-inf"),
            solution=np.zeros(problem.n_objects),
        )


class RelaxationOracle(Protocol):
    """Solves the continuous knapsack relaxation under variable fixings.

    Maximises ``values . x`` subject to ``0 <= x <= 1``,
    ``weights . x <= capacity`` and ``x[v] == fixed[v]`` for every fixed
    index. Must be deterministic. Infeasibility and solver failures are
    reported through ``RelaxationResult.status``, never raised.
    """

    def solve_relaxation(
        self,
        problem: KnapsackProblem,
        fixed: Mapping[int, int],
    ) -> RelaxationResult:
        ...


def check_fixings(problem: KnapsackProblem, fixed: Mapping[int, int]) -> None:
    for idx, val in fixed.items():
        if not 0 <= idx < problem.n_objects:
            raise ValueError(
                f"Fixed variable index {idx} out of bounds for {problem.n_objects} objects"
            )
        if val not in (0, 1):
            raise ValueError(f"Variable {idx} can only be fixed to 0 or 1, got {val}")
