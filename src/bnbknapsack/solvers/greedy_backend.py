"""
Closed-form Knapsack Relaxation

The continuous 0/1 knapsack has an optimal solution given by Dantzig's rule:
take items in decreasing value/weight order until one no longer fits, then
take the fraction of that item that fills the remaining capacity. Fixed items
are placed first and reduce the capacity left for the free ones.
"""

from __future__ import annotations

import logging
from typing import List, Mapping

import numpy as np

from ..constants import LPStatus
from ..problem import KnapsackProblem
from .base import RelaxationResult, check_fixings

logger = logging.getLogger(__name__)


def _ratio_order(problem: KnapsackProblem, free: List[int]) -> List[int]:
    """Free indices by decreasing value/weight ratio, ties by index.

    Zero-weight items come first since they cost no capacity.
    """

    def key(idx: int):
        weight = problem.weights[idx]
        ratio = float("inf") if weight == 0 else problem.values[idx] / weight
        return (-ratio, idx)

    return sorted(free, key=key)


class GreedyRelaxationOracle:
    """Exact relaxation oracle for knapsack, without an LP solver."""

    def solve_relaxation(
        self,
        problem: KnapsackProblem,
        fixed: Mapping[int, int],
    ) -> RelaxationResult:
        check_fixings(problem, fixed)

        x = np.zeros(problem.n_objects)
        residual = float(problem.capacity)
        for idx, val in fixed.items():
            x[idx] = float(val)
            residual -= val * problem.weights[idx]

        if residual < 0:
            logger.debug(
                f"Fixed weight exceeds capacity by {-residual}, relaxation infeasible"
            )
            return RelaxationResult.failed(problem, LPStatus.INFEASIBLE)

        free = [i for i in range(problem.n_objects) if i not in fixed]
        for idx in _ratio_order(problem, free):
            weight = problem.weights[idx]
            if problem.values[idx] == 0:
                continue
            if weight <= residual:
                x[idx] = 1.0
                residual -= weight
            else:
                x[idx] = residual / weight
                break

        return RelaxationResult(
            status=LPStatus.OPTIMAL,
            objective=problem.objective(x),
            solution=x,
        )
