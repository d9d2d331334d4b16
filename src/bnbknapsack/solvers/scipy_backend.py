from __future__ import annotations

import logging
from typing import Dict, Mapping

import numpy as np
from scipy.optimize import linprog  # type: ignore

from ..constants import LPStatus
from ..problem import KnapsackProblem
from .base import RelaxationResult, check_fixings

logger = logging.getLogger(__name__)


class ScipyRelaxationOracle:
    """Knapsack relaxation solved with ``scipy.optimize.linprog``.

    Every call builds the LP from scratch: fixings become equal lower and
    upper bounds on the fixed variables.
    """

    SUPPORTED_METHODS = {"highs", "highs-ds", "highs-ipm"}

    # scipy.optimize.OptimizeResult.status codes
    _STATUS_MAP: Dict[int, LPStatus] = {
        0: LPStatus.OPTIMAL,
        2: LPStatus.INFEASIBLE,
    }

    def __init__(self, method: str = "highs", options: Dict[str, object] | None = None):
        if method not in self.SUPPORTED_METHODS:
            raise ValueError(f"Method '{method}' is not supported by the SciPy oracle")
        self.method = method
        self.options = dict(options) if options else {}

    def solve_relaxation(
        self,
        problem: KnapsackProblem,
        fixed: Mapping[int, int],
    ) -> RelaxationResult:
        check_fixings(problem, fixed)

        bounds = [(0.0, 1.0)] * problem.n_objects
        for idx, val in fixed.items():
            bounds[idx] = (float(val), float(val))

        # linprog minimises, so negate the values
        res = linprog(
            c=-problem.value_array,
            A_ub=problem.weight_array.reshape(1, -1),
            b_ub=[float(problem.capacity)],
            bounds=bounds,
            method=self.method,
            options=self.options or None,
        )

        status = self._STATUS_MAP.get(res.status, LPStatus.OTHER_FAILURE)
        if status != LPStatus.OPTIMAL or res.x is None:
            logger.debug(f"linprog returned status {res.status}: {res.message}")
            if status == LPStatus.OPTIMAL:
                status = LPStatus.OTHER_FAILURE
            return RelaxationResult.failed(problem, status)

        x = np.clip(np.asarray(res.x, dtype=float), 0.0, 1.0)
        return RelaxationResult(
            status=LPStatus.OPTIMAL,
            objective=float(-res.fun),
            solution=x,
        )
