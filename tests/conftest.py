import numpy as np
import pytest

from bnbknapsack import GreedyRelaxationOracle, KnapsackProblem, RelaxationResult
from bnbknapsack.constants import LPStatus


@pytest.fixture
def small_problem():
    """Four-object instance whose optimum is [0, 1, 1, 1] with value 42."""
    return KnapsackProblem(
        values=[16, 22, 12, 8],
        weights=[5, 7, 4, 3],
        capacity=14,
        integer_precision=1e-4,
        gap_precision=1e-3,
    )


@pytest.fixture
def roomy_problem():
    """Same objects, but everything fits."""
    return KnapsackProblem(values=[16, 22, 12, 8], weights=[5, 7, 4, 3], capacity=30)


@pytest.fixture
def medium_problem():
    return KnapsackProblem(
        values=[10, 13, 7, 8, 9, 4, 11, 6],
        weights=[4, 6, 3, 5, 4, 2, 7, 3],
        capacity=17,
    )


@pytest.fixture
def greedy_oracle():
    return GreedyRelaxationOracle()


class FailingOracle:
    """Greedy oracle that reports a solver failure for chosen fixings."""

    def __init__(self, fail_on, status=LPStatus.OTHER_FAILURE):
        self.fail_on = dict(fail_on)
        self.status = status
        self.inner = GreedyRelaxationOracle()
        self.calls = []

    def solve_relaxation(self, problem, fixed):
        self.calls.append(dict(fixed))
        if self.fail_on and all(fixed.get(k) == v for k, v in self.fail_on.items()):
            return RelaxationResult.failed(problem, self.status)
        return self.inner.solve_relaxation(problem, fixed)


class StuckOracle:
    """Returns the same fractional point whatever is fixed."""

    def solve_relaxation(self, problem, fixed):
        return RelaxationResult(
            status=LPStatus.OPTIMAL,
            objective=10.0,
            solution=np.full(problem.n_objects, 0.5),
        )


@pytest.fixture
def make_failing_oracle():
    return FailingOracle


@pytest.fixture
def stuck_oracle():
    return StuckOracle()
