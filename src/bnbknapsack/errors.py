"""Errors raised by the branch-and-bound search.

Only conditions with no recovery are raised. An infeasible or failed
relaxation below the root is stored on the node and pruned instead.
"""

from __future__ import annotations


class BranchAndBoundError(RuntimeError):
    """Base class for fatal search errors."""


class OracleInfeasibleError(BranchAndBoundError):
    """The root relaxation has no feasible point."""


class OracleFailureError(BranchAndBoundError):
    """The relaxation solver failed on the root relaxation."""


class NoBranchingVariableError(BranchAndBoundError):
    """A fractional solution has no unfixed fractional variable to branch on."""

    def __init__(self, node_id: int, solution) -> None:
        self.node_id = node_id
        self.solution = solution
        super().__init__(
            f"Node {node_id} is fractional but every fractional variable is "
            f"already fixed on its path: {list(solution)}"
        )
