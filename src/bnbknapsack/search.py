"""
Branch-and-Bound Search Driver

Runs the search as a three-state machine:

- INIT: solve the root relaxation. An infeasible or failed root is fatal; an
  integral root is already optimal and the search terminates.
- EXPLORING: pick the first open leaf depth-first, branch it on its smallest
  unfixed fractional variable, update the incumbent and the bounds. Stops
  when the relative gap closes, the tree has no open leaf left, or an
  optional iteration or time limit is hit.
- TERMINATED: the bounds and incumbent are final.

Every relaxation is a blocking call to the oracle, solved from scratch.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Dict, List

from .bnb import (
    BBNode,
    BBStats,
    BBStatus,
    OpenLeafFrontier,
    branch,
    compute_gap,
    refresh_upper_bound,
    round_solution,
    select_branching_variable,
    select_next_node,
    update_incumbent,
)
from .constants import (
    DEFAULT_NODE_SELECTION,
    LPStatus,
    NodeSelection,
    Oracle,
    SearchState,
    TerminationReason,
)
from .errors import OracleFailureError, OracleInfeasibleError
from .problem import KnapsackProblem
from .solvers import RelaxationOracle, get_oracle

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    upper_bound: float
    lower_bound: float
    incumbent: List[int]
    gap: float
    reason: TerminationReason
    state: SearchState
    stats: BBStats
    # Holding the root keeps the whole tree alive for reports
    root: BBNode

    @property
    def objective(self) -> float | None:
        return self.lower_bound if self.incumbent else None

    @property
    def is_optimal(self) -> bool:
        if not self.incumbent:
            return False
        return self.reason in (
            TerminationReason.ROOT_INTEGER,
            TerminationReason.GAP_CLOSED,
            TerminationReason.TREE_EXHAUSTED,
        )


class BranchAndBoundSearch:
    """
    Depth-first branch-and-bound over knapsack relaxations.

    Options:
        - node_selection: "recursive" walks the tree from the root on every
          iteration, "frontier" keeps an ordered list of open leaves. Both
          select the same node. (default: "recursive")
        - max_iterations: Stop after this many branchings (default: None)
        - max_time: Stop after this many seconds (default: None)
        - verbose: Print a progress line per iteration (default: False)
    """

    def __init__(
        self,
        problem: KnapsackProblem,
        oracle: RelaxationOracle | Oracle | str | None = None,
        options: Dict[str, object] | None = None,
    ):
        if not isinstance(problem, KnapsackProblem):
            raise TypeError(
                f"problem must be a KnapsackProblem, got {type(problem).__name__}"
            )

        opts = dict(options) if options else {}
        self.node_selection = NodeSelection(
            str(opts.pop("node_selection", DEFAULT_NODE_SELECTION))
        )
        max_iterations = opts.pop("max_iterations", None)
        max_time = opts.pop("max_time", None)
        self.max_iterations = int(max_iterations) if max_iterations is not None else None
        self.max_time = float(max_time) if max_time is not None else None
        self.verbose = bool(opts.pop("verbose", False))
        if opts:
            raise ValueError(f"Unknown search options: {', '.join(sorted(opts))}")
        if self.max_iterations is not None and self.max_iterations < 0:
            raise ValueError(f"max_iterations must be non-negative, got {self.max_iterations}")
        if self.max_time is not None and self.max_time <= 0:
            raise ValueError(f"max_time must be positive, got {self.max_time}")

        if oracle is None:
            oracle = Oracle.HIGHS
        if isinstance(oracle, str):
            oracle = get_oracle(oracle)

        self.problem = problem
        self.oracle = oracle
        self.state = SearchState.INIT
        self.status: BBStatus | None = None
        self.stats = BBStats()
        self.reason: TerminationReason | None = None

        self._frontier: OpenLeafFrontier | None = None
        self._next_id = 1
        self._start_time = 0.0

    def initialize(self) -> None:
        """Solve the root relaxation and leave the INIT state."""
        if self.state != SearchState.INIT:
            raise RuntimeError(f"Search already initialized (state: {self.state})")

        self._start_time = time.time()
        result = self.oracle.solve_relaxation(self.problem, {})
        self.stats.lp_solves += 1

        if result.status == LPStatus.INFEASIBLE:
            logger.error("Root relaxation is infeasible")
            raise OracleInfeasibleError(
                "Root relaxation is infeasible, no incumbent can be established"
            )
        if result.status != LPStatus.OPTIMAL:
            logger.error(f"Root relaxation could not be solved to optimality: {result.status}")
            raise OracleFailureError(
                f"Root relaxation could not be solved to optimality: {result.status}"
            )

        int_feas = self.problem.is_integer_solution(result.solution)
        root = BBNode.root(
            lp_objective=result.objective,
            lp_status=result.status,
            lp_solution=result.solution,
            integer_feasible=int_feas,
        )
        self.stats.nodes_created += 1
        self.status = BBStatus(root=root, upper_bound=result.objective)
        logger.info(f"Root node solved. LP value: {result.objective:.6g}")

        if self.verbose:
            print(f"Branch-and-Bound: {self.problem.n_objects} objects, "
                  f"capacity {self.problem.capacity}")
            print(f"Node selection: {self.node_selection.value}")
            print(f"{'Iter':>6} {'Nodes':>6} {'Incumbent':>12} {'Upper':>12} {'Gap':>10}")
            print("-" * 50)

        if int_feas:
            # The root relaxation is integral, hence optimal
            self.status.lower_bound = result.objective
            self.status.upper_bound = result.objective
            self.status.incumbent = round_solution(result.solution)
            self.stats.incumbent_updates += 1
            self.stats.gap = compute_gap(self.status.upper_bound, self.status.lower_bound)
            self._record()
            logger.info("Solved at root node")
            self._terminate(TerminationReason.ROOT_INTEGER)
            return

        if self.node_selection == NodeSelection.FRONTIER:
            self._frontier = OpenLeafFrontier(root)
        self.stats.gap = compute_gap(self.status.upper_bound, self.status.lower_bound)
        self._record()
        self.state = SearchState.EXPLORING

    def step(self) -> None:
        """Run one EXPLORING iteration: select, branch, update bounds."""
        if self.state != SearchState.EXPLORING:
            raise RuntimeError(f"Cannot step a search in state {self.state}")
        status = self.status

        if self.max_iterations is not None and self.stats.iterations >= self.max_iterations:
            self._terminate(TerminationReason.MAX_ITERATIONS)
            return
        if self.max_time is not None and time.time() - self._start_time > self.max_time:
            self._terminate(TerminationReason.MAX_TIME)
            return

        node = self._select_node()
        if node is None:
            logger.info("No more branches to explore in the tree")
            self._terminate(TerminationReason.TREE_EXHAUSTED)
            return

        variable = select_branching_variable(self.problem, node)
        self.stats.iterations += 1
        logger.debug(
            f"[{self.stats.iterations}] Branching node {node.node_id} on variable {variable}"
        )

        left, right = branch(
            self.problem, self.oracle, node, variable, self._next_id, self.stats
        )
        self._next_id += 2
        if self._frontier is not None:
            self._frontier.replace(node)

        for child in (left, right):
            if child.lp_status != LPStatus.OPTIMAL:
                self.stats.nodes_infeasible += 1
                logger.debug(f"Node {child.node_id} pruned by infeasibility")
                continue
            if update_incumbent(status, child, self.stats) and self.verbose:
                self._print_progress(marker="*")

        refresh_upper_bound(status)
        self.stats.gap = compute_gap(status.upper_bound, status.lower_bound)
        self._record()
        logger.debug(
            f"[{self.stats.iterations}] Iteration done. Gap: {self.stats.gap:.3e}. "
            f"Bound: [{status.lower_bound:.6g}; {status.upper_bound:.6g}]"
        )
        if self.verbose:
            self._print_progress()

        # NaN (no incumbent yet) never satisfies the test
        if self.stats.gap <= self.problem.gap_precision:
            self._terminate(TerminationReason.GAP_CLOSED)

    def run(self) -> SearchResult:
        if self.state == SearchState.INIT:
            self.initialize()
        while self.state == SearchState.EXPLORING:
            self.step()
        return self.result()

    def result(self) -> SearchResult:
        if self.state != SearchState.TERMINATED:
            raise RuntimeError(f"No result before termination (state: {self.state})")
        status = self.status
        return SearchResult(
            upper_bound=status.upper_bound,
            lower_bound=status.lower_bound,
            incumbent=list(status.incumbent),
            gap=self.stats.gap,
            reason=self.reason,
            state=self.state,
            stats=self.stats,
            root=status.root,
        )

    def _select_node(self) -> BBNode | None:
        if self._frontier is not None:
            return self._frontier.select(self.status)
        return select_next_node(self.status)

    def _record(self) -> None:
        self.stats.history.append(
            (self.stats.iterations, self.status.lower_bound, self.status.upper_bound)
        )

    def _terminate(self, reason: TerminationReason) -> None:
        self.state = SearchState.TERMINATED
        self.stats.solve_time = time.time() - self._start_time
        self.reason = reason
        logger.info(
            f"Search terminated ({reason}) after {self.stats.iterations} iterations: "
            f"lower bound {self.status.lower_bound:.6g}, "
            f"upper bound {self.status.upper_bound:.6g}"
        )
        if self.verbose:
            print("-" * 50)
            print(f"Termination: {reason}")
            print(f"Iterations: {self.stats.iterations}")
            print(f"LP solves: {self.stats.lp_solves}")
            print(f"Solve time: {self.stats.solve_time:.3f}s")
            if self.status.has_incumbent:
                print(f"Best objective: {self.status.lower_bound:.6g}")
                print(f"Incumbent: {self.status.incumbent}")

    def _print_progress(self, marker: str = "") -> None:
        status = self.status
        inc_str = (
            f"{status.lower_bound:>12.4f}" if not math.isinf(status.lower_bound) else "        -inf"
        )
        print(f"{self.stats.iterations:>6} {self.stats.nodes_created:>6} {inc_str} "
              f"{status.upper_bound:>12.4f} {self.stats.gap:>10.2e} {marker}")


def solve(
    problem: KnapsackProblem,
    oracle: RelaxationOracle | Oracle | str | None = None,
    options: Dict[str, object] | None = None,
) -> SearchResult:
    """Solve a knapsack problem by depth-first branch-and-bound.

    Args:
        problem: The knapsack instance and its tolerances
        oracle: A relaxation oracle, or the name of a registered one
            (default: "highs")
        options: Search options, see `BranchAndBoundSearch`

    Returns:
        SearchResult with the final bounds and incumbent

    Raises:
        OracleInfeasibleError: The root relaxation is infeasible
        OracleFailureError: The root relaxation could not be solved
        NoBranchingVariableError: A fractional node had no variable to branch on
    """
    return BranchAndBoundSearch(problem, oracle, options).run()
