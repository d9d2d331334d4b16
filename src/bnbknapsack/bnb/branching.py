"""
Branching Variable Selection and Child Creation

Binary variables are always split into exactly two children: the left child
fixes the branching variable to 0 and the right child fixes it to 1. Each
child relaxation is solved from scratch with every fixing on its path.
"""

from __future__ import annotations

import logging
from typing import Tuple

from ..constants import LPStatus
from ..errors import NoBranchingVariableError
from ..problem import KnapsackProblem
from ..solvers.base import RelaxationOracle
from .node import BBNode, BBStats

logger = logging.getLogger(__name__)


def is_variable_branched_on(node: BBNode, variable: int) -> bool:
    """Whether `variable` is fixed anywhere on the path from `node` to the root."""
    return variable in node.fixed_assignments()


def select_branching_variable(problem: KnapsackProblem, node: BBNode) -> int:
    """Smallest fractional index of the node's relaxation not fixed on its path.

    Raises:
        NoBranchingVariableError: every fractional index is already fixed.
    """
    for idx, val in enumerate(node.lp_solution):
        if problem.is_fractional(float(val)) and not is_variable_branched_on(node, idx):
            return idx
    raise NoBranchingVariableError(node.node_id, node.lp_solution)


def create_child(
    problem: KnapsackProblem,
    oracle: RelaxationOracle,
    parent: BBNode,
    variable: int,
    value: int,
    node_id: int,
    stats: BBStats | None = None,
) -> BBNode:
    """Solve the relaxation below `parent` with `variable` fixed to `value`."""
    fixed = parent.fixed_assignments()
    fixed[variable] = value

    result = oracle.solve_relaxation(problem, fixed)
    if stats is not None:
        stats.lp_solves += 1
        stats.nodes_created += 1

    int_feas = result.status == LPStatus.OPTIMAL and problem.is_integer_solution(
        result.solution
    )
    node = BBNode.child(
        parent,
        node_id=node_id,
        variable=variable,
        variable_value=value,
        lp_objective=result.objective,
        lp_status=result.status,
        lp_solution=result.solution,
        integer_feasible=int_feas,
    )
    logger.debug(
        f"Node {node_id}: x[{variable}] = {value}, LP {result.status} "
        f"value {result.objective:.6g}{' (integer)' if int_feas else ''}"
    )
    return node


def branch(
    problem: KnapsackProblem,
    oracle: RelaxationOracle,
    parent: BBNode,
    variable: int,
    next_id: int,
    stats: BBStats | None = None,
) -> Tuple[BBNode, BBNode]:
    """Create both children of `parent` on `variable` and attach them."""
    left = create_child(problem, oracle, parent, variable, 0, next_id, stats)
    right = create_child(problem, oracle, parent, variable, 1, next_id + 1, stats)
    parent.attach_children(left, right)
    return left, right
