"""
Bound Maintenance

The lower bound is the value of the incumbent and only ever increases. The
upper bound is recomputed from the leaves of the tree after each branching.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

from ..constants import LPStatus
from .node import BBNode, BBStats, BBStatus
from .pruning import is_pruned

logger = logging.getLogger(__name__)


def round_solution(solution: Sequence[float]) -> List[int]:
    """Round half up: values below 0.5 become 0, everything else 1."""
    return [0 if s < 0.5 else 1 for s in solution]


def update_incumbent(status: BBStatus, node: BBNode, stats: BBStats | None = None) -> bool:
    """Adopt `node` as the incumbent if it is integer-feasible and strictly better."""
    if node.lp_status != LPStatus.OPTIMAL or not node.integer_feasible:
        return False
    if node.lp_objective <= status.lower_bound:
        return False

    status.lower_bound = node.lp_objective
    status.incumbent = round_solution(node.lp_solution)
    if stats is not None:
        stats.incumbent_updates += 1
    logger.info(f"New incumbent from node {node.node_id}: value {node.lp_objective:.6g}")
    return True


def compute_upper_bound(status: BBStatus) -> float:
    """Maximum relaxation objective over the unresolved leaves.

    The optimum lies below one of the unresolved leaves, so the largest of
    their relaxations bounds it. A leaf that is pruned, whether by bounds,
    integrality or infeasibility, is resolved and counts as -inf. Internal
    nodes take the maximum of their two children.
    """

    def leaf_bound(node: BBNode) -> float:
        if not node.is_leaf:
            return max(leaf_bound(child) for child in node.children)
        if is_pruned(node, status):
            return -math.inf
        return node.lp_objective

    return leaf_bound(status.root)


def refresh_upper_bound(status: BBStatus) -> float:
    """Recompute the upper bound and store it on the status.

    Every unresolved leaf has an objective of at least the lower bound, so
    the result never drops below it. Once every leaf is resolved the tree
    proves the incumbent optimal and the upper bound drops to its value.
    Without an incumbent a fully resolved tree leaves the bound unchanged.
    """
    bound = compute_upper_bound(status)
    if not math.isinf(bound):
        status.upper_bound = bound
    elif status.has_incumbent:
        status.upper_bound = status.lower_bound
    return status.upper_bound


def compute_gap(upper_bound: float, lower_bound: float) -> float:
    """Relative gap (upper - lower) / upper.

    NaN until an incumbent exists, so `gap <= tolerance` is False and the
    search cannot stop before finding a first integer solution.
    """
    if math.isinf(lower_bound):
        return math.nan
    if upper_bound == lower_bound:
        return 0.0
    if upper_bound == 0.0:
        return math.inf
    return (upper_bound - lower_bound) / upper_bound
