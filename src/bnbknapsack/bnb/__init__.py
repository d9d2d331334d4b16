"""
Depth-First Branch-and-Bound for the 0/1 Knapsack Problem

Modules:
- node: Node, status and statistics dataclasses
- pruning: Pruning classification
- branching: Branching variable selection and child creation
- traversal: Depth-first, left-first node selection
- bounds: Incumbent, upper bound and gap maintenance
"""

from .node import BBNode, BBStats, BBStatus
from .pruning import classify, is_pruned
from .branching import (
    branch,
    create_child,
    is_variable_branched_on,
    select_branching_variable,
)
from .traversal import OpenLeafFrontier, select_next_node
from .bounds import (
    compute_gap,
    compute_upper_bound,
    refresh_upper_bound,
    round_solution,
    update_incumbent,
)

__all__ = [
    "BBNode",
    "BBStats",
    "BBStatus",
    "classify",
    "is_pruned",
    "branch",
    "create_child",
    "is_variable_branched_on",
    "select_branching_variable",
    "OpenLeafFrontier",
    "select_next_node",
    "compute_gap",
    "compute_upper_bound",
    "refresh_upper_bound",
    "round_solution",
    "update_incumbent",
]
