"""
Branch-and-Bound Node, Status and Statistics Dataclasses

Nodes own their children outright and keep only a weak reference to their
parent, so the tree has a single owner (the search status holds the root)
and no reference cycles. The parent link exists for walking back to the
root when rebuilding a node's fixed assignments.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

import numpy as np

from ..constants import LPStatus


@dataclass(eq=False)
class BBNode:
    """
    A node in the branch-and-bound tree.

    Semantics:
    - `variable` is the index fixed relative to the parent, or None for the
      root. It is paired with `variable_value`, which is 0 or 1.
    - The relaxation fields describe the LP solved with every fixing on the
      path from the root to this node.
    - All fields are fixed at creation except `children`, which is set once,
      as a pair, when the node is branched.
    """

    node_id: int
    variable: int | None
    variable_value: int
    lp_objective: float
    lp_status: LPStatus
    lp_solution: np.ndarray
    integer_feasible: bool
    depth: int = 0

    _parent_ref: weakref.ReferenceType | None = field(default=None, repr=False)
    _children: Tuple[BBNode, ...] = field(default=(), repr=False)

    @classmethod
    def root(
        cls,
        lp_objective: float,
        lp_status: LPStatus,
        lp_solution: np.ndarray,
        integer_feasible: bool,
    ) -> BBNode:
        return cls(
            node_id=0,
            variable=None,
            variable_value=0,
            lp_objective=lp_objective,
            lp_status=lp_status,
            lp_solution=lp_solution,
            integer_feasible=integer_feasible,
        )

    @classmethod
    def child(
        cls,
        parent: BBNode,
        node_id: int,
        variable: int,
        variable_value: int,
        lp_objective: float,
        lp_status: LPStatus,
        lp_solution: np.ndarray,
        integer_feasible: bool,
    ) -> BBNode:
        if variable_value not in (0, 1):
            raise ValueError(f"Binary variables branch on 0 or 1, got {variable_value}")
        if variable in parent.path_variables():
            raise ValueError(
                f"Variable {variable} is already fixed on the path to node {parent.node_id}"
            )
        return cls(
            node_id=node_id,
            variable=variable,
            variable_value=variable_value,
            lp_objective=lp_objective,
            lp_status=lp_status,
            lp_solution=lp_solution,
            integer_feasible=integer_feasible,
            depth=parent.depth + 1,
            _parent_ref=weakref.ref(parent),
        )

    @property
    def parent(self) -> BBNode | None:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def children(self) -> Tuple[BBNode, ...]:
        return self._children

    @property
    def is_root(self) -> bool:
        return self.variable is None

    @property
    def is_leaf(self) -> bool:
        return not self._children

    def attach_children(self, left: BBNode, right: BBNode) -> None:
        """Attach both branches at once. A node is branched at most once."""
        if self._children:
            raise ValueError(f"Node {self.node_id} already has children")
        if left.parent is not self or right.parent is not self:
            raise ValueError(f"Children were not created from node {self.node_id}")
        if left.variable != right.variable:
            raise ValueError("Both children must branch on the same variable")
        self._children = (left, right)

    def fixed_assignments(self) -> Dict[int, int]:
        """Fixings from the root down to this node, as index -> value."""
        fixed: Dict[int, int] = {}
        node = self
        while not node.is_root:
            fixed[node.variable] = node.variable_value
            parent = node.parent
            if parent is None:
                # The tree is owned by the root; a dangling node cannot be traced
                raise RuntimeError(
                    f"Node {node.node_id} outlived the tree it belonged to"
                )
            node = parent
        return fixed

    def path_variables(self) -> List[int]:
        return list(self.fixed_assignments())

    def iter_subtree(self) -> Iterator[BBNode]:
        """Pre-order walk, left child before right child."""
        yield self
        for child in self._children:
            yield from child.iter_subtree()


@dataclass(eq=False)
class BBStatus:
    """Global search state: bounds, incumbent and the tree root."""

    root: BBNode
    upper_bound: float
    lower_bound: float = float("-inf")
    incumbent: List[int] = field(default_factory=list)

    @property
    def has_incumbent(self) -> bool:
        return bool(self.incumbent)


@dataclass
class BBStats:
    """Statistics from the branch-and-bound search."""

    iterations: int = 0
    nodes_created: int = 0
    lp_solves: int = 0
    nodes_infeasible: int = 0
    incumbent_updates: int = 0
    gap: float = float("nan")
    solve_time: float = 0.0
    # (iteration, lower_bound, upper_bound) after each iteration
    history: List[Tuple[int, float, float]] = field(default_factory=list)
