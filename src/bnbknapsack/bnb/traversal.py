"""
Node Selection

Depth-first search from the root, left child first: the next node to branch
is the first unexpanded leaf reached through unpruned nodes only.

`select_next_node` walks the whole tree on every call, which is linear in
the tree size. `OpenLeafFrontier` keeps the candidate leaves in the same
left-to-right order, so it returns the same node without the full walk.
"""

from __future__ import annotations

from typing import List, Sequence

from .node import BBNode, BBStatus
from .pruning import is_pruned


def select_next_node(status: BBStatus) -> BBNode | None:
    """First unpruned leaf in depth-first, left-first order, or None."""

    def explore(node: BBNode) -> BBNode | None:
        if is_pruned(node, status):
            return None
        if node.is_leaf:
            return node
        # Binary variables: two children or none
        for child in node.children:
            found = explore(child)
            if found is not None:
                return found
        return None

    return explore(status.root)


class OpenLeafFrontier:
    """Leaves that may still be branched, in left-to-right tree order.

    A pruned leaf never becomes open again: infeasibility and integrality are
    fixed at creation and the lower bound only grows. Pruned leaves are
    therefore dropped as soon as they are seen.
    """

    def __init__(self, root: BBNode):
        self._leaves: List[BBNode] = [root]

    def __len__(self) -> int:
        return len(self._leaves)

    @property
    def leaves(self) -> Sequence[BBNode]:
        return tuple(self._leaves)

    def select(self, status: BBStatus) -> BBNode | None:
        while self._leaves:
            node = self._leaves[0]
            if self._reachable(node, status):
                return node
            self._leaves.pop(0)
        return None

    def replace(self, node: BBNode) -> None:
        """Swap a freshly branched node for its two children, in place."""
        pos = self._leaves.index(node)
        self._leaves[pos : pos + 1] = list(node.children)

    @staticmethod
    def _reachable(node: BBNode, status: BBStatus) -> bool:
        # The recursive walk stops at the first pruned ancestor
        current: BBNode | None = node
        while current is not None:
            if is_pruned(current, status):
                return False
            current = current.parent
        return True
