from __future__ import annotations

from ..constants import LPStatus, PruneReason
from .node import BBNode, BBStatus


def classify(node: BBNode, status: BBStatus) -> PruneReason:
    """Why a node is pruned, or PruneReason.NONE if it can still be branched.

    Checked in order: infeasible (or failed) relaxation, integer-feasible
    relaxation, relaxation objective strictly below the incumbent value.
    A node whose objective equals the incumbent value stays open.
    """
    if node.lp_status != LPStatus.OPTIMAL:
        return PruneReason.FEASIBILITY
    # Integer-feasible nodes are finished leaves; the incumbent was already
    # updated when the node was created.
    if node.integer_feasible:
        return PruneReason.OPTIMALITY
    if node.lp_objective < status.lower_bound:
        return PruneReason.BOUNDS
    return PruneReason.NONE


def is_pruned(node: BBNode, status: BBStatus) -> bool:
    return classify(node, status) != PruneReason.NONE
