"""
Search Tree Reports

Read-only views of a search for humans and for analysis. A report is a
tagged value (`NodeReport` or `StatusReport`); `ReportVisitor.visit` picks
the handler from the tag, so new renderers only override the handlers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List

import networkx as nx

from .bnb import BBNode, BBStatus, classify
from .constants import PruneReason


class ReportKind(Enum):
    NODE = auto()
    STATUS = auto()


@dataclass(frozen=True)
class NodeReport:
    node: BBNode
    status: BBStatus
    level: int = 0
    kind: ReportKind = field(default=ReportKind.NODE, init=False)


@dataclass(frozen=True)
class StatusReport:
    status: BBStatus
    kind: ReportKind = field(default=ReportKind.STATUS, init=False)


class ReportVisitor:
    def visit(self, report: NodeReport | StatusReport):
        handlers = {
            ReportKind.NODE: self.visit_node,
            ReportKind.STATUS: self.visit_status,
        }
        if report.kind not in handlers:
            raise TypeError(f"Unknown report kind: {report.kind}")
        return handlers[report.kind](report)

    def visit_node(self, report: NodeReport):
        raise NotImplementedError

    def visit_status(self, report: StatusReport):
        raise NotImplementedError


class TextReportVisitor(ReportVisitor):
    """Renders a report as lines of text.

    Tree lines are indented by depth and flagged with `(I)` for
    integer-feasible nodes and `(P: <reason>)` for pruned ones.
    """

    def __init__(self, base_level: int = 2):
        self.base_level = base_level

    def visit_node(self, report: NodeReport) -> List[str]:
        node = report.node
        line = " . " + "  " * report.level
        if node.is_root:
            line += f"Root node:               {node.lp_objective}"
        else:
            line += (
                f"Variable {node.variable}   :   {node.variable_value}   ;   "
                f"{node.lp_objective}"
            )
        line += "  (I)" if node.integer_feasible else "     "

        reason = classify(node, report.status)
        if reason != PruneReason.NONE:
            line += f"  (P: {reason.value.capitalize()})"

        lines = [line.rstrip()]
        for child in node.children:
            lines.extend(
                self.visit(NodeReport(child, report.status, report.level + 1))
            )
        return lines

    def visit_status(self, report: StatusReport) -> List[str]:
        status = report.status
        lines = [
            " . Complete branch-and-bound status, including tree.",
            f" . Upper bound: {status.upper_bound}",
            f" . Lower bound: {status.lower_bound}",
            f" . Incumbent: {status.incumbent}",
            " . Tree: ",
        ]
        lines.extend(self.visit(NodeReport(status.root, status, self.base_level)))
        return lines


def format_tree(status: BBStatus) -> str:
    visitor = TextReportVisitor()
    return "\n".join(visitor.visit(NodeReport(status.root, status, visitor.base_level)))


def format_status(status: BBStatus) -> str:
    return "\n".join(TextReportVisitor().visit(StatusReport(status)))


def to_networkx(status: BBStatus) -> nx.DiGraph:
    """Export the search tree as a directed graph keyed by node id.

    Edges point from parent to child and carry the fixing that separates
    them. Node attributes mirror the node fields plus the current pruning
    reason.
    """
    graph = nx.DiGraph()
    for node in status.root.iter_subtree():
        graph.add_node(
            node.node_id,
            variable=node.variable,
            variable_value=node.variable_value,
            lp_objective=node.lp_objective,
            lp_status=node.lp_status,
            integer_feasible=node.integer_feasible,
            depth=node.depth,
            pruned=classify(node, status),
        )
        for child in node.children:
            graph.add_edge(
                node.node_id,
                child.node_id,
                variable=child.variable,
                value=child.variable_value,
            )
    return graph
