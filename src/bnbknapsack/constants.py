from enum import StrEnum, Enum


class Oracle(StrEnum):
    HIGHS = "highs"  # scipy.optimize.linprog
    GREEDY = "greedy"  # Closed-form Dantzig relaxation


class LPStatus(StrEnum):
    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    OTHER_FAILURE = "other_failure"


class PruneReason(StrEnum):
    NONE = "none"
    FEASIBILITY = "feasibility"
    OPTIMALITY = "optimality"
    BOUNDS = "bounds"


class NodeSelection(Enum):
    """Node selection strategy. Both are depth-first, left child first."""

    RECURSIVE = "recursive"  # Re-walk the tree from the root every iteration
    FRONTIER = "frontier"  # Keep an ordered list of open leaves


class SearchState(StrEnum):
    INIT = "init"
    EXPLORING = "exploring"
    TERMINATED = "terminated"


class TerminationReason(StrEnum):
    ROOT_INTEGER = "root_integer"
    GAP_CLOSED = "gap_closed"
    TREE_EXHAUSTED = "tree_exhausted"
    MAX_ITERATIONS = "max_iterations"
    MAX_TIME = "max_time"


DEFAULT_INTEGER_PRECISION = 1e-4
DEFAULT_GAP_PRECISION = 1e-3
DEFAULT_NODE_SELECTION = NodeSelection.RECURSIVE.value
