__all__ = [
    "KnapsackProblem",
    "BranchAndBoundSearch",
    "SearchResult",
    "solve",
    "BBNode",
    "BBStatus",
    "BBStats",
    "RelaxationOracle",
    "RelaxationResult",
    "ScipyRelaxationOracle",
    "GreedyRelaxationOracle",
    "get_oracle",
    "register_oracle",
    "BranchAndBoundError",
    "OracleInfeasibleError",
    "OracleFailureError",
    "NoBranchingVariableError",
    "LPStatus",
    "PruneReason",
    "NodeSelection",
    "SearchState",
    "TerminationReason",
    "HIGHS",
    "GREEDY",
    "format_status",
    "to_networkx",
]

from .problem import KnapsackProblem
from .constants import (
    LPStatus,
    NodeSelection,
    Oracle,
    PruneReason,
    SearchState,
    TerminationReason,
)
from .errors import (
    BranchAndBoundError,
    NoBranchingVariableError,
    OracleFailureError,
    OracleInfeasibleError,
)
from .solvers import (
    GreedyRelaxationOracle,
    RelaxationOracle,
    RelaxationResult,
    ScipyRelaxationOracle,
    get_oracle,
    register_oracle,
)
from .bnb import BBNode, BBStats, BBStatus
from .search import BranchAndBoundSearch, SearchResult, solve
from .report import format_status, to_networkx

HIGHS = Oracle.HIGHS
GREEDY = Oracle.GREEDY
