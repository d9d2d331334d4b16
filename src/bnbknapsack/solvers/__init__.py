from __future__ import annotations

from typing import Dict

from ..constants import Oracle
from .base import RelaxationOracle, RelaxationResult
from .scipy_backend import ScipyRelaxationOracle
from .greedy_backend import GreedyRelaxationOracle


_ORACLES: Dict[str, RelaxationOracle] = {
    Oracle.HIGHS.value: ScipyRelaxationOracle(),
    Oracle.GREEDY.value: GreedyRelaxationOracle(),
}


def register_oracle(name: str, oracle: RelaxationOracle) -> None:
    _ORACLES[name] = oracle


def get_oracle(oracle: Oracle | str) -> RelaxationOracle:
    oracle_name = oracle.value if isinstance(oracle, Oracle) else str(oracle)
    if oracle_name not in _ORACLES:
        raise ValueError(f"No relaxation oracle registered under '{oracle_name}'")
    return _ORACLES[oracle_name]


__all__ = [
    "RelaxationOracle",
    "RelaxationResult",
    "ScipyRelaxationOracle",
    "GreedyRelaxationOracle",
    "get_oracle",
    "register_oracle",
]
