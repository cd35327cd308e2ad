from __future__ import annotations
import hashlib
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List
import numpy as np

INFEASIBLE = math.inf


def clone(x: np.ndarray) -> np.ndarray:
    return np.array(x, copy=True)


def is_feasible(cost: float) -> bool:
    return math.isfinite(cost)


def normalize_cost(cost) -> float:
    cost = float(cost)
    return cost if math.isfinite(cost) else INFEASIBLE


def fingerprint(x: np.ndarray, resolution: float = 1e-4) -> int:
    """Stable 64-bit digest of a solution.

    Real vectors are discretized to ``resolution`` so that values which only
    differ by rounding noise share a fingerprint.
    """
    a = np.asarray(x)
    if np.issubdtype(a.dtype, np.floating):
        a = np.floor(a / resolution).astype(np.int64)
    else:
        a = a.astype(np.int64, copy=False)
    digest = hashlib.blake2b(np.ascontiguousarray(a).tobytes(), digest_size=8).digest()
    return int.from_bytes(digest, "little")


class Termination(str, Enum):
    MAX_ITERATIONS = "iteration budget exhausted"
    CONVERGED = "convergence criterion met"
    TIME_LIMIT = "time budget exhausted"
    EXHAUSTED = "no further neighbors"


@dataclass
class OptResult:
    best: np.ndarray
    best_cost: float
    iterations: int
    evaluations: int
    reason: Termination
    history: List[float] = field(default_factory=list)
    elapsed: float = 0.0
    algorithm: str = ""

    @property
    def feasible(self) -> bool:
        return self.best is not None and is_feasible(self.best_cost)
