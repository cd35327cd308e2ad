from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Tuple
import numpy as np
from .errors import MissingCapabilityError
from .solution import fingerprint as default_fingerprint

Solution = np.ndarray
ObjectiveFn = Callable[[Solution], float]
NeighborFn = Callable[[Solution, float, np.random.Generator], Optional[Solution]]
GenerateFn = Callable[[np.random.Generator], Optional[Solution]]
PerturbFn = Callable[[Solution, int, np.random.Generator], Solution]
CrossoverFn = Callable[[Solution, Solution, np.random.Generator], Tuple[Solution, Solution]]
MutateFn = Callable[[Solution, float, np.random.Generator], Solution]
ConstructFn = Callable[[float, np.random.Generator, ObjectiveFn], Solution]
DestroyFn = Callable[[Solution, float, np.random.Generator], Any]
RepairFn = Callable[[Any, np.random.Generator, ObjectiveFn], Solution]


@dataclass(frozen=True)
class Problem:
    """Capability bundle handed to every algorithm.

    Only ``objective`` is mandatory; algorithms declare which of the other
    functions they need and refuse to start without them.

    ``construct`` and the repair operators receive the algorithm's counted
    cost function as their last argument and must score candidates through
    it, never through ``objective`` directly.
    """
    name: str
    dimension: int
    objective: ObjectiveFn
    neighbor: Optional[NeighborFn] = None
    generate: Optional[GenerateFn] = None
    perturb: Optional[PerturbFn] = None
    crossover: Optional[CrossoverFn] = None
    mutate: Optional[MutateFn] = None
    construct: Optional[ConstructFn] = None
    destroy_ops: Mapping[str, DestroyFn] = field(default_factory=dict)
    repair_ops: Mapping[str, RepairFn] = field(default_factory=dict)
    fingerprint: Callable[[Solution], int] = default_fingerprint
    bounds: Optional[Tuple[np.ndarray, np.ndarray]] = None
    heuristic: Optional[np.ndarray] = None
    known_optimum: Optional[float] = None

    def require(self, algorithm: str, *capabilities: str) -> None:
        for cap in capabilities:
            value = getattr(self, cap, None)
            if value is None or (isinstance(value, Mapping) and not value):
                raise MissingCapabilityError(algorithm, cap, self.name)

    @property
    def lb(self) -> np.ndarray:
        return self.bounds[0]

    @property
    def ub(self) -> np.ndarray:
        return self.bounds[1]
