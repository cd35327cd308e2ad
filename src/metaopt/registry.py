"""
registry.py

Name -> algorithm class table, plus ``build``/``solve`` helpers that turn a
plain parameter dict (e.g. a YAML block) into a configured algorithm.
"""
from __future__ import annotations
from dataclasses import fields
from typing import Any, Dict, Optional
from .algorithms.aco import AntColony
from .algorithms.base import Algorithm
from .algorithms.differential_evolution import DifferentialEvolution
from .algorithms.genetic import GeneticAlgorithm
from .algorithms.grasp import GRASP
from .algorithms.hill_climbing import (FirstImprovementHillClimbing, RandomRestartHillClimbing,
                                       SteepestHillClimbing, StochasticHillClimbing)
from .algorithms.ils import IteratedLocalSearch
from .algorithms.lns import AdaptiveLargeNeighborhoodSearch, LargeNeighborhoodSearch
from .algorithms.memetic import MemeticAlgorithm
from .algorithms.pso import ParticleSwarm
from .algorithms.simulated_annealing import SimulatedAnnealing
from .algorithms.tabu_search import TabuSearch
from .algorithms.vns import VariableNeighborhoodSearch
from .core.errors import ConfigurationError, UnknownAlgorithmError
from .core.problem import Problem
from .core.solution import OptResult

ALGORITHMS: Dict[str, type] = {cls.name: cls for cls in (
    SteepestHillClimbing, FirstImprovementHillClimbing, RandomRestartHillClimbing,
    StochasticHillClimbing, SimulatedAnnealing, TabuSearch, GRASP, IteratedLocalSearch,
    VariableNeighborhoodSearch, LargeNeighborhoodSearch, AdaptiveLargeNeighborhoodSearch,
    GeneticAlgorithm, MemeticAlgorithm, DifferentialEvolution, ParticleSwarm, AntColony,
)}


def build(name: str, problem: Problem, params: Optional[Dict[str, Any]] = None,
          rng=None, callback=None) -> Algorithm:
    key = name.upper()
    if key not in ALGORITHMS:
        raise UnknownAlgorithmError(name, sorted(ALGORITHMS))
    cls = ALGORITHMS[key]
    params = dict(params or {})
    known = {f.name for f in fields(cls.config_cls)}
    unknown = sorted(set(params) - known)
    if unknown:
        raise ConfigurationError(f"{key}: unknown parameter(s) {', '.join(unknown)}",
                                 suggestion=f"Valid parameters: {', '.join(sorted(known))}",
                                 details={"algorithm": key, "unknown": unknown})
    return cls(cls.config_cls(**params), problem, rng=rng, callback=callback)


def solve(name: str, problem: Problem, initial=None, **params) -> OptResult:
    return build(name, problem, params).run(initial)
