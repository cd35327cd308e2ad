from __future__ import annotations
from pathlib import Path
from typing import Any, Dict
import yaml
from .benchmarks.continuous import continuous_problem
from .benchmarks.tsp import INSTANCES, random_instance, tsp_problem
from .core.errors import ConfigurationError
from .core.problem import Problem


def load_config(path) -> Dict[str, Any]:
    p = Path(path)
    if not p.is_file():
        raise ConfigurationError(f"config file not found: {p}")
    cfg = yaml.safe_load(p.read_text())
    if not isinstance(cfg, dict):
        raise ConfigurationError(f"{p}: expected a mapping at the top level")
    return cfg


def _no_extra(spec, allowed) -> None:
    extra = sorted(set(spec) - set(allowed))
    if extra:
        raise ConfigurationError(f"unknown problem option(s) {', '.join(extra)}")


def problem_from_config(spec: Dict[str, Any]) -> Problem:
    """Build a benchmark problem from the ``problem:`` block of an experiment file."""
    spec = dict(spec or {})
    kind = spec.pop("type", None)
    if kind == "tsp":
        name = spec.pop("instance", "square4")
        if name == "random":
            inst = random_instance(int(spec.pop("n", 30)), seed=int(spec.pop("seed", 0)))
        elif name in INSTANCES:
            inst = INSTANCES[name]()
        else:
            raise ConfigurationError(f"unknown TSP instance '{name}'",
                                     suggestion=f"Use 'random' or one of: {', '.join(INSTANCES)}")
        _no_extra(spec, ("move", "crossover", "mutation"))
        return tsp_problem(inst, **spec)
    if kind == "continuous":
        fn, dim = spec.pop("function", "sphere"), int(spec.pop("dim", 2))
        _no_extra(spec, ())
        return continuous_problem(fn, dim)
    raise ConfigurationError(f"unknown problem type {kind!r}", suggestion="Use 'tsp' or 'continuous'")
