"""
continuous.py

Box-constrained test functions (bowl, multimodal, valley) and the real-vector
operators used to run every algorithm on them.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Callable, Dict, Tuple
import numpy as np
from ..core.errors import ConfigurationError
from ..core.problem import Problem


def sphere(x: np.ndarray) -> float:
    return float(np.dot(x, x))

def rastrigin(x: np.ndarray) -> float:
    return float(10.0 * x.size + (x**2 - 10.0 * np.cos(2 * np.pi * x)).sum())

def rosenbrock(x: np.ndarray) -> float:
    return float((100.0 * (x[1:] - x[:-1]**2)**2 + (1.0 - x[:-1])**2).sum())

def ackley(x: np.ndarray) -> float:
    d = x.size
    a = -20.0 * np.exp(-0.2 * np.sqrt((x**2).sum() / d))
    b = -np.exp(np.cos(2 * np.pi * x).sum() / d)
    return float(a + b + 20.0 + math.e)

def schwefel(x: np.ndarray) -> float:
    return float(418.9829 * x.size - (x * np.sin(np.sqrt(np.abs(x)))).sum())


@dataclass(frozen=True)
class BenchmarkFunction:
    name: str
    fn: Callable[[np.ndarray], float]
    lower: float
    upper: float
    sigma: float
    optimum: float   # coordinate of the global minimizer, repeated on every axis

    def optimum_point(self, dim: int) -> np.ndarray:
        return np.full(dim, self.optimum)


FUNCTIONS: Dict[str, BenchmarkFunction] = {
    "sphere": BenchmarkFunction("sphere", sphere, -5.12, 5.12, 0.1, 0.0),
    "rastrigin": BenchmarkFunction("rastrigin", rastrigin, -5.12, 5.12, 0.1, 0.0),
    "rosenbrock": BenchmarkFunction("rosenbrock", rosenbrock, -5.0, 10.0, 0.1, 1.0),
    "ackley": BenchmarkFunction("ackley", ackley, -32.768, 32.768, 0.5, 0.0),
    "schwefel": BenchmarkFunction("schwefel", schwefel, -500.0, 500.0, 5.0, 420.9687),
}


# ---------------------- Operators ----------------------

def gaussian_neighbor(x, strength, rng, sigma, lb, ub):
    return np.clip(x + rng.normal(0.0, sigma * max(strength, 1e-12), x.size), lb, ub)

def uniform_point(rng, lb, ub):
    return lb + (ub - lb) * rng.random(lb.size)

def blx_crossover(p1, p2, rng, lb, ub, alpha: float = 0.5) -> Tuple[np.ndarray, np.ndarray]:
    lo, hi = np.minimum(p1, p2), np.maximum(p1, p2)
    I = hi - lo
    a, b = lo - alpha * I, hi + alpha * I
    c1 = a + (b - a) * rng.random(p1.size)
    c2 = a + (b - a) * rng.random(p1.size)
    return np.clip(c1, lb, ub), np.clip(c2, lb, ub)

def gaussian_mutation(x, rate, rng, sigma, lb, ub):
    mask = rng.random(x.size) < rate
    y = x.copy()
    if mask.any():
        y[mask] += rng.normal(0.0, sigma, int(mask.sum()))
    return np.clip(y, lb, ub)

def _sample_coordinate(cost, x, j, k, rng, lb, ub):
    vals = lb[j] + (ub[j] - lb[j]) * rng.random(k)
    costs = np.empty(k)
    for i, v in enumerate(vals):
        y = x.copy(); y[j] = v
        costs[i] = cost(y)
    costs[~np.isfinite(costs)] = np.inf
    return vals, costs

def coordinate_rcl(cost, alpha, rng, lb, ub, candidates: int = 10):
    """Greedy-randomized point: each coordinate drawn from the RCL of sampled values."""
    x = uniform_point(rng, lb, ub)
    for j in rng.permutation(lb.size):
        vals, costs = _sample_coordinate(cost, x, j, candidates, rng, lb, ub)
        fin = costs[np.isfinite(costs)]
        if fin.size == 0:
            x[j] = vals[rng.integers(vals.size)]; continue
        lo, hi = fin.min(), fin.max()
        rcl = vals[costs <= lo + alpha * (hi - lo) + 1e-12]
        x[j] = rcl[rng.integers(rcl.size)]
    return x

# A destroyed vector is (vector, mask of released coordinates).

def destroy_coordinates(x, degree, rng):
    k = int(min(max(1, int(degree * x.size)), x.size))
    mask = np.zeros(x.size, dtype=bool)
    mask[rng.choice(x.size, size=k, replace=False)] = True
    return x.copy(), mask

def repair_uniform(partial, rng, lb, ub):
    x, mask = partial
    y = x.copy()
    y[mask] = lb[mask] + (ub[mask] - lb[mask]) * rng.random(int(mask.sum()))
    return y

def repair_best_of(partial, rng, cost, lb, ub, candidates: int = 10):
    x, mask = partial
    y = x.copy()
    for j in np.flatnonzero(mask):
        vals, costs = _sample_coordinate(cost, y, j, candidates, rng, lb, ub)
        y[j] = vals[int(np.argmin(costs))]
    return y


# ---------------------- Problem factory ----------------------

def continuous_problem(name: str, dim: int = 2) -> Problem:
    if name not in FUNCTIONS:
        raise ConfigurationError(f"unknown test function '{name}'",
                                 suggestion=f"Use one of: {', '.join(FUNCTIONS)}")
    if dim < 1 or (name == "rosenbrock" and dim < 2):
        raise ConfigurationError(f"{name}: invalid dimension {dim}")
    tf = FUNCTIONS[name]
    lb, ub = np.full(dim, tf.lower), np.full(dim, tf.upper)
    f, s = tf.fn, tf.sigma
    return Problem(
        name=f"{name}{dim}", dimension=dim,
        objective=f,
        neighbor=lambda x, k, rng: gaussian_neighbor(x, k, rng, s, lb, ub),
        generate=lambda rng: uniform_point(rng, lb, ub),
        crossover=lambda a, b, rng: blx_crossover(a, b, rng, lb, ub),
        mutate=lambda x, rate, rng: gaussian_mutation(x, rate, rng, s, lb, ub),
        construct=lambda alpha, rng, cost: coordinate_rcl(cost, alpha, rng, lb, ub),
        destroy_ops={"random": destroy_coordinates},
        repair_ops={"random": lambda p, rng, cost: repair_uniform(p, rng, lb, ub),
                    "greedy": lambda p, rng, cost: repair_best_of(p, rng, cost, lb, ub)},
        bounds=(lb, ub),
        known_optimum=0.0,
    )
