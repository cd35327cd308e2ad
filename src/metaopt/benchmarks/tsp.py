"""
tsp.py

Routing benchmark: symmetric Euclidean TSP instances and the permutation
operators (neighbors, perturbation, crossover, mutation, construction,
destroy/repair) that plug them into the engine.
"""
from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple
import numpy as np
from scipy.spatial.distance import cdist
from ..core.errors import ConfigurationError
from ..core.problem import Problem
from ..core.solution import INFEASIBLE


@dataclass
class TSPInstance:
    coords: np.ndarray
    name: str = "tsp"
    known_optimum: Optional[float] = None
    dist: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        self.coords = np.asarray(self.coords, dtype=float)
        if self.coords.ndim != 2 or self.coords.shape[0] < 2:
            raise ConfigurationError(f"{self.name}: need at least two 2-D points")
        self.dist = cdist(self.coords, self.coords)

    @property
    def n(self) -> int:
        return self.coords.shape[0]


# ---------------------- Instances ----------------------

def square(side: float = 1.0) -> TSPInstance:
    pts = [(0.0, 0.0), (side, 0.0), (side, side), (0.0, side)]
    return TSPInstance(np.array(pts), name="square4", known_optimum=4.0 * side)


def example_5(radius: float = 10.0) -> TSPInstance:
    a = 2.0 * np.pi * np.arange(5) / 5.0
    pts = np.column_stack([radius * np.cos(a), radius * np.sin(a)])
    return TSPInstance(pts, name="pentagon5", known_optimum=5.0 * 2.0 * radius * math.sin(math.pi / 5.0))


def _ladder(cols: int) -> np.ndarray:
    top = [(10.0 * i, 0.0) for i in range(cols)]
    bottom = [(10.0 * i, 10.0) for i in reversed(range(cols))]
    return np.array(top + bottom)


def example_10() -> TSPInstance:
    return TSPInstance(_ladder(5), name="ladder10", known_optimum=100.0)


def example_20() -> TSPInstance:
    return TSPInstance(_ladder(10), name="ladder20", known_optimum=200.0)


def random_instance(n: int, seed: int = 0, scale: float = 100.0) -> TSPInstance:
    if n < 2:
        raise ConfigurationError(f"random TSP instance needs n >= 2, got {n}")
    rng = np.random.default_rng(seed)
    return TSPInstance(rng.random((n, 2)) * scale, name=f"random{n}")


INSTANCES = {"square4": square, "pentagon5": example_5, "ladder10": example_10, "ladder20": example_20}


# ---------------------- Cost / validity ----------------------

def is_valid_tour(tour: np.ndarray, n: int) -> bool:
    tour = np.asarray(tour)
    return tour.shape == (n,) and np.array_equal(np.sort(tour), np.arange(n))


def tour_cost(tour: np.ndarray, dist: np.ndarray) -> float:
    if not is_valid_tour(tour, dist.shape[0]):
        return INFEASIBLE
    return float(dist[tour, np.roll(tour, -1)].sum())


# ---------------------- Moves ----------------------

def swap(tour: np.ndarray, strength, rng: np.random.Generator) -> np.ndarray:
    t = tour.copy()
    for _ in range(max(1, int(strength))):
        i, j = rng.choice(t.size, size=2, replace=False)
        t[i], t[j] = t[j], t[i]
    return t


def two_opt(tour: np.ndarray, strength, rng: np.random.Generator) -> np.ndarray:
    t = tour.copy()
    for _ in range(max(1, int(strength))):
        i, j = np.sort(rng.choice(t.size, size=2, replace=False))
        t[i:j + 1] = t[i:j + 1][::-1]
    return t


def double_bridge(tour: np.ndarray, strength, rng: np.random.Generator) -> np.ndarray:
    """Martin-Otto-Felten 4-opt kick; small tours fall back to random swaps."""
    n = tour.size
    if n < 8:
        return swap(tour, max(2, int(strength)), rng)
    t = tour
    for _ in range(max(1, int(strength))):
        p1, p2, p3 = np.sort(rng.choice(np.arange(1, n), size=3, replace=False))
        t = np.concatenate([t[:p1], t[p2:p3], t[p1:p2], t[p3:]])
    return t


def random_tour(n: int, rng: np.random.Generator) -> np.ndarray:
    return rng.permutation(n).astype(np.int64)


# ---------------------- Crossover / mutation ----------------------

def order_crossover(p1: np.ndarray, p2: np.ndarray, rng: np.random.Generator) -> Tuple[np.ndarray, np.ndarray]:
    n = p1.size
    i, j = np.sort(rng.choice(n, size=2, replace=False))

    def child(a, b):
        c = np.full(n, -1, dtype=p1.dtype)
        c[i:j + 1] = a[i:j + 1]
        keep = set(a[i:j + 1].tolist())
        fill = [g for g in np.roll(b, -(j + 1)).tolist() if g not in keep]
        slots = [(j + 1 + k) % n for k in range(n - (j - i + 1))]
        c[slots] = fill
        return c

    return child(p1, p2), child(p2, p1)


def pmx_crossover(p1: np.ndarray, p2: np.ndarray, rng: np.random.Generator) -> Tuple[np.ndarray, np.ndarray]:
    n = p1.size
    i, j = np.sort(rng.choice(n, size=2, replace=False))

    def child(a, b):
        c = b.copy()
        pos = np.empty(n, dtype=np.int64)
        pos[c] = np.arange(n)
        for k in range(i, j + 1):
            u, v = a[k], c[k]
            if u == v:
                continue
            pu = pos[u]
            c[k], c[pu] = u, v
            pos[u], pos[v] = k, pu
        return c

    return child(p1, p2), child(p2, p1)


def swap_mutation(tour: np.ndarray, rate: float, rng: np.random.Generator) -> np.ndarray:
    return swap(tour, 1, rng) if rng.random() < rate else tour.copy()


def inversion_mutation(tour: np.ndarray, rate: float, rng: np.random.Generator) -> np.ndarray:
    return two_opt(tour, 1, rng) if rng.random() < rate and tour.size >= 3 else tour.copy()


# ---------------------- Construction ----------------------

def nearest_neighbor_rcl(dist: np.ndarray, alpha: float, rng: np.random.Generator) -> np.ndarray:
    """Greedy-randomized tour: next city drawn from the restricted candidate list."""
    n = dist.shape[0]
    tour = [int(rng.integers(n))]
    free = np.ones(n, dtype=bool); free[tour[0]] = False
    for _ in range(n - 1):
        cand = np.flatnonzero(free)
        d = dist[tour[-1], cand]
        lo, hi = d.min(), d.max()
        rcl = cand[d <= lo + alpha * (hi - lo) + 1e-9]
        nxt = int(rcl[rng.integers(rcl.size)])
        tour.append(nxt); free[nxt] = False
    return np.array(tour, dtype=np.int64)


# ---------------------- Destroy / repair ----------------------
# A destroyed tour is (partial tour, removed cities).

def _n_remove(n: int, degree: float) -> int:
    return int(min(max(1, int(degree * n)), n - 1))


def destroy_random(tour: np.ndarray, degree: float, rng: np.random.Generator):
    k = _n_remove(tour.size, degree)
    drop = rng.choice(tour.size, size=k, replace=False)
    mask = np.ones(tour.size, dtype=bool); mask[drop] = False
    return tour[mask].copy(), tour[~mask].copy()


def destroy_worst(tour: np.ndarray, degree: float, rng: np.random.Generator, dist: np.ndarray = None):
    k = _n_remove(tour.size, degree)
    prev, nxt = np.roll(tour, 1), np.roll(tour, -1)
    detour = dist[prev, tour] + dist[tour, nxt] - dist[prev, nxt]
    # random tie-break
    detour = detour + rng.random(tour.size) * 1e-9
    drop = np.argsort(-detour)[:k]
    mask = np.ones(tour.size, dtype=bool); mask[drop] = False
    return tour[mask].copy(), tour[~mask].copy()


def repair_greedy(partial, rng: np.random.Generator, dist: np.ndarray = None) -> np.ndarray:
    kept, removed = partial
    t = list(kept.tolist())
    for c in rng.permutation(removed).tolist():
        if not t:
            t.append(c); continue
        a = np.array(t); b = np.roll(a, -1)
        inc = dist[a, c] + dist[c, b] - dist[a, b]
        t.insert(int(np.argmin(inc)) + 1, c)
    return np.array(t, dtype=np.int64)


def repair_random(partial, rng: np.random.Generator) -> np.ndarray:
    kept, removed = partial
    t = list(kept.tolist())
    for c in rng.permutation(removed).tolist():
        t.insert(int(rng.integers(len(t) + 1)), c)
    return np.array(t, dtype=np.int64)


# ---------------------- Problem factory ----------------------

_MOVES = {"two_opt": two_opt, "swap": swap}
_CROSSOVERS = {"ox": order_crossover, "pmx": pmx_crossover}
_MUTATIONS = {"inversion": inversion_mutation, "swap": swap_mutation}


def tsp_problem(inst: TSPInstance, move: str = "two_opt", crossover: str = "ox",
                mutation: str = "inversion") -> Problem:
    for key, value, table in (("move", move, _MOVES), ("crossover", crossover, _CROSSOVERS),
                              ("mutation", mutation, _MUTATIONS)):
        if value not in table:
            raise ConfigurationError(f"unknown TSP {key} '{value}'",
                                     suggestion=f"Use one of: {', '.join(table)}")
    D, n = inst.dist, inst.n
    eta = 1.0 / np.maximum(D, 1e-12)
    np.fill_diagonal(eta, 0.0)
    return Problem(
        name=inst.name, dimension=n,
        objective=lambda t: tour_cost(t, D),
        neighbor=_MOVES[move],
        generate=lambda rng: random_tour(n, rng),
        perturb=double_bridge,
        crossover=_CROSSOVERS[crossover],
        mutate=_MUTATIONS[mutation],
        construct=lambda alpha, rng, cost: nearest_neighbor_rcl(D, alpha, rng),
        destroy_ops={"random": destroy_random,
                     "worst": lambda t, deg, rng: destroy_worst(t, deg, rng, dist=D)},
        repair_ops={"greedy": lambda p, rng, cost: repair_greedy(p, rng, dist=D),
                    "random": lambda p, rng, cost: repair_random(p, rng)},
        heuristic=eta,
        known_optimum=inst.known_optimum,
    )
