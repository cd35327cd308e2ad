from __future__ import annotations
from dataclasses import dataclass
import numpy as np
from .base import AlgoConfig, Algorithm, _choice, _positive
from ..core.errors import ConfigurationError
from ..core.solution import Termination
from ..operators.selection import weighted


@dataclass
class ACOConfig(AlgoConfig):
    max_iter: int = 500
    n_ants: int = 20
    alpha: float = 1.0
    beta: float = 3.0
    rho: float = 0.1
    q: float = 1.0
    tau0: float = 0.1
    variant: str = "as"
    elitist_weight: float = 2.0
    tau_min: float = 0.001
    tau_max: float = 10.0
    gbest_period: int = 5

    def validate(self) -> None:
        super().validate()
        for k in ("n_ants", "q", "tau0", "tau_min", "tau_max", "gbest_period"):
            _positive(self, k)
        _choice(self, "variant", ("as", "elitist", "mmas"))
        if not 0.0 < self.rho <= 1.0:
            raise ConfigurationError(f"rho must lie in (0, 1], got {self.rho}")
        if self.tau_min >= self.tau_max:
            raise ConfigurationError(f"tau_min ({self.tau_min}) must be below tau_max ({self.tau_max})")
        if self.alpha < 0 or self.beta < 0 or self.elitist_weight < 0:
            raise ConfigurationError("alpha, beta and elitist_weight must be non-negative")


class AntColony(Algorithm):
    """Ant System and its elitist and MAX-MIN variants on a routing problem.

    The problem's ``heuristic`` matrix gives the desirability of every edge;
    ``self.pheromone`` holds one weight per directed edge and is updated
    symmetrically.
    """
    name = "ACO"
    config_cls = ACOConfig
    requires = ("heuristic",)

    def construct(self, W: np.ndarray) -> np.ndarray:
        n = W.shape[0]
        tour = np.empty(n, dtype=np.int64)
        tour[0] = self.rng.integers(n)
        free = np.ones(n, dtype=bool); free[tour[0]] = False
        for s in range(1, n):
            cand = np.flatnonzero(free)
            tour[s] = cand[weighted(W[tour[s - 1], cand], self.rng)]
            free[tour[s]] = False
        return tour

    def deposit(self, tour: np.ndarray, amount: float) -> None:
        a, b = tour, np.roll(tour, -1)
        self.pheromone[a, b] += amount
        self.pheromone[b, a] += amount

    def clamp(self) -> None:
        if self.cfg.variant == "mmas":
            np.clip(self.pheromone, self.cfg.tau_min, self.cfg.tau_max, out=self.pheromone)

    def search(self, initial=None):
        cfg = self.cfg
        eta = np.asarray(self.problem.heuristic, dtype=float)
        n = eta.shape[0]
        self.pheromone = np.full((n, n), cfg.tau_max if cfg.variant == "mmas" else cfg.tau0)
        if initial is not None:
            self.offer(initial, self.evaluate(initial))
        eta_b = eta ** cfg.beta
        for it in range(1, cfg.max_iter + 1):
            W = self.pheromone ** cfg.alpha * eta_b
            tours = [self.construct(W) for _ in range(cfg.n_ants)]
            costs = np.array([self.evaluate(t) for t in tours])
            ib = int(np.argmin(costs))
            self.offer(tours[ib], costs[ib])
            self.pheromone *= 1.0 - cfg.rho
            self.clamp()
            if cfg.variant == "mmas":
                use_global = it % cfg.gbest_period == 0 and self.best is not None
                t, c = (self.best, self.best_cost) if use_global else (tours[ib], costs[ib])
                if np.isfinite(c):
                    self.deposit(t, cfg.q / max(c, 1e-12))
            else:
                for t, c in zip(tours, costs):
                    if np.isfinite(c):
                        self.deposit(t, cfg.q / max(c, 1e-12))
                if cfg.variant == "elitist" and self.best is not None and np.isfinite(self.best_cost):
                    self.deposit(self.best, cfg.elitist_weight * cfg.q / max(self.best_cost, 1e-12))
            self.clamp()
            self.tick()
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS
