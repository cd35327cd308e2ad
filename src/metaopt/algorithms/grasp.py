from __future__ import annotations
from dataclasses import dataclass
import logging
import numpy as np
from .base import AlgoConfig, Algorithm, _choice, _positive, _probability
from .hill_climbing import DESCENTS
from ..core.solution import Termination
from ..operators.selection import weighted

logger = logging.getLogger(__name__)


@dataclass
class GRASPConfig(AlgoConfig):
    max_iter: int = 500
    alpha: float = 0.3
    local_search: str = "steepest"
    ls_iter: int = 100
    ls_neighbors: int = 20
    reactive: bool = False
    n_alphas: int = 5
    block_size: int = 50
    delta: float = 2.0

    def validate(self) -> None:
        super().validate()
        _probability(self, "alpha")
        _choice(self, "local_search", tuple(DESCENTS))
        for k in ("ls_iter", "ls_neighbors", "n_alphas", "block_size", "delta"):
            _positive(self, k)


class GRASP(Algorithm):
    """Greedy randomized construction followed by local search, once per iteration."""
    name = "GRASP"
    config_cls = GRASPConfig
    requires = ("construct", "neighbor")

    def reactive_probs(self, sums, counts) -> np.ndarray:
        used = counts > 0
        if not used.any() or not np.isfinite(self.best_cost):
            return np.full(counts.size, 1.0 / counts.size)
        mean = np.where(used, sums / np.maximum(counts, 1), self.best_cost)
        q = (1.0 / (1.0 + np.maximum(mean - self.best_cost, 0.0))) ** self.cfg.delta
        return q / q.sum()

    def search(self, initial=None):
        cfg = self.cfg
        descend = DESCENTS[cfg.local_search]
        A = (np.arange(cfg.n_alphas) + 1.0) / (cfg.n_alphas + 1.0)
        self.alpha_probs = np.full(cfg.n_alphas, 1.0 / cfg.n_alphas)
        sums, counts = np.zeros(cfg.n_alphas), np.zeros(cfg.n_alphas)
        for it in range(cfg.max_iter):
            if cfg.reactive:
                if it > 0 and it % cfg.block_size == 0:
                    self.alpha_probs = self.reactive_probs(sums, counts)
                    logger.debug("%s: alpha probabilities %s", self.name, np.round(self.alpha_probs, 3))
                i = weighted(self.alpha_probs, self.rng)
                alpha = A[i]
            else:
                alpha = cfg.alpha
            x = self.call("construct", self.problem.construct, alpha, self.rng, self.evaluate)
            fx = self.evaluate(x)
            self.offer(x, fx)
            x, fx = descend(self, x, fx, cfg.ls_iter, cfg.ls_neighbors)
            if cfg.reactive and np.isfinite(fx):
                sums[i] += fx; counts[i] += 1
            self.tick()
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS
