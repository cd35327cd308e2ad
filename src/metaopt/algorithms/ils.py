from __future__ import annotations
from dataclasses import dataclass
import numpy as np
from .base import AlgoConfig, Algorithm, _choice, _positive
from .hill_climbing import DESCENTS
from ..core.errors import ConfigurationError
from ..core.solution import Termination, clone
from ..operators.acceptance import always, better, metropolis


@dataclass
class ILSConfig(AlgoConfig):
    max_iter: int = 1000
    local_search: str = "steepest"
    ls_iter: int = 200
    ls_neighbors: int = 20
    strength: int = 1
    acceptance: str = "better"
    temperature: float = 10.0
    cooling: float = 0.95
    restart_window: int = 50

    def validate(self) -> None:
        super().validate()
        _choice(self, "local_search", tuple(DESCENTS))
        _choice(self, "acceptance", ("better", "always", "annealing", "restart"))
        for k in ("ls_iter", "ls_neighbors", "strength", "temperature", "restart_window"):
            _positive(self, k)
        if not 0.0 < self.cooling <= 1.0:
            raise ConfigurationError(f"cooling must lie in (0, 1], got {self.cooling}")


class IteratedLocalSearch(Algorithm):
    """Perturb, descend, accept.

    ``current``/``current_cost`` hold the incumbent after every iteration;
    ``restarts`` counts jumps back to the best solution.
    """
    name = "ILS"
    config_cls = ILSConfig
    requires = ("neighbor", "generate")

    def perturb(self, x: np.ndarray) -> np.ndarray:
        if self.problem.perturb is not None:
            return self.call("perturb", self.problem.perturb, x, self.cfg.strength, self.rng)
        return self.neighbor(x, self.cfg.strength)

    def search(self, initial=None):
        cfg = self.cfg
        descend = DESCENTS[cfg.local_search]
        x, fx = self.start(initial)
        x, fx = descend(self, x, fx, cfg.ls_iter, cfg.ls_neighbors)
        T = cfg.temperature
        self.rejected, self.restarts = 0, 0
        for _ in range(cfg.max_iter):
            y = self.perturb(x)
            fy = self.evaluate(y)
            self.offer(y, fy)
            y, fy = descend(self, y, fy, cfg.ls_iter, cfg.ls_neighbors)
            if cfg.acceptance == "annealing":
                ok = metropolis(fy - fx, T, self.rng)
                T *= cfg.cooling
            elif cfg.acceptance == "always":
                ok = always()
            else:
                ok = better(fy - fx)
            if ok:
                x, fx, self.rejected = y, fy, 0
            else:
                self.rejected += 1
                if cfg.acceptance == "restart" and self.rejected >= cfg.restart_window:
                    x, fx, self.rejected = clone(self.best), self.best_cost, 0
                    self.restarts += 1
            self.current, self.current_cost = x, fx
            self.tick()
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS
