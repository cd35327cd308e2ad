from __future__ import annotations
from dataclasses import dataclass
import numpy as np
from .base import AlgoConfig, Algorithm, _choice, _positive
from ..core.solution import Termination
from ..operators.acceptance import logistic


@dataclass
class HCConfig(AlgoConfig):
    neighbors_per_iter: int = 20
    restarts: int = 10
    base: str = "steepest"
    temperature: float = 1.0

    def validate(self) -> None:
        super().validate()
        _positive(self, "neighbors_per_iter"); _positive(self, "restarts")
        _positive(self, "temperature")
        _choice(self, "base", ("steepest", "first"))


# ---------------------- Shared descents ----------------------
# Used as inner optimizers by GRASP, ILS, VNS and the memetic algorithm.
# Every evaluation goes through ``algo`` so counters and best tracking stay exact.

def best_of_sample(algo: Algorithm, x: np.ndarray, n: int, strength: float = 1):
    yb, fb = None, np.inf
    for _ in range(n):
        y = algo.neighbor(x, strength)
        fy = algo.evaluate(y)
        algo.offer(y, fy)
        if yb is None or fy < fb:
            yb, fb = y, fy
    return yb, fb


def steepest_descent(algo: Algorithm, x: np.ndarray, fx: float, max_iter: int,
                     n_neighbors: int, strength: float = 1):
    """Move to the best of ``n_neighbors`` samples until none improves."""
    for _ in range(max_iter):
        y, fy = best_of_sample(algo, x, n_neighbors, strength)
        if not fy < fx:
            break
        x, fx = y, fy
    return x, fx


def first_improvement_descent(algo: Algorithm, x: np.ndarray, fx: float, max_iter: int,
                              n_neighbors: int, strength: float = 1):
    for _ in range(max_iter):
        moved = False
        for _ in range(n_neighbors):
            y = algo.neighbor(x, strength)
            fy = algo.evaluate(y)
            algo.offer(y, fy)
            if fy < fx:
                x, fx, moved = y, fy, True
                break
        if not moved:
            break
    return x, fx


DESCENTS = {"steepest": steepest_descent, "first": first_improvement_descent}


# ---------------------- Variants ----------------------

class SteepestHillClimbing(Algorithm):
    name = "HC-STEEPEST"
    config_cls = HCConfig
    requires = ("neighbor", "generate")

    def search(self, initial=None):
        cfg = self.cfg
        x, fx = self.start(initial)
        for _ in range(cfg.max_iter):
            y, fy = best_of_sample(self, x, cfg.neighbors_per_iter)
            self.tick()
            if not fy < fx:
                return Termination.CONVERGED
            x, fx = y, fy
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS


class FirstImprovementHillClimbing(Algorithm):
    name = "HC-FIRST"
    config_cls = HCConfig
    requires = ("neighbor", "generate")

    def search(self, initial=None):
        cfg = self.cfg
        x, fx = self.start(initial)
        for _ in range(cfg.max_iter):
            moved = False
            for _ in range(cfg.neighbors_per_iter):
                y = self.neighbor(x)
                fy = self.evaluate(y)
                if fy < fx:
                    self.offer(y, fy)
                    x, fx, moved = y, fy, True
                    break
            self.tick()
            if not moved:
                return Termination.CONVERGED
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS


class RandomRestartHillClimbing(Algorithm):
    """One outer iteration per restart; each restart climbs to a local optimum."""
    name = "HC-RESTART"
    config_cls = HCConfig
    requires = ("neighbor", "generate")

    def search(self, initial=None):
        cfg = self.cfg
        descend = DESCENTS[cfg.base]
        for r in range(cfg.restarts):
            x, fx = self.start(initial if r == 0 else None)
            descend(self, x, fx, cfg.max_iter, cfg.neighbors_per_iter)
            self.tick()
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS


class StochasticHillClimbing(Algorithm):
    """Single-sample climber; ties and small gains pass with logistic probability."""
    name = "HC-STOCHASTIC"
    config_cls = HCConfig
    requires = ("neighbor", "generate")

    def search(self, initial=None):
        cfg = self.cfg
        x, fx = self.start(initial)
        for _ in range(cfg.max_iter):
            y = self.neighbor(x)
            fy = self.evaluate(y)
            if logistic(fx - fy, cfg.temperature, self.rng):
                x, fx = y, fy
                self.offer(x, fx)
            self.tick()
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS
