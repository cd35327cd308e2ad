from __future__ import annotations
from dataclasses import dataclass
from .base import AlgoConfig, Algorithm, _choice, _positive
from .hill_climbing import best_of_sample, steepest_descent
from ..core.solution import Termination


@dataclass
class VNSConfig(AlgoConfig):
    max_iter: int = 1000
    k_max: int = 5
    variant: str = "basic"
    ls_iter: int = 200
    ls_neighbors: int = 20
    vnd_neighborhoods: int = 3

    def validate(self) -> None:
        super().validate()
        _choice(self, "variant", ("basic", "reduced", "general"))
        for k in ("k_max", "ls_iter", "ls_neighbors", "vnd_neighborhoods"):
            _positive(self, k)


def vnd(algo: Algorithm, x, fx, n_neighborhoods: int, max_iter: int, n_neighbors: int):
    """Variable neighborhood descent: back to the first radius after every improvement."""
    k = 1
    for _ in range(max_iter):
        if k > n_neighborhoods:
            break
        y, fy = best_of_sample(algo, x, n_neighbors, k)
        if fy < fx:
            x, fx, k = y, fy, 1
        else:
            k += 1
    return x, fx


class VariableNeighborhoodSearch(Algorithm):
    """Shake at radius k, improve, recenter on success.

    The radius is the neighbor strength, so it means k moves for tours and
    a k-times wider Gaussian step for vectors.
    """
    name = "VNS"
    config_cls = VNSConfig
    requires = ("neighbor", "generate")

    def improve(self, x, fx):
        cfg = self.cfg
        if cfg.variant == "reduced":
            return x, fx
        if cfg.variant == "general":
            return vnd(self, x, fx, cfg.vnd_neighborhoods, cfg.ls_iter, cfg.ls_neighbors)
        return steepest_descent(self, x, fx, cfg.ls_iter, cfg.ls_neighbors)

    def search(self, initial=None):
        cfg = self.cfg
        x, fx = self.start(initial)
        k = 1
        for _ in range(cfg.max_iter):
            y = self.neighbor(x, k)
            fy = self.evaluate(y)
            self.offer(y, fy)
            y, fy = self.improve(y, fy)
            if fy < fx:
                x, fx, k = y, fy, 1
            else:
                k = k + 1 if k < cfg.k_max else 1
            self.k = k
            self.tick()
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS
