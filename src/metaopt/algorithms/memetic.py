from __future__ import annotations
from dataclasses import dataclass
import numpy as np
from .base import _choice, _positive, _probability
from .genetic import GAConfig, GeneticAlgorithm
from .hill_climbing import DESCENTS


@dataclass
class MemeticConfig(GAConfig):
    max_iter: int = 200
    local_search: str = "steepest"
    ls_iter: int = 50
    ls_neighbors: int = 10
    ls_probability: float = 1.0
    ls_initial: bool = True
    learning: str = "lamarckian"

    def validate(self) -> None:
        super().validate()
        _choice(self, "local_search", tuple(DESCENTS))
        _choice(self, "learning", ("lamarckian", "baldwinian"))
        _positive(self, "ls_iter"); _positive(self, "ls_neighbors")
        _probability(self, "ls_probability")


class MemeticAlgorithm(GeneticAlgorithm):
    """GA whose offspring are locally improved before insertion.

    Lamarckian learning writes the improved encoding back; Baldwinian
    learning keeps the encoding and only records the improved cost.
    """
    name = "MEMETIC"
    config_cls = MemeticConfig
    requires = ("generate", "crossover", "mutate", "neighbor")

    def refine(self, x, fx):
        cfg = self.cfg
        if self.rng.random() >= cfg.ls_probability:
            return x, fx
        y, fy = DESCENTS[cfg.local_search](self, x, fx, cfg.ls_iter, cfg.ls_neighbors)
        if cfg.learning == "lamarckian":
            return y, fy
        return x, fy

    def initialize(self, initial=None):
        X, fit = super().initialize(initial)
        if self.cfg.ls_initial:
            for i in range(X.shape[0]):
                X[i], fit[i] = self.refine(X[i], fit[i])
        return X, fit
