from __future__ import annotations
from dataclasses import dataclass
import numpy as np
from .base import AlgoConfig, Algorithm, _choice, _positive, _probability
from ..core.errors import ConfigurationError
from ..core.solution import Termination
from ..operators.selection import SELECTORS, tournament


@dataclass
class GAConfig(AlgoConfig):
    max_iter: int = 500
    pop_size: int = 50
    crossover_rate: float = 0.8
    mutation_rate: float = 0.05
    elitism: int = 2
    selection: str = "tournament"
    tournament_size: int = 3
    adaptive: bool = False
    adaptive_min_mutation: float = 0.01
    adaptive_max_mutation: float = 0.3
    adaptive_min_crossover: float = 0.5

    def validate(self) -> None:
        super().validate()
        _positive(self, "pop_size"); _positive(self, "tournament_size")
        for k in ("crossover_rate", "mutation_rate", "adaptive_min_mutation",
                  "adaptive_max_mutation", "adaptive_min_crossover"):
            _probability(self, k)
        _choice(self, "selection", tuple(SELECTORS))
        if not 0 <= self.elitism < self.pop_size:
            raise ConfigurationError(f"elitism must lie in [0, pop_size), got {self.elitism}")
        if self.adaptive_min_mutation > self.adaptive_max_mutation:
            raise ConfigurationError("adaptive_min_mutation exceeds adaptive_max_mutation")


class GeneticAlgorithm(Algorithm):
    """Generational GA with elitism.

    Population is a 2-D array ``X`` (one individual per row) with cached
    costs ``fit``. An infeasible child never displaces its parent.
    """
    name = "GA"
    config_cls = GAConfig
    requires = ("generate", "crossover", "mutate")

    def select(self, fit: np.ndarray) -> int:
        if self.cfg.selection == "tournament":
            return tournament(fit, self.rng, self.cfg.tournament_size)
        return SELECTORS[self.cfg.selection](fit, self.rng)

    def rates(self, fit: np.ndarray, gen: int):
        cfg = self.cfg
        if not cfg.adaptive:
            return cfg.crossover_rate, cfg.mutation_rate
        fin = fit[np.isfinite(fit)]
        div = float(fin.std() / (abs(fin.mean()) + 1e-12)) if fin.size > 1 else 0.0
        mr = cfg.adaptive_max_mutation - (cfg.adaptive_max_mutation - cfg.adaptive_min_mutation) * min(div, 1.0)
        cr_min = min(cfg.adaptive_min_crossover, cfg.crossover_rate)
        cr = cfg.crossover_rate - (cfg.crossover_rate - cr_min) * gen / cfg.max_iter
        return cr, mr

    def refine(self, x: np.ndarray, fx: float):
        """Hook applied to every new individual; the memetic variant improves it."""
        return x, fx

    def initialize(self, initial=None):
        rows = [self.generate() for _ in range(self.cfg.pop_size)]
        if initial is not None:
            rows[0] = np.array(initial, copy=True)
        X = np.stack(rows)
        fit = np.array([self.evaluate(x) for x in X])
        for x, fx in zip(X, fit):
            self.offer(x, fx)
        return X, fit

    def offspring(self, X, fit, a: int, b: int, cr: float, mr: float):
        if self.rng.random() < cr:
            c1, c2 = self.call("crossover", self.problem.crossover, X[a], X[b], self.rng)
        else:
            c1, c2 = X[a].copy(), X[b].copy()
        out = []
        for c, p in ((c1, a), (c2, b)):
            c = self.call("mutate", self.problem.mutate, c, mr, self.rng)
            if np.array_equal(c, X[a]):
                fc = fit[a]
            elif np.array_equal(c, X[b]):
                fc = fit[b]
            else:
                fc = self.evaluate(c)
                self.offer(c, fc)
            c, fc = self.refine(c, fc)
            if not np.isfinite(fc):
                c, fc = X[p].copy(), fit[p]
            out.append((c, fc))
        return out

    def search(self, initial=None):
        cfg = self.cfg
        N = cfg.pop_size
        X, fit = self.initialize(initial)
        for gen in range(cfg.max_iter):
            cr, mr = self.rates(fit, gen)
            self.mutation_rate, self.crossover_rate = mr, cr
            order = np.argsort(fit, kind="stable")
            elite = [int(i) for i in order[:cfg.elitism] if np.isfinite(fit[i])]
            Xn, fn = [X[i].copy() for i in elite], [fit[i] for i in elite]
            while len(Xn) < N:
                a, b = self.select(fit), self.select(fit)
                for c, fc in self.offspring(X, fit, a, b, cr, mr):
                    if len(Xn) < N:
                        Xn.append(c); fn.append(fc)
            X, fit = np.stack(Xn), np.array(fn, dtype=float)
            self.population, self.fitness = X, fit
            self.tick()
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS
