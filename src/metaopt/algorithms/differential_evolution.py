from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import numpy as np
from .base import AlgoConfig, Algorithm, _choice, _positive, _probability
from ..core.errors import ConfigurationError
from ..core.solution import Termination

# donors drawn per strategy (besides the target itself)
_DONORS = {"rand/1": 3, "best/1": 2, "current-to-best/1": 2, "rand/2": 5, "best/2": 4}


@dataclass
class DEConfig(AlgoConfig):
    max_iter: int = 1000
    pop_size: int = 50
    F: float = 0.8
    CR: float = 0.9
    strategy: str = "rand/1"
    tol: Optional[float] = None

    def validate(self) -> None:
        super().validate()
        _positive(self, "pop_size"); _positive(self, "F")
        _probability(self, "CR")
        _choice(self, "strategy", tuple(_DONORS))
        if self.pop_size < _DONORS[self.strategy] + 1:
            raise ConfigurationError(f"strategy {self.strategy} needs pop_size >= {_DONORS[self.strategy] + 1}")
        if self.tol is not None and self.tol <= 0:
            raise ConfigurationError(f"tol must be positive, got {self.tol}")


class DifferentialEvolution(Algorithm):
    name = "DE"
    config_cls = DEConfig
    requires = ("generate", "bounds")

    def donors(self, N: int, k: int) -> np.ndarray:
        idx = np.empty((N, k), dtype=np.int64)
        for i in range(N):
            others = np.delete(np.arange(N), i)
            idx[i] = self.rng.choice(others, size=k, replace=False)
        return idx

    def mutants(self, X: np.ndarray, fit: np.ndarray) -> np.ndarray:
        cfg, F = self.cfg, self.cfg.F
        N = X.shape[0]
        r = self.donors(N, _DONORS[cfg.strategy])
        best = X[int(np.argmin(fit))]
        s = cfg.strategy
        if s == "rand/1":
            return X[r[:, 0]] + F * (X[r[:, 1]] - X[r[:, 2]])
        if s == "best/1":
            return best + F * (X[r[:, 0]] - X[r[:, 1]])
        if s == "current-to-best/1":
            return X + F * (best - X) + F * (X[r[:, 0]] - X[r[:, 1]])
        if s == "rand/2":
            return X[r[:, 0]] + F * (X[r[:, 1]] - X[r[:, 2]]) + F * (X[r[:, 3]] - X[r[:, 4]])
        return best + F * (X[r[:, 0]] - X[r[:, 1]]) + F * (X[r[:, 2]] - X[r[:, 3]])

    def search(self, initial=None):
        cfg = self.cfg
        lb, ub = self.problem.lb, self.problem.ub
        N = cfg.pop_size
        X = np.stack([self.generate() for _ in range(N)]).astype(float)
        if initial is not None:
            X[0] = initial
        fit = np.array([self.evaluate(x) for x in X])
        bi = int(np.argmin(fit)); self.offer(X[bi], fit[bi])
        D = X.shape[1]
        for _ in range(cfg.max_iter):
            V = np.clip(self.mutants(X, fit), lb, ub)
            mask = self.rng.random((N, D)) < cfg.CR
            mask[np.arange(N), self.rng.integers(0, D, size=N)] = True
            U = np.where(mask, V, X)
            fu = np.array([self.evaluate(u) for u in U])
            keep = np.isfinite(fu) & (fu <= fit)
            X[keep], fit[keep] = U[keep], fu[keep]
            bi = int(np.argmin(fit)); self.offer(X[bi], fit[bi])
            self.population, self.fitness = X, fit
            self.tick()
            fin = fit[np.isfinite(fit)]
            if cfg.tol is not None and fin.size == N and fin.max() - fin.min() < cfg.tol:
                return Termination.CONVERGED
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS
