from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import numpy as np
from .base import AlgoConfig, Algorithm, _choice, _positive
from ..core.errors import ConfigurationError
from ..core.solution import Termination
from ..operators.schedules import constriction, inertia_linear


@dataclass
class PSOConfig(AlgoConfig):
    max_iter: int = 500
    pop_size: int = 30
    w: float = 0.729
    w_min: float = 0.4
    c1: float = 1.49445
    c2: float = 1.49445
    inertia: str = "constant"
    v_max_ratio: Optional[float] = 0.1

    def validate(self) -> None:
        super().validate()
        _positive(self, "pop_size")
        _choice(self, "inertia", ("constant", "linear", "constriction"))
        if self.c1 < 0 or self.c2 < 0:
            raise ConfigurationError("c1 and c2 must be non-negative")
        if self.v_max_ratio is not None and self.v_max_ratio <= 0:
            raise ConfigurationError(f"v_max_ratio must be positive or None, got {self.v_max_ratio}")


class ParticleSwarm(Algorithm):
    """Global-best PSO over a box.

    With ``inertia="constriction"`` the factor chi scales the whole
    velocity update and ``w`` is not used.
    """
    name = "PSO"
    config_cls = PSOConfig
    requires = ("generate", "bounds")

    def search(self, initial=None):
        cfg = self.cfg
        lb, ub = self.problem.lb, self.problem.ub
        N = cfg.pop_size
        X = np.stack([self.generate() for _ in range(N)]).astype(float)
        if initial is not None:
            X[0] = initial
        D = X.shape[1]
        self.v_max = None if cfg.v_max_ratio is None else cfg.v_max_ratio * (ub - lb)
        if self.v_max is None:
            V = np.zeros((N, D))
        else:
            V = -self.v_max + 2.0 * self.v_max * self.rng.random((N, D))
        fit = np.array([self.evaluate(x) for x in X])
        P, fp = X.copy(), fit.copy()
        gi = int(np.argmin(fp)); self.offer(P[gi], fp[gi])
        chi = constriction(cfg.c1, cfg.c2)
        for t in range(cfg.max_iter):
            g = self.best if self.best is not None else P[gi]
            r1, r2 = self.rng.random((N, D)), self.rng.random((N, D))
            pull = cfg.c1 * r1 * (P - X) + cfg.c2 * r2 * (g - X)
            if cfg.inertia == "constriction":
                V = chi * (V + pull)
            else:
                w = cfg.w if cfg.inertia == "constant" else inertia_linear(t, cfg.max_iter, cfg.w, cfg.w_min)
                V = w * V + pull
            if self.v_max is not None:
                V = np.clip(V, -self.v_max, self.v_max)
            X = np.clip(X + V, lb, ub)
            fit = np.array([self.evaluate(x) for x in X])
            imp = fit < fp
            P[imp], fp[imp] = X[imp], fit[imp]
            gi = int(np.argmin(fp)); self.offer(P[gi], fp[gi])
            self.positions, self.velocities = X, V
            self.tick()
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS
