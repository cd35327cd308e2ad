from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Dict, List, Optional
import numpy as np
from .base import AlgoConfig, Algorithm, _choice, _positive
from ..core.errors import ConfigurationError
from ..core.solution import Termination
from ..operators.acceptance import better, metropolis
from ..operators.selection import weighted

logger = logging.getLogger(__name__)


@dataclass
class LNSConfig(AlgoConfig):
    max_iter: int = 1000
    degree: float = 0.3
    destroy: str = "random"
    repair: str = "greedy"
    acceptance: str = "better"
    temperature: float = 100.0
    cooling: float = 0.99
    # adaptive variant
    destroy_ops: Optional[List[str]] = None
    repair_ops: Optional[List[str]] = None
    initial_weights: Optional[Dict[str, float]] = None
    reward_best: float = 10.0
    reward_better: float = 5.0
    reward_accepted: float = 1.0
    segment: int = 50
    decay: float = 0.8
    min_weight: float = 0.01

    def validate(self) -> None:
        super().validate()
        _choice(self, "acceptance", ("better", "annealing"))
        for k in ("temperature", "segment", "min_weight"):
            _positive(self, k)
        if not 0.0 < self.degree <= 1.0:
            raise ConfigurationError(f"degree must lie in (0, 1], got {self.degree}")
        if not 0.0 < self.cooling <= 1.0 or not 0.0 <= self.decay <= 1.0:
            raise ConfigurationError("cooling must lie in (0, 1] and decay in [0, 1]")


def _known(problem, kind: str, names) -> None:
    table = getattr(problem, f"{kind}_ops")
    for n in names:
        if n not in table:
            raise ConfigurationError(f"problem '{problem.name}' has no {kind} operator '{n}'",
                                     suggestion=f"Use one of: {', '.join(table)}")


class LargeNeighborhoodSearch(Algorithm):
    name = "LNS"
    config_cls = LNSConfig
    requires = ("generate", "destroy_ops", "repair_ops")

    def __init__(self, cfg, problem, rng=None, callback=None):
        super().__init__(cfg, problem, rng, callback)
        self.check_operators()

    def check_operators(self) -> None:
        _known(self.problem, "destroy", [self.cfg.destroy])
        _known(self.problem, "repair", [self.cfg.repair])

    def rebuild(self, x, destroy: str, repair: str):
        partial = self.call(f"destroy {destroy}", self.problem.destroy_ops[destroy], x, self.cfg.degree, self.rng)
        return self.call(f"repair {repair}", self.problem.repair_ops[repair], partial, self.rng, self.evaluate)

    def accept(self, fy: float, fx: float) -> bool:
        if self.cfg.acceptance == "annealing":
            ok = metropolis(fy - fx, self.T, self.rng)
            self.T *= self.cfg.cooling
            return ok
        return better(fy - fx)

    def search(self, initial=None):
        cfg = self.cfg
        x, fx = self.start(initial)
        self.T = cfg.temperature
        for _ in range(cfg.max_iter):
            y = self.rebuild(x, cfg.destroy, cfg.repair)
            fy = self.evaluate(y)
            self.offer(y, fy)
            if self.accept(fy, fx):
                x, fx = y, fy
            self.tick()
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS


class AdaptiveLargeNeighborhoodSearch(LargeNeighborhoodSearch):
    """LNS with roulette selection over destroy/repair operators.

    Weights are refreshed every ``segment`` iterations from the average
    reward each operator earned since the last refresh.
    """
    name = "ALNS"

    def check_operators(self) -> None:
        cfg, p = self.cfg, self.problem
        self.d_names = list(cfg.destroy_ops or p.destroy_ops)
        self.r_names = list(cfg.repair_ops or p.repair_ops)
        _known(p, "destroy", self.d_names)
        _known(p, "repair", self.r_names)
        w0 = cfg.initial_weights or {}
        stray = sorted(set(w0) - set(self.d_names) - set(self.r_names))
        if stray:
            raise ConfigurationError(f"initial_weights names unknown operator(s) {', '.join(stray)}")
        if any(v <= 0 for v in w0.values()):
            raise ConfigurationError("initial operator weights must be positive")

    def _weights(self, names) -> np.ndarray:
        w0 = self.cfg.initial_weights or {}
        return np.array([float(w0.get(n, 1.0)) for n in names])

    def _refresh(self, w, score, uses) -> None:
        cfg = self.cfg
        used = uses > 0
        w[used] = cfg.decay * w[used] + (1.0 - cfg.decay) * score[used] / uses[used]
        np.maximum(w, cfg.min_weight, out=w)
        score[:] = 0.0; uses[:] = 0

    def search(self, initial=None):
        cfg = self.cfg
        x, fx = self.start(initial)
        self.T = cfg.temperature
        self.destroy_weights, self.repair_weights = self._weights(self.d_names), self._weights(self.r_names)
        sd, sr = np.zeros(len(self.d_names)), np.zeros(len(self.r_names))
        ud, ur = np.zeros(len(self.d_names)), np.zeros(len(self.r_names))
        for it in range(1, cfg.max_iter + 1):
            i, j = weighted(self.destroy_weights, self.rng), weighted(self.repair_weights, self.rng)
            y = self.rebuild(x, self.d_names[i], self.r_names[j])
            fy = self.evaluate(y)
            ud[i] += 1; ur[j] += 1
            if self.offer(y, fy):
                reward = cfg.reward_best
            elif fy < fx:
                reward = cfg.reward_better
            else:
                reward = 0.0
            ok = self.accept(fy, fx)
            if ok:
                x, fx = y, fy
                reward = reward or cfg.reward_accepted
            sd[i] += reward; sr[j] += reward
            if it % cfg.segment == 0:
                self._refresh(self.destroy_weights, sd, ud)
                self._refresh(self.repair_weights, sr, ur)
                logger.debug("%s: destroy weights %s repair weights %s", self.name,
                             np.round(self.destroy_weights, 3), np.round(self.repair_weights, 3))
            self.tick()
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS
