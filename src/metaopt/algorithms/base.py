from __future__ import annotations
from dataclasses import dataclass
import logging
import time
import numpy as np
from typing import Callable, List, Optional
from ..core.errors import ConfigurationError, NeighborhoodExhausted
from ..core.problem import Problem
from ..core.rng import make_rng
from ..core.solution import OptResult, Termination, clone, normalize_cost

logger = logging.getLogger(__name__)


@dataclass
class AlgoConfig:
    max_iter: int = 1000
    seed: Optional[int] = 42
    time_limit: Optional[float] = None
    patience: Optional[int] = None

    def validate(self) -> None:
        _positive(self, "max_iter")
        if self.time_limit is not None and self.time_limit <= 0:
            raise ConfigurationError(f"time_limit must be positive, got {self.time_limit}")
        if self.patience is not None:
            _positive(self, "patience")


def _positive(cfg, name: str) -> None:
    value = getattr(cfg, name)
    if value is None or value <= 0:
        raise ConfigurationError(f"{type(cfg).__name__}.{name} must be positive, got {value!r}")


def _choice(cfg, name: str, allowed) -> None:
    value = getattr(cfg, name)
    if value not in allowed:
        raise ConfigurationError(f"{type(cfg).__name__}.{name}={value!r} is not supported",
                                 suggestion=f"Use one of: {', '.join(map(str, allowed))}")


def _probability(cfg, name: str) -> None:
    value = getattr(cfg, name)
    if value is None or not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{type(cfg).__name__}.{name} must lie in [0, 1], got {value!r}")


class Algorithm:
    """Common run loop and bookkeeping.

    Subclasses implement ``search(initial)`` and return a Termination. The
    best solution is tracked here so every algorithm shares the same
    strict-improvement rule and the same handling of infeasible costs.
    """
    name: str = "BASE"
    config_cls = AlgoConfig
    requires: tuple = ("generate",)

    def __init__(self, cfg: AlgoConfig, problem: Problem,
                 rng: Optional[np.random.Generator] = None,
                 callback: Optional[Callable[["Algorithm"], None]] = None):
        if cfg is None or problem is None:
            raise ConfigurationError(f"{self.name} needs both a config and a problem")
        cfg.validate()
        problem.require(self.name, "objective", *self.requires)
        self.cfg, self.problem, self.callback = cfg, problem, callback
        self._own_rng = rng is None
        self.rng = rng if rng is not None else make_rng(cfg.seed)
        self._reset()

    def _reset(self) -> None:
        self.best: Optional[np.ndarray] = None
        self.best_cost = np.inf
        self.evaluations = 0
        self.iteration = 0
        self.history: List[float] = []
        self._stall = 0
        self._t0 = time.perf_counter()

    # -- problem access -------------------------------------------------
    def evaluate(self, x: np.ndarray) -> float:
        self.evaluations += 1
        cost = normalize_cost(self.problem.objective(x))
        if cost == np.inf:
            logger.debug("%s: infeasible candidate at evaluation %d", self.name, self.evaluations)
        return cost

    def call(self, label: str, fn, *args):
        """Invoke a problem operator; ``None`` means it has nothing left to offer."""
        out = fn(*args)
        if out is None:
            raise NeighborhoodExhausted(f"{self.problem.name}: {label} returned no candidate")
        return out

    def neighbor(self, x: np.ndarray, strength: float = 1) -> np.ndarray:
        return self.call("neighbor", self.problem.neighbor, x, strength, self.rng)

    def generate(self) -> np.ndarray:
        return self.call("generate", self.problem.generate, self.rng)

    # -- bookkeeping ----------------------------------------------------
    def offer(self, x: np.ndarray, cost: float) -> bool:
        if cost < self.best_cost:
            self.best, self.best_cost = clone(x), float(cost)
            return True
        return False

    def tick(self) -> None:
        improved = bool(self.history) and self.best_cost < self.history[-1]
        self._stall = 0 if improved or not self.history else self._stall + 1
        self.iteration += 1
        self.history.append(self.best_cost)
        if self.callback is not None:
            self.callback(self)

    def elapsed(self) -> float:
        return time.perf_counter() - self._t0

    def should_stop(self) -> Optional[Termination]:
        if self.cfg.time_limit is not None and self.elapsed() >= self.cfg.time_limit:
            return Termination.TIME_LIMIT
        if self.cfg.patience is not None and self._stall >= self.cfg.patience:
            return Termination.CONVERGED
        return None

    def start(self, initial: Optional[np.ndarray] = None):
        x = clone(initial) if initial is not None else self.generate()
        fx = self.evaluate(x)
        self.offer(x, fx)
        return x, fx

    def search(self, initial: Optional[np.ndarray] = None) -> Termination:
        raise NotImplementedError

    def run(self, initial: Optional[np.ndarray] = None) -> OptResult:
        if self._own_rng:
            self.rng = make_rng(self.cfg.seed)
        self._reset()
        logger.debug("%s: starting on %s", self.name, self.problem.name)
        try:
            reason = self.search(initial)
        except NeighborhoodExhausted as exc:
            logger.info("%s: stopping early, %s", self.name, exc.message)
            reason = Termination.EXHAUSTED
        best = clone(self.best) if self.best is not None else None
        result = OptResult(best=best, best_cost=float(self.best_cost),
                           iterations=self.iteration, evaluations=self.evaluations,
                           reason=reason, history=list(self.history),
                           elapsed=self.elapsed(), algorithm=self.name)
        logger.info("%s: best=%.6g iters=%d evals=%d (%s)", self.name, result.best_cost,
                    result.iterations, result.evaluations, reason.value)
        return result
