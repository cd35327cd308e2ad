from __future__ import annotations
from collections import deque
from dataclasses import dataclass
import logging
import numpy as np
from .base import AlgoConfig, Algorithm, _choice, _positive
from ..core.errors import ConfigurationError
from ..core.solution import Termination
from ..operators.acceptance import metropolis
from ..operators import schedules

logger = logging.getLogger(__name__)


@dataclass
class SAConfig(AlgoConfig):
    max_iter: int = 10000
    t0: float = 100.0
    t_min: float = 1e-3
    alpha: float = 0.95
    schedule: str = "geometric"
    chain_length: int = 50
    linear_steps: int = 1000
    window: int = 50
    adaptive_low: float = 0.2
    adaptive_high: float = 0.5
    adaptive_factor: float = 1.05
    reheat: bool = False
    reheat_threshold: float = 0.01
    reheat_factor: float = 2.0
    auto_t0: bool = False
    calibration_samples: int = 100
    target_acceptance: float = 0.8

    def validate(self) -> None:
        super().validate()
        for k in ("t0", "t_min", "chain_length", "linear_steps", "window", "calibration_samples"):
            _positive(self, k)
        _choice(self, "schedule", ("geometric", "linear", "logarithmic", "adaptive"))
        if self.t_min >= self.t0:
            raise ConfigurationError(f"t_min ({self.t_min}) must be below t0 ({self.t0})")
        if not 0.0 < self.alpha < 1.0:
            raise ConfigurationError(f"alpha must lie in (0, 1), got {self.alpha}")
        if not 0.0 < self.target_acceptance < 1.0:
            raise ConfigurationError(f"target_acceptance must lie in (0, 1), got {self.target_acceptance}")
        if self.adaptive_factor <= 1.0 or self.reheat_factor <= 1.0:
            raise ConfigurationError("adaptive_factor and reheat_factor must exceed 1")


class SimulatedAnnealing(Algorithm):
    """Metropolis search over Markov chains of ``chain_length`` moves.

    One outer iteration is one chain at a fixed temperature; ``max_iter``
    bounds the total number of moves.
    """
    name = "SA"
    config_cls = SAConfig
    requires = ("neighbor", "generate")

    def calibrate(self) -> float:
        deltas = []
        for _ in range(self.cfg.calibration_samples):
            x = self.generate(); y = self.neighbor(x)
            fx, fy = self.evaluate(x), self.evaluate(y)
            self.offer(x, fx); self.offer(y, fy)
            if np.isfinite(fx) and np.isfinite(fy):
                deltas.append(abs(fy - fx))
        T0 = schedules.calibrate_t0(deltas, self.cfg.target_acceptance)
        if T0 <= self.cfg.t_min:
            logger.debug("%s: calibration found no uphill moves, keeping t0=%g", self.name, self.cfg.t0)
            return self.cfg.t0
        return T0

    def cool(self, T: float, T0: float, step: int, rate: float) -> float:
        cfg = self.cfg
        if cfg.schedule == "geometric":
            return schedules.geometric(T, cfg.alpha)
        if cfg.schedule == "linear":
            return schedules.linear(T, (T0 - cfg.t_min) / cfg.linear_steps, cfg.t_min)
        if cfg.schedule == "logarithmic":
            return schedules.logarithmic(T0, step + 1)
        return schedules.adaptive(T, rate, cfg.adaptive_low, cfg.adaptive_high, cfg.adaptive_factor)

    def search(self, initial=None):
        cfg = self.cfg
        T = self.calibrate() if cfg.auto_t0 else cfg.t0
        T0, step, moves = T, 0, 0
        self.temperature = T
        x, fx = self.start(initial)
        recent = deque(maxlen=cfg.window)
        while T > cfg.t_min and moves < cfg.max_iter:
            for _ in range(min(cfg.chain_length, cfg.max_iter - moves)):
                y = self.neighbor(x)
                fy = self.evaluate(y)
                ok = metropolis(fy - fx, T, self.rng)
                if ok:
                    x, fx = y, fy
                    self.offer(x, fx)
                recent.append(ok)
                moves += 1
            rate = sum(recent) / len(recent)
            if cfg.reheat and rate < cfg.reheat_threshold and T < 0.5 * T0:
                T = min(T * cfg.reheat_factor, T0)
                logger.debug("%s: reheating to T=%.4g", self.name, T)
            else:
                step += 1
                T = self.cool(T, T0, step, rate)
            self.temperature = T
            self.tick()
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.CONVERGED if T <= cfg.t_min else Termination.MAX_ITERATIONS
