from __future__ import annotations
from collections import Counter, deque
from dataclasses import dataclass
import logging
import numpy as np
from .base import AlgoConfig, Algorithm, _positive
from ..core.errors import ConfigurationError
from ..core.solution import Termination, clone

logger = logging.getLogger(__name__)


@dataclass
class TabuConfig(AlgoConfig):
    max_iter: int = 5000
    neighbors_per_iter: int = 20
    tenure: int = 15
    aspiration: bool = True
    diversification: bool = False
    diversification_weight: float = 0.1
    diversification_trigger: int = 100
    intensification: bool = False
    intensification_trigger: int = 50
    reactive: bool = False
    tenure_increase: int = 5
    tenure_decrease: int = 1
    min_tenure: int = 5
    max_tenure: int = 50
    cycle_window: int = 50

    def validate(self) -> None:
        super().validate()
        for k in ("neighbors_per_iter", "tenure", "diversification_trigger",
                  "intensification_trigger", "min_tenure", "max_tenure", "cycle_window"):
            _positive(self, k)
        if self.min_tenure > self.max_tenure:
            raise ConfigurationError(f"min_tenure ({self.min_tenure}) exceeds max_tenure ({self.max_tenure})")
        if self.diversification_weight < 0:
            raise ConfigurationError("diversification_weight must be non-negative")


class TabuSearch(Algorithm):
    """Solution-based tabu search over fingerprints.

    The tabu list holds the fingerprints of the last ``tenure`` incumbents.
    A tabu candidate is admissible only when it beats the best-ever cost
    (aspiration). When every sampled candidate is inadmissible the
    incumbent stays where it is for that iteration.
    """
    name = "TABU"
    config_cls = TabuConfig
    requires = ("neighbor", "generate")

    def _resize(self, tenure: int) -> None:
        self.tenure = tenure
        self.tabu = deque(self.tabu, maxlen=tenure)

    def search(self, initial=None):
        cfg = self.cfg
        fp = self.problem.fingerprint
        x, fx = self.start(initial)
        self.tabu = deque(maxlen=cfg.tenure)
        self.tenure = cfg.tenure
        self.current_fp, self.current_cost, self.moved = fp(x), fx, False
        self.tabu.append(self.current_fp)
        freq = Counter([self.current_fp])
        last_seen = {self.current_fp: 0}
        no_improve = 0
        for it in range(1, cfg.max_iter + 1):
            yb, fb, hb, score_b = None, np.inf, None, np.inf
            for _ in range(cfg.neighbors_per_iter):
                y = self.neighbor(x)
                fy = self.evaluate(y)
                h = fp(y)
                if h in self.tabu and not (cfg.aspiration and fy < self.best_cost):
                    continue
                score = fy + cfg.diversification_weight * freq[h] if cfg.diversification else fy
                if yb is None or score < score_b:
                    yb, fb, hb, score_b = y, fy, h, score
            self.moved = yb is not None
            if self.moved:
                x, fx = yb, fb
                self.current_fp, self.current_cost = hb, fb
                self.tabu.append(hb)
                freq[hb] += 1
                improved = self.offer(x, fx)
                no_improve = 0 if improved else no_improve + 1
                if cfg.reactive:
                    seen = last_seen.get(hb)
                    if seen is not None and it - seen <= cfg.cycle_window:
                        self._resize(min(self.tenure + cfg.tenure_increase, cfg.max_tenure))
                    else:
                        self._resize(max(self.tenure - cfg.tenure_decrease, cfg.min_tenure))
                last_seen[hb] = it
            else:
                no_improve += 1
            if cfg.intensification and no_improve == cfg.intensification_trigger:
                x, fx = clone(self.best), self.best_cost
                self.current_fp, self.current_cost = fp(x), fx
            if cfg.diversification and no_improve >= cfg.diversification_trigger:
                logger.debug("%s: diversifying at iteration %d", self.name, it)
                x = self.generate(); fx = self.evaluate(x)
                self.offer(x, fx)
                self.current_fp, self.current_cost = fp(x), fx
                no_improve = 0
            self.tick()
            stop = self.should_stop()
            if stop:
                return stop
        return Termination.MAX_ITERATIONS
