from __future__ import annotations
import numpy as np

def tournament(fit: np.ndarray, rng: np.random.Generator, k: int = 3) -> int:
    idx = rng.integers(0, fit.size, size=k)
    return int(idx[np.argmin(fit[idx])])

def roulette(fit: np.ndarray, rng: np.random.Generator) -> int:
    """Fitness-proportional pick for minimization: weight = worst + 1 - cost."""
    feasible = np.isfinite(fit)
    if not feasible.any():
        return int(rng.integers(fit.size))
    worst = fit[feasible].max()
    w = np.where(feasible, worst + 1.0 - fit, 0.0)
    return weighted(w, rng)

def rank(fit: np.ndarray, rng: np.random.Generator) -> int:
    order = np.argsort(fit, kind="stable")
    N = fit.size
    w = np.arange(N, 0, -1, dtype=float)
    return int(order[weighted(w, rng)])

def weighted(w: np.ndarray, rng: np.random.Generator) -> int:
    total = float(w.sum())
    if total <= 0.0:
        return int(rng.integers(w.size))
    r = rng.random() * total
    return int(min(np.searchsorted(np.cumsum(w), r, side="right"), w.size - 1))

SELECTORS = {"tournament": tournament, "roulette": roulette, "rank": rank}
