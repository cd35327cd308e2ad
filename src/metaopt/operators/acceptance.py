import math
import numpy as np

def better(delta: float, *_) -> bool:
    return delta < 0

def always(*_) -> bool:
    return True

def metropolis(delta: float, T: float, rng: np.random.Generator) -> bool:
    if delta < 0:
        return True
    if T <= 1e-15 or not math.isfinite(delta):
        return False
    return rng.random() < math.exp(-delta / T)

def logistic(gain: float, T: float, rng: np.random.Generator) -> bool:
    # never accepts a worsening move; ties pass half the time
    if math.isnan(gain) or gain < 0:
        return False
    if math.isinf(gain) or T <= 1e-15:
        return gain > 0
    z = -gain / T
    p = 0.0 if z > 700 else 1.0 / (1.0 + math.exp(z))
    return rng.random() < p
