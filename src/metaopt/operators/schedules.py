import math

def geometric(T: float, alpha: float) -> float:
    return T * alpha

def linear(T: float, delta: float, T_min: float) -> float:
    return max(T - delta, T_min)

def logarithmic(T0: float, k: int) -> float:
    return T0 / math.log(1.0 + k)

def adaptive(T: float, rate: float, low: float, high: float, factor: float) -> float:
    """Cool when too many moves are accepted, warm up when too few are."""
    if rate < low:
        return T * factor
    if rate > high:
        return T / factor
    return T

def inertia_linear(t: int, T_iter: int, w_max: float, w_min: float) -> float:
    return w_max - (w_max - w_min) * t / T_iter

def constriction(c1: float, c2: float) -> float:
    phi = c1 + c2
    if phi <= 4.0:
        return 1.0
    return 2.0 / abs(2.0 - phi - math.sqrt(phi * phi - 4.0 * phi))

def calibrate_t0(deltas, target: float) -> float:
    """Initial temperature at which the mean uphill move passes with probability ``target``."""
    deltas = [d for d in deltas if d > 1e-15]
    if not deltas:
        return 0.0
    return -(sum(deltas) / len(deltas)) / math.log(target)
