"""Properties shared by every registered algorithm."""
import math
from dataclasses import replace

import numpy as np
import pytest

from metaopt.benchmarks.continuous import continuous_problem
from metaopt.benchmarks.tsp import example_10, is_valid_tour, tsp_problem
from metaopt.config import problem_from_config
from metaopt.core.errors import ConfigurationError, UnknownAlgorithmError
from metaopt.core.problem import Problem
from metaopt.core.solution import OptResult, Termination
from metaopt.registry import ALGORITHMS, build, solve

SMALL = {
    "HC-STEEPEST": dict(max_iter=30, neighbors_per_iter=5),
    "HC-FIRST": dict(max_iter=30, neighbors_per_iter=5),
    "HC-RESTART": dict(max_iter=20, neighbors_per_iter=5, restarts=3),
    "HC-STOCHASTIC": dict(max_iter=60),
    "SA": dict(max_iter=400, chain_length=20),
    "TABU": dict(max_iter=40, neighbors_per_iter=5, tenure=5),
    "GRASP": dict(max_iter=4, ls_iter=10, ls_neighbors=5),
    "ILS": dict(max_iter=8, ls_iter=10, ls_neighbors=5),
    "VNS": dict(max_iter=10, ls_iter=10, ls_neighbors=5, k_max=3),
    "LNS": dict(max_iter=30),
    "ALNS": dict(max_iter=30, segment=10),
    "GA": dict(max_iter=10, pop_size=10),
    "MEMETIC": dict(max_iter=3, pop_size=6, ls_iter=3, ls_neighbors=3),
    "DE": dict(max_iter=20, pop_size=10),
    "PSO": dict(max_iter=20, pop_size=10),
    "ACO": dict(max_iter=10, n_ants=5),
}
ROUTING = sorted(set(SMALL) - {"DE", "PSO"})
CONTINUOUS = sorted(set(SMALL) - {"ACO"})


def _run(name, problem, seed=7, **extra):
    return build(name, problem, dict(SMALL[name], seed=seed, **extra)).run()


def test_registry_covers_every_family():
    assert set(ALGORITHMS) == set(SMALL)
    for key, cls in ALGORITHMS.items():
        assert cls.name == key


@pytest.mark.parametrize("name", ROUTING)
def test_routing_results_are_permutations(name):
    out = _run(name, tsp_problem(example_10()))
    assert isinstance(out, OptResult) and out.algorithm == name
    assert is_valid_tour(out.best, 10)
    assert out.best_cost == pytest.approx(float(tsp_problem(example_10()).objective(out.best)))


@pytest.mark.parametrize("name", CONTINUOUS)
def test_continuous_results_stay_in_bounds(name):
    p = continuous_problem("rastrigin", 3)
    out = _run(name, p)
    assert out.best.shape == (3,)
    assert np.all(out.best >= p.lb) and np.all(out.best <= p.ub)
    assert out.best_cost == pytest.approx(p.objective(out.best))


@pytest.mark.parametrize("name", ROUTING)
def test_identical_seeds_reproduce_identical_results(name):
    p = tsp_problem(example_10())
    a, b = _run(name, p, seed=3), _run(name, p, seed=3)
    assert np.array_equal(a.best, b.best)
    assert (a.best_cost, a.iterations, a.evaluations, a.reason) == \
           (b.best_cost, b.iterations, b.evaluations, b.reason)
    assert a.history == b.history


@pytest.mark.parametrize("name", CONTINUOUS)
def test_rerunning_one_instance_is_reproducible(name):
    algo = build(name, continuous_problem("sphere", 2), dict(SMALL[name], seed=5))
    a, b = algo.run(), algo.run()
    assert np.array_equal(a.best, b.best) and a.evaluations == b.evaluations


@pytest.mark.parametrize("name", CONTINUOUS)
def test_best_cost_never_increases(name):
    h = np.array(_run(name, continuous_problem("ackley", 2)).history)
    assert h.size > 0
    assert np.all(h[1:] <= h[:-1])


@pytest.mark.parametrize("name", CONTINUOUS)
def test_non_finite_costs_never_become_best(name):
    base = continuous_problem("sphere", 2)

    def half_nan(x):
        return float("nan") if x[0] > 0 else float(x @ x)

    algo = build(name, replace(base, objective=half_nan), dict(SMALL[name], seed=7))
    out = algo.run(np.array([-1.0, 1.0]))
    assert math.isfinite(out.best_cost)
    assert out.best[0] <= 0


@pytest.mark.parametrize("name", ["HC-STEEPEST", "SA", "TABU", "GA", "DE", "PSO"])
def test_degenerate_generate_reports_exhaustion(name):
    p = replace(continuous_problem("sphere", 2), generate=lambda rng: None)
    out = _run(name, p)
    assert out.reason == Termination.EXHAUSTED
    assert out.best is None and not out.feasible


def _counted(problem):
    calls = [0]

    def objective(x):
        calls[0] += 1
        return problem.objective(x)

    return replace(problem, objective=objective), calls


@pytest.mark.parametrize("name", CONTINUOUS)
def test_every_objective_call_is_counted_continuous(name):
    p, calls = _counted(continuous_problem("sphere", 3))
    out = _run(name, p)
    assert out.evaluations == calls[0] > 0


@pytest.mark.parametrize("name", ROUTING)
def test_every_objective_call_is_counted_routing(name):
    p, calls = _counted(tsp_problem(example_10()))
    out = _run(name, p)
    assert out.evaluations == calls[0] > 0


def _nothing(*args):
    return None


@pytest.mark.parametrize("name, field, extra", [
    ("GRASP", "construct", {}),
    ("ILS", "perturb", {}),
    ("LNS", "repair_ops", {}),
    ("ALNS", "destroy_ops", {}),
    ("GA", "crossover", {"crossover_rate": 1.0}),
    ("GA", "mutate", {}),
    ("MEMETIC", "mutate", {}),
])
def test_operator_returning_nothing_reports_exhaustion(name, field, extra):
    base = continuous_problem("sphere", 2)
    if field.endswith("_ops"):
        broken = {k: _nothing for k in getattr(base, field)}
    else:
        broken = _nothing
    out = _run(name, replace(base, **{field: broken}), **extra)
    assert out.reason == Termination.EXHAUSTED
    assert out.best is None if name == "GRASP" else math.isfinite(out.best_cost)


def test_result_owns_its_best():
    p = continuous_problem("sphere", 2)
    algo = build("SA", p, dict(SMALL["SA"], seed=1))
    out = algo.run()
    out.best[:] = 99.0
    assert not np.array_equal(algo.best, out.best)


def test_build_is_case_insensitive_and_solve_runs(square_tsp):
    assert type(build("sa", square_tsp)).__name__ == "SimulatedAnnealing"
    out = solve("tabu", square_tsp, max_iter=50, tenure=3)
    assert out.best_cost == pytest.approx(4.0)


def test_build_rejects_bad_names_and_parameters(square_tsp):
    with pytest.raises(UnknownAlgorithmError):
        build("simplex", square_tsp)
    with pytest.raises(ConfigurationError) as exc:
        build("SA", square_tsp, {"temprature": 5.0})
    assert exc.value.details["unknown"] == ["temprature"]
    with pytest.raises(ConfigurationError):
        build("GA", square_tsp, {"pop_size": 0})
    with pytest.raises(ConfigurationError):
        build("GA", square_tsp, {"crossover_rate": None})
    with pytest.raises(ConfigurationError):
        build("DE", continuous_problem("sphere", 2), {"CR": None})


def test_missing_function_fails_before_running():
    bare = Problem(name="bare", dimension=2, objective=lambda x: 0.0)
    for name in SMALL:
        with pytest.raises(ConfigurationError):
            build(name, bare)


def test_problem_from_config():
    p = problem_from_config({"type": "tsp", "instance": "random", "n": 7, "seed": 1, "move": "swap"})
    assert p.dimension == 7
    assert problem_from_config({"type": "continuous", "function": "ackley", "dim": 4}).name == "ackley4"
    with pytest.raises(ConfigurationError):
        problem_from_config({"type": "knapsack"})
    with pytest.raises(ConfigurationError):
        problem_from_config({"type": "tsp", "instance": "square4", "cities": 3})
