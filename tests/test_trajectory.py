from dataclasses import replace

import numpy as np
import pytest

from metaopt.algorithms.grasp import GRASP, GRASPConfig
from metaopt.algorithms.ils import ILSConfig, IteratedLocalSearch
from metaopt.algorithms.lns import (AdaptiveLargeNeighborhoodSearch, LargeNeighborhoodSearch,
                                    LNSConfig)
from metaopt.algorithms.tabu_search import TabuConfig, TabuSearch
from metaopt.algorithms.vns import VariableNeighborhoodSearch, VNSConfig
from metaopt.benchmarks.tsp import example_10, example_20, is_valid_tour, tour_cost, tsp_problem
from metaopt.core.errors import ConfigurationError
from metaopt.core.problem import Problem


# ---------------------- Tabu search ----------------------

def test_tabu_never_moves_onto_tabu_tour_without_aspiration(square_tsp):
    state, violations, moves = {}, [], []

    def check(algo):
        if state and algo.moved:
            moves.append(algo.current_fp)
            if algo.current_fp in state["tabu"] and not algo.current_cost < state["best"]:
                violations.append(algo.iteration)
        state["tabu"], state["best"] = set(algo.tabu), algo.best_cost

    cfg = TabuConfig(max_iter=300, tenure=3, neighbors_per_iter=10, seed=11)
    out = TabuSearch(cfg, square_tsp, callback=check).run()
    assert violations == []
    assert len(moves) > 0
    assert out.best_cost == pytest.approx(4.0)


def test_tabu_list_respects_tenure(ladder_tsp):
    sizes = []
    cfg = TabuConfig(max_iter=50, tenure=4, neighbors_per_iter=5, seed=0)
    TabuSearch(cfg, ladder_tsp, callback=lambda a: sizes.append(len(a.tabu))).run()
    assert max(sizes) == 4


def test_reactive_tenure_stays_in_bounds(square_tsp):
    tenures = []
    cfg = TabuConfig(max_iter=200, tenure=6, reactive=True, min_tenure=2, max_tenure=9,
                     tenure_increase=3, neighbors_per_iter=5, seed=3)
    TabuSearch(cfg, square_tsp, callback=lambda a: tenures.append(a.tenure)).run()
    assert min(tenures) >= 2 and max(tenures) <= 9
    assert len(set(tenures)) > 1


def test_tabu_diversification_and_intensification(ladder_tsp):
    cfg = TabuConfig(max_iter=300, diversification=True, diversification_trigger=20,
                     intensification=True, intensification_trigger=10, neighbors_per_iter=8, seed=5)
    out = TabuSearch(cfg, ladder_tsp).run()
    assert is_valid_tour(out.best, 10)
    assert out.iterations == 300


def test_tabu_config_validation(square_tsp):
    with pytest.raises(ConfigurationError):
        TabuSearch(TabuConfig(tenure=0), square_tsp)
    with pytest.raises(ConfigurationError):
        TabuSearch(TabuConfig(min_tenure=10, max_tenure=5), square_tsp)


# ---------------------- GRASP ----------------------

def test_grasp_on_ladder(ladder_tsp):
    out = GRASP(GRASPConfig(max_iter=20, ls_iter=50, seed=1), ladder_tsp).run()
    assert out.iterations == 20
    assert is_valid_tour(out.best, 10)
    assert out.best_cost <= 1.5 * 100.0


def test_reactive_grasp_updates_alpha_probabilities(ladder_tsp):
    cfg = GRASPConfig(max_iter=30, reactive=True, block_size=10, ls_iter=20, seed=2)
    algo = GRASP(cfg, ladder_tsp)
    algo.run()
    assert algo.alpha_probs.sum() == pytest.approx(1.0)
    assert np.all(algo.alpha_probs > 0)


def test_grasp_on_continuous(sphere2):
    out = GRASP(GRASPConfig(max_iter=10, local_search="first", seed=3), sphere2).run()
    lb, ub = sphere2.bounds
    assert np.all(out.best >= lb) and np.all(out.best <= ub)
    assert out.best_cost < 0.5


def test_grasp_requires_construct(sphere2):
    with pytest.raises(ConfigurationError):
        GRASP(GRASPConfig(), replace(sphere2, construct=None))


# ---------------------- ILS / VNS ----------------------

@pytest.mark.parametrize("acceptance", ["better", "always", "annealing", "restart"])
def test_ils_acceptance_rules(ladder_tsp, acceptance):
    cfg = ILSConfig(max_iter=30, ls_iter=30, acceptance=acceptance, restart_window=5, seed=4)
    out = IteratedLocalSearch(cfg, ladder_tsp).run()
    assert out.iterations == 30
    assert is_valid_tour(out.best, 10)


def _ils_trail(acceptance, **extra):
    trail = []
    cfg = ILSConfig(max_iter=60, ls_iter=5, ls_neighbors=5, acceptance=acceptance, seed=9, **extra)
    IteratedLocalSearch(cfg, tsp_problem(example_20()), callback=lambda a: trail.append(
        (a.current.copy(), a.current_cost, a.best.copy(), a.best_cost, a.rejected, a.restarts))).run()
    return trail


def test_ils_better_never_moves_to_a_worse_incumbent():
    trail = _ils_trail("better")
    costs = [t[1] for t in trail]
    assert all(b <= a for a, b in zip(costs, costs[1:]))
    assert all(t[1] == t[3] for t in trail)


def test_ils_always_accepts_worse_incumbents():
    costs = [t[1] for t in _ils_trail("always")]
    assert any(b > a for a, b in zip(costs, costs[1:]))


def test_ils_restart_returns_to_best_after_window():
    trail = _ils_trail("restart", restart_window=3)
    assert max(t[4] for t in trail) < 3
    assert trail[-1][5] > 0
    jumps = [cur for prev, cur in zip(trail, trail[1:]) if cur[5] > prev[5]]
    assert jumps
    for current, current_cost, best, best_cost, _, _ in jumps:
        assert np.array_equal(current, best) and current_cost == best_cost


def test_ils_uses_neighbor_when_no_perturbation(sphere2):
    out = IteratedLocalSearch(ILSConfig(max_iter=20, ls_iter=20, seed=1), sphere2).run()
    assert out.best_cost < 0.05


@pytest.mark.parametrize("variant", ["basic", "reduced", "general"])
def test_vns_variants(sphere2, variant):
    x0 = np.array([4.0, -4.0])
    out = VariableNeighborhoodSearch(VNSConfig(max_iter=60, variant=variant, seed=6), sphere2).run(x0)
    assert out.best_cost < 32.0
    assert out.iterations == 60


def test_vns_radius_cycles_within_k_max(ladder_tsp):
    ks = []
    VariableNeighborhoodSearch(VNSConfig(max_iter=40, k_max=3, variant="reduced", seed=2), ladder_tsp,
                               callback=lambda a: ks.append(a.k)).run()
    assert set(ks) <= {1, 2, 3}


# ---------------------- LNS / ALNS ----------------------

@pytest.mark.parametrize("acceptance", ["better", "annealing"])
def test_lns_improves_random_tour(ladder_tsp, acceptance, rng):
    x0 = rng.permutation(10)
    cfg = LNSConfig(max_iter=100, acceptance=acceptance, seed=7)
    out = LargeNeighborhoodSearch(cfg, ladder_tsp).run(x0)
    assert is_valid_tour(out.best, 10)
    assert out.best_cost <= tour_cost(x0, example_10().dist)


def test_alns_weights_stay_above_floor(ladder_tsp):
    cfg = LNSConfig(max_iter=60, segment=5, min_weight=0.05, decay=0.5,
                    initial_weights={"worst": 3.0}, seed=8)
    algo = AdaptiveLargeNeighborhoodSearch(cfg, ladder_tsp)
    out = algo.run()
    assert set(algo.d_names) == {"random", "worst"}
    assert np.all(algo.destroy_weights >= 0.05) and np.all(algo.repair_weights >= 0.05)
    assert is_valid_tour(out.best, 10)


def test_alns_weights_shift_toward_rewarded_repair():
    p = Problem("shrinking", 2, objective=lambda x: float(x @ x), generate=lambda rng: np.ones(2),
                destroy_ops={"keep": lambda x, degree, rng: x.copy()},
                repair_ops={"shrink": lambda part, rng, cost: part * 0.5,
                            "noise": lambda part, rng, cost: part + 1.0})
    algo = AdaptiveLargeNeighborhoodSearch(LNSConfig(max_iter=20, segment=20, decay=0.5, seed=0), p)
    algo.run()
    w = dict(zip(algo.r_names, algo.repair_weights))
    assert w["shrink"] > 1.0 >= w["noise"]
    assert w["shrink"] == pytest.approx(5.5)


def test_alns_on_continuous(sphere2):
    out = AdaptiveLargeNeighborhoodSearch(LNSConfig(max_iter=100, seed=1), sphere2).run()
    assert out.best_cost < 0.5


def test_lns_rejects_unknown_operator(sphere2):
    with pytest.raises(ConfigurationError):
        LargeNeighborhoodSearch(LNSConfig(destroy="worst"), sphere2)
    with pytest.raises(ConfigurationError):
        AdaptiveLargeNeighborhoodSearch(LNSConfig(repair_ops=["regret"]), sphere2)
    with pytest.raises(ConfigurationError):
        LargeNeighborhoodSearch(LNSConfig(degree=0.0), sphere2)
