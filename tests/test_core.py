import math

import numpy as np
import pytest

from metaopt.core.errors import (ConfigurationError, MetaoptError, MissingCapabilityError,
                                 UnknownAlgorithmError)
from metaopt.core.problem import Problem
from metaopt.core.rng import make_rng
from metaopt.core.solution import OptResult, Termination, fingerprint, normalize_cost


def test_make_rng_is_reproducible():
    a, b = make_rng(7), make_rng(7)
    assert np.array_equal(a.random(5), b.random(5))


def test_fingerprint_is_stable_and_discriminates_tours():
    t = np.array([0, 1, 2, 3])
    assert fingerprint(t) == fingerprint(t.copy())
    assert fingerprint(t) != fingerprint(np.array([0, 2, 1, 3]))


def test_fingerprint_discretizes_real_vectors():
    assert fingerprint(np.array([0.00001, 0.5])) == fingerprint(np.array([0.00002, 0.5]))
    assert fingerprint(np.array([0.1, 0.5])) != fingerprint(np.array([0.2, 0.5]))


def test_normalize_cost_maps_non_finite_to_inf():
    assert normalize_cost(1.5) == 1.5
    assert normalize_cost(float("nan")) == math.inf
    assert normalize_cost(-math.inf) == math.inf


def test_opt_result_feasibility():
    ok = OptResult(best=np.zeros(2), best_cost=0.0, iterations=1, evaluations=1,
                   reason=Termination.MAX_ITERATIONS)
    bad = OptResult(best=None, best_cost=math.inf, iterations=0, evaluations=0,
                    reason=Termination.EXHAUSTED)
    assert ok.feasible and not bad.feasible


def test_problem_require_reports_missing_capability():
    p = Problem(name="bare", dimension=2, objective=lambda x: 0.0)
    p.require("X", "objective")
    with pytest.raises(MissingCapabilityError) as exc:
        p.require("SA", "objective", "neighbor")
    assert exc.value.details["capability"] == "neighbor"
    with pytest.raises(MissingCapabilityError):
        p.require("LNS", "destroy_ops")


def test_error_hierarchy_and_suggestion():
    err = UnknownAlgorithmError("foo", ["GA", "SA"])
    assert isinstance(err, ConfigurationError) and isinstance(err, MetaoptError)
    assert "Suggestion:" in str(err)
    assert err.details["available"] == ["GA", "SA"]
