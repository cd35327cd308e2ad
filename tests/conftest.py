import numpy as np
import pytest

from metaopt.benchmarks.continuous import continuous_problem
from metaopt.benchmarks.tsp import example_10, square, tsp_problem


@pytest.fixture
def square_tsp():
    return tsp_problem(square())


@pytest.fixture
def ladder_tsp():
    return tsp_problem(example_10())


@pytest.fixture
def sphere2():
    return continuous_problem("sphere", 2)


@pytest.fixture
def rng():
    return np.random.default_rng(0)
