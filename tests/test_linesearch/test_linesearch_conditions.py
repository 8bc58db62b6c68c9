import numpy as np

from simplesolvers.linesearch import (
    LineSearchCache,
    curvature_condition,
    sufficient_decrease,
)


def test_sufficient_decrease():
    assert sufficient_decrease(0.04, 0.09, -0.6, 0.5, 1e-4)
    assert not sufficient_decrease(0.49, 0.09, -0.6, 1.0, 1e-4)
    # Equality passes.
    assert sufficient_decrease(1.0, 1.0, 0.0, 1.0, 1e-4)


def test_curvature_condition_standard():
    assert curvature_condition(-0.5, -1.0, 0.9)
    assert curvature_condition(3.0, -1.0, 0.9)
    assert not curvature_condition(-0.95, -1.0, 0.9)


def test_curvature_condition_strong():
    assert curvature_condition(0.5, -1.0, 0.9, strong=True)
    assert not curvature_condition(3.0, -1.0, 0.9, strong=True)
    assert not curvature_condition(-0.95, -1.0, 0.9, strong=True)


def test_cache_trial_writes_in_place():
    cache = LineSearchCache(2)
    cache.reset(np.array([1.0, 2.0]), np.array([-1.0, 0.5]))
    first = cache.trial(0.5)
    assert np.allclose(first, [0.5, 2.25])
    second = cache.trial(2.0)
    assert second is first
    assert np.allclose(second, [-1.0, 3.0])
    assert np.allclose(cache.x_base, [1.0, 2.0])
