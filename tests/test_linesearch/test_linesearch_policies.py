import logging
from io import StringIO

import numpy as np
import pytest

from simplesolvers import EvaluationFailure
from simplesolvers.linesearch import (
    LineSearch,
    LineSearchKind,
    LineSearchProblem,
    bierlaire_search,
    bierlaire_update,
    shrink_until_finite,
    sufficient_decrease,
)
from simplesolvers.logging import configure_logging


def parabola(center: float) -> LineSearchProblem:
    return LineSearchProblem(f=lambda a: (a - center) ** 2, d=lambda a: 2 * (a - center))


ALL_KINDS = list(LineSearchKind)
ADAPTIVE_KINDS = [kind for kind in LineSearchKind if kind is not LineSearchKind.STATIC]


def test_static_returns_configured_step():
    assert LineSearch.static(0.25).search(parabola(0.3)) == 0.25
    assert LineSearch.static(0.25).search(parabola(0.3), 0.9) == 0.25


def test_backtracking_satisfies_armijo():
    problem = parabola(0.3)
    config = LineSearch.backtracking()
    alpha = config.search(problem, 1.0)
    assert alpha == 0.5
    assert sufficient_decrease(problem.f(alpha), problem.f(0.0), problem.d(0.0), alpha, config.c1)


def test_backtracking_default_start_is_alpha():
    assert LineSearch.backtracking(alpha=0.5).search(parabola(1.0)) == 0.5


def test_backtracking_with_curvature():
    problem = parabola(0.3)
    assert LineSearch.backtracking(curvature=True).search(problem, 1.0) == 0.5
    assert LineSearch.backtracking(curvature=True, strong=True).search(problem, 1.0) == 0.5


def test_backtracking_returns_last_trial_on_exhaustion():
    # The curvature condition never holds below alpha = 1.
    config = LineSearch.backtracking(curvature=True, max_iterations=3)
    assert config.search(parabola(10.0), 0.5) == 0.125


def test_bisection_finds_stationary_point():
    problem = parabola(0.3)
    alpha = LineSearch.bisection().search(problem, 1.0)
    assert alpha == pytest.approx(0.3, abs=1e-7)
    assert abs(problem.d(alpha)) < 1e-6


def test_quadratic_is_exact_on_parabola():
    assert LineSearch.quadratic().search(parabola(0.3), 1.0) == pytest.approx(0.3)


def test_quadratic_on_quartic():
    problem = LineSearchProblem(f=lambda a: (a - 0.7) ** 4 - a, d=lambda a: 4 * (a - 0.7) ** 3 - 1)
    alpha = LineSearch.quadratic(tol=1e-6, max_iterations=200).search(problem, 1.0)
    assert problem.f(alpha) < problem.f(0.0)
    assert 0.0 < alpha < 2.0


def test_bierlaire_quadratic_finds_minimum():
    alpha = LineSearch.bierlaire_quadratic().search(parabola(0.3), 1.0)
    assert alpha == pytest.approx(0.3, abs=1e-6)


@pytest.mark.parametrize("kind", ALL_KINDS)
def test_unit_step_for_exact_newton_direction(kind):
    # Restriction of |F|^2 to a full Newton step of a linear F.
    problem = LineSearchProblem(f=lambda a: (1 - a) ** 2, d=lambda a: -2 * (1 - a))
    assert LineSearch(kind=kind).search(problem, 1.0) == 1.0


@pytest.mark.parametrize("kind", ADAPTIVE_KINDS)
def test_flat_start_returns_initial_step(kind):
    problem = LineSearchProblem(f=lambda a: 1.0, d=lambda a: 0.0)
    assert LineSearch(kind=kind).search(problem, 0.7) == 0.7


def _is_bracket(f, a, b, c):
    return a < b < c and f(a) >= f(b) <= f(c)


@pytest.mark.parametrize(
    "triple",
    [(0.0, 0.5, 3.0), (0.0, 1.5, 3.0), (0.0, 0.9, 1.2), (-1.0, 1.1, 1.3)],
)
def test_bierlaire_update_keeps_bracket(triple):
    f = lambda x: (x - 1.0) ** 2 + 0.1 * (x - 1.0) ** 4  # noqa: E731
    a, b, c = triple
    assert _is_bracket(f, a, b, c)
    for _ in range(8):
        a, b, c = bierlaire_update(f, a, b, c)
        assert _is_bracket(f, a, b, c)
    assert a <= 1.0 <= c


def test_bierlaire_update_moves_towards_vertex():
    f = lambda x: (x - 1.0) ** 2  # noqa: E731
    assert np.allclose(bierlaire_update(f, 0.0, 0.5, 3.0), (0.5, 1.0, 3.0))
    assert np.allclose(bierlaire_update(f, 0.0, 1.5, 3.0), (0.0, 1.0, 1.5))


def test_bierlaire_search_nonquadratic():
    f = lambda x: x**4 - x  # noqa: E731
    x = bierlaire_search(f, 0.0, 0.5, 2.0, eps=1e-10, max_iterations=200)
    assert x == pytest.approx(0.25 ** (1 / 3), abs=1e-4)


def test_shrink_until_finite():
    def evaluate(x):
        with np.errstate(invalid="ignore"):
            return np.sqrt(x)

    direction = shrink_until_finite(evaluate, np.array([1.0]), np.array([-4.0]), 0.5, 10)
    assert np.allclose(direction, [-1.0])


def test_shrink_until_finite_gives_up():
    with pytest.raises(EvaluationFailure):
        shrink_until_finite(lambda x: np.array([np.nan]), np.zeros(1), np.ones(1), 0.5, 3)


def test_shrink_until_finite_logs_with_high_verbosity():
    stream = StringIO()
    configure_logging(level=logging.WARNING, stream=stream)
    try:
        shrink_until_finite(
            lambda x: np.array([np.nan]) if x[0] > 1 else x, np.zeros(1), np.array([4.0]), 0.5, 5, verbosity=2
        )
    finally:
        configure_logging(level=logging.WARNING)
    assert "NaN detected at trial point" in stream.getvalue()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"kind": "static"},
        {"alpha": 0.0},
        {"c1": 0.9, "c2": 0.5},
        {"p": 1.0},
        {"sigma0": 0.6, "sigma1": 0.5},
        {"s": 0.0},
        {"tol": 0.0},
        {"max_iterations": 0},
        {"nan_factor": 1.0},
        {"nan_max_iterations": -1},
    ],
)
def test_invalid_configuration(kwargs):
    with pytest.raises(ValueError):
        LineSearch(**kwargs)


def test_bierlaire_falls_back_when_minimum_is_too_close():
    # The minimizer 1e-4 lies below every halved initial increment.
    problem = LineSearchProblem(f=lambda a: (1 - 1e4 * a) ** 2, d=lambda a: -2e4 * (1 - 1e4 * a))
    alpha = LineSearch.bierlaire_quadratic().search(problem, 1.0)
    assert alpha == 2.0**-13
    assert problem.f(alpha) < problem.f(0.0)


@pytest.mark.parametrize(
    "kind",
    [LineSearchKind.BISECTION, LineSearchKind.QUADRATIC, LineSearchKind.BIERLAIRE_QUADRATIC],
)
def test_unbounded_ray_falls_back_to_backtracking(kind):
    ray = LineSearchProblem(f=lambda a: -a, d=lambda a: -1.0)
    assert LineSearch(kind=kind).search(ray, 1.0) == 1.0
