"""Step-length policies.

Every policy has the signature ``policy(problem, alpha0, config) -> alpha``
where ``problem`` is a :class:`~simplesolvers.linesearch.problem.LineSearchProblem`
and ``config`` the :class:`~simplesolvers.linesearch.core.LineSearch` that
selected it. All policies return ``alpha0`` untouched when ``|d(0)|`` is
below ``config.tol``. The bracketing policies fall back to backtracking
from ``alpha0`` when no bracket can be found along the ray.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Callable

from ..bracketing import bisection as bisect_root
from ..bracketing import bracket_minimum, bracket_minimum_with_fixed_point, triple_point_finder
from ..exceptions import BracketingError
from ..logging import get_logger
from ..options import EPS
from .conditions import curvature_condition, sufficient_decrease
from .problem import LineSearchProblem

if TYPE_CHECKING:
    from .core import LineSearch

logger = get_logger(__name__)


def _flat(derivative: float, tol: float) -> bool:
    return abs(derivative) < tol


def _fall_back(problem: LineSearchProblem, alpha0: float, config: "LineSearch", err: BracketingError) -> float:
    logger.debug("%s Falling back to backtracking from alpha = %.3e.", err, alpha0)
    return backtracking(problem, alpha0, config)


def static(problem: LineSearchProblem, alpha0: float, config: "LineSearch") -> float:
    """Return the configured constant step length."""
    return config.alpha


def backtracking(problem: LineSearchProblem, alpha0: float, config: "LineSearch") -> float:
    """Shrink ``alpha`` by ``config.p`` until the Armijo condition holds.

    With ``config.curvature`` set the (standard or strong) curvature
    condition has to hold as well. If no step passes within
    ``config.max_iterations`` trials the last trial step is returned.
    """
    y0 = problem.f(0.0)
    d0 = problem.d(0.0)
    if _flat(d0, config.tol):
        return alpha0

    alpha = last = float(alpha0)
    for _ in range(config.max_iterations):
        if sufficient_decrease(problem.f(alpha), y0, d0, alpha, config.c1) and (
            not config.curvature
            or curvature_condition(problem.d(alpha), d0, config.c2, config.strong)
        ):
            return alpha
        last = alpha
        alpha *= config.p
    logger.debug("Backtracking exhausted after %d trials; alpha = %.3e", config.max_iterations, last)
    return last


def bisection(problem: LineSearchProblem, alpha0: float, config: "LineSearch") -> float:
    """Bisect the derivative on a bracket around the minimum along the ray."""
    d0 = problem.d(0.0)
    if _flat(d0, config.tol) or _flat(problem.d(alpha0), config.tol):
        return alpha0
    try:
        a, c = bracket_minimum(problem.f, 0.0, s=config.s)
    except BracketingError as err:
        return _fall_back(problem, alpha0, config, err)
    return bisect_root(
        problem.d,
        a,
        c,
        x_abstol=config.tol,
        f_abstol=config.tol,
        max_iterations=config.max_iterations,
    )


def quadratic(problem: LineSearchProblem, alpha0: float, config: "LineSearch") -> float:
    """Safeguarded quadratic interpolation.

    The bracket ``[left, right]`` comes from
    :func:`~simplesolvers.bracketing.bracket_minimum_with_fixed_point`. Each
    iteration fits ``p(t) = p0 + p1 t + p2 t**2`` to ``f`` and ``d`` at
    ``left`` and ``f`` at ``right``, and clamps its minimizer to
    ``[sigma0 h, sigma1 h]`` with ``h`` the bracket width (Kelley's
    safeguard). The bracket then shrinks from the side given by the sign of
    the derivative.
    """
    y0 = problem.f(0.0)
    d0 = problem.d(0.0)
    if _flat(d0, config.tol) or _flat(problem.d(alpha0), config.tol):
        return alpha0

    try:
        left, right = bracket_minimum_with_fixed_point(problem.f, 0.0, s=config.s)
    except BracketingError as err:
        return _fall_back(problem, alpha0, config, err)
    f_left, d_left, f_right = y0, d0, problem.f(right)
    best_alpha, best_value = right, f_right

    for _ in range(config.max_iterations):
        h = right - left
        p2 = (f_right - f_left - d_left * h) / h**2
        t = -d_left / (2 * p2) if p2 > 0 else config.sigma1 * h
        t = min(max(t, config.sigma0 * h), config.sigma1 * h)
        alpha = left + t
        f_alpha = problem.f(alpha)
        d_alpha = problem.d(alpha)
        if f_alpha < best_value:
            best_alpha, best_value = alpha, f_alpha
        if _flat(d_alpha, config.tol):
            return alpha
        if d_alpha < 0:
            left, f_left, d_left = alpha, f_alpha, d_alpha
        else:
            right, f_right = alpha, f_alpha

    logger.debug("Quadratic line search exhausted; returning alpha = %.3e", best_alpha)
    return best_alpha


def _wider_side_midpoint(a: float, b: float, c: float) -> float:
    return 0.5 * (b + c) if (c - b) > (b - a) else 0.5 * (a + b)


def _vertex(a: float, b: float, c: float, fa: float, fb: float, fc: float, eps: float) -> float:
    numerator = fa * (b**2 - c**2) + fb * (c**2 - a**2) + fc * (a**2 - b**2)
    denominator = fa * (b - c) + fb * (c - a) + fc * (a - b)
    if denominator == 0 or not math.isfinite(numerator / denominator):
        return _wider_side_midpoint(a, b, c)
    chi = 0.5 * numerator / denominator
    if math.isclose(chi, b, rel_tol=4 * EPS, abs_tol=EPS):
        chi = b + eps / 2 if (c - b) > (b - a) else b - eps / 2
    if not a < chi < c or chi == b:
        chi = _wider_side_midpoint(a, b, c)
    return chi


def _bierlaire_step(
    f: Callable[[float], float],
    points: tuple[float, float, float],
    values: tuple[float, float, float],
    eps: float,
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    a, b, c = points
    fa, fb, fc = values
    chi = _vertex(a, b, c, fa, fb, fc, eps)
    f_chi = f(chi)
    if chi > b:
        if f_chi > fb:
            c, fc = chi, f_chi
        else:
            a, fa, b, fb = b, fb, chi, f_chi
    else:
        if f_chi > fb:
            a, fa = chi, f_chi
        else:
            b, fb, c, fc = chi, f_chi, b, fb
    return (a, b, c), (fa, fb, fc)


def bierlaire_update(
    f: Callable[[float], float], a: float, b: float, c: float, eps: float = 1e-8
) -> tuple[float, float, float]:
    """Perform one three-point quadratic update of the triple ``(a, b, c)``.

    Requires ``a < b < c`` with ``f(a) >= f(b) <= f(c)`` and returns a new
    triple with the same property.
    """
    points, _ = _bierlaire_step(f, (a, b, c), (f(a), f(b), f(c)), eps)
    return points


def bierlaire_search(
    f: Callable[[float], float],
    a: float,
    b: float,
    c: float,
    eps: float = 1e-8,
    max_iterations: int = 50,
) -> float:
    """Shrink a bracketing triple by quadratic interpolation and return ``b``.

    Stops when the bracket is narrower than ``eps`` or both value gaps
    ``f(a) - f(b)`` and ``f(c) - f(b)`` are at most ``eps``.
    """
    points = (a, b, c)
    values = (f(a), f(b), f(c))
    for _ in range(max_iterations):
        points, values = _bierlaire_step(f, points, values, eps)
        a, b, c = points
        fa, fb, fc = values
        if (c - a) <= eps or ((fa - fb) <= eps and (fc - fb) <= eps):
            break
    return points[1]


def bierlaire_quadratic(problem: LineSearchProblem, alpha0: float, config: "LineSearch") -> float:
    """Three-point quadratic line search (Bierlaire 2015, ch. 11.2.1)."""
    if _flat(problem.d(0.0), config.tol) or _flat(problem.d(alpha0), config.tol):
        return alpha0
    try:
        a, b, c = triple_point_finder(problem.f, 0.0, delta=config.s)
    except BracketingError as err:
        return _fall_back(problem, alpha0, config, err)
    return bierlaire_search(problem.f, a, b, c, eps=config.tol, max_iterations=config.max_iterations)


__all__ = [
    "backtracking",
    "bierlaire_quadratic",
    "bierlaire_search",
    "bierlaire_update",
    "bisection",
    "quadratic",
    "static",
]
