"""Bracketing utilities for scalar functions.

These routines locate intervals that contain a minimum or a sign change of
a function of one variable. They are used by the line searches to set up
one-dimensional sub-problems and can also be used on their own, e.g.
``bisection(f, *bracket_root(f, x0))`` for a scalar root.

References:
    - Kochenderfer & Wheeler, *Algorithms for Optimization* (2019), ch. 3
    - Bierlaire, *Optimization: Principles and Algorithms* (2015), ch. 11
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from .exceptions import BracketingError
from .options import ABSOLUTE_TOLERANCE, DEFAULT_MAX_ITERATIONS, DEFAULT_TOLERANCE

ScalarFunction = Callable[[float], float]

DEFAULT_BRACKETING_S = 1e-2
DEFAULT_BRACKETING_K = 2.0
DEFAULT_BRACKETING_NMAX = 100
MAX_STEP_ADJUSTMENTS = 5


def _check_growth(s: float, k: float, nmax: int) -> None:
    if s == 0:
        raise ValueError("Initial step s must be non-zero.")
    if k <= 1:
        raise ValueError("Growth factor k must be larger than 1.")
    if nmax < 1:
        raise ValueError("nmax must be at least 1.")


def bracket_minimum(
    f: ScalarFunction,
    x: float = 0.0,
    s: float = DEFAULT_BRACKETING_S,
    k: float = DEFAULT_BRACKETING_K,
    nmax: int = DEFAULT_BRACKETING_NMAX,
) -> tuple[float, float]:
    """Find an interval ``(a, c)`` that contains a local minimum of ``f``.

    Starting at ``x`` the routine walks downhill with steps that grow by the
    factor ``k`` until the function value increases again.

    Parameters
    ----------
    f:
        Scalar function.
    x:
        Starting point.
    s:
        Initial step size.
    k:
        Factor by which the step grows after every successful move.
    nmax:
        Maximum number of moves before giving up.

    Examples
    --------
    >>> bracket_minimum(lambda x: x ** 2, 0.0)
    (-0.01, 0.01)
    """
    _check_growth(s, k, nmax)
    a, ya = float(x), f(x)
    b = a + s
    yb = f(b)
    if yb > ya:
        a, b = b, a
        ya, yb = yb, ya
        s = -s
    for _ in range(nmax):
        c = b + s
        yc = f(c)
        if yc > yb:
            return (a, c) if a < c else (c, a)
        a, ya, b, yb = b, yb, c, yc
        s *= k
    raise BracketingError(f"Unable to bracket a minimum starting at x = {x}.")


def bracket_minimum_with_fixed_point(
    f: ScalarFunction,
    x: float = 0.0,
    s: float = DEFAULT_BRACKETING_S,
    k: float = DEFAULT_BRACKETING_K,
    nmax: int = DEFAULT_BRACKETING_NMAX,
) -> tuple[float, float]:
    """Bracket a minimum while keeping the left end pinned at ``x``.

    The right end is moved to ``x + s``, ``x + s k``, ``x + s k**2``, ...
    until ``f`` rises above the previous sample. Returns ``(x, c)``. The
    function is assumed to decrease to the right of ``x``.
    """
    _check_growth(s, k, nmax)
    x = float(x)
    y_prev = f(x)
    width = s
    for _ in range(nmax):
        c = x + width
        yc = f(c)
        if yc > y_prev:
            return x, c
        y_prev = yc
        width *= k
    raise BracketingError(f"Unable to bracket a minimum to the right of x = {x}.")


def triple_point_finder(
    f: ScalarFunction,
    x: float = 0.0,
    delta: float = DEFAULT_BRACKETING_S,
    nmax: int = DEFAULT_BRACKETING_NMAX,
) -> tuple[float, float, float]:
    """Find ``a < b < c`` with ``f(a) >= f(b)`` and ``f(c) > f(b)``.

    ``f`` has to decrease to the right of ``x``. If the first trial point does not
    decrease the function the initial increment is halved, at most
    ``MAX_STEP_ADJUSTMENTS`` times. Afterwards the increment doubles until
    the function increases.
    """
    if delta <= 0:
        raise ValueError("delta must be positive.")
    x = float(x)
    fx = f(x)
    for _ in range(MAX_STEP_ADJUSTMENTS + 1):
        x1 = x + delta
        f1 = f(x1)
        if f1 < fx:
            break
        delta /= 2
    else:
        raise BracketingError(
            f"The function must be decreasing at x = {x}; f({x1}) = {f1} >= f({x}) = {fx}."
        )

    previous, current, f_current = x, x1, f1
    increment = delta
    for _ in range(nmax):
        increment *= 2
        following = current + increment
        f_following = f(following)
        if f_following > f_current:
            return previous, current, following
        previous, current, f_current = current, following, f_following
    raise BracketingError(f"Unable to find a triple point starting at x = {x}.")


def bracket_root(
    f: ScalarFunction,
    x: float = 0.0,
    s: float = DEFAULT_BRACKETING_S,
    k: float = DEFAULT_BRACKETING_K,
    nmax: int = DEFAULT_BRACKETING_NMAX,
) -> tuple[float, float]:
    """Find an interval anchored at ``x`` over which ``f`` changes sign.

    The far end is pushed away from ``x`` with widths ``s``, ``s k``, ...
    in the direction in which ``|f|`` decreases until ``f(x) f(c) <= 0``.

    Only a sign change is detected, so the bracket is not guaranteed to hold
    a single root. For ``f(x) = x**2 - 1`` started at ``-3`` with ``s = 4``
    the returned interval ``(-3, 1)`` contains both roots; an even number of
    roots between the samples is not detected at all.
    """
    _check_growth(s, k, nmax)
    x = float(x)
    fx = f(x)
    if fx == 0:
        return x, x
    if abs(f(x + s)) > abs(fx):
        s = -s
    width = s
    for _ in range(nmax):
        c = x + width
        if fx * f(c) <= 0:
            return (x, c) if x < c else (c, x)
        width *= k
    raise BracketingError(f"Unable to bracket a root starting at x = {x}.")


def bisection(
    f: ScalarFunction,
    a: float,
    b: float,
    x_abstol: float = DEFAULT_TOLERANCE,
    f_abstol: float = ABSOLUTE_TOLERANCE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> float:
    """Locate a root of ``f`` in ``[a, b]`` by bisection.

    Stops as soon as ``|f(x)| <= f_abstol`` at the midpoint or the bracket
    is narrower than ``x_abstol``. On exhaustion the last midpoint is
    returned.
    """
    x0, x1 = (float(a), float(b)) if a <= b else (float(b), float(a))
    y0, y1 = f(x0), f(x1)
    if y0 == 0:
        return x0
    if y1 == 0:
        return x1
    if np.sign(y0) == np.sign(y1):
        raise BracketingError(f"f has no sign change on [{x0}, {x1}].")

    x = 0.5 * (x0 + x1)
    for _ in range(max_iterations):
        x = 0.5 * (x0 + x1)
        y = f(x)
        if abs(y) <= f_abstol:
            break
        if y0 * y > 0:
            x0, y0 = x, y
        else:
            x1 = x
        if abs(x1 - x0) <= x_abstol:
            break
    return x


__all__ = [
    "DEFAULT_BRACKETING_K",
    "DEFAULT_BRACKETING_NMAX",
    "DEFAULT_BRACKETING_S",
    "bisection",
    "bracket_minimum",
    "bracket_minimum_with_fixed_point",
    "bracket_root",
    "triple_point_finder",
]
