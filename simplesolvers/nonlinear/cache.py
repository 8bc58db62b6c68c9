"""Iterate storage of the nonlinear solvers and their line-search sub-problem."""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..core import Array, EvaluationCounter
from ..linesearch import LineSearchCache, LineSearchProblem
from .problem import NonlinearProblem


class SolverCache:
    """Current and previous iterate of a nonlinear solver.

    ``x_prev`` always holds the value ``x`` had before the last call to
    :meth:`commit`. Trial points live in ``linesearch`` and never touch
    ``x``, so a failed iteration leaves the last valid iterate in place.
    """

    def __init__(self, x: Array, y: Array):
        self.x = np.array(x, dtype=float, copy=True)
        self.x_prev = self.x.copy()
        self.y = np.array(y, dtype=float, copy=True)
        self.y_prev = self.y.copy()
        self.jacobian: Optional[Array] = None
        self.direction = np.zeros_like(self.x)
        self.rhs = np.zeros_like(self.y)
        self.linesearch = LineSearchCache(self.x.size)

    def commit(self, x: Array, y: Array) -> None:
        self.x_prev[:] = self.x
        self.y_prev[:] = self.y
        self.x[:] = x
        self.y[:] = y


def solver_linesearch_problem(
    problem: NonlinearProblem,
    cache: LineSearchCache,
    counter: EvaluationCounter,
    jacobian: Optional[Array] = None,
) -> LineSearchProblem:
    """Line-search problem ``f(alpha) = |F(x + alpha d)|^2`` for a solver.

    The derivative is ``2 F^T J d``. ``J`` is evaluated at the trial point
    unless a fixed ``jacobian`` is given.
    """

    def f(alpha: float) -> float:
        y = problem.residual(cache.trial(alpha), counter)
        return float(y @ y)

    def d(alpha: float) -> float:
        x = cache.trial(alpha)
        y = problem.residual(x, counter)
        jac = jacobian if jacobian is not None else problem.jacobian_at(x, counter)
        return 2.0 * float(y @ (jac @ cache.direction))

    return LineSearchProblem(f=f, d=d)


__all__ = ["SolverCache", "solver_linesearch_problem"]
