"""Picard iteration for square systems."""

from __future__ import annotations

from typing import Optional

from ..core import Array, EvaluationCounter, contains_nan
from ..exceptions import DirectionFailure
from ..linesearch import LineSearch, shrink_until_finite
from ..options import Options
from .base import NonlinearSolver
from .cache import SolverCache, solver_linesearch_problem
from .problem import NonlinearProblem


class FixedPointIterator(NonlinearSolver):
    """Fixed-point (Picard) iteration with a line search.

    The direction is ``-F(x)``; no linear system is solved. With a unit step
    this is the iteration ``x <- G(x)`` for ``F(x) = x - G(x)``. The line
    search works on ``|F(x + alpha d)|^2`` like in
    :class:`~simplesolvers.nonlinear.NewtonSolver`, so the Jacobian is only
    needed for its derivative.

    Example
    -------
    >>> import numpy as np
    >>> from simplesolvers import FixedPointIterator, NonlinearProblem
    >>> solver = FixedPointIterator(NonlinearProblem(fun=lambda x: x - np.cos(x)))
    >>> round(float(solver.solve(np.array([1.0])).x[0]), 6)
    0.739085
    """

    name = "fixed-point iterator"

    def __init__(
        self,
        problem: NonlinearProblem,
        linesearch: Optional[LineSearch] = None,
        options: Optional[Options] = None,
    ):
        super().__init__(problem, options)
        self.linesearch = linesearch if linesearch is not None else LineSearch.backtracking()

    def _initialize(self, cache: SolverCache) -> None:
        if cache.y.shape != cache.x.shape:
            raise ValueError(
                f"Fixed-point iteration needs a square system, F maps {cache.x.size} to {cache.y.size} entries."
            )

    def step(self, cache: SolverCache, counter: EvaluationCounter) -> Array:
        direction = -cache.y
        if contains_nan(direction):
            raise DirectionFailure("NaN detected in direction vector.")
        direction = shrink_until_finite(
            lambda point: self.problem.residual(point, counter),
            cache.x,
            direction,
            self.linesearch.nan_factor,
            self.linesearch.nan_max_iterations,
            self.options.verbosity,
        )
        cache.direction[:] = direction
        cache.linesearch.reset(cache.x, direction)
        problem = solver_linesearch_problem(self.problem, cache.linesearch, counter)
        alpha = self.linesearch.search(problem, 1.0)
        return cache.x + alpha * direction


__all__ = ["FixedPointIterator"]
