"""Newton and quasi-Newton solvers for nonlinear systems."""

from __future__ import annotations

from typing import Optional

from ..core import Array, EvaluationCounter, contains_nan
from ..exceptions import DirectionFailure, SingularMatrixError
from ..linear import LUSolver
from ..linesearch import LineSearch, shrink_until_finite
from ..options import Options
from .base import NonlinearSolver
from .cache import SolverCache, solver_linesearch_problem
from .problem import NonlinearProblem


class NewtonSolver(NonlinearSolver):
    """Newton's method with a line search.

    Every iteration evaluates and factorizes the Jacobian, solves
    ``J d = -F(x)``, shrinks ``d`` while ``F(x + d)`` is NaN and finally
    picks the step length with ``linesearch`` on ``|F(x + alpha d)|^2``.

    Example
    -------
    >>> import numpy as np
    >>> from simplesolvers import NewtonSolver, NonlinearProblem
    >>> solver = NewtonSolver(NonlinearProblem(fun=lambda x: x**2 - 4.0, jacobian=lambda x: np.diag(2 * x)))
    >>> round(float(solver.solve(np.array([3.0])).x[0]), 8)
    2.0
    """

    name = "Newton solver"

    def __init__(
        self,
        problem: NonlinearProblem,
        linesearch: Optional[LineSearch] = None,
        options: Optional[Options] = None,
        linear_solver: Optional[LUSolver] = None,
    ):
        super().__init__(problem, options)
        self.linesearch = linesearch if linesearch is not None else LineSearch.backtracking()
        self.linear_solver = linear_solver if linear_solver is not None else LUSolver()

    def _initialize(self, cache: SolverCache) -> None:
        self.linear_solver = LUSolver(self.linear_solver.pivot_tol)

    def _needs_factorization(self) -> bool:
        return True

    def _linesearch_jacobian(self, cache: SolverCache) -> Optional[Array]:
        return None

    def compute_direction(self, cache: SolverCache, counter: EvaluationCounter) -> Array:
        """Solve ``J d = -F(x)`` and return ``d``."""
        if self._needs_factorization() or not self.linear_solver.factorized:
            cache.jacobian = self.problem.jacobian_at(cache.x, counter)
            try:
                self.linear_solver.factorize(cache.jacobian)
            except SingularMatrixError as err:
                raise DirectionFailure(f"Jacobian is singular at x = {cache.x}.") from err
        cache.rhs = -cache.y
        direction = self.linear_solver.solve(cache.rhs)
        if contains_nan(direction):
            raise DirectionFailure("NaN detected in direction vector.")
        return direction

    def step(self, cache: SolverCache, counter: EvaluationCounter) -> Array:
        direction = self.compute_direction(cache, counter)
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
        problem = solver_linesearch_problem(
            self.problem, cache.linesearch, counter, jacobian=self._linesearch_jacobian(cache)
        )
        alpha = self.linesearch.search(problem, 1.0)
        return cache.x + alpha * direction


class QuasiNewtonSolver(NewtonSolver):
    """Newton solver that refactorizes the Jacobian every ``refactorize`` iterations.

    In between, the last factorization is reused for the linear solves and
    the frozen Jacobian is used for the line-search derivative.
    """

    name = "quasi-Newton solver"

    def __init__(
        self,
        problem: NonlinearProblem,
        linesearch: Optional[LineSearch] = None,
        options: Optional[Options] = None,
        linear_solver: Optional[LUSolver] = None,
        refactorize: int = 5,
    ):
        if refactorize < 1:
            raise ValueError("refactorize must be at least 1.")
        super().__init__(problem, linesearch, options, linear_solver)
        self.refactorize = refactorize

    def _needs_factorization(self) -> bool:
        return self.status.iteration % self.refactorize == 0

    def _linesearch_jacobian(self, cache: SolverCache) -> Optional[Array]:
        return cache.jacobian


__all__ = ["NewtonSolver", "QuasiNewtonSolver"]
