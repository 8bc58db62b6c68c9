"""Iteration loop shared by the nonlinear solvers."""

from __future__ import annotations

import copy
from typing import List, Optional

import numpy as np

from ..core import Array, EvaluationCounter, SolverResult, Status
from ..exceptions import DivergenceError
from ..options import Options
from ..status import NonlinearSolverStatus, report_final_state
from .cache import SolverCache
from .problem import NonlinearProblem

_MESSAGES = {
    Status.CONVERGED: "Convergence criterion satisfied.",
    Status.MAX_ITERATIONS: "Maximum iterations reached.",
}


class NonlinearSolver:
    """Base class of the solvers for ``F(x) = 0``.

    Subclasses implement :meth:`step`, which returns the next iterate
    without modifying ``cache.x``. The loop evaluates the residual there,
    updates the status and either commits the iterate, stops, or raises
    :class:`~simplesolvers.exceptions.DivergenceError`. ``state`` moves from
    ``INITIALIZED`` to ``RUNNING`` and ends in ``CONVERGED``,
    ``MAX_ITERATIONS`` or ``DIVERGED``. An instance must not be re-entered
    while a solve is running.
    """

    name = "nonlinear solver"

    def __init__(self, problem: NonlinearProblem, options: Optional[Options] = None):
        self.problem = problem
        self.options = options if options is not None else Options()
        self.status = NonlinearSolverStatus()
        self.state = Status.INITIALIZED
        self.cache: Optional[SolverCache] = None
        self._running = False

    def _initialize(self, cache: SolverCache) -> None:
        pass

    def step(self, cache: SolverCache, counter: EvaluationCounter) -> Array:
        raise NotImplementedError

    def solve(self, x0: Array) -> SolverResult:
        """Iterate from ``x0`` until a stopping criterion fires."""
        if self._running:
            raise RuntimeError(f"{type(self).__name__} is already solving and cannot be re-entered.")
        self._running = True
        try:
            return self._solve(x0)
        finally:
            self._running = False

    def _solve(self, x0: Array) -> SolverResult:
        x = np.atleast_1d(np.array(x0, dtype=float, copy=True))
        if self.problem.dim is not None and x.size != self.problem.dim:
            raise ValueError(f"x0 has {x.size} entries, the problem expects {self.problem.dim}.")
        counter = EvaluationCounter()
        y = self.problem.residual(x, counter)
        cache = self.cache = SolverCache(x, y)
        self.status.initialize(cache.x, cache.y)
        self.state = Status.INITIALIZED
        self._initialize(cache)
        history: List[Array] = [cache.x.copy()] if self.options.store_trace else []

        self.state = state = Status.RUNNING
        while state is Status.RUNNING:
            x_new = self.step(cache, counter)
            y_new = self.problem.residual(x_new, counter)
            self.status.update(x_new, cache.x, y_new, cache.y)
            self.state = state = self.status.evaluate(self.options)
            if state is Status.DIVERGED:
                raise DivergenceError(
                    f"{self.name} diverged after {self.status.iteration} iterations ({self.status}).",
                    status=copy.copy(self.status),
                    x=cache.x,
                )
            cache.commit(x_new, y_new)
            if self.options.store_trace:
                history.append(cache.x.copy())

        report_final_state(self.name, state, self.status, self.options)
        return SolverResult(
            x=cache.x.copy(),
            fun=cache.y.copy(),
            nit=self.status.iteration,
            success=state is Status.CONVERGED,
            message=_MESSAGES[state],
            status=state,
            residual_norm=float(np.linalg.norm(cache.y)),
            nfev=counter.nfev,
            njev=counter.njev,
            history=history,
        )


__all__ = ["NonlinearSolver"]
