"""Newton and quasi-Newton (BFGS, DFP) minimization with line searches."""

from __future__ import annotations

import copy
from typing import List, Optional

import numpy as np

from ..core import Array, EvaluationCounter, OptimizerResult, Status, contains_nan
from ..exceptions import DirectionFailure, DivergenceError, SingularMatrixError
from ..hessians import HessianKind, InverseHessianApproximation
from ..linear import LUSolver
from ..linesearch import LineSearch, LineSearchCache, LineSearchProblem, shrink_until_finite
from ..logging import get_logger
from ..options import Options
from ..status import OptimizerStatus, report_final_state
from .problem import OptimizerProblem

logger = get_logger(__name__)


class OptimizerCache:
    """Current and previous iterate, value and gradient of an optimizer."""

    def __init__(self, x: Array, f: float, g: Array):
        self.x = np.array(x, dtype=float, copy=True)
        self.x_prev = self.x.copy()
        self.f = float(f)
        self.f_prev = self.f
        self.g = np.array(g, dtype=float, copy=True)
        self.g_prev = self.g.copy()
        self.direction = np.zeros_like(self.x)
        self.rhs = -self.g
        self.linesearch = LineSearchCache(self.x.size)

    def commit(self, x: Array, f: float, g: Array) -> None:
        self.x_prev[:] = self.x
        self.f_prev = self.f
        self.g_prev[:] = self.g
        self.x[:] = x
        self.f = float(f)
        self.g[:] = g


def optimizer_linesearch_problem(
    problem: OptimizerProblem, cache: LineSearchCache, counter: EvaluationCounter
) -> LineSearchProblem:
    """Line-search problem ``f(alpha) = f(x + alpha d)`` with ``d(alpha) = grad f(x + alpha d) . d``."""

    def f(alpha: float) -> float:
        return problem.value(cache.trial(alpha), counter)

    def d(alpha: float) -> float:
        return float(problem.gradient(cache.trial(alpha), counter) @ cache.direction)

    return LineSearchProblem(f=f, d=d)


class Optimizer:
    """Minimize a scalar objective.

    ``hessian`` selects the direction: ``HessianKind.EXACT`` solves
    ``H d = -g`` with the (user, autodiff or finite-difference) Hessian,
    ``BFGS`` and ``DFP`` use ``d = -Q g`` with an inverse Hessian estimate
    ``Q`` that starts at the identity and is updated after every step.

    Example
    -------
    >>> import numpy as np
    >>> from simplesolvers import Optimizer, OptimizerProblem
    >>> problem = OptimizerProblem(fun=lambda x: float(np.sum((x - 1.0) ** 2)), grad=lambda x: 2 * (x - 1.0))
    >>> result = Optimizer(problem).solve(np.zeros(3))
    >>> bool(np.allclose(result.x, 1.0))
    True
    """

    def __init__(
        self,
        problem: OptimizerProblem,
        hessian: HessianKind = HessianKind.BFGS,
        linesearch: Optional[LineSearch] = None,
        options: Optional[Options] = None,
    ):
        if not isinstance(hessian, HessianKind):
            raise ValueError(f"Unknown Hessian kind: {hessian!r}")
        self.problem = problem
        self.hessian = hessian
        self.linesearch = linesearch if linesearch is not None else LineSearch.backtracking()
        self.options = options if options is not None else Options()
        self.status = OptimizerStatus()
        self.state = Status.INITIALIZED
        self.cache: Optional[OptimizerCache] = None
        self.inverse_hessian: Optional[InverseHessianApproximation] = None
        self._running = False

    @property
    def name(self) -> str:
        return "Newton optimizer" if self.hessian is HessianKind.EXACT else f"{self.hessian.name} optimizer"

    def compute_direction(self, cache: OptimizerCache, counter: EvaluationCounter) -> Array:
        cache.rhs = -cache.g
        if self.inverse_hessian is not None:
            direction = self.inverse_hessian.direction(cache.g)
            if float(direction @ cache.g) >= 0 and np.any(cache.g):
                # Q lost positive definiteness; restart from steepest descent
                logger.debug("%s direction is not a descent direction; resetting Q.", self.hessian.name)
                self.inverse_hessian.reset()
                direction = self.inverse_hessian.direction(cache.g)
        else:
            hess = self.problem.hessian(cache.x, counter)
            try:
                direction = LUSolver().factorize(hess).solve(cache.rhs)
            except SingularMatrixError as err:
                raise DirectionFailure(f"Hessian is singular at x = {cache.x}.") from err
        if contains_nan(direction):
            raise DirectionFailure("NaN detected in direction vector.")
        return direction

    def step(self, cache: OptimizerCache, counter: EvaluationCounter) -> Array:
        direction = self.compute_direction(cache, counter)
        direction = shrink_until_finite(
            lambda point: self.problem.value(point, counter),
            cache.x,
            direction,
            self.linesearch.nan_factor,
            self.linesearch.nan_max_iterations,
            self.options.verbosity,
        )
        cache.direction[:] = direction
        cache.linesearch.reset(cache.x, direction)
        problem = optimizer_linesearch_problem(self.problem, cache.linesearch, counter)
        alpha = self.linesearch.search(problem, 1.0)
        return cache.x + alpha * direction

    def solve(self, x0: Array) -> OptimizerResult:
        """Iterate from ``x0`` until a stopping criterion fires."""
        if self._running:
            raise RuntimeError("Optimizer is already solving and cannot be re-entered.")
        self._running = True
        try:
            return self._solve(x0)
        finally:
            self._running = False

    def _solve(self, x0: Array) -> OptimizerResult:
        x = np.atleast_1d(np.array(x0, dtype=float, copy=True))
        if self.problem.dim is not None and x.size != self.problem.dim:
            raise ValueError(f"x0 has {x.size} entries, the problem expects {self.problem.dim}.")
        counter = EvaluationCounter()
        cache = self.cache = OptimizerCache(
            x, self.problem.value(x, counter), self.problem.gradient(x, counter)
        )
        self.status.initialize(cache.x, cache.f, cache.g)
        self.state = Status.INITIALIZED
        self.inverse_hessian = (
            None if self.hessian is HessianKind.EXACT else InverseHessianApproximation(self.hessian, x.size)
        )
        history: List[Array] = [cache.x.copy()] if self.options.store_trace else []

        self.state = state = Status.RUNNING
        while state is Status.RUNNING:
            x_new = self.step(cache, counter)
            f_new = self.problem.value(x_new, counter)
            g_new = self.problem.gradient(x_new, counter)
            self.status.update(x_new, cache.x, f_new, cache.f, g_new, cache.g)
            self.state = state = self.status.evaluate(self.options)
            if state is Status.DIVERGED:
                raise DivergenceError(
                    f"{self.name} diverged after {self.status.iteration} iterations ({self.status}).",
                    status=copy.copy(self.status),
                    x=cache.x,
                )
            cache.commit(x_new, f_new, g_new)
            if self.inverse_hessian is not None:
                self.inverse_hessian.update(cache.x - cache.x_prev, cache.g - cache.g_prev)
            if self.options.store_trace:
                history.append(cache.x.copy())

        report_final_state(self.name, state, self.status, self.options)
        return OptimizerResult(
            x=cache.x.copy(),
            fun=cache.f,
            nit=self.status.iteration,
            success=state is Status.CONVERGED,
            message="Convergence criterion satisfied." if state is Status.CONVERGED else "Maximum iterations reached.",
            status=state,
            grad_norm=float(np.linalg.norm(cache.g)),
            nfev=counter.nfev,
            njev=counter.njev,
            nhev=counter.nhev,
            history=history,
        )


def newton_optimizer(problem: OptimizerProblem, **kwargs) -> Optimizer:
    """Optimizer using the exact Hessian."""
    return Optimizer(problem, hessian=HessianKind.EXACT, **kwargs)


def bfgs_optimizer(problem: OptimizerProblem, **kwargs) -> Optimizer:
    return Optimizer(problem, hessian=HessianKind.BFGS, **kwargs)


def dfp_optimizer(problem: OptimizerProblem, **kwargs) -> Optimizer:
    return Optimizer(problem, hessian=HessianKind.DFP, **kwargs)


__all__ = [
    "Optimizer",
    "OptimizerCache",
    "bfgs_optimizer",
    "dfp_optimizer",
    "newton_optimizer",
    "optimizer_linesearch_problem",
]
