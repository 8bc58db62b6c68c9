"""Dogleg trust-region solver for (possibly overdetermined) nonlinear systems."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ..core import Array, EvaluationCounter, contains_nan
from ..exceptions import DirectionFailure, EvaluationFailure, SingularMatrixError
from ..linear import LUSolver
from ..logging import get_logger
from ..options import Options
from .base import NonlinearSolver
from .cache import SolverCache
from .problem import NonlinearProblem

logger = get_logger(__name__)

SHRINK_THRESHOLD = 0.25
EXPAND_THRESHOLD = 0.75


@dataclass(frozen=True)
class TrustRegionStep:
    """One trial step of the dogleg solver."""

    delta: float
    step_norm: float
    rho: float
    accepted: bool


def cauchy_step(grad: Array, model: Array, delta: float) -> Array:
    """Minimizer of the quadratic model along ``-grad``.

    Falls back to the steepest-descent step of length ``delta`` when the
    model has no positive curvature along ``grad``.
    """
    grad_norm = float(np.linalg.norm(grad))
    if grad_norm == 0:
        return np.zeros_like(grad)
    gbg = float(grad @ (model @ grad))
    if gbg <= 0:
        return -(delta / grad_norm) * grad
    return -(grad_norm**2 / gbg) * grad


def dogleg_step(grad: Array, model: Array, delta: float) -> Array:
    """Dogleg step for the model ``m(p) = g.p + p.B.p / 2`` with ``|p| <= delta``.

    Takes the Gauss-Newton step ``-B^-1 g`` if it fits, the Cauchy step
    scaled to the boundary if even that is too long, and otherwise the point
    where the segment between both crosses the boundary.
    """
    grad_norm = float(np.linalg.norm(grad))
    if grad_norm == 0:
        return np.zeros_like(grad)
    try:
        p_gn: Optional[Array] = -LUSolver().factorize(model).solve(grad)
    except SingularMatrixError:
        p_gn = None
    if p_gn is not None and np.linalg.norm(p_gn) <= delta:
        return p_gn
    p_c = cauchy_step(grad, model, delta)
    p_c_norm = float(np.linalg.norm(p_c))
    if p_c_norm >= delta:
        return (delta / p_c_norm) * p_c
    if p_gn is None:
        return p_c
    diff = p_gn - p_c
    a = float(diff @ diff)
    if a <= 0:
        return p_c
    b = 2.0 * float(p_c @ diff)
    c = float(p_c @ p_c) - delta**2
    disc = max(b * b - 4 * a * c, 0.0)
    tau = min(max((-b + np.sqrt(disc)) / (2 * a), 0.0), 1.0)
    return p_c + tau * diff


class DoglegSolver(NonlinearSolver):
    """Trust-region solver minimizing ``|F(x)|^2 / 2`` with dogleg steps.

    The model Hessian is ``J^T J + regularization * I`` and the model
    gradient ``J^T F``. A trial step is accepted when the ratio of actual to
    predicted decrease exceeds ``eta``. A ratio below 0.25 shrinks the
    radius by ``reduction_factor`` and a ratio above 0.75 for a step on the
    boundary grows it by ``expansion_factor`` up to ``max_delta``. Rejected
    steps are retried with the smaller radius, at most
    ``max_trust_region_iterations`` times per iteration; after that the
    iterate does not move and the stopping criteria decide. All trial steps of the last solve are kept in
    ``trust_region_history``.
    """

    name = "dogleg solver"

    def __init__(
        self,
        problem: NonlinearProblem,
        delta: float = 1.0,
        max_delta: float = 100.0,
        eta: float = 0.15,
        reduction_factor: float = 0.25,
        expansion_factor: float = 2.0,
        regularization: float = 0.0,
        max_trust_region_iterations: int = 20,
        options: Optional[Options] = None,
    ):
        if not (0 < delta <= max_delta):
            raise ValueError("Require 0 < delta <= max_delta.")
        if not (0 <= eta < SHRINK_THRESHOLD):
            raise ValueError(f"eta must lie in [0, {SHRINK_THRESHOLD}).")
        if not (0 < reduction_factor < 1):
            raise ValueError("reduction_factor must lie in (0, 1).")
        if expansion_factor <= 1:
            raise ValueError("expansion_factor must be larger than 1.")
        if regularization < 0:
            raise ValueError("regularization must be non-negative.")
        if max_trust_region_iterations < 1:
            raise ValueError("max_trust_region_iterations must be at least 1.")
        super().__init__(problem, options)
        self.initial_delta = delta
        self.delta = delta
        self.max_delta = max_delta
        self.eta = eta
        self.reduction_factor = reduction_factor
        self.expansion_factor = expansion_factor
        self.regularization = regularization
        self.max_trust_region_iterations = max_trust_region_iterations
        self.trust_region_history: List[TrustRegionStep] = []

    def _initialize(self, cache: SolverCache) -> None:
        self.delta = self.initial_delta
        self.trust_region_history = []

    def _ratio(self, residual: Array, trial_residual: Array, jac: Array, step: Array) -> float:
        if contains_nan(trial_residual):
            return -np.inf
        current = 0.5 * float(residual @ residual)
        linearized = residual + jac @ step
        predicted = current - 0.5 * float(linearized @ linearized)
        if predicted <= 0:
            return 0.0
        return (current - 0.5 * float(trial_residual @ trial_residual)) / predicted

    def _update_radius(self, rho: float, step_norm: float) -> None:
        if rho < SHRINK_THRESHOLD:
            self.delta *= self.reduction_factor
            logger.debug("Trust region shrunk to %.3e (rho = %.3e).", self.delta, rho)
        elif rho > EXPAND_THRESHOLD and step_norm >= 0.99 * self.delta:
            self.delta = min(self.expansion_factor * self.delta, self.max_delta)
            logger.debug("Trust region expanded to %.3e (rho = %.3e).", self.delta, rho)

    def step(self, cache: SolverCache, counter: EvaluationCounter) -> Array:
        jac = self.problem.jacobian_at(cache.x, counter)
        cache.jacobian = jac
        grad = jac.T @ cache.y
        if float(np.linalg.norm(grad)) == 0:
            return cache.x.copy()
        model = jac.T @ jac + self.regularization * np.eye(cache.x.size)

        x_trial = cache.x
        trial_residual = cache.y
        for _ in range(self.max_trust_region_iterations):
            delta = self.delta
            step = dogleg_step(grad, model, delta)
            if contains_nan(step):
                raise DirectionFailure("NaN detected in direction vector.")
            cache.direction[:] = step
            x_trial = cache.x + step
            trial_residual = self.problem.residual(x_trial, counter)
            rho = self._ratio(cache.y, trial_residual, jac, step)
            step_norm = float(np.linalg.norm(step))
            accepted = rho > self.eta
            self._update_radius(rho, step_norm)
            self.trust_region_history.append(TrustRegionStep(delta, step_norm, rho, accepted))
            if accepted:
                return x_trial

        if contains_nan(trial_residual):
            raise EvaluationFailure(
                f"Trial point evaluates to NaN after {self.max_trust_region_iterations} radius reductions."
            )
        logger.debug("No trial step accepted; staying at x (delta = %.3e).", self.delta)
        return cache.x.copy()


__all__ = ["DoglegSolver", "TrustRegionStep", "cauchy_step", "dogleg_step"]
