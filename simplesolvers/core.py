"""Core types shared by solvers, optimizers and line searches."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List

import numpy as np

Array = np.ndarray
Residual = Callable[[Array], Array]
Objective = Callable[[Array], float]
Jacobian = Callable[[Array], Array]
Gradient = Callable[[Array], Array]
Hessian = Callable[[Array], Array]

RTOL = 1e-8
ATOL = 1e-10


class Status(Enum):
    """State of an iteration driver."""

    INITIALIZED = "initialized"
    RUNNING = "running"
    CONVERGED = "converged"
    DIVERGED = "diverged"
    MAX_ITERATIONS = "max_iterations"


@dataclass
class EvaluationCounter:
    """Number of function, first- and second-derivative evaluations."""

    nfev: int = 0
    njev: int = 0
    nhev: int = 0


@dataclass
class SolverResult:
    """
    Result of a nonlinear solve.

    Attributes:
        x: Final iterate.
        fun: Residual ``F(x)`` at the final iterate.
        nit: Number of iterations performed.
        success: True if a convergence criterion fired.
        message: Human readable description of the stopping reason.
        status: Final driver state.
        residual_norm: Euclidean norm of ``fun``.
        nfev: Residual evaluations, including line searches and finite
            differences.
        njev: Jacobian evaluations of a user or autodiff provider.
        history: Iterates, filled when ``Options.store_trace`` is set.
    """

    x: Array
    fun: Array
    nit: int
    success: bool
    message: str
    status: Status
    residual_norm: float
    nfev: int
    njev: int
    history: List[Array] = field(default_factory=list)


@dataclass
class OptimizerResult:
    """Result object returned by :class:`~simplesolvers.optimization.Optimizer`."""

    x: Array
    fun: float
    nit: int
    success: bool
    message: str
    status: Status
    grad_norm: float
    nfev: int
    njev: int
    nhev: int
    history: List[Array] = field(default_factory=list)


def contains_nan(value) -> bool:
    """Return True if ``value`` (scalar or array) has a NaN entry."""
    return bool(np.any(np.isnan(value)))


__all__ = [
    "ATOL",
    "Array",
    "EvaluationCounter",
    "Gradient",
    "Hessian",
    "Jacobian",
    "Objective",
    "OptimizerResult",
    "RTOL",
    "Residual",
    "SolverResult",
    "Status",
    "contains_nan",
]
