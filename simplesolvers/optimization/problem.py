"""Scalar objectives ``f: R^n -> R`` with optional derivatives."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core import Array, EvaluationCounter, Gradient, Hessian, Objective
from ..derivatives import (
    Differentiation,
    approx_grad,
    approx_hessian,
    autodiff_gradient,
    autodiff_hessian,
    autodiff_value,
)


@dataclass(frozen=True)
class OptimizerProblem:
    """Container describing a minimization problem.

    Missing derivatives are produced according to ``differentiation``. With
    ``Differentiation.AUTODIFF`` the objective must be written with torch
    operations.
    """

    fun: Objective
    grad: Optional[Gradient] = None
    hess: Optional[Hessian] = None
    differentiation: Differentiation = Differentiation.FINITE_DIFFERENCE
    dim: Optional[int] = None

    def _call(self, x: Array) -> float:
        if self.differentiation is Differentiation.AUTODIFF:
            value = autodiff_value(self.fun, x)
        else:
            value = self.fun(x)
        return float(np.reshape(value, ()))

    def value(self, x: Array, counter: Optional[EvaluationCounter] = None) -> float:
        if counter is not None:
            counter.nfev += 1
        return self._call(x)

    def gradient(self, x: Array, counter: Optional[EvaluationCounter] = None) -> Array:
        if self.grad is not None:
            grad = np.array(self.grad(x), dtype=float, copy=True)
            if counter is not None:
                counter.njev += 1
        elif self.differentiation is Differentiation.AUTODIFF:
            grad = autodiff_gradient(self.fun, x)
            if counter is not None:
                counter.njev += 1
        else:
            grad, evals = approx_grad(self._call, x, return_evals=True)
            if counter is not None:
                counter.nfev += evals
        return np.atleast_1d(grad)

    def hessian(self, x: Array, counter: Optional[EvaluationCounter] = None) -> Array:
        if self.hess is not None:
            hess = np.array(self.hess(x), dtype=float, copy=True)
            if counter is not None:
                counter.nhev += 1
        elif self.differentiation is Differentiation.AUTODIFF:
            hess = autodiff_hessian(self.fun, x)
            if counter is not None:
                counter.nhev += 1
        else:
            hess, evals = approx_hessian(self._call, x, return_evals=True)
            if counter is not None:
                counter.nfev += evals
        return np.atleast_2d(hess)


__all__ = ["OptimizerProblem"]
