"""Residual problems ``F(x) = 0``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core import Array, EvaluationCounter, Jacobian, Residual
from ..derivatives import Differentiation, approx_jacobian, autodiff_jacobian, autodiff_value


@dataclass(frozen=True)
class NonlinearProblem:
    """Container describing a nonlinear system.

    ``fun`` maps ``R^n`` to ``R^m``. Without an explicit ``jacobian`` the
    Jacobian is produced according to ``differentiation``; with
    ``Differentiation.AUTODIFF`` the residual must be written with torch
    operations.
    """

    fun: Residual
    jacobian: Optional[Jacobian] = None
    differentiation: Differentiation = Differentiation.FINITE_DIFFERENCE
    dim: Optional[int] = None

    def residual(self, x: Array, counter: Optional[EvaluationCounter] = None) -> Array:
        if self.differentiation is Differentiation.AUTODIFF:
            value = autodiff_value(self.fun, x)
        else:
            value = self.fun(x)
        if counter is not None:
            counter.nfev += 1
        return np.array(np.atleast_1d(value), dtype=float, copy=True)

    def jacobian_at(self, x: Array, counter: Optional[EvaluationCounter] = None) -> Array:
        if self.jacobian is not None:
            jac = np.array(self.jacobian(x), dtype=float, copy=True)
            if counter is not None:
                counter.njev += 1
        elif self.differentiation is Differentiation.AUTODIFF:
            jac = autodiff_jacobian(self.fun, x)
            if counter is not None:
                counter.njev += 1
        else:
            jac, evals = approx_jacobian(self.fun, x, return_evals=True)
            if counter is not None:
                counter.nfev += evals
        return np.atleast_2d(jac)


__all__ = ["NonlinearProblem"]
