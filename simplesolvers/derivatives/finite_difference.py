"""Central finite-difference derivatives.

Pure NumPy. Used by problems that come without derivative
callables and ``Differentiation.FINITE_DIFFERENCE``. Each routine can report
the number of function evaluations so that the drivers can count them.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from ..core import Array, Objective

Residual = Callable[[Array], Array]


def _steps(x: Array, eps: float) -> Array:
    if eps <= 0:
        raise ValueError("eps must be positive")
    return eps * np.eye(x.size)


def approx_grad(
    fun: Objective, x: Array, eps: float = 1e-6, return_evals: bool = False
) -> Array | tuple[Array, int]:
    """Central-difference gradient ``(f(x + eps e_i) - f(x - eps e_i)) / 2 eps``.

    Parameters
    ----------
    fun:
        Objective function returning a scalar given x.
    x:
        Point where the gradient is approximated.
    eps:
        Perturbation size.
    return_evals:
        Also return the number of calls to ``fun``.
    """
    x = np.array(x, dtype=float, copy=True)
    steps = _steps(x, eps)
    grad = np.array([(fun(x + e) - fun(x - e)) / (2.0 * eps) for e in steps], dtype=float)
    grad = grad.reshape(x.shape)
    if return_evals:
        return grad, 2 * x.size
    return grad


def approx_jacobian(
    fun: Residual, x: Array, eps: float = 1e-6, return_evals: bool = False
) -> Array | tuple[Array, int]:
    """Central-difference Jacobian of a vector valued function.

    Column ``j`` holds the derivative of ``fun`` with respect to ``x[j]``;
    the number of rows follows the output of ``fun``.
    """
    x = np.array(x, dtype=float, copy=True)
    steps = _steps(x, eps)
    columns = [
        (np.atleast_1d(np.asarray(fun(x + e), dtype=float)) - np.atleast_1d(np.asarray(fun(x - e), dtype=float)))
        / (2.0 * eps)
        for e in steps
    ]
    jac = np.column_stack(columns) if columns else np.zeros((0, 0))
    if return_evals:
        return jac, 2 * x.size
    return jac


def approx_hessian(
    fun: Objective, x: Array, eps: float = 1e-4, return_evals: bool = False
) -> Array | tuple[Array, int]:
    """Second-order central-difference Hessian.

    The diagonal uses the three-point stencil, off-diagonal entries the
    four-point cross stencil; the result is symmetric by construction.
    """
    x = np.array(x, dtype=float, copy=True)
    steps = _steps(x, eps)
    n = x.size
    hess = np.zeros((n, n))
    fx = fun(x)
    evals = 1
    for i, ei in enumerate(steps):
        hess[i, i] = (fun(x + ei) - 2 * fx + fun(x - ei)) / eps**2
        evals += 2
        for j in range(i + 1, n):
            ej = steps[j]
            cross = fun(x + ei + ej) - fun(x + ei - ej) - fun(x - ei + ej) + fun(x - ei - ej)
            evals += 4
            hess[i, j] = hess[j, i] = cross / (4 * eps**2)
    if return_evals:
        return hess, evals
    return hess


__all__ = ["approx_grad", "approx_hessian", "approx_jacobian"]
