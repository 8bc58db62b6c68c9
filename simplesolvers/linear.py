"""Dense LU factorization with partial pivoting.

The solvers factorize a Jacobian or Hessian once and may reuse the factors
for several right-hand sides (see
:class:`~simplesolvers.nonlinear.QuasiNewtonSolver`).
"""

from __future__ import annotations

import warnings
from typing import Optional

import numpy as np
import scipy.linalg

from .core import Array
from .exceptions import SingularMatrixError


class LUSolver:
    """Factorize ``A = P L U`` with LAPACK and solve ``A x = b``.

    A pivot with ``|u_kk| <= pivot_tol`` raises
    :class:`~simplesolvers.exceptions.SingularMatrixError`. NaN entries are
    not treated as singular; they propagate into the solution where the
    caller can detect them.
    """

    def __init__(self, pivot_tol: float = 0.0):
        if pivot_tol < 0:
            raise ValueError("pivot_tol must be non-negative.")
        self.pivot_tol = pivot_tol
        self._factors: Optional[tuple[Array, Array]] = None

    @property
    def factorized(self) -> bool:
        return self._factors is not None

    def factorize(self, matrix: Array) -> "LUSolver":
        a = np.array(matrix, dtype=float, copy=True)
        if a.ndim != 2 or a.shape[0] != a.shape[1]:
            raise ValueError(f"LU factorization needs a square matrix, got shape {a.shape}")
        self._factors = None
        with warnings.catch_warnings():
            # exactly singular input is reported below
            warnings.simplefilter("ignore", scipy.linalg.LinAlgWarning)
            lu, piv = scipy.linalg.lu_factor(a, overwrite_a=True, check_finite=False)
        pivots = np.abs(np.diag(lu))
        small = np.flatnonzero(pivots <= self.pivot_tol)
        if small.size:
            raise SingularMatrixError(f"Matrix is singular (zero pivot in column {small[0]}).")
        self._factors = (lu, piv)
        return self

    def solve(self, rhs: Array) -> Array:
        if self._factors is None:
            raise ValueError("Call factorize before solve.")
        n = self._factors[0].shape[0]
        b = np.asarray(rhs, dtype=float)
        if b.shape != (n,):
            raise ValueError(f"Right-hand side must have shape ({n},), got {b.shape}")
        return scipy.linalg.lu_solve(self._factors, b, check_finite=False)


__all__ = ["LUSolver"]
