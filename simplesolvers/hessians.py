"""Quasi-Newton approximations of the inverse Hessian.

Both updates are rank-2 corrections built from ``dx = x - x_prev`` and
``dg = g - g_prev``. They are assembled from outer products of the same
vectors, which keeps the approximation exactly symmetric. An update whose
denominator vanishes up to round-off is skipped and the approximation is
left unchanged.
"""

from __future__ import annotations

from enum import Enum

import numpy as np

from .core import Array
from .logging import get_logger

logger = get_logger(__name__)

DEGENERACY_TOL = 1e-12


class HessianKind(Enum):
    """How the optimizer obtains second-order information."""

    EXACT = "exact"
    BFGS = "bfgs"
    DFP = "dfp"


def _degenerate(value: float, scale: float) -> bool:
    return not np.isfinite(value) or abs(value) <= DEGENERACY_TOL * scale


def bfgs_update(inv_hessian: Array, dx: Array, dg: Array) -> Array:
    """Return the BFGS update of the inverse Hessian approximation ``Q``.

    ``Q - (dx (Q dg)^T + (Q dg) dx^T - (1 + dg^T Q dg / s) dx dx^T) / s``
    with ``s = dx . dg``. ``inv_hessian`` itself is returned when ``s`` vanishes.
    """
    s = float(dx @ dg)
    if _degenerate(s, float(np.linalg.norm(dx) * np.linalg.norm(dg))):
        return inv_hessian
    v = inv_hessian @ dg
    correction = np.outer(dx, v) + np.outer(v, dx) - (1.0 + float(dg @ v) / s) * np.outer(dx, dx)
    return inv_hessian - correction / s


def dfp_update(inv_hessian: Array, dx: Array, dg: Array) -> Array:
    """Return the DFP update ``Q - (Q dg)(Q dg)^T / (dg^T Q dg) + dx dx^T / s``.

    ``inv_hessian`` itself is returned when ``s`` or ``dg^T Q dg`` vanishes.
    """
    s = float(dx @ dg)
    if _degenerate(s, float(np.linalg.norm(dx) * np.linalg.norm(dg))):
        return inv_hessian
    v = inv_hessian @ dg
    gamma_q_gamma = float(dg @ v)
    if _degenerate(gamma_q_gamma, float(np.linalg.norm(dg) * np.linalg.norm(v))):
        return inv_hessian
    return inv_hessian - np.outer(v, v) / gamma_q_gamma + np.outer(dx, dx) / s


_UPDATES = {
    HessianKind.BFGS: bfgs_update,
    HessianKind.DFP: dfp_update,
}


class InverseHessianApproximation:
    """Running inverse Hessian estimate used by quasi-Newton optimizers."""

    def __init__(self, kind: HessianKind, dim: int):
        if kind not in _UPDATES:
            raise ValueError(f"{kind} has no iterative approximation.")
        if dim < 1:
            raise ValueError("dim must be positive.")
        self.kind = kind
        self.dim = dim
        self.matrix = np.eye(dim)

    def reset(self) -> None:
        self.matrix = np.eye(self.dim)

    def update(self, dx: Array, dg: Array) -> bool:
        """Apply the rank-2 update. Returns False if it was skipped."""
        updated = _UPDATES[self.kind](self.matrix, np.asarray(dx, dtype=float), np.asarray(dg, dtype=float))
        if updated is self.matrix:
            logger.debug("Skipped degenerate %s update.", self.kind.name)
            return False
        self.matrix = updated
        return True

    def direction(self, grad: Array) -> Array:
        """Quasi-Newton direction ``-Q g``."""
        return -(self.matrix @ grad)


__all__ = [
    "DEGENERACY_TOL",
    "HessianKind",
    "InverseHessianApproximation",
    "bfgs_update",
    "dfp_update",
]
