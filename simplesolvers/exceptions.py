"""Exception hierarchy for numerical failures.

Invalid arguments raise ``ValueError``. Everything below signals that an
iteration could not continue from a numerical point of view.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np


class SolverError(RuntimeError):
    """Base class for numerical failures raised by the solvers."""


class DirectionFailure(SolverError):
    """The search direction is unusable (NaN entries or a singular system)."""


class EvaluationFailure(SolverError):
    """Trial evaluations kept producing NaN after repeated step shrinking."""


class BracketingError(SolverError):
    """A bracketing routine could not enclose a minimum or a sign change."""


class SingularMatrixError(SolverError):
    """The LU factorization met a zero pivot."""


class DivergenceError(SolverError):
    """The iteration diverged.

    Attributes:
        status: Status object of the iteration that triggered the failure.
        x: Last valid iterate, i.e. the point before the diverging update.
    """

    def __init__(self, message: str, status: Any = None, x: Optional[np.ndarray] = None):
        super().__init__(message)
        self.status = status
        self.x = None if x is None else np.array(x, dtype=float, copy=True)


__all__ = [
    "BracketingError",
    "DirectionFailure",
    "DivergenceError",
    "EvaluationFailure",
    "SingularMatrixError",
    "SolverError",
]
