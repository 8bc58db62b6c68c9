"""Immutable solver configuration.

An :class:`Options` instance is built once and handed to every driver that
needs tolerances or iteration limits. There is no global default registry;
drivers fall back to ``Options()`` when none is given.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

EPS = float(np.finfo(float).eps)
DEFAULT_TOLERANCE = 2 * EPS
ABSOLUTE_TOLERANCE = 0.0
MINIMUM_DECREASE_THRESHOLD = 1e-4
DEFAULT_MAX_ITERATIONS = 1000


@dataclass(frozen=True)
class Options:
    """
    Tolerances and iteration limits shared by solvers and optimizers.

    Args:
        x_abstol: Absolute tolerance on the step ``|x - x_prev|``.
        x_reltol: Relative tolerance on the step ``|x - x_prev| / |x|``.
        x_suctol: Tolerance on the successive step norm.
        f_abstol: Absolute tolerance on the residual norm (solvers) or on the
            change of the objective (optimizers). Also used by bisection.
        f_reltol: Relative tolerance on the residual or objective change.
        f_suctol: Tolerance on the change of the residual between iterates.
        f_mindec: Minimum decrease factor; an optimizer only reports the
            objective as converged if the actual decrease is at most this
            fraction of the decrease predicted by the gradient.
        g_restol: Tolerance on the gradient norm.
        x_abstol_break: Divergence threshold for the absolute step.
        x_reltol_break: Divergence threshold for the relative step.
        f_abstol_break: Divergence threshold for the absolute residual.
        f_reltol_break: Divergence threshold for the relative residual.
        g_restol_break: Divergence threshold for the gradient norm.
        allow_f_increases: If False, an increase of the residual or objective
            is treated as divergence.
        min_iterations: Convergence is only reported from this iteration on.
        max_iterations: Soft iteration limit.
        warn_iterations: A warning is logged once this many iterations were
            needed. Defaults to ``max_iterations``.
        store_trace: Keep every iterate in the result history.
        verbosity: 0 is silent, 1 logs warnings, 2 also logs NaN recovery
            and a final status summary.
    """

    x_abstol: float = DEFAULT_TOLERANCE
    x_reltol: float = DEFAULT_TOLERANCE
    x_suctol: float = DEFAULT_TOLERANCE
    f_abstol: float = ABSOLUTE_TOLERANCE
    f_reltol: float = DEFAULT_TOLERANCE
    f_suctol: float = DEFAULT_TOLERANCE
    f_mindec: float = MINIMUM_DECREASE_THRESHOLD
    g_restol: float = math.sqrt(EPS)
    x_abstol_break: float = math.inf
    x_reltol_break: float = math.inf
    f_abstol_break: float = math.inf
    f_reltol_break: float = math.inf
    g_restol_break: float = math.inf
    allow_f_increases: bool = True
    min_iterations: int = 0
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    warn_iterations: Optional[int] = None
    store_trace: bool = False
    verbosity: int = 1

    def __post_init__(self) -> None:
        for name in (
            "x_abstol",
            "x_reltol",
            "x_suctol",
            "f_abstol",
            "f_reltol",
            "f_suctol",
            "f_mindec",
            "g_restol",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative.")
        if self.min_iterations < 0:
            raise ValueError("min_iterations must be non-negative.")
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1.")
        if self.min_iterations > self.max_iterations:
            raise ValueError("min_iterations cannot exceed max_iterations.")
        if self.warn_iterations is None:
            object.__setattr__(self, "warn_iterations", self.max_iterations)
        elif self.warn_iterations < 0:
            raise ValueError("warn_iterations must be non-negative.")
        if self.verbosity < 0:
            raise ValueError("verbosity must be non-negative.")


__all__ = [
    "ABSOLUTE_TOLERANCE",
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_TOLERANCE",
    "EPS",
    "MINIMUM_DECREASE_THRESHOLD",
    "Options",
]
