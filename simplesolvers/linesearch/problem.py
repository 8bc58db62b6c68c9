"""One-dimensional sub-problems seen by the line searches."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np

from ..core import Array, contains_nan
from ..exceptions import EvaluationFailure
from ..logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LineSearchProblem:
    """Restriction of an outer problem to the ray ``x(alpha) = x_base + alpha * direction``.

    ``f`` returns the value and ``d`` the derivative with respect to
    ``alpha``. Line searches assume ``d(0) < 0``.
    """

    f: Callable[[float], float]
    d: Callable[[float], float]


class LineSearchCache:
    """Scratch storage for the trial point of a line search.

    The cache belongs to an iteration driver. The driver hands it to the
    function that builds the :class:`LineSearchProblem`, which writes every
    trial point into ``x_trial`` instead of allocating a new array.
    """

    def __init__(self, dim: int):
        self.x_base = np.zeros(dim)
        self.direction = np.zeros(dim)
        self.x_trial = np.zeros(dim)

    def reset(self, x_base: Array, direction: Array) -> None:
        self.x_base[:] = x_base
        self.direction[:] = direction

    def trial(self, alpha: float) -> Array:
        """Write ``x_base + alpha * direction`` into ``x_trial`` and return it."""
        np.multiply(self.direction, alpha, out=self.x_trial)
        self.x_trial += self.x_base
        return self.x_trial


def shrink_until_finite(
    evaluate: Callable[[Array], object],
    x: Array,
    direction: Array,
    factor: float,
    max_reductions: int,
    verbosity: int = 1,
) -> Array:
    """Scale ``direction`` by ``factor`` until ``evaluate(x + direction)`` has no NaN.

    Raises:
        EvaluationFailure: If the trial point still evaluates to NaN after
            ``max_reductions`` reductions.
    """
    direction = np.array(direction, dtype=float, copy=True)
    for attempt in range(max_reductions + 1):
        if not contains_nan(evaluate(x + direction)):
            return direction
        if attempt == max_reductions:
            break
        if verbosity >= 2:
            logger.warning("NaN detected at trial point. Reducing length of direction vector by %g.", factor)
        direction *= factor
    raise EvaluationFailure(
        f"Trial point evaluates to NaN after {max_reductions} reductions of the direction."
    )


__all__ = ["LineSearchCache", "LineSearchProblem", "shrink_until_finite"]
