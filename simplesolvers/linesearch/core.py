"""Line-search configuration and dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..core import RTOL
from ..bracketing import DEFAULT_BRACKETING_S
from . import policies
from .problem import LineSearchProblem


class LineSearchKind(Enum):
    """Available step-length policies."""

    STATIC = "static"
    BACKTRACKING = "backtracking"
    BISECTION = "bisection"
    QUADRATIC = "quadratic"
    BIERLAIRE_QUADRATIC = "bierlaire_quadratic"


Policy = Callable[[LineSearchProblem, float, "LineSearch"], float]

_POLICIES: dict[LineSearchKind, Policy] = {
    LineSearchKind.STATIC: policies.static,
    LineSearchKind.BACKTRACKING: policies.backtracking,
    LineSearchKind.BISECTION: policies.bisection,
    LineSearchKind.QUADRATIC: policies.quadratic,
    LineSearchKind.BIERLAIRE_QUADRATIC: policies.bierlaire_quadratic,
}


@dataclass(frozen=True)
class LineSearch:
    """
    Configuration of a line search.

    Fields that a policy does not use are ignored by it.

    Args:
        kind: Policy used by :meth:`search`.
        alpha: Step returned by the static policy and default initial step
            for the others.
        c1: Sufficient-decrease constant, ``0 < c1 < c2 < 1``.
        c2: Curvature constant.
        p: Backtracking shrink factor in ``(0, 1)``.
        curvature: Also require the curvature condition when backtracking.
        strong: Use the strong form of the curvature condition.
        sigma0: Lower safeguard of the quadratic policy, relative to the
            current bracket width.
        sigma1: Upper safeguard of the quadratic policy.
        s: Initial step of the bracketing routines.
        tol: Derivative and bracket tolerance.
        max_iterations: Bound on the number of trial steps.
        nan_factor: Factor applied to the direction by the drivers while the
            trial point evaluates to NaN.
        nan_max_iterations: Number of such reductions before giving up.
    """

    kind: LineSearchKind = LineSearchKind.BACKTRACKING
    alpha: float = 1.0
    c1: float = 1e-4
    c2: float = 0.9
    p: float = 0.5
    curvature: bool = False
    strong: bool = False
    sigma0: float = 0.1
    sigma1: float = 0.5
    s: float = DEFAULT_BRACKETING_S
    tol: float = RTOL
    max_iterations: int = 50
    nan_factor: float = 0.5
    nan_max_iterations: int = 10

    def __post_init__(self) -> None:
        if not isinstance(self.kind, LineSearchKind):
            raise ValueError(f"Unknown line search kind: {self.kind!r}")
        if self.alpha <= 0:
            raise ValueError("alpha must be positive.")
        if not (0 < self.c1 < self.c2 < 1):
            raise ValueError("Require 0 < c1 < c2 < 1.")
        if not (0 < self.p < 1):
            raise ValueError("p must lie in (0, 1).")
        if not (0 < self.sigma0 < self.sigma1 < 1):
            raise ValueError("Require 0 < sigma0 < sigma1 < 1.")
        if self.s <= 0:
            raise ValueError("s must be positive.")
        if self.tol <= 0:
            raise ValueError("tol must be positive.")
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1.")
        if not (0 < self.nan_factor < 1):
            raise ValueError("nan_factor must lie in (0, 1).")
        if self.nan_max_iterations < 0:
            raise ValueError("nan_max_iterations must be non-negative.")

    def search(self, problem: LineSearchProblem, alpha0: Optional[float] = None) -> float:
        """Return a step length for ``problem`` starting from ``alpha0``."""
        start = self.alpha if alpha0 is None else float(alpha0)
        return _POLICIES[self.kind](problem, start, self)

    @classmethod
    def static(cls, alpha: float = 1.0, **kwargs) -> "LineSearch":
        return cls(kind=LineSearchKind.STATIC, alpha=alpha, **kwargs)

    @classmethod
    def backtracking(cls, **kwargs) -> "LineSearch":
        return cls(kind=LineSearchKind.BACKTRACKING, **kwargs)

    @classmethod
    def bisection(cls, **kwargs) -> "LineSearch":
        return cls(kind=LineSearchKind.BISECTION, **kwargs)

    @classmethod
    def quadratic(cls, **kwargs) -> "LineSearch":
        return cls(kind=LineSearchKind.QUADRATIC, **kwargs)

    @classmethod
    def bierlaire_quadratic(cls, **kwargs) -> "LineSearch":
        return cls(kind=LineSearchKind.BIERLAIRE_QUADRATIC, **kwargs)


__all__ = ["LineSearch", "LineSearchKind"]
