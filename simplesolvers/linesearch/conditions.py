"""Sufficient-decrease and curvature tests for step lengths."""

from __future__ import annotations


def sufficient_decrease(f_alpha: float, y0: float, d0: float, alpha: float, c1: float) -> bool:
    """Armijo condition ``f(alpha) <= f(0) + c1 * alpha * d(0)``."""
    return f_alpha <= y0 + c1 * alpha * d0


def curvature_condition(d_alpha: float, d0: float, c2: float, strong: bool = False) -> bool:
    """Curvature (Wolfe) condition.

    The standard form requires ``d(alpha) >= c2 * d(0)``; the strong form
    requires ``|d(alpha)| < c2 * |d(0)|``.
    """
    if strong:
        return abs(d_alpha) < c2 * abs(d0)
    return d_alpha >= c2 * d0


__all__ = ["curvature_condition", "sufficient_decrease"]
