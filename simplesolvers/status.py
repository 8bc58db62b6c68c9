"""Residual bookkeeping and stopping criteria.

A status object is created by a driver at the start of a solve, updated
once per iteration and turned into a :class:`~simplesolvers.core.Status`
by :meth:`evaluate`:

* ``CONVERGED`` if an absolute or relative criterion is met and at least
  ``Options.min_iterations`` iterations were done;
* ``DIVERGED`` if a break threshold is exceeded, the residual/objective
  grew while ``Options.allow_f_increases`` is False, or a NaN appeared;
* ``MAX_ITERATIONS`` once ``Options.max_iterations`` is reached;
* ``RUNNING`` otherwise.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .core import Array, Status, contains_nan
from .logging import get_logger
from .options import Options

logger = get_logger(__name__)


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0 if numerator == 0 else math.inf
    return numerator / denominator


def _norm(value) -> float:
    return float(np.linalg.norm(np.atleast_1d(value)))


@dataclass
class NonlinearSolverStatus:
    """Convergence measures of a nonlinear solver.

    Attributes:
        iteration: Number of completed iterations.
        rx_abs: ``|x - x_prev|``.
        rx_rel: ``|x - x_prev| / |x|``.
        rx_suc: Successive step norm.
        rf_abs: ``|F(x)|``.
        rf_rel: ``|F(x)| / |F(x0)|``.
        rf_suc: ``|F(x) - F(x_prev)|``.
    """

    iteration: int = 0
    rx_abs: float = math.nan
    rx_rel: float = math.nan
    rx_suc: float = math.nan
    rf_abs: float = math.nan
    rf_rel: float = math.nan
    rf_suc: float = math.nan
    initial_residual_norm: float = math.nan
    previous_residual_norm: float = math.nan
    x_converged: bool = False
    f_converged: bool = False
    f_increased: bool = False
    x_isnan: bool = False
    f_isnan: bool = False

    def initialize(self, x: Array, y: Array) -> None:
        self.iteration = 0
        self.rx_abs = self.rx_rel = self.rx_suc = math.nan
        self.rf_abs = _norm(y)
        self.rf_rel = 1.0
        self.rf_suc = math.nan
        self.initial_residual_norm = self.rf_abs
        self.previous_residual_norm = self.rf_abs
        self.x_converged = self.f_converged = self.f_increased = False
        self.x_isnan = contains_nan(x)
        self.f_isnan = contains_nan(y)

    def update(self, x: Array, x_prev: Array, y: Array, y_prev: Array) -> None:
        self.iteration += 1
        step = _norm(x - x_prev)
        self.rx_abs = step
        self.rx_rel = _ratio(step, _norm(x))
        self.rx_suc = step
        self.previous_residual_norm = _norm(y_prev)
        self.rf_abs = _norm(y)
        self.rf_rel = _ratio(self.rf_abs, self.initial_residual_norm)
        self.rf_suc = _norm(y - y_prev)
        self.x_isnan = contains_nan(x)
        self.f_isnan = contains_nan(y)

    def assess_convergence(self, options: Options) -> bool:
        self.x_converged = (
            self.rx_abs <= options.x_abstol
            or self.rx_rel <= options.x_reltol
            or self.rx_suc <= options.x_suctol
        )
        self.f_converged = (
            self.rf_abs <= options.f_abstol
            or self.rf_rel <= options.f_reltol
            or self.rf_suc <= options.f_suctol
        )
        self.f_increased = self.rf_abs > self.previous_residual_norm
        return self.converged

    @property
    def converged(self) -> bool:
        return self.x_converged or self.f_converged

    def is_diverged(self, options: Options) -> bool:
        return (
            (self.f_increased and not options.allow_f_increases)
            or self.rx_abs > options.x_abstol_break
            or self.rx_rel > options.x_reltol_break
            or self.rf_abs > options.f_abstol_break
            or self.rf_rel > options.f_reltol_break
            or self.x_isnan
            or self.f_isnan
        )

    def evaluate(self, options: Options) -> Status:
        converged = self.assess_convergence(options)
        if self.is_diverged(options):
            return Status.DIVERGED
        if converged and self.iteration >= options.min_iterations:
            return Status.CONVERGED
        if self.iteration >= options.max_iterations:
            return Status.MAX_ITERATIONS
        return Status.RUNNING

    def __str__(self) -> str:
        return (
            f"iterations = {self.iteration}, |x - x'| = {self.rx_abs:.2e}, "
            f"|x - x'|/|x| = {self.rx_rel:.2e}, |F(x)| = {self.rf_abs:.2e}, "
            f"|F(x)|/|F(x0)| = {self.rf_rel:.2e}, |F(x) - F(x')| = {self.rf_suc:.2e}"
        )


@dataclass
class OptimizerStatus:
    """Convergence measures of an optimizer.

    Attributes:
        iteration: Number of completed iterations.
        rx_abs: ``|x - x_prev|``.
        rx_rel: ``|x - x_prev| / |x|``.
        rf_abs: ``|f(x) - f(x_prev)|``.
        rf_rel: ``|f(x) - f(x_prev)| / |f(x)|``.
        rg_abs: ``|g(x) - g(x_prev)|``.
        rg: ``|g(x)|``.
        df: Actual decrease ``f(x_prev) - f(x)``.
        df_pred: Decrease predicted by the gradient, ``-g(x_prev) . (x - x_prev)``.
    """

    iteration: int = 0
    rx_abs: float = math.nan
    rx_rel: float = math.nan
    rf_abs: float = math.nan
    rf_rel: float = math.nan
    rg_abs: float = math.nan
    rg: float = math.nan
    df: float = math.nan
    df_pred: float = math.nan
    x_converged: bool = False
    f_converged: bool = False
    g_converged: bool = False
    f_increased: bool = False
    x_isnan: bool = False
    f_isnan: bool = False
    g_isnan: bool = False

    def initialize(self, x: Array, f: float, g: Array) -> None:
        self.iteration = 0
        self.rx_abs = self.rx_rel = self.rf_abs = self.rf_rel = self.rg_abs = math.nan
        self.df = self.df_pred = math.nan
        self.rg = _norm(g)
        self.x_converged = self.f_converged = self.g_converged = self.f_increased = False
        self.x_isnan = contains_nan(x)
        self.f_isnan = contains_nan(f)
        self.g_isnan = contains_nan(g)

    def update(
        self, x: Array, x_prev: Array, f: float, f_prev: float, g: Array, g_prev: Array
    ) -> None:
        self.iteration += 1
        dx = x - x_prev
        self.rx_abs = _norm(dx)
        self.rx_rel = _ratio(self.rx_abs, _norm(x))
        self.rf_abs = abs(f - f_prev)
        self.rf_rel = _ratio(self.rf_abs, abs(f))
        self.rg_abs = _norm(g - g_prev)
        self.rg = _norm(g)
        self.df = f_prev - f
        self.df_pred = -float(g_prev @ dx)
        self.f_increased = f > f_prev
        self.x_isnan = contains_nan(x)
        self.f_isnan = contains_nan(f)
        self.g_isnan = contains_nan(g)

    def assess_convergence(self, options: Options) -> bool:
        self.x_converged = self.rx_abs <= options.x_abstol or self.rx_rel <= options.x_reltol
        f_small = self.rf_abs <= options.f_abstol or self.rf_rel <= options.f_reltol
        self.f_converged = f_small and self.df <= options.f_mindec * self.df_pred
        self.g_converged = self.rg <= options.g_restol
        return self.converged

    @property
    def converged(self) -> bool:
        return self.x_converged or self.f_converged or self.g_converged

    def is_diverged(self, options: Options) -> bool:
        return (
            (self.f_increased and not options.allow_f_increases)
            or self.rx_abs > options.x_abstol_break
            or self.rx_rel > options.x_reltol_break
            or self.rf_abs > options.f_abstol_break
            or self.rf_rel > options.f_reltol_break
            or self.rg > options.g_restol_break
            or self.x_isnan
            or self.f_isnan
            or self.g_isnan
        )

    def evaluate(self, options: Options) -> Status:
        converged = self.assess_convergence(options)
        if self.is_diverged(options):
            return Status.DIVERGED
        if converged and self.iteration >= options.min_iterations:
            return Status.CONVERGED
        if self.iteration >= options.max_iterations:
            return Status.MAX_ITERATIONS
        return Status.RUNNING

    def __str__(self) -> str:
        return (
            f"iterations = {self.iteration}, |x - x'| = {self.rx_abs:.2e}, "
            f"|x - x'|/|x'| = {self.rx_rel:.2e}, |f(x) - f(x')| = {self.rf_abs:.2e}, "
            f"|g(x) - g(x')| = {self.rg_abs:.2e}, |g(x)| = {self.rg:.2e}"
        )


def report_final_state(name: str, state: Status, status, options: Options) -> None:
    """Log how a driver called ``name`` stopped, according to ``options.verbosity``."""
    if options.verbosity >= 1:
        if state is Status.MAX_ITERATIONS:
            logger.warning(
                "%s stopped after max_iterations = %d without converging (%s).",
                name,
                options.max_iterations,
                status,
            )
        elif options.warn_iterations and status.iteration >= options.warn_iterations:
            logger.warning("%s needed %d iterations.", name, status.iteration)
    if options.verbosity >= 2:
        logger.info("%s", status)


__all__ = ["NonlinearSolverStatus", "OptimizerStatus", "report_final_state"]
