"""Minimization of scalar objectives with Newton, BFGS and DFP directions."""

from .optimizer import (
    Optimizer,
    OptimizerCache,
    bfgs_optimizer,
    dfp_optimizer,
    newton_optimizer,
    optimizer_linesearch_problem,
)
from .problem import OptimizerProblem

__all__ = [
    "Optimizer",
    "OptimizerCache",
    "OptimizerProblem",
    "bfgs_optimizer",
    "dfp_optimizer",
    "newton_optimizer",
    "optimizer_linesearch_problem",
]
