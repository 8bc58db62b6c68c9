"""Iterative solvers for nonlinear systems and unconstrained minimization.

Newton-type drivers compute a search direction from local derivative
information, choose a step length with a line search (or a dogleg trust
region) and stop according to an explicit :class:`Options` record.

Example
-------
>>> import numpy as np
>>> from simplesolvers import LineSearch, OptimizerProblem, newton_optimizer
>>> problem = OptimizerProblem(fun=lambda x: float(x @ x), grad=lambda x: 2 * x, hess=lambda x: 2 * np.eye(x.size))
>>> result = newton_optimizer(problem, linesearch=LineSearch.static(1.0)).solve(np.array([3.0]))
>>> result.x, result.nit
(array([0.]), 1)
"""

from .bracketing import (
    bisection,
    bracket_minimum,
    bracket_minimum_with_fixed_point,
    bracket_root,
    triple_point_finder,
)
from .core import ATOL, RTOL, EvaluationCounter, OptimizerResult, SolverResult, Status
from .derivatives import Differentiation
from .exceptions import (
    BracketingError,
    DirectionFailure,
    DivergenceError,
    EvaluationFailure,
    SingularMatrixError,
    SolverError,
)
from .hessians import HessianKind, InverseHessianApproximation, bfgs_update, dfp_update
from .linear import LUSolver
from .linesearch import LineSearch, LineSearchCache, LineSearchKind, LineSearchProblem
from .nonlinear import DoglegSolver, FixedPointIterator, NewtonSolver, NonlinearProblem, QuasiNewtonSolver
from .optimization import (
    Optimizer,
    OptimizerProblem,
    bfgs_optimizer,
    dfp_optimizer,
    newton_optimizer,
)
from .options import Options
from .status import NonlinearSolverStatus, OptimizerStatus

__version__ = "0.1.0"

__all__ = [
    "ATOL",
    "BracketingError",
    "Differentiation",
    "DirectionFailure",
    "DivergenceError",
    "DoglegSolver",
    "EvaluationCounter",
    "EvaluationFailure",
    "FixedPointIterator",
    "HessianKind",
    "InverseHessianApproximation",
    "LUSolver",
    "LineSearch",
    "LineSearchCache",
    "LineSearchKind",
    "LineSearchProblem",
    "NewtonSolver",
    "NonlinearProblem",
    "NonlinearSolverStatus",
    "Optimizer",
    "OptimizerProblem",
    "OptimizerResult",
    "OptimizerStatus",
    "Options",
    "QuasiNewtonSolver",
    "RTOL",
    "SingularMatrixError",
    "SolverError",
    "SolverResult",
    "Status",
    "bfgs_optimizer",
    "bfgs_update",
    "bisection",
    "bracket_minimum",
    "bracket_minimum_with_fixed_point",
    "bracket_root",
    "dfp_optimizer",
    "dfp_update",
    "newton_optimizer",
    "triple_point_finder",
]
