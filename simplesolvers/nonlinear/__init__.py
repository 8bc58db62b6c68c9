"""Solvers for nonlinear systems ``F(x) = 0``.

Example
-------
>>> import numpy as np
>>> from simplesolvers.nonlinear import DoglegSolver, NonlinearProblem
>>> def powell(x):
...     return np.array([x[0], 10 * x[0] / (x[0] + 0.1) + 2 * x[1] ** 2])
>>> result = DoglegSolver(NonlinearProblem(fun=powell)).solve(np.array([3.0, 1.0]))
>>> result.residual_norm < 1e-6
True
"""

from .base import NonlinearSolver
from .cache import SolverCache, solver_linesearch_problem
from .dogleg import DoglegSolver, TrustRegionStep, cauchy_step, dogleg_step
from .fixed_point import FixedPointIterator
from .newton import NewtonSolver, QuasiNewtonSolver
from .problem import NonlinearProblem

__all__ = [
    "DoglegSolver",
    "FixedPointIterator",
    "NewtonSolver",
    "NonlinearProblem",
    "NonlinearSolver",
    "QuasiNewtonSolver",
    "SolverCache",
    "TrustRegionStep",
    "cauchy_step",
    "dogleg_step",
    "solver_linesearch_problem",
]
