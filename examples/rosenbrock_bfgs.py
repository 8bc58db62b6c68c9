"""Minimizing the Rosenbrock function.

This example compares the Newton, BFGS and DFP optimizers on the
two-dimensional Rosenbrock function. The objective is written with torch
operations so that gradients and Hessians come from autograd.
"""

from __future__ import annotations

import numpy as np
import torch

from simplesolvers import (
    Differentiation,
    HessianKind,
    LineSearch,
    Optimizer,
    OptimizerProblem,
    Options,
)


def rosenbrock(x: torch.Tensor) -> torch.Tensor:
    return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2


def main() -> None:
    """Run every optimizer from the standard starting point."""
    problem = OptimizerProblem(fun=rosenbrock, differentiation=Differentiation.AUTODIFF, dim=2)
    x0 = np.array([-1.2, 1.0])
    options = Options(g_restol=1e-6, max_iterations=500)

    print("Minimizing the Rosenbrock function from x0 = [-1.2, 1.0]")
    for kind in (HessianKind.BFGS, HessianKind.DFP, HessianKind.EXACT):
        optimizer = Optimizer(problem, hessian=kind, linesearch=LineSearch.backtracking(), options=options)
        result = optimizer.solve(x0)
        print(
            f"{optimizer.name:>16}: x = {np.array2string(result.x, precision=6)}, "
            f"f = {result.fun:.3e}, iterations = {result.nit}, converged = {result.success}"
        )

    print("\nMinimizer of the Rosenbrock function: [1. 1.]")


if __name__ == "__main__":
    main()
