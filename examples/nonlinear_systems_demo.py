"""
Example: Nonlinear Systems in simplesolvers

This example solves small nonlinear systems with the Newton, quasi-Newton
and dogleg solvers, and finds a scalar root by bracketing and bisection.
"""

import numpy as np

from simplesolvers import (
    DoglegSolver,
    LineSearch,
    NewtonSolver,
    NonlinearProblem,
    Options,
    QuasiNewtonSolver,
    bisection,
    bracket_root,
)


def circle_line(x: np.ndarray) -> np.ndarray:
    return np.array([x[0] ** 2 + x[1] ** 2 - 4.0, x[0] - x[1]])


def circle_line_jacobian(x: np.ndarray) -> np.ndarray:
    return np.array([[2 * x[0], 2 * x[1]], [1.0, -1.0]])


def powell(x: np.ndarray) -> np.ndarray:
    return np.array([x[0], 10 * x[0] / (x[0] + 0.1) + 2 * x[1] ** 2])


def example_newton():
    """Example: Intersection of a circle and a line."""
    print("=" * 60)
    print("Example 1: Newton and quasi-Newton solvers")
    print("=" * 60)

    problem = NonlinearProblem(fun=circle_line, jacobian=circle_line_jacobian, dim=2)
    options = Options(f_abstol=1e-12)
    x0 = np.array([2.0, 1.0])

    for solver in (
        NewtonSolver(problem, linesearch=LineSearch.bierlaire_quadratic(), options=options),
        QuasiNewtonSolver(problem, options=options, refactorize=3),
    ):
        result = solver.solve(x0)
        print(f"{solver.name}: x = {result.x}, |F(x)| = {result.residual_norm:.2e}")
        print(f"  iterations = {result.nit}, Jacobian evaluations = {result.njev}")
    print()


def example_dogleg():
    """Example: Powell's badly scaled system with finite-difference Jacobians."""
    print("=" * 60)
    print("Example 2: Dogleg trust region")
    print("=" * 60)

    solver = DoglegSolver(NonlinearProblem(fun=powell), delta=1.0, options=Options(f_abstol=1e-10))
    result = solver.solve(np.array([3.0, 1.0]))
    rejected = sum(not record.accepted for record in solver.trust_region_history)
    print(f"Solution: x = {result.x}")
    print(f"Residual norm: {result.residual_norm:.2e}")
    print(f"Trial steps: {len(solver.trust_region_history)} ({rejected} rejected)")
    print()


def example_scalar_root():
    """Example: Bracketing a root of x^2 - 1 before bisecting."""
    print("=" * 60)
    print("Example 3: Bracketing and bisection")
    print("=" * 60)

    def f(x):
        return x**2 - 1.0

    for step in (1e-2, 4.0):
        a, c = bracket_root(f, -3.0, s=step)
        roots = [r for r in (-1.0, 1.0) if a <= r <= c]
        print(f"Initial step {step}: bracket = ({a:.4f}, {c:.4f}) holds roots {roots}")
        print(f"  bisection returns x = {bisection(f, a, c, x_abstol=1e-12):.10f}")
    print()


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("simplesolvers - Nonlinear Systems Examples")
    print("=" * 60 + "\n")

    example_newton()
    example_dogleg()
    example_scalar_root()

    print("=" * 60)
    print("All examples completed successfully!")
    print("=" * 60)
