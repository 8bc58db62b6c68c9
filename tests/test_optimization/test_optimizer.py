import numpy as np
import pytest
import torch

from simplesolvers import (
    Differentiation,
    EvaluationCounter,
    HessianKind,
    InverseHessianApproximation,
    LineSearch,
    LineSearchKind,
    Optimizer,
    OptimizerProblem,
    Options,
    Status,
    bfgs_optimizer,
    dfp_optimizer,
    newton_optimizer,
)
from simplesolvers.optimization import OptimizerCache


def rosenbrock(x: np.ndarray) -> float:
    return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2


def rosenbrock_grad(x: np.ndarray) -> np.ndarray:
    return np.array(
        [
            -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )


def himmelblau(x: np.ndarray) -> float:
    return (x[0] ** 2 + x[1] - 11) ** 2 + (x[0] + x[1] ** 2 - 7) ** 2


def himmelblau_grad(x: np.ndarray) -> np.ndarray:
    return np.array(
        [
            4 * x[0] * (x[0] ** 2 + x[1] - 11) + 2 * (x[0] + x[1] ** 2 - 7),
            2 * (x[0] ** 2 + x[1] - 11) + 4 * x[1] * (x[0] + x[1] ** 2 - 7),
        ]
    )


def quartic(x):
    return (x**4 + x**2 - x).sum()


def quartic_grad(x: np.ndarray) -> np.ndarray:
    return 4 * x**3 + 2 * x - 1


def quartic_hess(x: np.ndarray) -> np.ndarray:
    return np.diag(12 * x**2 + 2)


# Root of 4 t^3 + 2 t - 1.
QUARTIC_MINIMIZER = 0.3854585


def test_newton_static_step_on_parabola():
    problem = OptimizerProblem(fun=lambda x: float(x @ x), grad=lambda x: 2 * x, hess=lambda x: 2 * np.eye(x.size))
    result = newton_optimizer(problem, linesearch=LineSearch.static(1.0)).solve(np.array([3.0]))
    assert result.success
    assert result.status is Status.CONVERGED
    assert result.nit == 1
    assert np.array_equal(result.x, [0.0])
    assert result.fun == 0.0
    assert result.nhev == 1


def test_bfgs_reaches_rosenbrock_minimum():
    problem = OptimizerProblem(fun=rosenbrock, grad=rosenbrock_grad, dim=2)
    result = bfgs_optimizer(problem, options=Options(g_restol=1e-6)).solve(np.array([-1.2, 1.0]))
    assert result.success
    assert np.allclose(result.x, np.ones(2), atol=1e-5)
    assert result.fun < 1e-9
    assert result.nhev == 0


def test_dfp_on_himmelblau():
    problem = OptimizerProblem(fun=himmelblau, grad=himmelblau_grad, dim=2)
    result = dfp_optimizer(problem, options=Options(g_restol=1e-6)).solve(np.array([3.0, 1.5]))
    assert result.success
    assert result.fun < 1e-10
    assert result.grad_norm <= 1e-6


@pytest.mark.parametrize("kind", [HessianKind.BFGS, HessianKind.DFP])
def test_quasi_newton_on_quadratic(kind, rng, spd_matrix):
    a = spd_matrix(4)
    b = rng.standard_normal(4)
    problem = OptimizerProblem(fun=lambda x: 0.5 * x @ a @ x - b @ x, grad=lambda x: a @ x - b)
    optimizer = Optimizer(problem, hessian=kind, linesearch=LineSearch.bisection())
    result = optimizer.solve(np.zeros(4))
    assert result.success
    assert result.nit <= 20
    assert np.allclose(result.x, np.linalg.solve(a, b), atol=1e-6)
    q = optimizer.inverse_hessian.matrix
    assert np.array_equal(q, q.T)
    assert np.all(np.linalg.eigvalsh(q) > 0)


def test_newton_on_convex_quartic():
    problem = OptimizerProblem(fun=quartic, grad=quartic_grad, hess=quartic_hess)
    result = newton_optimizer(problem).solve(np.array([2.0, -2.0]))
    assert result.success
    assert np.allclose(result.x, QUARTIC_MINIMIZER, atol=1e-5)
    assert result.nhev == result.nit


def test_newton_with_finite_differences():
    problem = OptimizerProblem(fun=quartic)
    result = newton_optimizer(problem, options=Options(g_restol=1e-6)).solve(np.array([2.0, -2.0]))
    assert result.success
    assert np.allclose(result.x, QUARTIC_MINIMIZER, atol=1e-5)
    assert result.njev == 0
    assert result.nhev == 0


@pytest.mark.parametrize("hessian", list(HessianKind))
def test_autodiff_problem(hessian):
    problem = OptimizerProblem(fun=lambda x: torch.sum(x**4 + x**2 - x), differentiation=Differentiation.AUTODIFF)
    result = Optimizer(problem, hessian=hessian, options=Options(g_restol=1e-7)).solve(np.array([2.0, -2.0]))
    assert result.success
    assert isinstance(result.fun, float)
    assert np.allclose(result.x, QUARTIC_MINIMIZER, atol=1e-5)
    assert result.njev >= result.nit


def test_store_trace():
    problem = OptimizerProblem(fun=quartic, grad=quartic_grad, hess=quartic_hess)
    result = newton_optimizer(problem, options=Options(store_trace=True)).solve(np.array([1.0]))
    assert len(result.history) == result.nit + 1
    assert np.array_equal(result.history[0], [1.0])
    assert np.array_equal(result.history[-1], result.x)


def test_optimizer_names():
    problem = OptimizerProblem(fun=quartic, grad=quartic_grad)
    assert newton_optimizer(problem).name == "Newton optimizer"
    assert bfgs_optimizer(problem).name == "BFGS optimizer"
    assert dfp_optimizer(problem).name == "DFP optimizer"
    assert Optimizer(problem).hessian is HessianKind.BFGS


@pytest.mark.parametrize("kind", list(LineSearchKind))
def test_newton_solves_quadratic_in_one_step(kind, rng, spd_matrix):
    a = spd_matrix(5)
    b = rng.standard_normal(5)
    problem = OptimizerProblem(fun=lambda x: 0.5 * x @ a @ x - b @ x, grad=lambda x: a @ x - b, hess=lambda x: a)
    result = newton_optimizer(problem, linesearch=LineSearch(kind=kind)).solve(np.zeros(5))
    assert result.success
    assert result.nit == 1
    assert np.allclose(result.x, np.linalg.solve(a, b))


def test_bfgs_on_steep_parabola_with_bierlaire():
    # The first line search cannot bracket its minimum and backtracks instead.
    problem = OptimizerProblem(fun=lambda x: 1e6 * float(x @ x), grad=lambda x: 2e6 * x)
    result = bfgs_optimizer(problem, linesearch=LineSearch.bierlaire_quadratic()).solve(np.array([1.0]))
    assert result.success
    assert result.x[0] == pytest.approx(0.0, abs=1e-6)


def test_ascent_direction_resets_inverse_hessian():
    problem = OptimizerProblem(fun=quartic, grad=quartic_grad)
    optimizer = bfgs_optimizer(problem)
    optimizer.inverse_hessian = InverseHessianApproximation(HessianKind.BFGS, 1)
    optimizer.inverse_hessian.matrix = -np.eye(1)
    x = np.array([2.0])
    cache = OptimizerCache(x, quartic(x), quartic_grad(x))
    direction = optimizer.compute_direction(cache, EvaluationCounter())
    assert np.allclose(direction, -quartic_grad(x))
    assert np.array_equal(optimizer.inverse_hessian.matrix, np.eye(1))


def test_optimizer_state_follows_the_solve():
    optimizer = newton_optimizer(OptimizerProblem(fun=quartic, grad=quartic_grad, hess=quartic_hess))
    assert optimizer.state is Status.INITIALIZED
    optimizer.solve(np.array([1.0]))
    assert optimizer.state is Status.CONVERGED
