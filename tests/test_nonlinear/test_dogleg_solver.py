import numpy as np
import pytest

from simplesolvers import DoglegSolver, NonlinearProblem, Options
from simplesolvers.nonlinear import cauchy_step, dogleg_step


def powell(x: np.ndarray) -> np.ndarray:
    return np.array([x[0], 10 * x[0] / (x[0] + 0.1) + 2 * x[1] ** 2])


def powell_jacobian(x: np.ndarray) -> np.ndarray:
    return np.array([[1.0, 0.0], [1.0 / (x[0] + 0.1) ** 2, 4 * x[1]]])


def rosenbrock_residual(x: np.ndarray) -> np.ndarray:
    return np.array([10 * (x[1] - x[0] ** 2), 1 - x[0]])


def rosenbrock_residual_jacobian(x: np.ndarray) -> np.ndarray:
    return np.array([[-20 * x[0], 10.0], [-1.0, 0.0]])


def overdetermined(x: np.ndarray) -> np.ndarray:
    return np.array([x[0] - 1.0, x[1] - 2.0, x[0] * x[1] - 2.0])


def overdetermined_jacobian(x: np.ndarray) -> np.ndarray:
    return np.array([[1.0, 0.0], [0.0, 1.0], [x[1], x[0]]])


def check_radius_updates(solver: DoglegSolver) -> None:
    history = solver.trust_region_history
    assert history
    for record in history:
        assert record.step_norm <= record.delta * (1 + 1e-10)
        assert record.accepted == (record.rho > solver.eta)
    for record, following in zip(history, history[1:]):
        if record.rho < 0.25:
            assert following.delta == record.delta * solver.reduction_factor
        elif record.rho > 0.75 and record.step_norm >= 0.99 * record.delta:
            assert following.delta == min(record.delta * solver.expansion_factor, solver.max_delta)
        else:
            assert following.delta == record.delta


def test_dogleg_powell():
    problem = NonlinearProblem(fun=powell, jacobian=powell_jacobian)
    solver = DoglegSolver(problem, options=Options(f_abstol=1e-8))
    result = solver.solve(np.array([3.0, 1.0]))
    assert result.success
    assert result.residual_norm <= 1e-8
    check_radius_updates(solver)


def test_dogleg_shrinks_after_poor_step():
    # The full Gauss-Newton step from the standard start overshoots badly.
    problem = NonlinearProblem(fun=rosenbrock_residual, jacobian=rosenbrock_residual_jacobian)
    solver = DoglegSolver(problem, delta=10.0, options=Options(f_abstol=1e-10))
    result = solver.solve(np.array([-1.2, 1.0]))
    first = solver.trust_region_history[0]
    assert not first.accepted
    assert solver.trust_region_history[1].delta == 2.5
    assert result.success
    assert np.allclose(result.x, [1.0, 1.0])
    check_radius_updates(solver)


def test_dogleg_overdetermined_system():
    problem = NonlinearProblem(fun=overdetermined, jacobian=overdetermined_jacobian)
    solver = DoglegSolver(problem, delta=1.0, options=Options(f_abstol=1e-10))
    result = solver.solve(np.array([4.0, -3.0]))
    assert result.success
    assert result.fun.shape == (3,)
    assert np.allclose(result.x, [1.0, 2.0])
    check_radius_updates(solver)


def test_dogleg_with_regularization_and_finite_differences():
    problem = NonlinearProblem(fun=overdetermined)
    solver = DoglegSolver(problem, regularization=1e-3, options=Options(f_abstol=1e-8))
    result = solver.solve(np.array([0.5, 0.5]))
    assert result.success
    assert np.allclose(result.x, [1.0, 2.0], atol=1e-6)


def test_history_is_reset_between_solves():
    problem = NonlinearProblem(fun=overdetermined, jacobian=overdetermined_jacobian)
    solver = DoglegSolver(problem, options=Options(f_abstol=1e-10))
    solver.solve(np.array([4.0, -3.0]))
    first_length = len(solver.trust_region_history)
    solver.solve(np.array([4.0, -3.0]))
    assert len(solver.trust_region_history) == first_length
    assert solver.trust_region_history[0].delta == 1.0


def test_gauss_newton_step_inside_region():
    step = dogleg_step(np.array([2.0, 0.0]), 2 * np.eye(2), 10.0)
    assert np.allclose(step, [-1.0, 0.0])


def test_cauchy_step_scaled_to_boundary():
    step = dogleg_step(np.array([2.0, 0.0]), 2 * np.eye(2), 0.5)
    assert np.allclose(step, [-0.5, 0.0])


def test_dogleg_segment_hits_boundary():
    grad = np.array([1.0, 1.0])
    model = np.diag([1.0, 10.0])
    step = dogleg_step(grad, model, 0.6)
    assert np.linalg.norm(step) == pytest.approx(0.6)
    assert grad @ step < 0


def test_cauchy_step_without_curvature():
    step = cauchy_step(np.array([3.0, 4.0]), -np.eye(2), 2.0)
    assert np.allclose(step, [-1.2, -1.6])
    assert np.allclose(cauchy_step(np.zeros(2), np.eye(2), 1.0), 0.0)


def test_singular_model_falls_back_to_cauchy():
    grad = np.array([1.0, 0.0])
    model = np.array([[1.0, 0.0], [0.0, 0.0]])
    step = dogleg_step(grad, model, 5.0)
    assert np.allclose(step, [-1.0, 0.0])


@pytest.mark.parametrize(
    "kwargs",
    [
        {"delta": 0.0},
        {"delta": 200.0},
        {"eta": 0.3},
        {"reduction_factor": 1.0},
        {"expansion_factor": 1.0},
        {"regularization": -1.0},
        {"max_trust_region_iterations": 0},
    ],
)
def test_invalid_parameters(kwargs):
    with pytest.raises(ValueError):
        DoglegSolver(NonlinearProblem(fun=powell), **kwargs)


def test_exhausted_trust_region_does_not_move():
    problem = NonlinearProblem(fun=rosenbrock_residual, jacobian=rosenbrock_residual_jacobian)
    solver = DoglegSolver(problem, delta=10.0, max_trust_region_iterations=1)
    x0 = np.array([-1.2, 1.0])
    result = solver.solve(x0)
    (record,) = solver.trust_region_history
    assert not record.accepted
    assert solver.delta == 2.5
    assert record.step_norm > solver.delta
    assert np.array_equal(result.x, x0)
    assert result.nit == 1
