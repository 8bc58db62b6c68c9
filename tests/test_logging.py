"""Tests for logging utilities."""

import logging
from io import StringIO

import numpy as np
import pytest

from simplesolvers import LineSearch, NewtonSolver, NonlinearProblem, Options
from simplesolvers.logging import configure_logging, get_logger, set_log_level


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    configure_logging(level=logging.WARNING)


def test_get_logger_returns_logger():
    logger = get_logger("test_module")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "simplesolvers.test_module"


def test_get_logger_keeps_package_names():
    assert get_logger("simplesolvers.nonlinear.base").name == "simplesolvers.nonlinear.base"
    assert get_logger().name == "simplesolvers"


def test_get_logger_caching():
    assert get_logger("test_module") is get_logger("test_module")


def test_get_logger_different_modules():
    logger1 = get_logger("module1")
    logger2 = get_logger("module2")
    assert logger1 is not logger2
    assert logger1.name != logger2.name


def test_set_log_level_string():
    logger = get_logger("test_module")

    set_log_level("DEBUG")
    assert logger.level == logging.DEBUG

    set_log_level("ERROR")
    assert logger.level == logging.ERROR


def test_configure_logging():
    stream = StringIO()
    configure_logging(level=logging.DEBUG, stream=stream)

    logger = get_logger("test_module")
    logger.debug("Debug message")

    assert "Debug message" in stream.getvalue()
    assert "simplesolvers.test_module" in stream.getvalue()


def test_logger_does_not_propagate():
    assert get_logger("test_module").propagate is False


def test_solver_warns_on_max_iterations():
    stream = StringIO()
    configure_logging(level=logging.WARNING, stream=stream)
    problem = NonlinearProblem(fun=lambda x: np.arctan(x), jacobian=lambda x: np.diag(1 / (1 + x**2)))
    solver = NewtonSolver(problem, linesearch=LineSearch.static(0.01), options=Options(max_iterations=3))

    result = solver.solve(np.array([1.0]))

    assert not result.success
    assert "max_iterations = 3" in stream.getvalue()


def test_verbosity_zero_is_silent():
    stream = StringIO()
    configure_logging(level=logging.WARNING, stream=stream)
    problem = NonlinearProblem(fun=lambda x: np.arctan(x), jacobian=lambda x: np.diag(1 / (1 + x**2)))
    options = Options(max_iterations=3, verbosity=0)

    NewtonSolver(problem, linesearch=LineSearch.static(0.01), options=options).solve(np.array([1.0]))

    assert stream.getvalue() == ""
