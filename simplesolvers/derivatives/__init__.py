"""Derivative providers: central finite differences and torch autograd."""

from enum import Enum

from .autodiff import autodiff_gradient, autodiff_hessian, autodiff_jacobian, autodiff_value
from .finite_difference import approx_grad, approx_hessian, approx_jacobian


class Differentiation(Enum):
    """How missing derivatives of a problem are produced."""

    FINITE_DIFFERENCE = "finite_difference"
    AUTODIFF = "autodiff"


__all__ = [
    "Differentiation",
    "approx_grad",
    "approx_hessian",
    "approx_jacobian",
    "autodiff_gradient",
    "autodiff_hessian",
    "autodiff_jacobian",
    "autodiff_value",
]
