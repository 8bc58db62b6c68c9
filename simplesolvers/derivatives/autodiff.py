"""Derivatives through ``torch.autograd``.

Functions passed here must be written with torch operations. Points are
converted to ``float64`` tensors on the way in and results are returned as
NumPy arrays, so the solvers never see a tensor.
"""

from __future__ import annotations

from typing import Callable

import numpy as np
import torch

from ..core import Array

TorchFunction = Callable[[torch.Tensor], torch.Tensor]


def _to_tensor(x: Array) -> torch.Tensor:
    return torch.as_tensor(np.array(x, dtype=float, copy=True), dtype=torch.float64)


def autodiff_value(fun: TorchFunction, x: Array) -> Array:
    """Evaluate ``fun`` at ``x`` without recording a graph."""
    with torch.no_grad():
        value = fun(_to_tensor(x))
    return np.asarray(torch.as_tensor(value).detach().cpu().numpy(), dtype=float)


def autodiff_gradient(fun: TorchFunction, x: Array) -> Array:
    """Gradient of a scalar function.

    Raises:
        ValueError: If ``fun`` does not return a scalar.
        RuntimeError: If autograd did not produce a gradient.
    """
    point = _to_tensor(x).requires_grad_(True)
    value = fun(point)
    if value.numel() != 1:
        raise ValueError(f"Expected a scalar output, got shape {tuple(value.shape)}")
    value.reshape(()).backward()
    if point.grad is None:
        raise RuntimeError("Autograd did not populate gradients for the input.")
    return point.grad.detach().cpu().numpy().astype(float)


def autodiff_jacobian(fun: TorchFunction, x: Array) -> Array:
    """Jacobian of a vector valued function, shape ``(m, n)``."""
    point = _to_tensor(x)
    jac = torch.autograd.functional.jacobian(fun, point)
    return jac.detach().cpu().numpy().reshape(-1, point.numel()).astype(float)


def autodiff_hessian(fun: TorchFunction, x: Array) -> Array:
    """Hessian of a scalar function, shape ``(n, n)``."""
    point = _to_tensor(x)
    hess = torch.autograd.functional.hessian(lambda p: fun(p).reshape(()), point)
    return hess.detach().cpu().numpy().reshape(point.numel(), point.numel()).astype(float)


__all__ = [
    "autodiff_gradient",
    "autodiff_hessian",
    "autodiff_jacobian",
    "autodiff_value",
]
