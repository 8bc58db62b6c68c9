"""Pytest configuration and shared fixtures for simplesolvers tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Helpers for building well-conditioned test problems
"""

import os

import numpy as np
import pytest
import torch


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    This ensures tests are reproducible while allowing override for debugging.
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic CPU torch RNG for tests."""
    generator = torch.Generator()
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


@pytest.fixture
def spd_matrix(rng: np.random.Generator):
    """Factory for symmetric positive-definite matrices."""

    def make(n: int) -> np.ndarray:
        a = rng.standard_normal((n, n))
        return a @ a.T + n * np.eye(n)

    return make
