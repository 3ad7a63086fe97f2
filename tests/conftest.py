"""
Pytest configuration and shared fixtures.
"""

import pytest


@pytest.fixture
def harmonic():
    """Harmonic potential V(x) = x²/2; the density is Gaussian with variance Σ/ϑ."""
    return lambda x: x * x / 2.0


@pytest.fixture
def double_well():
    """Symmetric double-well potential V(x) = x⁴/4 - x²/2."""
    return lambda x: x**4 / 4.0 - x**2 / 2.0


@pytest.fixture
def standard_params():
    """Unit drift and diffusion coefficients."""
    return {
        "theta": 1.0,
        "sigma": 1.0,
    }


@pytest.fixture
def asymmetric_params():
    """Drift and diffusion coefficients with a non-unit ratio."""
    return {
        "theta": 2.0,
        "sigma": 0.5,
    }
