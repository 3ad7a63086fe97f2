"""Unit tests for invariant density consistency diagnostics."""

import numpy as np
import pytest

from invariant_density.diagnostics.consistency import (
    check_diffusion_derivative,
    check_drift_derivative,
    check_non_negativity,
    check_normalization,
)


def test_normalization_valid(double_well, standard_params):
    """The double-well density integrates to one over a wide range."""
    result = check_normalization(**standard_params, potential=double_well)
    assert result.is_valid, result.violations
    assert abs(result.details["integral"] - 1.0) < 1e-6


def test_normalization_detects_truncated_range(harmonic, standard_params):
    """Integrating over [-1, 1] misses about a third of the Gaussian mass."""
    result = check_normalization(**standard_params, potential=harmonic, lower=-1.0, upper=1.0)
    assert not result.is_valid
    assert len(result.violations) == 1
    assert abs(result.details["integral"] - 0.6827) < 1e-3


def test_normalization_rejects_empty_range(harmonic, standard_params):
    with pytest.raises(ValueError):
        check_normalization(**standard_params, potential=harmonic, lower=1.0, upper=1.0)


def test_non_negativity_valid(double_well, asymmetric_params):
    """Density is non-negative on a grid reaching into the underflowing tails."""
    result = check_non_negativity(np.linspace(-40.0, 40.0, 81), **asymmetric_params, potential=double_well)
    assert result.is_valid
    assert result.details["min_value"] >= 0.0
    assert result.details["points"] == 81


def test_non_negativity_rejects_empty_grid(harmonic, standard_params):
    with pytest.raises(ValueError, match="at least one point"):
        check_non_negativity([], **standard_params, potential=harmonic)


@pytest.mark.parametrize("x", [-2.0, -1.0, 0.0, 0.5, 2.0])
def test_drift_derivative_check_valid(double_well, standard_params, x):
    result = check_drift_derivative(x, **standard_params, potential=double_well)
    assert result.is_valid, result.violations


@pytest.mark.parametrize("x", [-2.0, -1.0, 0.0, 0.5, 2.0])
def test_diffusion_derivative_check_valid(double_well, asymmetric_params, x):
    result = check_diffusion_derivative(x, **asymmetric_params, potential=double_well)
    assert result.is_valid, result.violations


def test_derivative_check_reports_violation(harmonic, standard_params):
    """A zero tolerance cannot be met and is reported as a violation."""
    result = check_drift_derivative(1.0, **standard_params, potential=harmonic, tolerance=0.0)
    assert not result.is_valid
    assert len(result.violations) == 1
    assert "analytical" in result.details
    assert "numerical" in result.details
