"""
Unit tests for the real-line quadrature and the normalization integrals.

This module validates:
1. Known integrals over ℝ through the domain transform
2. Normalization constant and potential moment for closed-form potentials
3. Convergence failures surfaced as typed errors
4. Quadrature settings validation
5. Debug logging of quadrature work
"""

import logging
import math

import pytest
from scipy.integrate import quad

from invariant_density.core.transform import domain_transform, domain_transform_derivative
from invariant_density.solvers.quadrature import (
    BREAKPOINTS,
    integrate_real_line,
    normalization_constant,
    potential_moment,
    validate_coefficients,
)
from invariant_density.utils.exceptions import (
    DegenerateNormalizationError,
    InvalidParameterError,
    NumericalDivergenceError,
)
from invariant_density.utils.types import QuadratureSettings


# ===========================
# integrate_real_line() Tests
# ===========================


def test_gaussian_integral():
    """∫ exp(-x²) dx = √π"""
    result = integrate_real_line(
        lambda y: math.exp(-domain_transform(y) ** 2) * domain_transform_derivative(y)
    )
    assert abs(result.estimate - math.sqrt(math.pi)) < 1e-8
    assert result.error < 1e-6
    assert result.evaluations > 0
    assert result.subintervals >= 1


def test_cauchy_integral():
    """∫ 1/(1+x²) dx = π, a heavy-tailed integrand."""
    result = integrate_real_line(
        lambda y: domain_transform_derivative(y) / (1.0 + domain_transform(y) ** 2)
    )
    assert abs(result.estimate - math.pi) < 1e-8


def test_non_finite_integrand_raises():
    """A NaN-producing integrand is reported as divergence, never returned."""
    with pytest.raises(NumericalDivergenceError):
        integrate_real_line(lambda y: math.nan)


def test_divergence_error_names_integral():
    """The error carries the label of the failing integral."""
    with pytest.raises(NumericalDivergenceError) as excinfo:
        potential_moment(1.0, 1.0, lambda x: -x * x)
    assert excinfo.value.integral == "potential moment"


# ===========================
# Normalization Constant Tests
# ===========================


@pytest.mark.parametrize("theta, sigma", [(1.0, 1.0), (2.0, 0.5), (0.3, 1.7)])
def test_harmonic_normalization_constant(harmonic, theta, sigma):
    """For V = x²/2, Z = √(2πΣ/ϑ)."""
    Z = normalization_constant(theta, sigma, harmonic)
    assert abs(Z - math.sqrt(2.0 * math.pi * sigma / theta)) < 1e-7


def test_double_well_normalization_constant(double_well):
    """Z agrees with scipy's own infinite-range quadrature."""
    reference, _ = quad(lambda x: math.exp(-(x**4 / 4.0 - x**2 / 2.0)), -math.inf, math.inf)
    Z = normalization_constant(1.0, 1.0, double_well)
    assert abs(Z - reference) / reference < 1e-7


def test_normalization_depends_on_ratio_only(double_well):
    """Z depends on (ϑ, Σ) only through ϑ/Σ."""
    assert normalization_constant(1.0, 2.0, double_well) == pytest.approx(
        normalization_constant(0.5, 1.0, double_well), rel=1e-12
    )


@pytest.mark.parametrize("center", [-50.0, -30.0, 12.0, 50.0])
def test_shifted_gaussian_normalization_constant(center):
    """Z = √(2π) wherever the peak of V = (x - c)²/2 sits."""
    Z = normalization_constant(1.0, 1.0, lambda x: (x - center) ** 2 / 2.0)
    assert abs(Z - math.sqrt(2.0 * math.pi)) < 1e-6


def test_breakpoints_partition_domain():
    """Breakpoints are sorted, symmetric about 0 and strictly inside (-1, 1)."""
    assert list(BREAKPOINTS) == sorted(BREAKPOINTS)
    assert len(set(BREAKPOINTS)) == len(BREAKPOINTS)
    assert all(-1.0 < y < 1.0 for y in BREAKPOINTS)
    assert all(a == -b for a, b in zip(BREAKPOINTS, reversed(BREAKPOINTS)))
    assert 0.0 in BREAKPOINTS


def test_zero_normalization_raises():
    """Z = 0 from total underflow is rejected."""
    with pytest.raises(DegenerateNormalizationError):
        normalization_constant(1.0, 1.0, lambda x: x * x + 800.0)


def test_flat_potential_diverges():
    """∫ dx over ℝ does not exist."""
    with pytest.raises(NumericalDivergenceError):
        normalization_constant(1.0, 1.0, lambda x: 0.0)


# ===========================
# Potential Moment Tests
# ===========================


@pytest.mark.parametrize("theta, sigma", [(1.0, 1.0), (2.0, 0.5)])
def test_harmonic_potential_moment(harmonic, theta, sigma):
    """For V = x²/2, M = Z · E[x²]/2 = Z · Σ/(2ϑ)."""
    Z = math.sqrt(2.0 * math.pi * sigma / theta)
    M = potential_moment(theta, sigma, harmonic)
    assert abs(M - Z * sigma / (2.0 * theta)) < 1e-7


def test_potential_moment_can_be_negative(double_well):
    """The double well is negative near its minima, so M < 0 at low temperature."""
    assert potential_moment(10.0, 1.0, double_well) < 0.0


# ===========================
# Validation Tests
# ===========================


@pytest.mark.parametrize(
    "theta, sigma", [(0.0, 1.0), (-1.0, 1.0), (1.0, 0.0), (math.inf, 1.0), (1.0, math.nan)]
)
def test_validate_coefficients_rejects(theta, sigma):
    with pytest.raises(InvalidParameterError):
        validate_coefficients(theta, sigma)


def test_validate_coefficients_accepts_small_positive():
    validate_coefficients(1e-12, 1e12)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"abs_tolerance": -1.0},
        {"rel_tolerance": math.nan},
        {"abs_tolerance": 0.0, "rel_tolerance": 0.0},
        {"max_subintervals": 0},
        {"max_subintervals": True},
    ],
)
def test_invalid_settings_raise(kwargs):
    """Unusable quadrature settings fail at construction time."""
    with pytest.raises(InvalidParameterError):
        QuadratureSettings(**kwargs)


def test_settings_are_immutable():
    settings = QuadratureSettings()
    with pytest.raises(AttributeError):
        settings.max_subintervals = 10


# ===========================
# Logging Tests
# ===========================


def test_quadrature_logs_debug_record(harmonic, caplog):
    """Each quadrature emits a debug record on the package logger."""
    caplog.set_level(logging.DEBUG, logger="invariant_density")
    normalization_constant(1.0, 1.0, harmonic)

    messages = [r.getMessage() for r in caplog.records if r.name == "invariant_density"]
    assert any(m.startswith("normalization integral") for m in messages)


def test_divergence_logs_warning(caplog):
    """A failed quadrature is logged before the error is raised."""
    caplog.set_level(logging.WARNING, logger="invariant_density")
    with pytest.raises(NumericalDivergenceError):
        normalization_constant(1.0, 1.0, lambda x: -x * x)

    assert any(r.levelno == logging.WARNING for r in caplog.records)
