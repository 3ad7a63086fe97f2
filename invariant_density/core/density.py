"""
Invariant densities of SDE limit equations and their parameter derivatives.

This module evaluates the stationary density of a one-dimensional diffusion
whose drift is the negative gradient of a potential V,

    μ(x, ϑ, Σ, V) = exp(-ϑ/Σ · V(x)) / Z(ϑ, Σ),   x ∈ ℝ,

together with its derivatives with respect to the drift coefficient ϑ and
the diffusion coefficient Σ. These derivatives feed gradient-based parameter
estimation, so they are computed analytically by differentiating Z under the
integral sign rather than by finite differences.

Mathematical Background:
    Z(ϑ, Σ) = ∫_ℝ exp(-ϑ/Σ · V(y)) dy must be finite and positive, which is
    a condition on V (e.g. V(x) = x⁴/4 - x²/2 or V(x) = x²/2). Z is
    evaluated by adaptive quadrature after mapping ℝ onto (-1, 1); see
    solvers.quadrature.

Cost:
    density              1 quadrature
    drift_derivative     2 quadratures (Z and the potential moment)
    diffusion_derivative 2 quadratures
    density_gradient     2 quadratures for all three values
"""

import math
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from invariant_density.solvers.quadrature import (
    normalization_constant,
    potential_moment,
    validate_coefficients,
)
from invariant_density.utils.exceptions import NumericalDivergenceError
from invariant_density.utils.types import DensityGradient, Potential, QuadratureSettings


def _boltzmann_factor(x: float, theta: float, sigma: float, potential: Potential) -> tuple[float, float]:
    """
    Evaluate V(x) and the unnormalized density exp(-ϑ/Σ · V(x)).

    Returns:
        Tuple (V(x), exp(-ϑ/Σ · V(x)))

    Raises:
        NumericalDivergenceError: If V(x) is nan or the exponential overflows at x
    """
    v = potential(x)
    if math.isnan(v):
        raise NumericalDivergenceError(
            f"Potential returned nan at x={x}",
            integral="density factor",
        )
    try:
        weight = math.exp(-theta / sigma * v)
    except OverflowError as e:
        raise NumericalDivergenceError(
            f"exp(-theta/sigma * V(x)) overflows at x={x} (V(x)={v})",
            integral="density factor",
        ) from e
    return v, weight


def density(
    x: float,
    theta: float,
    sigma: float,
    potential: Potential,
    *,
    settings: Optional[QuadratureSettings] = None,
) -> float:
    """
    Evaluate the invariant density defined through a potential.

    Args:
        x: Point at which to evaluate the density
        theta: Positive drift coefficient ϑ
        sigma: Positive diffusion coefficient Σ
        potential: Potential function V on ℝ
        settings: Quadrature tolerances, defaults from utils.constants

    Returns:
        Density value μ(x, ϑ, Σ, V) ≥ 0

    Formula:
        μ(x, ϑ, Σ, V) = exp(-ϑ/Σ · V(x)) / Z(ϑ, Σ)
        Z(ϑ, Σ)       = ∫_{-1}^{1} exp(-ϑ/Σ · V(t(y))) · dt(y) dy

    Raises:
        InvalidParameterError: If ϑ or Σ is not finite and positive
        NumericalDivergenceError: If Z does not converge
        DegenerateNormalizationError: If Z is not strictly positive

    Examples:
        >>> # Harmonic potential gives the standard normal density for ϑ = Σ = 1
        >>> abs(density(0.0, 1.0, 1.0, lambda x: x * x / 2) - 0.3989) < 1e-4
        True
    """
    validate_coefficients(theta, sigma)

    Z = normalization_constant(theta, sigma, potential, settings=settings)
    _, weight = _boltzmann_factor(x, theta, sigma, potential)

    return weight / Z


def drift_derivative(
    x: float,
    theta: float,
    sigma: float,
    potential: Potential,
    *,
    settings: Optional[QuadratureSettings] = None,
) -> float:
    """
    Evaluate the derivative of the invariant density with respect to ϑ.

    Args:
        x: Point at which to evaluate the derivative
        theta: Positive drift coefficient ϑ
        sigma: Positive diffusion coefficient Σ
        potential: Potential function V on ℝ
        settings: Quadrature tolerances, defaults from utils.constants

    Returns:
        ∂μ/∂ϑ at x

    Formulas:
        ∂ϑμ(x) = -μ(x) · (V(x)/Σ + ∂ϑZ/Z)
        ∂ϑZ    = -(1/Σ) ∫_ℝ V(y) · exp(-ϑ/Σ · V(y)) dy

    Notes:
        Z is reused for the density factor instead of calling density(),
        so the evaluation costs two quadratures rather than three.
    """
    validate_coefficients(theta, sigma)

    Z = normalization_constant(theta, sigma, potential, settings=settings)
    d_theta_Z = -potential_moment(theta, sigma, potential, settings=settings) / sigma

    v, weight = _boltzmann_factor(x, theta, sigma, potential)
    if weight == 0.0:
        return 0.0

    return -1.0 / Z * weight * (v / sigma + d_theta_Z / Z)


def diffusion_derivative(
    x: float,
    theta: float,
    sigma: float,
    potential: Potential,
    *,
    settings: Optional[QuadratureSettings] = None,
) -> float:
    """
    Evaluate the derivative of the invariant density with respect to Σ.

    Args:
        x: Point at which to evaluate the derivative
        theta: Positive drift coefficient ϑ
        sigma: Positive diffusion coefficient Σ
        potential: Potential function V on ℝ
        settings: Quadrature tolerances, defaults from utils.constants

    Returns:
        ∂μ/∂Σ at x

    Formulas:
        ∂Σμ(x) = μ(x) · (ϑ·V(x)/Σ² - ∂ΣZ/Z)
        ∂ΣZ    = (ϑ/Σ²) ∫_ℝ V(y) · exp(-ϑ/Σ · V(y)) dy
    """
    validate_coefficients(theta, sigma)

    Z = normalization_constant(theta, sigma, potential, settings=settings)
    d_sigma_Z = theta / sigma**2 * potential_moment(theta, sigma, potential, settings=settings)

    v, weight = _boltzmann_factor(x, theta, sigma, potential)
    if weight == 0.0:
        return 0.0

    return 1.0 / Z * weight * (theta * v / sigma**2 - d_sigma_Z / Z)


def density_gradient(
    x: float,
    theta: float,
    sigma: float,
    potential: Potential,
    *,
    settings: Optional[QuadratureSettings] = None,
) -> DensityGradient:
    """
    Evaluate the density and both parameter derivatives in one pass.

    Both derivatives of Z are multiples of the same potential moment, so the
    three values together need only two quadratures.

    Returns:
        DensityGradient with value, d_theta, d_sigma

    Example:
        >>> g = density_gradient(0.0, 1.0, 1.0, lambda x: x * x / 2)
        >>> print(f"{g.value:.4f} {g.d_theta:.4f} {g.d_sigma:.4f}")
        0.3989 0.1995 -0.1995
    """
    validate_coefficients(theta, sigma)

    Z = normalization_constant(theta, sigma, potential, settings=settings)
    moment = potential_moment(theta, sigma, potential, settings=settings)
    d_theta_Z = -moment / sigma
    d_sigma_Z = theta / sigma**2 * moment

    v, weight = _boltzmann_factor(x, theta, sigma, potential)
    if weight == 0.0:
        return DensityGradient(value=0.0, d_theta=0.0, d_sigma=0.0)

    return DensityGradient(
        value=weight / Z,
        d_theta=-1.0 / Z * weight * (v / sigma + d_theta_Z / Z),
        d_sigma=1.0 / Z * weight * (theta * v / sigma**2 - d_sigma_Z / Z),
    )


def density_on_grid(
    xs: ArrayLike,
    theta: float,
    sigma: float,
    potential: Potential,
    *,
    settings: Optional[QuadratureSettings] = None,
) -> NDArray[np.float64]:
    """
    Evaluate the invariant density at many points with a single quadrature.

    Convenience for building density curves: Z depends only on (ϑ, Σ, V), so
    it is computed once for the whole grid. The potential is called once per
    point and need not accept arrays.

    Args:
        xs: Points at which to evaluate the density (any shape)
        theta, sigma: Positive drift and diffusion coefficients
        potential: Potential function V on ℝ
        settings: Quadrature tolerances, defaults from utils.constants

    Returns:
        Array of density values with the same shape as xs

    Example:
        >>> xs = np.linspace(-5, 5, 1000)
        >>> ys = density_on_grid(xs, 1.0, 1.0, lambda x: x**4 / 4 - x**2 / 2)
        >>> # Use ys to plot the double-well density
    """
    validate_coefficients(theta, sigma)

    points = np.asarray(xs, dtype=np.float64)
    Z = normalization_constant(theta, sigma, potential, settings=settings)

    values = np.fromiter(
        (potential(float(x)) for x in points.ravel()), dtype=np.float64, count=points.size
    )
    with np.errstate(over="ignore"):
        weights = np.exp(-theta / sigma * values)

    if not np.all(np.isfinite(weights)):
        raise NumericalDivergenceError(
            "exp(-theta/sigma * V(x)) is not finite on part of the grid",
            integral="density factor",
        )

    return (weights / Z).reshape(points.shape)
