"""
Consistency diagnostics for computed invariant densities.

This module implements numerical sanity checks for the evaluators in
core.density, useful before handing them to a fitting routine:
- Normalization (independent integration of the returned density)
- Non-negativity on a grid
- Drift derivative vs central finite difference
- Diffusion derivative vs central finite difference
"""

import math
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike
from scipy.integrate import quad

from invariant_density.core.density import (
    density,
    density_on_grid,
    diffusion_derivative,
    drift_derivative,
)
from invariant_density.utils.constants import (
    DERIVATIVE_TOLERANCE,
    FD_STEP_SIGMA,
    FD_STEP_THETA,
    NORMALIZATION_BOUND,
    NORMALIZATION_TOLERANCE,
)
from invariant_density.utils.types import ConsistencyCheck, Potential, QuadratureSettings


def check_normalization(
    theta: float,
    sigma: float,
    potential: Potential,
    lower: float = -NORMALIZATION_BOUND,
    upper: float = NORMALIZATION_BOUND,
    tolerance: float = NORMALIZATION_TOLERANCE,
    settings: Optional[QuadratureSettings] = None,
) -> ConsistencyCheck:
    """
    Validate that the density integrates to one.

    The density is integrated directly over [lower, upper] without the
    domain transform, so the check does not share its quadrature with the
    normalization constant. The range must be wide enough to hold
    essentially all of the mass.

    Args:
        theta, sigma: Positive drift and diffusion coefficients
        potential: Potential function V
        lower, upper: Finite integration range
        tolerance: Allowed deviation |∫μ - 1|
        settings: Quadrature tolerances passed to the density evaluator

    Returns:
        ConsistencyCheck with validation results
    """
    if not lower < upper:
        raise ValueError(f"Integration range must satisfy lower < upper, got [{lower}, {upper}]")

    output = quad(
        lambda x: density(x, theta, sigma, potential, settings=settings),
        lower,
        upper,
        full_output=1,
    )
    total, error = output[0], output[1]

    violations = []
    if len(output) > 3:
        violations.append(f"Independent integration did not converge: {output[3]}")

    diff = abs(total - 1.0)
    if diff >= tolerance:
        violations.append(
            f"Density integrates to {total:.8f} over [{lower}, {upper}], "
            f"|∫μ - 1| = {diff:.2e} exceeds {tolerance:.1e}"
        )

    details = {"integral": total, "error": error, "difference": diff}

    is_valid = len(violations) == 0
    return ConsistencyCheck(is_valid=is_valid, violations=violations, details=details)


def check_non_negativity(
    xs: ArrayLike,
    theta: float,
    sigma: float,
    potential: Potential,
    settings: Optional[QuadratureSettings] = None,
) -> ConsistencyCheck:
    """
    Check that the density is finite and non-negative at every grid point.

    Raises:
        ValueError: If the grid is empty

    Returns:
        ConsistencyCheck with validation results
    """
    points = np.asarray(xs, dtype=np.float64).ravel()
    if points.size == 0:
        raise ValueError("Grid must contain at least one point")

    values = density_on_grid(points, theta, sigma, potential, settings=settings)

    violations = []
    for x, value in zip(points, values):
        if not math.isfinite(value) or value < 0.0:
            violations.append(f"Density at x={x:.4f} is {value!r}")

    details = {"min_value": float(np.min(values)), "points": float(points.size)}

    is_valid = len(violations) == 0
    return ConsistencyCheck(is_valid=is_valid, violations=violations, details=details)


def check_drift_derivative(
    x: float,
    theta: float,
    sigma: float,
    potential: Potential,
    h: float = FD_STEP_THETA,
    tolerance: float = DERIVATIVE_TOLERANCE,
    settings: Optional[QuadratureSettings] = None,
) -> ConsistencyCheck:
    """
    Compare ∂μ/∂ϑ with a central finite difference.

    Finite difference:
        (μ(x, ϑ+h, Σ) - μ(x, ϑ-h, Σ)) / (2h)

    Args:
        x: Evaluation point
        theta, sigma: Positive drift and diffusion coefficients (ϑ > h)
        potential: Potential function V
        h: Step in ϑ
        tolerance: Allowed absolute difference
        settings: Quadrature tolerances passed to the evaluators

    Returns:
        ConsistencyCheck with validation results
    """
    analytical = drift_derivative(x, theta, sigma, potential, settings=settings)

    value_up = density(x, theta + h, sigma, potential, settings=settings)
    value_down = density(x, theta - h, sigma, potential, settings=settings)
    numerical = (value_up - value_down) / (2 * h)

    diff = abs(analytical - numerical)
    is_valid = diff < tolerance

    violations = []
    if not is_valid:
        violations.append(
            f"Drift derivative mismatch at x={x}: analytic {analytical:.8f}, "
            f"finite difference {numerical:.8f}, diff = {diff:.2e}"
        )

    details = {"analytical": analytical, "numerical": numerical, "difference": diff}

    return ConsistencyCheck(is_valid=is_valid, violations=violations, details=details)


def check_diffusion_derivative(
    x: float,
    theta: float,
    sigma: float,
    potential: Potential,
    h: float = FD_STEP_SIGMA,
    tolerance: float = DERIVATIVE_TOLERANCE,
    settings: Optional[QuadratureSettings] = None,
) -> ConsistencyCheck:
    """
    Compare ∂μ/∂Σ with a central finite difference.

    Finite difference:
        (μ(x, ϑ, Σ+h) - μ(x, ϑ, Σ-h)) / (2h)

    Returns:
        ConsistencyCheck with validation results
    """
    analytical = diffusion_derivative(x, theta, sigma, potential, settings=settings)

    value_up = density(x, theta, sigma + h, potential, settings=settings)
    value_down = density(x, theta, sigma - h, potential, settings=settings)
    numerical = (value_up - value_down) / (2 * h)

    diff = abs(analytical - numerical)
    is_valid = diff < tolerance

    violations = []
    if not is_valid:
        violations.append(
            f"Diffusion derivative mismatch at x={x}: analytic {analytical:.8f}, "
            f"finite difference {numerical:.8f}, diff = {diff:.2e}"
        )

    details = {"analytical": analytical, "numerical": numerical, "difference": diff}

    return ConsistencyCheck(is_valid=is_valid, violations=violations, details=details)
