"""
Adaptive quadrature over the real line for invariant density normalization.

This module wraps scipy's QUADPACK driver (QAGP: adaptive Gauss-Kronrod
subdivision from a fixed set of breakpoints, with epsilon-algorithm
extrapolation that copes with integrable endpoint singularities) and applies
it on (-1, 1) after the rational change of variables in core.transform.
Two integrals are needed:

    Z(ϑ, Σ)    = ∫_ℝ exp(-ϑ/Σ · V(y)) dy
    M(ϑ, Σ)    = ∫_ℝ V(y) · exp(-ϑ/Σ · V(y)) dy

Z normalizes the density; M is the potential moment that both parameter
derivatives of Z are proportional to. Every call integrates afresh; nothing
is cached between calls.

The transform squeezes everything beyond |x| ~ 10 into a sliver next to
y = ±1, where a single starting panel can step over a peak of the integrand
entirely and report a converged, wrong result. The breakpoints start the
subdivision with one panel per octave of x instead.
"""

import math
from typing import Callable, Optional

from scipy.integrate import quad

from invariant_density.core.transform import (
    domain_transform,
    domain_transform_derivative,
    inverse_domain_transform,
)
from invariant_density.utils.constants import (
    BREAKPOINT_MAX_EXPONENT,
    BREAKPOINT_MIN_EXPONENT,
    TRANSFORM_LOWER,
    TRANSFORM_UPPER,
)
from invariant_density.utils.exceptions import (
    DegenerateNormalizationError,
    InvalidParameterError,
    NumericalDivergenceError,
)
from invariant_density.utils.log import logger
from invariant_density.utils.types import Potential, QuadratureResult, QuadratureSettings

DEFAULT_SETTINGS = QuadratureSettings()

_OCTAVES = [
    inverse_domain_transform(2.0**k)
    for k in range(BREAKPOINT_MIN_EXPONENT, BREAKPOINT_MAX_EXPONENT + 1)
]
# Images of x = 0, ±2^k in (-1, 1), sorted
BREAKPOINTS = tuple([-y for y in reversed(_OCTAVES)] + [0.0] + _OCTAVES)


def validate_coefficients(theta: float, sigma: float) -> None:
    """
    Validate drift and diffusion coefficients.

    Args:
        theta: Drift coefficient ϑ
        sigma: Diffusion coefficient Σ

    Raises:
        InvalidParameterError: If either coefficient is non-finite or not
            strictly positive
    """
    if not math.isfinite(theta) or theta <= 0:
        raise InvalidParameterError(f"Drift coefficient must be finite and positive, got theta={theta}")
    if not math.isfinite(sigma) or sigma <= 0:
        raise InvalidParameterError(f"Diffusion coefficient must be finite and positive, got sigma={sigma}")


def _transformed_integrand(
    potential: Potential, ratio: float, moment: bool
) -> Callable[[float], float]:
    """
    Build y ↦ [V(t(y))] · exp(-ratio · V(t(y))) · dt(y) on (-1, 1).

    With moment=False the bracketed V factor is omitted.
    """

    def integrand(y: float) -> float:
        v = potential(domain_transform(y))
        weight = math.exp(-ratio * v)
        if weight == 0.0:
            # Underflow in the tails; V may be inf here, and inf · 0 is nan
            return 0.0
        value = weight * domain_transform_derivative(y)
        return v * value if moment else value

    return integrand


def integrate_real_line(
    integrand: Callable[[float], float],
    settings: QuadratureSettings = DEFAULT_SETTINGS,
    name: str = "normalization",
) -> QuadratureResult:
    """
    Integrate an already-transformed integrand over (-1, 1).

    Args:
        integrand: Function of y ∈ (-1, 1), typically f(t(y)) · dt(y)
        settings: Quadrature tolerances and subdivision limit
        name: Label used in log records and error messages

    Returns:
        QuadratureResult with estimate, error estimate and work counters

    Raises:
        NumericalDivergenceError: If QUADPACK reports any convergence
            problem, the estimate is not finite, or the integrand overflows
    """
    try:
        output = quad(
            integrand,
            TRANSFORM_LOWER,
            TRANSFORM_UPPER,
            epsabs=settings.abs_tolerance,
            epsrel=settings.rel_tolerance,
            points=BREAKPOINTS,
            # max_subintervals counts refinements beyond the initial partition
            limit=settings.max_subintervals + len(BREAKPOINTS) + 1,
            full_output=1,
        )
    except OverflowError as e:
        logger.warning("%s integral overflowed: %s", name, e)
        raise NumericalDivergenceError(
            f"Integrand of the {name} integral overflowed; the integral does not exist "
            f"for this potential and parameters",
            integral=name,
        ) from e

    estimate, error, info = output[0], output[1], output[2]

    # quad appends a message only when QUADPACK flags a problem (ier > 0)
    if len(output) > 3:
        logger.warning("%s integral did not converge: %s", name, output[3])
        raise NumericalDivergenceError(
            f"The {name} integral did not converge (estimate {estimate:.6e}, "
            f"error {error:.2e}): {output[3]}",
            integral=name,
        )

    if not math.isfinite(estimate) or not math.isfinite(error):
        logger.warning("%s integral is not finite: %r", name, estimate)
        raise NumericalDivergenceError(
            f"The {name} integral is not finite (estimate {estimate!r})",
            integral=name,
        )

    result = QuadratureResult(
        estimate=estimate,
        error=error,
        evaluations=int(info["neval"]),
        subintervals=int(info["last"]),
    )
    logger.debug(
        "%s integral: estimate=%.12e error=%.2e neval=%d subintervals=%d",
        name,
        result.estimate,
        result.error,
        result.evaluations,
        result.subintervals,
    )
    return result


def normalization_constant(
    theta: float,
    sigma: float,
    potential: Potential,
    *,
    settings: Optional[QuadratureSettings] = None,
) -> float:
    """
    Compute the normalization constant Z(ϑ, Σ) of the invariant density.

    Formula:
        Z = ∫_{-1}^{1} exp(-ϑ/Σ · V(t(y))) · dt(y) dy

    Args:
        theta: Positive drift coefficient ϑ
        sigma: Positive diffusion coefficient Σ
        potential: Potential function V
        settings: Quadrature tolerances, defaults from utils.constants

    Returns:
        Z > 0

    Raises:
        InvalidParameterError: If ϑ or Σ is not finite and positive
        NumericalDivergenceError: If the integral does not converge
        DegenerateNormalizationError: If Z converged but is not positive
    """
    validate_coefficients(theta, sigma)
    integrand = _transformed_integrand(potential, theta / sigma, moment=False)
    Z = integrate_real_line(integrand, settings or DEFAULT_SETTINGS, "normalization").estimate

    if Z <= 0.0:
        logger.warning("normalization constant is not positive: Z=%r", Z)
        raise DegenerateNormalizationError(
            f"Normalization constant Z={Z!r} is not strictly positive for "
            f"theta={theta}, sigma={sigma}; the density cannot be normalized"
        )
    return Z


def potential_moment(
    theta: float,
    sigma: float,
    potential: Potential,
    *,
    settings: Optional[QuadratureSettings] = None,
) -> float:
    """
    Compute the unnormalized potential moment M(ϑ, Σ).

    Formula:
        M = ∫_{-1}^{1} V(t(y)) · exp(-ϑ/Σ · V(t(y))) · dt(y) dy

    The parameter derivatives of Z follow from it directly:
        ∂ϑZ = -M / Σ
        ∂ΣZ =  ϑ · M / Σ²

    Raises:
        InvalidParameterError: If ϑ or Σ is not finite and positive
        NumericalDivergenceError: If the integral does not converge
    """
    validate_coefficients(theta, sigma)
    integrand = _transformed_integrand(potential, theta / sigma, moment=True)
    return integrate_real_line(integrand, settings or DEFAULT_SETTINGS, "potential moment").estimate
