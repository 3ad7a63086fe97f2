"""
Data types and structures for invariant density evaluation.

This module defines the dataclasses and type aliases used throughout the
package for quadrature configuration, quadrature results, density
gradients and diagnostic outcomes.
"""

import math
from dataclasses import dataclass
from typing import Callable

from invariant_density.utils.constants import (
    QUAD_ABS_TOLERANCE,
    QUAD_MAX_SUBINTERVALS,
    QUAD_REL_TOLERANCE,
)
from invariant_density.utils.exceptions import InvalidParameterError

# Any real-to-real callable: named functions, lambdas, compiled expressions
Potential = Callable[[float], float]


@dataclass(frozen=True)
class QuadratureSettings:
    """
    Immutable tolerances for the adaptive quadrature.

    Attributes:
        abs_tolerance: Absolute error target passed to QUADPACK (epsabs)
        rel_tolerance: Relative error target passed to QUADPACK (epsrel)
        max_subintervals: Maximum number of adaptive subdivisions (limit).
            This is the convergence safeguard: an integral that cannot meet
            the tolerances within this many subintervals fails instead of
            iterating further.
    """
    abs_tolerance: float = QUAD_ABS_TOLERANCE
    rel_tolerance: float = QUAD_REL_TOLERANCE
    max_subintervals: int = QUAD_MAX_SUBINTERVALS

    def __post_init__(self) -> None:
        """Validate tolerances are usable by QUADPACK."""
        if not math.isfinite(self.abs_tolerance) or self.abs_tolerance < 0:
            raise InvalidParameterError(
                f"abs_tolerance must be finite and non-negative, got {self.abs_tolerance}"
            )
        if not math.isfinite(self.rel_tolerance) or self.rel_tolerance < 0:
            raise InvalidParameterError(
                f"rel_tolerance must be finite and non-negative, got {self.rel_tolerance}"
            )
        if self.abs_tolerance == 0 and self.rel_tolerance == 0:
            raise InvalidParameterError("abs_tolerance and rel_tolerance cannot both be zero")
        if isinstance(self.max_subintervals, bool) or self.max_subintervals < 1:
            raise InvalidParameterError(
                f"max_subintervals must be a positive integer, got {self.max_subintervals}"
            )


@dataclass
class QuadratureResult:
    """
    Result from one adaptive quadrature over the transformed domain.

    Attributes:
        estimate: Value of the integral
        error: QUADPACK estimate of the absolute error
        evaluations: Number of integrand evaluations
        subintervals: Number of subintervals used by the adaptive scheme
    """
    estimate: float
    error: float
    evaluations: int
    subintervals: int


@dataclass
class DensityGradient:
    """
    Invariant density and its parameter derivatives at one point.

    Attributes:
        value: Density μ(x, ϑ, Σ, V)
        d_theta: Derivative with respect to the drift coefficient (∂μ/∂ϑ)
        d_sigma: Derivative with respect to the diffusion coefficient (∂μ/∂Σ)
    """
    value: float
    d_theta: float
    d_sigma: float


@dataclass
class ConsistencyCheck:
    """
    Result from a numerical consistency diagnostic.

    Attributes:
        is_valid: Whether the computed quantities passed the check
        violations: List of specific violations detected
        details: Dictionary with the compared values
    """
    is_valid: bool
    violations: list[str]
    details: dict[str, float]
