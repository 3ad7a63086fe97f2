"""
Change of variables from the interval (-1, 1) onto the real line.

The rational map

    t(y) = y / (1 - y²)

is a bijection (-1, 1) → ℝ with derivative

    dt(y) = (1 + y²) / (1 - y²)²,

so an improper integral over ℝ becomes a proper one over (-1, 1):

    ∫_ℝ f(x) dx = ∫_{-1}^{1} f(t(y)) · dt(y) dy

The Jacobian blows up at y = ±1. The quadrature that consumes this map must
never evaluate the endpoints themselves (QUADPACK's Gauss-Kronrod nodes are
interior), which is why both functions reject |y| ≥ 1.
"""

import math


def _check_domain(y: float) -> None:
    if not -1.0 < y < 1.0:
        raise ValueError(f"Transform is defined on the open interval (-1, 1), got y={y}")


def domain_transform(y: float) -> float:
    """
    Map y ∈ (-1, 1) onto the real line.

    Examples:
        >>> domain_transform(0.0)
        0.0
        >>> domain_transform(0.5)
        0.6666666666666666
    """
    _check_domain(y)
    return y / (1.0 - y * y)


def domain_transform_derivative(y: float) -> float:
    """Jacobian factor dt/dy of the transform, strictly positive on (-1, 1)."""
    _check_domain(y)
    one_minus_sq = 1.0 - y * y
    return (1.0 + y * y) / (one_minus_sq * one_minus_sq)


def inverse_domain_transform(x: float) -> float:
    """
    Map a real x back into (-1, 1), the inverse of domain_transform.

    Formula:
        y = 2x / (1 + √(1 + 4x²))

    This root of x·y² + y - x = 0 avoids cancellation for large |x|.
    """
    return 2.0 * x / (1.0 + math.sqrt(1.0 + 4.0 * x * x))
