"""
Error taxonomy for invariant density evaluation.

Each failure is raised at the point it is detected. Invalid parameters are
rejected before any quadrature work; numerical failures carry the integral
that failed so callers can decide whether to adjust parameters and retry.
"""


class InvariantDensityError(Exception):
    """Base class for all errors raised by this package."""


class InvalidParameterError(InvariantDensityError, ValueError):
    """Drift or diffusion coefficient (or a quadrature setting) is out of range."""


class NumericalDivergenceError(InvariantDensityError, ArithmeticError):
    """
    An integral failed to converge.

    Raised when QUADPACK reports a convergence problem, when the estimate is
    not finite, or when the integrand overflows.

    Attributes:
        integral: Name of the integral that failed ("normalization" or
            "potential moment")
    """

    def __init__(self, message: str, integral: str = "normalization") -> None:
        super().__init__(message)
        self.integral = integral


class DegenerateNormalizationError(InvariantDensityError, ArithmeticError):
    """The normalization constant converged but is not strictly positive."""
