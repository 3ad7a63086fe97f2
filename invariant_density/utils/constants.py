"""
Numerical constants and tolerances for invariant density calculations.

This module defines the default quadrature tolerances, the subdivision
limit that bounds every adaptive integration, and the thresholds used by
the consistency diagnostics. Every evaluator accepts a QuadratureSettings
override, so these values are defaults rather than global state.
"""

# Adaptive quadrature (scipy.integrate.quad / QUADPACK QAGS)
QUAD_ABS_TOLERANCE = 1.49e-8  # Absolute error target, QUADPACK default
QUAD_REL_TOLERANCE = 1.49e-8  # Relative error target, ~sqrt(machine epsilon)
QUAD_MAX_SUBINTERVALS = 200  # Upper bound on adaptive subdivisions

# Integration domain of the transformed integral
TRANSFORM_LOWER = -1.0
TRANSFORM_UPPER = 1.0

# Initial partition of (-1, 1) at the images of x = 0, ±2^k. Each octave
# [2^k, 2^(k+1)] gets its own 21-point Gauss-Kronrod panel, so any peak wider
# than ~5% of its distance from the origin (out to |x| ~ 1e6) is sampled
# before adaptive refinement starts.
BREAKPOINT_MIN_EXPONENT = -1
BREAKPOINT_MAX_EXPONENT = 20

# Consistency diagnostics
NORMALIZATION_TOLERANCE = 1e-6  # |∫μ - 1| allowed by the normalization check
NORMALIZATION_BOUND = 10.0  # Default half-width of the independent integration range
DERIVATIVE_TOLERANCE = 1e-4  # Analytic vs finite-difference derivative
FD_STEP_THETA = 1e-5  # Central-difference step for the drift coefficient
FD_STEP_SIGMA = 1e-5  # Central-difference step for the diffusion coefficient
