"""
Package logger for invariant density evaluation.

Quadrature work is recorded at DEBUG level and numerical failures at WARNING
level. Handlers are left to the application; the package only emits records.
"""

import logging

logger = logging.getLogger("invariant_density")
logger.addHandler(logging.NullHandler())
