"""
This file keeps in mind common settings of the primitive cell search.

They are read-only defaults: every function that needs a tolerance
receives it as an argument, so no global state is shared between calls.
"""

# Default length tolerance (in the same units of the unit cell)
__SYMPREC__ = 1e-5

# A negative angle tolerance means: use only the length tolerance
__ANGLE_TOLERANCE__ = -1.0

# Tolerance backoff
REDUCE_RATE = 0.95
INCREASE_RATE = 1.05
NUM_ATTEMPT = 20

# Below this value a volume or determinant is considered zero
__EPSILON__ = 1e-8
