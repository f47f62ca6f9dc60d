"""
===============================================================================
QUATROT - Numeric Constants
===============================================================================
Shapes and fixed component tuples shared across the package.

Note that there is deliberately no default comparison tolerance here: every
approximate-equality predicate takes an explicit epsilon from the caller.
===============================================================================
"""

import numpy as np


# =============================================================================
# COMPONENT LAYOUTS
# =============================================================================
IDENTITY_COMPONENTS = (1.0, 0.0, 0.0, 0.0)   # scalar-first [w, x, y, z]

# =============================================================================
# SHAPES
# =============================================================================
VECTOR_SIZE = 3
QUATERNION_SIZE = 4
COLUMN_DIMS = (3, 1)                          # Vector3 seen as a matrix
ROW_DIMS = (1, 3)                             # its transpose
ROTATION_MATRIX_SHAPE = (3, 3)

# =============================================================================
# DTYPE
# =============================================================================
FLOAT = np.float64

# =============================================================================
# LOGGING
# =============================================================================
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
