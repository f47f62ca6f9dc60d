"""
quatrot - quaternion / rotation matrix algebra.

Scalar-first quaternions, 3-vectors, vector rotation, and robust conversion
between unit quaternions and 3x3 rotation matrices.
"""

from quatrot.conversions import (
    is_rotation_matrix, quaternion_from_rotation_matrix, select_branch
)
from quatrot.exceptions import (
    ConfigError, DegenerateNormError, MatrixIndexError, QuatRotError
)
from quatrot.quaternion import Quaternion, UnitQuaternion
from quatrot.tolerance import approx_equal, approx_equal_up_to_sign, argmax
from quatrot.vector import RowVector3, Vector3

__version__ = '0.1.0'

__all__ = [
    'Vector3', 'RowVector3', 'Quaternion', 'UnitQuaternion',
    'quaternion_from_rotation_matrix', 'is_rotation_matrix', 'select_branch',
    'approx_equal', 'approx_equal_up_to_sign', 'argmax',
    'QuatRotError', 'DegenerateNormError', 'MatrixIndexError', 'ConfigError',
]
