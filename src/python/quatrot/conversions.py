"""
===============================================================================
QUATROT - Rotation Matrix to Quaternion Conversion
===============================================================================

Inverting the closed-form quaternion -> matrix formula directly is unstable:
each naive formula divides by a quantity that vanishes somewhere in rotation
space (e.g. the trace-based formula near 180 degree rotations). Instead we
build four unnormalized candidates, each proportional to the true quaternion
and each well conditioned in a different region, and pick the one whose
dominant term is largest:

    candidate value     dominant term     branch
    ---------------     -------------     ------
    M00                 4x^2 related      0
    M11                 4y^2 related      1
    M22                 4z^2 related      2
    trace(M)            4w^2 related      3

The winner is normalized, so no square root or reciprocal of a small
number is ever taken.

References
----------
    [1] Shepperd, "Quaternion from Rotation Matrix", JGCD 1(3), 1978.
    [2] Markley & Crassidis (2014), Sec. 2.9.3.
===============================================================================
"""

import logging

import numpy as np

from quatrot.constants import FLOAT, ROTATION_MATRIX_SHAPE
from quatrot.quaternion import UnitQuaternion
from quatrot.tolerance import argmax, check_epsilon

logger = logging.getLogger(__name__)


def _as_matrix(matrix) -> np.ndarray:
    m = np.asarray(matrix, dtype=FLOAT)
    if m.shape != ROTATION_MATRIX_SHAPE:
        raise ValueError(f"Rotation matrix must be 3x3, got shape {m.shape}")
    return m


def select_branch(matrix) -> int:
    """
    Index of the numerically best conversion branch for a rotation matrix.

    Compares [M00, M11, M22, trace]; the first maximal entry wins.
    """
    m = _as_matrix(matrix)
    return argmax([m[0, 0], m[1, 1], m[2, 2], np.trace(m)])


def quaternion_from_rotation_matrix(matrix) -> UnitQuaternion:
    """
    Recover a unit quaternion from a 3x3 rotation matrix.

    Parameters
    ----------
    matrix : array-like
        3x3 orthonormal matrix with determinant +1. Orthonormality is NOT
        checked; for other input the result is meaningless.

    Returns
    -------
    UnitQuaternion
        Quaternion q with q.to_rotation_matrix() == matrix. Its sign is
        arbitrary: q and -q describe the same rotation.

    Raises
    ------
    ValueError
        If the input is not 3x3.
    """
    m = _as_matrix(matrix)
    branch = select_branch(m)

    if branch == 0:
        # M00 largest: x dominant
        w = m[2, 1] - m[1, 2]
        x = 1.0 + m[0, 0] - m[1, 1] - m[2, 2]
        y = m[0, 1] + m[1, 0]
        z = m[0, 2] + m[2, 0]
    elif branch == 1:
        # M11 largest: y dominant
        w = m[0, 2] - m[2, 0]
        x = m[1, 0] + m[0, 1]
        y = 1.0 - m[0, 0] + m[1, 1] - m[2, 2]
        z = m[1, 2] + m[2, 1]
    elif branch == 2:
        # M22 largest: z dominant
        w = m[1, 0] - m[0, 1]
        x = m[2, 0] + m[0, 2]
        y = m[2, 1] + m[1, 2]
        z = 1.0 - m[0, 0] - m[1, 1] + m[2, 2]
    else:
        # trace largest: w dominant
        w = 1.0 + m[0, 0] + m[1, 1] + m[2, 2]
        x = m[2, 1] - m[1, 2]
        y = m[0, 2] - m[2, 0]
        z = m[1, 0] - m[0, 1]

    logger.debug("Matrix -> quaternion using branch %d", branch)

    # The raw branch output is only proportional to q.
    return UnitQuaternion(w, x, y, z)


def is_rotation_matrix(matrix, epsilon: float) -> bool:
    """
    Check that a matrix is a proper rotation within epsilon.

    Requires shape 3x3, every entry of M^T M - I strictly below epsilon in
    magnitude, and |det(M) - 1| < epsilon. The converter never calls this;
    it is for validating untrusted input at the boundary.
    """
    epsilon = check_epsilon(epsilon)
    m = np.asarray(matrix, dtype=FLOAT)
    if m.shape != ROTATION_MATRIX_SHAPE:
        return False

    orthogonality_error = np.abs(m.T @ m - np.eye(3)).max()
    det_error = abs(np.linalg.det(m) - 1.0)
    return bool(orthogonality_error < epsilon and det_error < epsilon)
