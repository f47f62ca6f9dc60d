"""
===============================================================================
QUATROT - Approximate Equality Utilities
===============================================================================
Tolerance-based comparison predicates used by the public API and throughout
the test suite.

All comparisons are strict: two values match when every element-wise absolute
difference is strictly LESS than epsilon. Epsilon is always supplied by the
caller since an appropriate tolerance depends on where the numbers came from
(a freshly normalized quaternion vs. a matrix typed in with 8 decimals).
===============================================================================
"""

import math
from typing import Sequence

import numpy as np


def check_epsilon(epsilon: float) -> float:
    """
    Validate a comparison tolerance.

    Parameters
    ----------
    epsilon : float
        Tolerance to validate.

    Returns
    -------
    float
        The tolerance as a float.

    Raises
    ------
    ValueError
        If epsilon is not a finite, strictly positive number.
    """
    epsilon = float(epsilon)
    if not math.isfinite(epsilon) or epsilon <= 0.0:
        raise ValueError(
            f"Tolerance must be a finite positive number, got {epsilon!r}"
        )
    return epsilon


def approx_equal(a, b, epsilon: float) -> bool:
    """
    Element-wise approximate equality of two equally shaped array-likes.

    Accepts numpy arrays, nested sequences, and anything exposing
    ``__array__`` (Vector3, Quaternion).

    Raises
    ------
    ValueError
        If the shapes differ or epsilon is invalid.
    """
    epsilon = check_epsilon(epsilon)
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)

    if a.shape != b.shape:
        raise ValueError(f"Shape mismatch: {a.shape} vs {b.shape}")

    return bool(np.all(np.abs(a - b) < epsilon))


def approx_equal_up_to_sign(q1, q2, epsilon: float) -> bool:
    """
    True if q1 matches q2 or -q2 within epsilon.

    q and -q encode the same rotation, so this is the right comparison for
    quaternions recovered from a rotation matrix.
    """
    q2 = np.asarray(q2, dtype=np.float64)
    return approx_equal(q1, q2, epsilon) or approx_equal(q1, -q2, epsilon)


def argmax(values: Sequence[float]) -> int:
    """
    Index of the largest value, or -1 for an empty sequence.

    Uses a strict greater-than scan so that on ties the FIRST maximal index
    wins. Unlike np.argmax, an empty sequence is not an error.
    """
    idx = -1
    best = None
    for i, value in enumerate(values):
        if best is None or value > best:
            best = value
            idx = i
    return idx
