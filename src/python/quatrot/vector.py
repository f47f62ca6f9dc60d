"""
===============================================================================
QUATROT - 3-Vector Algebra
===============================================================================

Vector3 is a plain 3-component real vector used both as the operand of
quaternion rotations and as the vector part of a quaternion.

Convention
----------
All arithmetic returns a NEW Vector3. The one exception is normalize(),
which rescales the receiver in place; normalized() is its non-mutating
counterpart.

Matrix view
-----------
A Vector3 can also be read as a 3x1 column matrix through dims()/at()/T,
which is what generic linear-algebra code expects. Out-of-range access
raises MatrixIndexError; indices are never clamped or wrapped.
===============================================================================
"""

import logging
import math
from typing import Iterator, Optional, Tuple, Union

import numpy as np

from quatrot.constants import COLUMN_DIMS, FLOAT, ROW_DIMS, VECTOR_SIZE
from quatrot.exceptions import DegenerateNormError, MatrixIndexError
from quatrot.tolerance import approx_equal

logger = logging.getLogger(__name__)


def stable_norm(arr: np.ndarray) -> float:
    """
    Euclidean norm of a 1-D array, computed on a copy rescaled by its
    largest magnitude so that components near the float64 limits neither
    underflow to 0 nor overflow to inf when squared.
    """
    peak = float(np.abs(arr).max())
    if peak == 0.0 or not math.isfinite(peak):
        return peak
    return peak * float(np.linalg.norm(arr / peak))


def unit_direction(arr: np.ndarray) -> Optional[np.ndarray]:
    """
    Unit vector along arr, or None for an all-zero array.

    Dividing by the largest magnitude first keeps the final division
    well-scaled for any non-zero finite input.
    """
    peak = float(np.abs(arr).max())
    if peak == 0.0:
        return None
    scaled = arr / peak
    return scaled / np.linalg.norm(scaled)


class Vector3:
    """
    Real 3-vector (x, y, z).

    Any triple of reals is valid, including the zero vector.

    Examples
    --------
    >>> a = Vector3(1.0, 0.0, 0.0)
    >>> b = Vector3(0.0, 1.0, 0.0)
    >>> a.cross(b)
    Vector3(x=+0.00000000, y=+0.00000000, z=+1.00000000)
    """

    __slots__ = ('_v',)

    def __init__(self, x: float, y: float, z: float) -> None:
        self._v = np.array([x, y, z], dtype=FLOAT)

    @classmethod
    def from_array(cls, arr) -> 'Vector3':
        """Build a Vector3 from any 3-element array-like."""
        arr = np.asarray(arr, dtype=FLOAT).reshape(-1)
        if arr.size != VECTOR_SIZE:
            raise ValueError(f"Vector3 needs 3 components, got {arr.size}")
        return cls(arr[0], arr[1], arr[2])

    # =========================================================================
    # COMPONENTS
    # =========================================================================

    @property
    def x(self) -> float:
        return float(self._v[0])

    @property
    def y(self) -> float:
        return float(self._v[1])

    @property
    def z(self) -> float:
        return float(self._v[2])

    def to_array(self) -> np.ndarray:
        """Copy of the components as a float64 array [x, y, z]."""
        return self._v.copy()

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        if dtype is None:
            return self._v.copy()
        return self._v.astype(dtype)

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    # =========================================================================
    # ALGEBRA
    # =========================================================================

    def cross(self, other: 'Vector3') -> 'Vector3':
        """
        Right-handed cross product self x other.

        Anti-commutative: a.cross(b) == -(b.cross(a)). Zero for parallel
        and anti-parallel inputs.
        """
        x1, y1, z1 = self._v
        x2, y2, z2 = other._v
        return Vector3(
            y1 * z2 - z1 * y2,
            z1 * x2 - x1 * z2,
            x1 * y2 - y1 * x2,
        )

    def dot(self, other: 'Vector3') -> float:
        return float(np.dot(self._v, other._v))

    def add(self, other: 'Vector3') -> 'Vector3':
        """Component-wise sum."""
        return Vector3.from_array(self._v + other._v)

    def add_scalar(self, s: float) -> 'Vector3':
        """Add s to every component."""
        return Vector3.from_array(self._v + float(s))

    def scale(self, s: float) -> 'Vector3':
        """Multiply every component by s."""
        return Vector3.from_array(self._v * float(s))

    def norm(self) -> float:
        """Euclidean norm sqrt(x^2 + y^2 + z^2)."""
        return stable_norm(self._v)

    def normalize(self) -> None:
        """
        Rescale this vector to unit length in place.

        Raises
        ------
        DegenerateNormError
            If the vector is the zero vector. The vector is left unchanged.
        """
        unit = unit_direction(self._v)
        if unit is None:
            logger.debug("Refusing to normalize zero vector")
            raise DegenerateNormError("Cannot normalize a zero-magnitude vector")
        self._v = unit

    def normalized(self) -> 'Vector3':
        """Return a unit-length copy; same zero-vector policy as normalize()."""
        result = Vector3.from_array(self._v)
        result.normalize()
        return result

    def approx_equals(self, other: 'Vector3', epsilon: float) -> bool:
        """
        True iff every |component difference| is strictly below epsilon.

        Parameters
        ----------
        other : Vector3
            Vector to compare against.
        epsilon : float
            Caller-chosen tolerance (no default).
        """
        return approx_equal(self._v, other._v, epsilon)

    def to_pure_quaternion(self) -> 'Quaternion':
        """
        Embed this vector as the pure quaternion (0, x, y, z).

        This is the form a vector takes inside the sandwich product q v q*.
        """
        from quatrot.quaternion import Quaternion
        return Quaternion(0.0, self.x, self.y, self.z)

    # =========================================================================
    # COLUMN-MATRIX ADAPTER
    # =========================================================================

    def dims(self) -> Tuple[int, int]:
        """Matrix dimensions of the column view: (3, 1)."""
        return COLUMN_DIMS

    def at(self, row: int, col: int) -> float:
        """
        Element (row, col) of the 3x1 column view.

        Raises
        ------
        MatrixIndexError
            If row is not 0, 1 or 2, or col is not 0.
        """
        if col != 0 or not 0 <= row < VECTOR_SIZE:
            raise MatrixIndexError(
                f"Index ({row}, {col}) out of range for {COLUMN_DIMS} matrix"
            )
        return float(self._v[row])

    def at_vec(self, i: int) -> float:
        """Element i of the vector; raises MatrixIndexError outside [0, 3)."""
        if not 0 <= i < VECTOR_SIZE:
            raise MatrixIndexError(f"Index {i} out of range for length-3 vector")
        return float(self._v[i])

    @property
    def T(self) -> 'RowVector3':
        """Transposed (1x3 row) view sharing this vector's components."""
        return RowVector3(self)

    # =========================================================================
    # OPERATORS
    # =========================================================================

    def __add__(self, other: 'Vector3') -> 'Vector3':
        if isinstance(other, Vector3):
            return self.add(other)
        return NotImplemented

    def __sub__(self, other: 'Vector3') -> 'Vector3':
        if isinstance(other, Vector3):
            return Vector3.from_array(self._v - other._v)
        return NotImplemented

    def __neg__(self) -> 'Vector3':
        return self.scale(-1.0)

    def __mul__(self, other: Union[float, int]) -> 'Vector3':
        if isinstance(other, (int, float, np.floating, np.integer)):
            return self.scale(other)
        return NotImplemented

    def __rmul__(self, other: Union[float, int]) -> 'Vector3':
        return self.__mul__(other)

    def __repr__(self) -> str:
        return f"Vector3(x={self.x:+.8f}, y={self.y:+.8f}, z={self.z:+.8f})"


class RowVector3:
    """1x3 transposed view of a Vector3."""

    __slots__ = ('_col',)

    def __init__(self, col: Vector3) -> None:
        self._col = col

    def dims(self) -> Tuple[int, int]:
        return ROW_DIMS

    def at(self, row: int, col: int) -> float:
        if row != 0 or not 0 <= col < VECTOR_SIZE:
            raise MatrixIndexError(
                f"Index ({row}, {col}) out of range for {ROW_DIMS} matrix"
            )
        return self._col.at_vec(col)

    @property
    def T(self) -> Vector3:
        return self._col

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        return np.asarray(self._col, dtype=dtype).reshape(ROW_DIMS)

    def __repr__(self) -> str:
        return f"RowVector3({self._col.x:+.8f}, {self._col.y:+.8f}, {self._col.z:+.8f})"
