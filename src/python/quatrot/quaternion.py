"""
===============================================================================
QUATROT - Quaternion Algebra
===============================================================================

Quaternion implementation for composing rotations, rotating vectors, and
converting to rotation matrices.

Convention
----------
We use the scalar-first convention:

    q = [q_w, q_x, q_y, q_z] = q_w + q_x*i + q_y*j + q_z*k

where q_w is the scalar (real) part and [q_x, q_y, q_z] is the vector
(imaginary) part, following Hamilton's original formulation.

A unit quaternion rotates a vector v through the sandwich product

    v' = q * v * q_conjugate

where v is embedded as a pure quaternion (v_w = 0).

Unit norm
---------
A plain Quaternion does NOT enforce |q| = 1. Callers normalize before
treating it as a rotation, or use UnitQuaternion, which normalizes on
construction and is what the matrix converter returns.

Mutation
--------
Every operation returns a new object except normalize(), which rescales
the receiver in place.

References
----------
    [1] Markley & Crassidis, "Fundamentals of Spacecraft Attitude
        Determination and Control", Springer, 2014.
    [2] Kuipers, "Quaternions and Rotation Sequences", Princeton, 1999.
    [3] Shoemake, "Uniform Random Rotations", Graphics Gems III, 1992.

===============================================================================
"""

import logging
from typing import Iterator, Optional, Union

import numpy as np

from quatrot.constants import FLOAT, IDENTITY_COMPONENTS, QUATERNION_SIZE
from quatrot.exceptions import DegenerateNormError
from quatrot.tolerance import approx_equal
from quatrot.vector import Vector3, stable_norm, unit_direction

logger = logging.getLogger(__name__)


class Quaternion:
    """
    Quaternion q = w + x*i + y*j + z*k.

    Represents a rotation when (and only when) its norm is 1. The identity
    rotation is [1, 0, 0, 0].

    Attributes
    ----------
    w : float
        Scalar (real) component of the quaternion.
    x : float
        First imaginary component (i-axis).
    y : float
        Second imaginary component (j-axis).
    z : float
        Third imaginary component (k-axis).

    Examples
    --------
    >>> q = Quaternion(0.5, 0.5, 0.5, 0.5)   # 120 deg about [1, 1, 1]
    >>> q.rotate(Vector3(1.0, 2.0, 3.0))
    Vector3(x=+3.00000000, y=+1.00000000, z=+2.00000000)
    """

    __slots__ = ('_q',)

    def __init__(self, w: float, x: float, y: float, z: float) -> None:
        """
        Initialize a quaternion with scalar-first convention.

        Parameters
        ----------
        w : float
            Scalar part (cos(theta/2) for a rotation by angle theta).
        x, y, z : float
            Vector part.
        """
        self._q = np.array([w, x, y, z], dtype=FLOAT)

    # =========================================================================
    # PROPERTIES - Read access to quaternion components
    # =========================================================================

    @property
    def w(self) -> float:
        """Scalar (real) part of the quaternion."""
        return float(self._q[0])

    @property
    def x(self) -> float:
        """First imaginary component (i-axis)."""
        return float(self._q[1])

    @property
    def y(self) -> float:
        """Second imaginary component (j-axis)."""
        return float(self._q[2])

    @property
    def z(self) -> float:
        """Third imaginary component (k-axis)."""
        return float(self._q[3])

    @property
    def scalar(self) -> float:
        """Scalar part of the quaternion (alias for w)."""
        return self.w

    @property
    def components(self) -> np.ndarray:
        """Copy of the quaternion as a 4-element array [w, x, y, z]."""
        return self._q.copy()

    def vector_part(self) -> Vector3:
        """
        Vector (imaginary) part as a Vector3.

        Applied to the result of a sandwich product q * v * q*, this extracts
        the rotated vector.
        """
        return Vector3(self.x, self.y, self.z)

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        if dtype is None:
            return self._q.copy()
        return self._q.astype(dtype)

    def __iter__(self) -> Iterator[float]:
        return iter((self.w, self.x, self.y, self.z))

    # =========================================================================
    # FACTORY METHODS
    # =========================================================================

    @staticmethod
    def identity() -> 'UnitQuaternion':
        """
        Create the identity quaternion [1, 0, 0, 0].

        The identity quaternion represents zero rotation. It is the
        multiplicative identity element: q * identity = q for any q.
        """
        return UnitQuaternion(*IDENTITY_COMPONENTS)

    @classmethod
    def from_array(cls, arr) -> 'Quaternion':
        """Build from any 4-element array-like in [w, x, y, z] order."""
        arr = np.asarray(arr, dtype=FLOAT).reshape(-1)
        if arr.size != QUATERNION_SIZE:
            raise ValueError(f"Quaternion needs 4 components, got {arr.size}")
        return cls(arr[0], arr[1], arr[2], arr[3])

    @staticmethod
    def from_rotation_matrix(matrix) -> 'UnitQuaternion':
        """
        Recover the unit quaternion of a 3x3 rotation matrix.

        See quatrot.conversions.quaternion_from_rotation_matrix.
        """
        from quatrot.conversions import quaternion_from_rotation_matrix
        return quaternion_from_rotation_matrix(matrix)

    @staticmethod
    def random(rng: Optional[np.random.Generator] = None) -> 'UnitQuaternion':
        """
        Generate a uniformly random unit quaternion.

        Uses the subgroup algorithm (Shoemake, 1992) to produce a quaternion
        uniformly distributed over SO(3). Simply normalizing a random
        4-vector does NOT produce a uniform rotation distribution.

        Parameters
        ----------
        rng : np.random.Generator, optional
            Source of randomness. Pass a seeded generator for reproducible
            results; a fresh default generator is used otherwise.
        """
        if rng is None:
            rng = np.random.default_rng()
        u1, u2, u3 = rng.random(3)

        sqrt_u1 = np.sqrt(u1)
        sqrt_1_minus_u1 = np.sqrt(1.0 - u1)

        w = sqrt_1_minus_u1 * np.sin(2.0 * np.pi * u2)
        x = sqrt_1_minus_u1 * np.cos(2.0 * np.pi * u2)
        y = sqrt_u1 * np.sin(2.0 * np.pi * u3)
        z = sqrt_u1 * np.cos(2.0 * np.pi * u3)

        return UnitQuaternion(w, x, y, z)

    # =========================================================================
    # QUATERNION ARITHMETIC
    # =========================================================================

    def multiply(self, other: 'Quaternion') -> 'Quaternion':
        """
        Multiply this quaternion by another (Hamilton product).

        Quaternion multiplication is NOT commutative: q1 * q2 != q2 * q1
        in general. The product q1 * q2 rotates a vector first by q2 and
        then by q1.

        The Hamilton product formula is:

            (a1 + b1*i + c1*j + d1*k) * (a2 + b2*i + c2*j + d2*k) =

            (a1*a2 - b1*b2 - c1*c2 - d1*d2) +
            (a1*b2 + b1*a2 + c1*d2 - d1*c2) i +
            (a1*c2 - b1*d2 + c1*a2 + d1*b2) j +
            (a1*d2 + b1*c2 - c1*b2 + d1*a2) k

        Parameters
        ----------
        other : Quaternion
            The right-hand quaternion in the product.

        Returns
        -------
        Quaternion
            The Hamilton product self * other (not normalized).
        """
        a1, b1, c1, d1 = self._q
        a2, b2, c2, d2 = other._q

        w = a1 * a2 - b1 * b2 - c1 * c2 - d1 * d2
        x = a1 * b2 + b1 * a2 + c1 * d2 - d1 * c2
        y = a1 * c2 - b1 * d2 + c1 * a2 + d1 * b2
        z = a1 * d2 + b1 * c2 - c1 * b2 + d1 * a2

        return Quaternion(w, x, y, z)

    def scale(self, s: float) -> 'Quaternion':
        """Component-wise scaling by s. The result is generally not unit."""
        return Quaternion.from_array(self._q * float(s))

    def conjugate(self) -> 'Quaternion':
        """
        Return the quaternion conjugate.

        For q = [w, x, y, z], the conjugate is q* = [w, -x, -y, -z].
        For unit quaternions, the conjugate equals the inverse and represents
        the reverse rotation.
        """
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def norm(self) -> float:
        """Euclidean norm sqrt(w^2 + x^2 + y^2 + z^2)."""
        return stable_norm(self._q)

    def normalize(self) -> None:
        """
        Rescale this quaternion to unit magnitude in place.

        Raises
        ------
        DegenerateNormError
            If the quaternion is [0, 0, 0, 0]. It is left unchanged.
        """
        unit = unit_direction(self._q)
        if unit is None:
            logger.debug("Refusing to normalize zero quaternion")
            raise DegenerateNormError(
                "Cannot normalize a zero-magnitude quaternion"
            )
        self._q = unit

    def normalized(self) -> 'UnitQuaternion':
        """Return a unit-norm copy; same zero-norm policy as normalize()."""
        return UnitQuaternion(self.w, self.x, self.y, self.z)

    def approx_equals(self, other: 'Quaternion', epsilon: float) -> bool:
        """
        Component-wise approximate equality.

        Each of the four absolute differences must be strictly below
        epsilon. This does NOT identify q with -q; use
        quatrot.tolerance.approx_equal_up_to_sign for rotation equality.
        """
        return approx_equal(self._q, other._q, epsilon)

    # =========================================================================
    # ROTATION OPERATIONS
    # =========================================================================

    def rotate(self, v: Vector3) -> Vector3:
        """
        Rotate a 3D vector by this quaternion.

        Equivalent to the sandwich product

            v' = q * v_pure * q^-1

        but evaluated without forming the quaternion products:

            v' = v + (2/m) * (r x (s*v + r x v))

        where r is the vector part, s the scalar part and m = |q|^2.
        Dividing by m makes the formula exact for any non-zero quaternion,
        so a slightly denormalized q still yields a pure rotation.

        Parameters
        ----------
        v : Vector3
            Vector to rotate.

        Returns
        -------
        Vector3
            Rotated vector.

        Raises
        ------
        DegenerateNormError
            If this is the zero quaternion.
        """
        # The formula is invariant to scaling q, so work on q / max|q_i| to
        # keep m away from underflow and overflow.
        peak = float(np.abs(self._q).max())
        if peak == 0.0:
            raise DegenerateNormError("Cannot rotate by a zero quaternion")

        s, rx, ry, rz = self._q / peak
        m = s * s + rx * rx + ry * ry + rz * rz
        r = Vector3(rx, ry, rz)
        t = v.scale(s).add(r.cross(v))
        return v.add(r.cross(t).scale(2.0 / m))

    def to_rotation_matrix(self) -> np.ndarray:
        """
        Convert to a 3x3 rotation matrix.

        The elements of R in terms of quaternion components are:

            R = | 1-2(y^2+z^2)    2(xy-wz)      2(xz+wy)   |
                | 2(xy+wz)      1-2(x^2+z^2)    2(yz-wx)   |
                | 2(xz-wy)      2(yz+wx)      1-2(x^2+y^2) |

        The quaternion must already be normalized; no normalization is
        done here.

        Returns
        -------
        np.ndarray
            3x3 rotation matrix such that R @ v == q.rotate(v).

        Notes
        -----
        Derived by expanding the sandwich product v' = q * v * q* and
        collecting terms into matrix form. See Markley & Crassidis (2014),
        Eq. 2.90.
        """
        w, x, y, z = self._q

        # Pre-compute products that appear multiple times
        xx = x * x
        yy = y * y
        zz = z * z
        xy = x * y
        xz = x * z
        yz = y * z
        wx = w * x
        wy = w * y
        wz = w * z

        return np.array([
            [1.0 - 2.0 * (yy + zz),  2.0 * (xy - wz),        2.0 * (xz + wy)],
            [2.0 * (xy + wz),         1.0 - 2.0 * (xx + zz),  2.0 * (yz - wx)],
            [2.0 * (xz - wy),         2.0 * (yz + wx),         1.0 - 2.0 * (xx + yy)]
        ], dtype=FLOAT)

    # =========================================================================
    # OPERATOR OVERLOADS
    # =========================================================================

    def __mul__(self, other: Union['Quaternion', float, int]) -> 'Quaternion':
        """
        Multiplication operator.

        - Quaternion * Quaternion -> Hamilton product (rotation composition)
        - Quaternion * scalar -> component-wise scaling
        """
        if isinstance(other, Quaternion):
            return self.multiply(other)
        elif isinstance(other, (int, float, np.floating, np.integer)):
            return self.scale(other)
        return NotImplemented

    def __rmul__(self, other: Union[float, int]) -> 'Quaternion':
        """Right-multiplication by a scalar: scalar * Quaternion."""
        if isinstance(other, (int, float, np.floating, np.integer)):
            return self.scale(other)
        return NotImplemented

    def __neg__(self) -> 'Quaternion':
        """
        Negate all components.

        Note: -q represents the same rotation as q.
        """
        return Quaternion(-self.w, -self.x, -self.y, -self.z)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(w={self.w:+.8f}, x={self.x:+.8f}, "
                f"y={self.y:+.8f}, z={self.z:+.8f})")


class UnitQuaternion(Quaternion):
    """
    Quaternion validated to unit norm at construction.

    The components passed in are normalized, so any non-zero input is
    accepted and the zero quaternion raises DegenerateNormError. Operations
    that keep the result on the unit sphere (conjugate, negation) return a
    UnitQuaternion; those that may leave it (multiply, scale) return a plain
    Quaternion.
    """

    __slots__ = ()

    def __init__(self, w: float, x: float, y: float, z: float) -> None:
        super().__init__(w, x, y, z)
        self.normalize()

    def conjugate(self) -> 'UnitQuaternion':
        """Conjugate, which for a unit quaternion is also the inverse."""
        return UnitQuaternion(self.w, -self.x, -self.y, -self.z)

    def inverse(self) -> 'UnitQuaternion':
        return self.conjugate()

    def __neg__(self) -> 'UnitQuaternion':
        return UnitQuaternion(-self.w, -self.x, -self.y, -self.z)
