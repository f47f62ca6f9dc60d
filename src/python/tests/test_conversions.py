"""
===============================================================================
QUATROT - Rotation Matrix Conversion Test Suite
===============================================================================
Tests for quaternion_from_rotation_matrix: one known matrix per branch,
branch selection and tie-breaking, quaternion -> matrix -> quaternion
round trips (compared up to sign), and cross-checks against SciPy.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy.spatial.transform import Rotation

from quatrot.conversions import (
    is_rotation_matrix, quaternion_from_rotation_matrix, select_branch
)
from quatrot.quaternion import Quaternion, UnitQuaternion
from quatrot.tolerance import approx_equal_up_to_sign


CONVERSION_TOL = 1e-6

# One rotation matrix per branch, with the quaternion it came from.
BRANCH_CASES = [
    (
        0,
        [[0.5461756, 0.81975061, 0.1723402],
         [0.63368737, -0.53888998, 0.55501163],
         [0.54784353, -0.193924, -0.81379417]],
        (0.219938314333263, -0.851301907985121, -0.426828005273729, -0.211494806705),
    ),
    (
        1,
        [[-0.78381123, 0.61936038, 0.04508521],
         [0.58609292, 0.76179912, -0.27596594],
         [-0.20526825, -0.18988108, -0.96010943]],
        (0.0668551704949506, 0.321908018212949, 0.936178371957253, -0.124401245443004),
    ),
    (
        2,
        [[-0.83800261, -0.16077859, 0.52144211],
         [0.52903087, -0.00522788, 0.84858648],
         [-0.1337085, 0.98697665, 0.08943782]],
        (0.24809641384963, 0.13945201421527, 0.660177420921586, 0.695102206924695),
    ),
    (
        3,
        [[0.45957249, -0.01894392, 0.88793821],
         [0.69007053, 0.63699394, -0.34357151],
         [-0.55910267, 0.770636, 0.30581753]],
        (0.774981282496085, 0.359430458639042, 0.466798652234362, 0.228719862398165),
    ),
]


@pytest.fixture
def rng():
    return np.random.default_rng(2024)


# =============================================================================
# Test: Known matrices, one per branch
# =============================================================================

class TestBranches:
    """Every conversion branch recovers its source quaternion."""

    @pytest.mark.parametrize("branch,matrix,expected", BRANCH_CASES)
    def test_branch_selected(self, branch, matrix, expected):
        assert select_branch(matrix) == branch

    @pytest.mark.parametrize("branch,matrix,expected", BRANCH_CASES)
    def test_known_quaternion(self, branch, matrix, expected):
        q = quaternion_from_rotation_matrix(np.array(matrix))
        target = Quaternion(*expected)
        assert q.approx_equals(target, CONVERSION_TOL) or \
            q.approx_equals(-target, CONVERSION_TOL)

    @pytest.mark.parametrize("branch,matrix,expected", BRANCH_CASES)
    def test_result_is_unit(self, branch, matrix, expected):
        q = quaternion_from_rotation_matrix(matrix)
        assert isinstance(q, UnitQuaternion)
        assert abs(q.norm() - 1.0) < 1e-14

    def test_identity_matrix(self):
        q = quaternion_from_rotation_matrix(np.eye(3))
        assert select_branch(np.eye(3)) == 3
        assert approx_equal_up_to_sign(q, [1.0, 0.0, 0.0, 0.0], 1e-15)

    @pytest.mark.parametrize("axis,branch", [
        ((1.0, 0.0, 0.0), 0),
        ((0.0, 1.0, 0.0), 1),
        ((0.0, 0.0, 1.0), 2),
    ])
    def test_half_turns(self, axis, branch):
        """180-degree rotations, where the trace-based formula breaks down."""
        q = Quaternion(0.0, *axis)
        matrix = q.to_rotation_matrix()
        assert select_branch(matrix) == branch
        assert approx_equal_up_to_sign(quaternion_from_rotation_matrix(matrix), q,
                                       1e-15)

    def test_tie_prefers_first_index(self):
        """Half turn about (1, 1, 0)/sqrt(2) ties M00 with M11: branch 0 wins."""
        s = np.sqrt(0.5)
        q = Quaternion(0.0, s, s, 0.0)
        matrix = q.to_rotation_matrix()
        assert matrix[0, 0] == matrix[1, 1]
        assert select_branch(matrix) == 0
        assert approx_equal_up_to_sign(quaternion_from_rotation_matrix(matrix), q,
                                       1e-12)

    def test_static_factory_delegates(self):
        _, matrix, expected = BRANCH_CASES[3]
        q = Quaternion.from_rotation_matrix(matrix)
        assert approx_equal_up_to_sign(q, expected, CONVERSION_TOL)


# =============================================================================
# Test: Round trips
# =============================================================================

class TestRoundTrip:
    """quaternion -> matrix -> quaternion recovers q up to sign."""

    def test_round_trip_random(self, rng):
        for _ in range(200):
            q = Quaternion.random(rng)
            recovered = quaternion_from_rotation_matrix(q.to_rotation_matrix())
            assert approx_equal_up_to_sign(recovered, q, CONVERSION_TOL)

    @pytest.mark.parametrize("components", [
        (1.0, 2.0, 3.0, 4.0),
        (-3.0, 0.0, 1.0, 2.0),
        (1e-9, 1.0, 0.0, 0.0),
        (1.0, 1e-9, 0.0, 0.0),
        (0.0, 0.0, 0.0, 1.0),
    ])
    def test_round_trip_parametrized(self, components):
        q = Quaternion(*components)
        q.normalize()
        recovered = Quaternion.from_rotation_matrix(q.to_rotation_matrix())
        assert approx_equal_up_to_sign(recovered, q, CONVERSION_TOL)

    def test_matrix_round_trip(self):
        """matrix -> quaternion -> matrix is exact up to rounding."""
        matrix = Rotation.from_rotvec([0.3, -1.2, 2.0]).as_matrix()
        q = quaternion_from_rotation_matrix(matrix)
        assert_allclose(q.to_rotation_matrix(), matrix, atol=1e-12)

    def test_matches_scipy(self, rng):
        for _ in range(20):
            matrix = Quaternion.random(rng).to_rotation_matrix()
            x, y, z, w = Rotation.from_matrix(matrix).as_quat()
            q = quaternion_from_rotation_matrix(matrix)
            assert approx_equal_up_to_sign(q, [w, x, y, z], 1e-12)


# =============================================================================
# Test: Input handling
# =============================================================================

class TestInput:

    @pytest.mark.parametrize("shape", [(2, 2), (3, 4), (9,), (4, 4)])
    def test_wrong_shape_raises(self, shape):
        with pytest.raises(ValueError):
            quaternion_from_rotation_matrix(np.zeros(shape))

    def test_accepts_nested_lists(self):
        q = quaternion_from_rotation_matrix([[1, 0, 0], [0, 1, 0], [0, 0, 1]])
        assert approx_equal_up_to_sign(q, [1.0, 0.0, 0.0, 0.0], 1e-15)


class TestIsRotationMatrix:

    def test_valid(self, rng):
        assert is_rotation_matrix(np.eye(3), 1e-9)
        assert is_rotation_matrix(Quaternion.random(rng).to_rotation_matrix(), 1e-9)

    @pytest.mark.parametrize("matrix", [
        2.0 * np.eye(3),
        np.diag([1.0, 1.0, -1.0]),
        np.ones((3, 3)),
        np.eye(2),
    ])
    def test_invalid(self, matrix):
        assert not is_rotation_matrix(matrix, 1e-6)

    def test_rounded_input_depends_on_tolerance(self):
        _, matrix, _ = BRANCH_CASES[0]
        assert is_rotation_matrix(matrix, 1e-6)
        assert not is_rotation_matrix(matrix, 1e-12)
