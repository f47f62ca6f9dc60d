"""
===============================================================================
QUATROT - Tolerance Utilities Test Suite
===============================================================================
Tests for approx_equal, approx_equal_up_to_sign, epsilon validation and the
first-maximum argmax used for branch selection.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest

from quatrot.quaternion import Quaternion
from quatrot.tolerance import (
    approx_equal, approx_equal_up_to_sign, argmax, check_epsilon
)
from quatrot.vector import Vector3


class TestApproxEqual:

    def test_quaternions_within_epsilon(self):
        q1 = Quaternion(1.0, 2.0, 3.0, 4.0)
        q2 = Quaternion(1.0 + 1e-5, 2.0, 3.0 - 1e-5, 4.0)
        assert approx_equal(q1, q2, 1e-4)
        assert q1.approx_equals(q2, 1e-4)
        assert not approx_equal(q1, q2, 1e-6)
        assert not q1.approx_equals(q2, 1e-6)

    def test_matrices(self):
        a = np.eye(3)
        b = np.eye(3) + 1e-9
        assert approx_equal(a, b, 1e-8)
        assert not approx_equal(a, b, 1e-10)

    def test_mixed_types(self):
        assert approx_equal(Vector3(1.0, 2.0, 3.0), [1.0, 2.0, 3.0], 1e-12)

    def test_shape_mismatch_raises(self):
        with pytest.raises(ValueError):
            approx_equal([1.0, 2.0, 3.0], [1.0, 2.0, 3.0, 4.0], 1e-6)

    def test_nan_never_equal(self):
        assert not approx_equal([float('nan')], [float('nan')], 1.0)


class TestUpToSign:

    def test_negated_quaternion_matches(self):
        q = Quaternion(0.5, -0.5, 0.5, -0.5)
        assert approx_equal_up_to_sign(q, -q, 1e-12)
        assert not q.approx_equals(-q, 1e-12)

    def test_different_rotation_does_not_match(self):
        assert not approx_equal_up_to_sign([1.0, 0.0, 0.0, 0.0],
                                           [0.0, 1.0, 0.0, 0.0], 1e-6)


class TestCheckEpsilon:

    @pytest.mark.parametrize("epsilon", [1e-12, 1e-7, 0.5, 3])
    def test_valid(self, epsilon):
        assert check_epsilon(epsilon) == float(epsilon)

    @pytest.mark.parametrize("epsilon", [0.0, -1e-6, float('inf'), float('nan')])
    def test_invalid(self, epsilon):
        with pytest.raises(ValueError):
            check_epsilon(epsilon)


class TestArgMax:
    """First-maximum argmax."""

    @pytest.mark.parametrize("values,expected", [
        ([], -1),
        ([1.0, 3.0, 2.0], 1),
        ([1.0, 2.0, 3.0], 2),
        ([1.0, 2.0, 2.0], 1),
        ([5.0], 0),
        ([-1.0, -1.0, -1.0, -1.0], 0),
        ([0.0, 0.0, 1.0, 1.0], 2),
    ])
    def test_argmax(self, values, expected):
        assert argmax(values) == expected

    def test_accepts_numpy(self):
        assert argmax(np.array([0.1, 0.7, 0.7, -2.0])) == 1
