"""Tests for Vec3 class."""

import pytest
import math
import numpy as np

from voxforge.vec3 import Vec3, Point3
from voxforge.quaternion import Quaternion


class TestVec3Creation:
    """Test Vec3 construction."""

    def test_default_constructor(self):
        v = Vec3()
        assert v.x == 0.0
        assert v.y == 0.0
        assert v.z == 0.0

    def test_value_constructor(self):
        v = Vec3(1.0, 2.0, 3.0)
        assert v.x == 1.0
        assert v.y == 2.0
        assert v.z == 3.0

    def test_from_array(self):
        arr = np.array([1.0, 2.0, 3.0])
        v = Vec3.from_array(arr)
        assert v.x == 1.0
        assert v.y == 2.0
        assert v.z == 3.0

    def test_from_array_copies(self):
        arr = np.array([1.0, 2.0, 3.0])
        v = Vec3.from_array(arr)
        arr[0] = 99.0
        assert v.x == 1.0

    def test_point_alias(self):
        assert Point3 is Vec3


class TestVec3Immutability:
    """Vectors behave as values."""

    def test_no_attribute_assignment(self):
        v = Vec3(1, 2, 3)
        with pytest.raises(AttributeError):
            v.x = 5

    def test_underlying_array_read_only(self):
        v = Vec3(1, 2, 3)
        with pytest.raises(ValueError):
            v._data[0] = 5

    def test_to_array_is_a_copy(self):
        v = Vec3(1, 2, 3)
        arr = v.to_array()
        arr[0] = 42
        assert v.x == 1

    def test_operations_leave_operands_untouched(self):
        a = Vec3(1, 2, 3)
        b = Vec3(4, 5, 6)
        _ = a + b
        _ = a.normalize()
        _ = a.rotate(Quaternion.from_axis_angle(1.0, Vec3(0, 0, 1)))
        assert a == Vec3(1, 2, 3)
        assert b == Vec3(4, 5, 6)


class TestVec3Arithmetic:
    """Test Vec3 arithmetic operations."""

    def test_negation(self):
        neg = -Vec3(1, 2, 3)
        assert neg.x == -1
        assert neg.y == -2
        assert neg.z == -3

    def test_addition(self):
        result = Vec3(1, 2, 3) + Vec3(4, 5, 6)
        assert result == Vec3(5, 7, 9)

    def test_subtraction(self):
        result = Vec3(4, 5, 6) - Vec3(1, 2, 3)
        assert result == Vec3(3, 3, 3)

    def test_scalar_multiplication(self):
        assert Vec3(1, 2, 3) * 2 == Vec3(2, 4, 6)
        assert 2 * Vec3(1, 2, 3) == Vec3(2, 4, 6)

    def test_componentwise_multiplication(self):
        assert Vec3(1, 2, 3) * Vec3(2, 3, 4) == Vec3(2, 6, 12)

    def test_division(self):
        assert Vec3(2, 4, 6) / 2 == Vec3(1, 2, 3)
        assert Vec3(2, 4, 6) / Vec3(2, 4, 3) == Vec3(1, 1, 2)

    def test_indexing_and_iteration(self):
        v = Vec3(7, 8, 9)
        assert v[0] == 7 and v[1] == 8 and v[2] == 9
        assert list(v) == [7, 8, 9]


class TestVec3VectorOps:
    """Test Vec3 vector operations."""

    def test_length(self):
        assert Vec3(3, 4, 0).length() == 5.0

    def test_length_squared(self):
        assert Vec3(3, 4, 0).length_squared() == 25.0

    def test_normalize(self):
        n = Vec3(3, 4, 0).normalize()
        assert abs(n.length() - 1.0) < 1e-10

    def test_normalize_is_idempotent(self):
        n = Vec3(1, -2, 5).normalize()
        nn = n.normalize()
        assert np.allclose(n.to_array(), nn.to_array(), atol=1e-12)

    def test_normalize_zero_vector(self):
        assert Vec3(0, 0, 0).normalize().length() == 0.0

    def test_dot_product(self):
        assert Vec3(1, 0, 0).dot(Vec3(0, 1, 0)) == 0.0
        assert Vec3(1, 2, 3).dot(Vec3(4, 5, 6)) == 32.0

    def test_cross_product(self):
        assert Vec3(1, 0, 0).cross(Vec3(0, 1, 0)) == Vec3(0, 0, 1)

    def test_reflect(self):
        incoming = Vec3(1, -1, 0).normalize()
        reflected = incoming.reflect(Vec3(0, 1, 0))
        expected = Vec3(1, 1, 0).normalize()
        assert abs(reflected.x - expected.x) < 1e-10
        assert abs(reflected.y - expected.y) < 1e-10

    def test_near_zero(self):
        assert Vec3(1e-10, 1e-10, 1e-10).near_zero()
        assert not Vec3(1, 0, 0).near_zero()


class TestVec3Rotate:
    """Test rotation by quaternions."""

    def test_quarter_turn_about_z(self):
        q = Quaternion.from_axis_angle(math.pi / 2, Vec3(0, 0, 1))
        v = Vec3(1, 0, 0).rotate(q)
        assert abs(v.x) < 1e-12
        assert abs(v.y - 1.0) < 1e-12
        assert abs(v.z) < 1e-12

    def test_unnormalized_quaternion_is_normalized_first(self):
        q = Quaternion.from_axis_angle(math.pi / 2, Vec3(0, 0, 1))
        scaled = Quaternion(q.w * 3, q.x * 3, q.y * 3, q.z * 3)
        assert Vec3(1, 0, 0).rotate(scaled) == Vec3(1, 0, 0).rotate(q)

    def test_degenerate_quaternion_is_no_op(self):
        v = Vec3(1, 2, 3)
        assert v.rotate(Quaternion(0, 0, 0, 0)) == v
        assert v.rotate(Quaternion(1e-20, 0, 0, 0)) == v

    def test_identity_is_no_op(self):
        v = Vec3(1, 2, 3)
        assert v.rotate(Quaternion.IDENTITY) == v

    def test_rotation_preserves_length(self):
        q = Quaternion.from_axis_angle(0.7, Vec3(1, 2, 3))
        v = Vec3(-2, 0.5, 4)
        assert abs(v.rotate(q).length() - v.length()) < 1e-12
