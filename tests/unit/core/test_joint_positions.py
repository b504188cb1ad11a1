"""
Unit tests for robot and external joint positions.
"""

import math

import pytest

from rapidkin.core.exceptions import (
    AxisMismatchError,
    JointDivisionByZeroError,
    JointPositionError,
)
from rapidkin.core.joint_positions import (
    UNDEFINED_AXIS,
    ExternalJointPosition,
    RobotJointPosition,
    axis_index,
)
from rapidkin.core.rapid import Scope, VariableType


class TestAxisIndex:
    """Tests for axis key resolution."""

    def test_numbers_and_letters(self):
        """Test that indexes and letters resolve to the same axis."""
        assert axis_index(0) == 0
        assert axis_index(5) == 5
        assert axis_index("a") == 0
        assert axis_index("F") == 5

    @pytest.mark.parametrize("key", [6, -1, "g", "ab", 1.0, True])
    def test_invalid_keys(self, key):
        """Test that unknown keys raise IndexError."""
        with pytest.raises(IndexError):
            axis_index(key)


class TestRobotJointPosition:
    """Tests for RobotJointPosition."""

    def test_defaults_to_zero(self):
        """Test that missing values default to 0."""
        position = RobotJointPosition(10, 20)
        assert position.values == [10.0, 20.0, 0.0, 0.0, 0.0, 0.0]

    def test_from_iterable(self):
        """Test construction from a single sequence."""
        position = RobotJointPosition([1, 2, 3, 4, 5, 6])
        assert list(position) == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]

    def test_too_many_values(self):
        """Test that more than six values are rejected."""
        with pytest.raises(JointPositionError):
            RobotJointPosition(1, 2, 3, 4, 5, 6, 7)

    def test_nan_is_coerced(self):
        """Test that NaN becomes the default value on construction and assignment."""
        position = RobotJointPosition(math.nan, 1.0)
        assert position[0] == 0.0
        position[1] = float("nan")
        assert position[1] == 0.0

    def test_letter_keys_rejected(self):
        """Test that robot axes cannot be addressed by letter."""
        with pytest.raises(IndexError):
            RobotJointPosition()["a"]

    def test_arithmetic(self):
        """Test element-wise and scalar arithmetic."""
        a = RobotJointPosition(10, 20, 30, 40, 50, 60)
        b = RobotJointPosition(1, 2, 3, 4, 5, 6)

        assert (a + b).values == [11.0, 22.0, 33.0, 44.0, 55.0, 66.0]
        assert (a - b).values == [9.0, 18.0, 27.0, 36.0, 45.0, 54.0]
        assert (a * 2).values == [20.0, 40.0, 60.0, 80.0, 100.0, 120.0]
        assert (2 * b).values == [2.0, 4.0, 6.0, 8.0, 10.0, 12.0]
        assert (a / b).values == [10.0] * 6
        assert (-b).values == [-1.0, -2.0, -3.0, -4.0, -5.0, -6.0]
        assert (100 - a).values == [90.0, 80.0, 70.0, 60.0, 50.0, 40.0]

    def test_division_by_zero_element(self):
        """Test that dividing by a zero element raises and names the axis."""
        a = RobotJointPosition(10, 20, 30, 40, 50, 60)
        b = RobotJointPosition(1, 2, 0, 4, 5, 6)

        with pytest.raises(JointDivisionByZeroError) as excinfo:
            a / b
        assert excinfo.value.axis == 2

    def test_division_by_zero_scalar(self):
        """Test that scalar division by zero raises a ZeroDivisionError subclass."""
        with pytest.raises(ZeroDivisionError):
            RobotJointPosition(1, 2, 3) / 0

    def test_norm_and_sum(self):
        """Test reductions."""
        position = RobotJointPosition(3, 4)
        assert position.sum() == 7.0
        assert position.norm_sq() == 25.0
        assert position.norm() == 5.0

    def test_copy_is_independent(self):
        """Test that copies do not share values."""
        position = RobotJointPosition(1, 2, 3, name="jHome")
        duplicate = position.copy()
        duplicate[0] = 99.0

        assert position[0] == 1.0
        assert duplicate.name == "jHome"

    def test_reset(self):
        """Test that reset restores the defaults."""
        position = RobotJointPosition(1, 2, 3, 4, 5, 6)
        position.reset()
        assert position.values == [0.0] * 6

    def test_equality_and_unhashable(self):
        """Test value equality; positions are mutable and unhashable."""
        assert RobotJointPosition(1, 2) == RobotJointPosition(1, 2)
        assert RobotJointPosition(1, 2) != RobotJointPosition(2, 1)
        with pytest.raises(TypeError):
            hash(RobotJointPosition())

    def test_to_rapid(self):
        """Test the RAPID literal."""
        position = RobotJointPosition(0, 0, 0, 0, 45, 0)
        assert position.to_rapid() == "[0, 0, 0, 0, 45, 0]"
        assert RobotJointPosition(1.234, -0.001).to_rapid() == "[1.23, 0, 0, 0, 0, 0]"

    def test_to_rapid_declaration(self):
        """Test declaration lines for the different scopes."""
        position = RobotJointPosition(0, 0, 0, 0, 45, 0, name="jHome")
        assert position.to_rapid_declaration() == (
            "VAR robjoint jHome := [0, 0, 0, 0, 45, 0];"
        )

        position.scope = Scope.LOCAL
        position.variable_type = VariableType.CONST
        assert position.to_rapid_declaration().startswith("LOCAL CONST robjoint jHome")

    def test_unnamed_declaration_is_empty(self):
        """Test that unnamed values produce no declaration."""
        assert RobotJointPosition().to_rapid_declaration() == ""


class TestExternalJointPosition:
    """Tests for ExternalJointPosition."""

    def test_defaults_to_undefined(self):
        """Test that unset axes are unconnected."""
        position = ExternalJointPosition(500)
        assert position["a"] == 500.0
        assert position["b"] is None
        assert position.defined_axes() == [0]

    def test_sentinel_is_undefined(self):
        """Test that the 9E9 sentinel and NaN mean unconnected."""
        position = ExternalJointPosition(UNDEFINED_AXIS, math.nan, 10)
        assert not position.is_defined(0)
        assert not position.is_defined("b")
        assert position.is_defined("c")

    def test_letter_assignment(self):
        """Test assigning by axis letter."""
        position = ExternalJointPosition()
        position["C"] = 90
        assert position[2] == 90.0

    def test_value_or(self):
        """Test the fallback for unconnected axes."""
        position = ExternalJointPosition(5)
        assert position.value_or("a", 0.0) == 5.0
        assert position.value_or("b", -1.0) == -1.0

    def test_undefined_propagates(self):
        """Test that two undefined values combine to undefined."""
        a = ExternalJointPosition(100)
        b = ExternalJointPosition(50)

        total = a + b
        assert total["a"] == 150.0
        assert all(total[i] is None for i in range(1, 6))

    def test_mismatch_raises(self):
        """Test that defined plus undefined raises AxisMismatchError."""
        a = ExternalJointPosition(100, 200)
        b = ExternalJointPosition(50)

        with pytest.raises(AxisMismatchError) as excinfo:
            a + b
        assert excinfo.value.axis == 1

    def test_scalar_skips_undefined(self):
        """Test that scalar arithmetic leaves unconnected axes alone."""
        position = ExternalJointPosition(100) * 2
        assert position["a"] == 200.0
        assert position["b"] is None

    def test_computed_sentinel_value_stays_defined(self):
        """Test that arithmetic resulting in 9E9 keeps the axis defined."""
        doubled = ExternalJointPosition(4.5e9) * 2
        assert doubled["a"] == UNDEFINED_AXIS
        assert doubled.is_defined("a")

        total = ExternalJointPosition(4e9) + ExternalJointPosition(5e9)
        assert total.is_defined("a")
        assert total.copy().is_defined("a")

    def test_mixed_kinds_not_supported(self):
        """Test that robot and external positions do not combine."""
        with pytest.raises(TypeError):
            RobotJointPosition() + ExternalJointPosition()

    def test_to_rapid_uses_sentinel(self):
        """Test that unconnected axes render as 9E9."""
        assert ExternalJointPosition(500).to_rapid() == "[500, 9E9, 9E9, 9E9, 9E9, 9E9]"

    def test_to_list_uses_sentinel(self):
        """Test that the numeric sentinel appears only at the boundary."""
        assert ExternalJointPosition(1).to_list() == [1.0] + [UNDEFINED_AXIS] * 5

    def test_norm_ignores_undefined(self):
        """Test that unconnected axes are left out of the norm."""
        assert ExternalJointPosition(3, 4).norm() == 5.0


class TestJointPositionSerialization:
    """Tests for dict serialization."""

    def test_dict_roundtrip(self):
        """Test that values and metadata survive a dict roundtrip."""
        position = ExternalJointPosition(
            250, name="eTrack", scope=Scope.TASK, variable_type=VariableType.PERS
        )
        restored = ExternalJointPosition.from_dict(position.to_dict())

        assert restored == position
        assert restored.name == "eTrack"
        assert restored.scope == Scope.TASK
        assert restored.variable_type == VariableType.PERS

    def test_legacy_payload_ignores_scope(self):
        """Test that payloads before version 2000000 use the default metadata."""
        data = {"version": 1_000_000, "name": "j1", "scope": 2, "variable_type": 2,
                "values": [1, 2, 3, 4, 5, 6]}
        restored = RobotJointPosition.from_dict(data)

        assert restored.values == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
        assert restored.scope == Scope.GLOBAL
        assert restored.variable_type == VariableType.VAR
