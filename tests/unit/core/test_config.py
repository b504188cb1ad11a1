"""
Unit tests for configuration management.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from rapidkin.core.config import (
    ConfigManager,
    ExternalAxisConfig,
    FrameConfig,
    KinematicsConfig,
    RobotConfig,
)
from rapidkin.core.exceptions import ConfigurationError
from rapidkin.motion.external_axes import create_external_axis

KINEMATICS = {"a1": 50, "a2": -40, "c1": 544, "c2": 425, "c3": 425, "c4": 90}


class TestFrameConfig:
    """Tests for FrameConfig model."""

    def test_defaults_to_world_xy(self):
        """Test the default frame."""
        frame = FrameConfig().to_frame()
        assert list(frame.point) == [0.0, 0.0, 0.0]
        assert list(frame.zaxis) == pytest.approx([0.0, 0.0, 1.0])

    def test_three_components(self):
        """Test that vectors need exactly three components."""
        with pytest.raises(ValidationError):
            FrameConfig(point=[0.0, 0.0])


class TestRobotConfig:
    """Tests for RobotConfig model."""

    def test_create_minimal(self):
        """Test creating config with minimal fields."""
        config = RobotConfig(name="Test", kinematics=KINEMATICS, joint_limits=[(-180, 180)] * 6)
        assert config.manufacturer == "ABB"
        assert config.kinematics.a3 == 0.0
        assert config.kinematics.b == 0.0
        assert config.tool is None
        assert config.external_axes == []

    def test_six_joint_limits(self):
        """Test that exactly six joint limits are required."""
        with pytest.raises(ValidationError, match="expected 6 joint limits"):
            RobotConfig(name="Test", kinematics=KINEMATICS, joint_limits=[(-180, 180)] * 5)

    def test_seven_meshes(self):
        """Test that meshes are either absent or one per link plus base."""
        with pytest.raises(ValidationError, match="expected 7 meshes"):
            RobotConfig(
                name="Test",
                kinematics=KINEMATICS,
                joint_limits=[(-180, 180)] * 6,
                mesh_paths=["base.stl"],
            )

    def test_kinematics_required(self):
        """Test that kinematic parameters are mandatory."""
        with pytest.raises(ValidationError):
            KinematicsConfig(a1=50, a2=-40)


class TestExternalAxisConfig:
    """Tests for ExternalAxisConfig model."""

    def test_axis_logic_as_text(self):
        """Test that numeric axis logic values are accepted."""
        config = ExternalAxisConfig(
            name="t", type="linear", axis_direction=[1, 0, 0], limits=(0, 100), axis_logic=2
        )
        assert config.axis_logic == "2"

    def test_axis_required(self):
        """Test that an axis frame or direction is required."""
        with pytest.raises(ValidationError, match="axis_frame or axis_direction"):
            ExternalAxisConfig(name="t", type="linear", limits=(0, 100))

    def test_type_checked(self):
        """Test that only linear and rotational axes exist."""
        with pytest.raises(ValidationError):
            ExternalAxisConfig(name="t", type="spherical", axis_direction=[0, 0, 1], limits=(0, 1))

    @pytest.mark.parametrize("axis_type, moves_robot", [("linear", True), ("rotational", False)])
    def test_moves_robot_default(self, axis_type, moves_robot):
        """Test that an unset moves_robot takes the default of the axis type."""
        config = ExternalAxisConfig(
            name="t", type=axis_type, axis_direction=[0, 0, 1], limits=(0, 100), axis_logic="a"
        )
        assert config.moves_robot is None
        assert create_external_axis(config).moves_robot is moves_robot


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_init_missing_dir(self):
        """Test initialization with a missing directory."""
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigManager(config_dir=Path("/nonexistent/path"))

    def test_list_robots(self, sample_config_dir):
        """Test listing robot configurations."""
        config = ConfigManager(config_dir=sample_config_dir)
        assert config.list_robots() == ["test_robot", "test_track"]

    def test_get_robot(self, sample_config_dir):
        """Test merging the YAML sections into a robot config."""
        config = ConfigManager(config_dir=sample_config_dir)
        robot = config.get_robot("test_track")

        assert robot.name == "Test Robot On Track"
        assert robot.kinematics.c3 == 425.0
        assert robot.joint_limits[1] == (-100.0, 130.0)
        assert robot.tool.name == "tTest"
        assert robot.external_axes[0].axis_logic == "a"
        assert robot.external_axes[0].moves_robot

    def test_get_unknown_robot(self, sample_config_dir):
        """Test that unknown robots list the available ones."""
        config = ConfigManager(config_dir=sample_config_dir)
        with pytest.raises(ConfigurationError) as excinfo:
            config.get_robot("missing")
        assert excinfo.value.details["available"] == ["test_robot", "test_track"]

    def test_invalid_yaml(self, sample_config_dir):
        """Test that broken files raise ConfigurationError with details."""
        (sample_config_dir / "robots" / "broken.yaml").write_text("robot: [unclosed\n")
        config = ConfigManager(config_dir=sample_config_dir)

        with pytest.raises(ConfigurationError, match="broken.yaml") as excinfo:
            config.load()
        assert "error" in excinfo.value.details

    def test_invalid_model(self, sample_config_dir):
        """Test that schema violations raise ConfigurationError."""
        (sample_config_dir / "robots" / "short.yaml").write_text(
            "robot:\n  name: Short\nkinematics:\n  a1: 1\n"
        )
        config = ConfigManager(config_dir=sample_config_dir)
        with pytest.raises(ConfigurationError):
            config.list_robots()

    def test_empty_config_dir(self, temp_dir):
        """Test a directory without robots."""
        config = ConfigManager(config_dir=temp_dir)
        assert config.list_robots() == []
