"""
Integration tests for the robot presets shipped in config/.
"""

from pathlib import Path

import pytest

from rapidkin.core.config import ConfigManager
from rapidkin.core.declarations import ConfigurationData, RobotTarget
from rapidkin.core.joint_positions import ExternalJointPosition, RobotJointPosition
from rapidkin.core.robot import RobotLoader, RobotState

CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"

pytestmark = pytest.mark.integration


@pytest.fixture(scope="module")
def config_manager():
    """Config manager over the shipped presets."""
    return ConfigManager(CONFIG_DIR)


@pytest.mark.parametrize("name", ["irb1300_11_090", "irb6700_245_300"])
def test_preset_is_valid(config_manager, name):
    """Test that every preset builds a valid robot."""
    robot = RobotLoader.load_from_config(config_manager.get_robot(name), base_dir=CONFIG_DIR)

    assert robot.state is RobotState.VALID
    assert robot.kinematic_parameters.to_dict() == pytest.approx(
        config_manager.get_robot(name).kinematics.model_dump(), abs=1e-9
    )


def test_track_roundtrip(config_manager):
    """Test solving a TCP posed on the track back to its joint values."""
    robot = RobotLoader.load_from_config(config_manager.get_robot("irb6700_245_300"))
    joints = RobotJointPosition(15, 10, -20, 30, 45, -60)
    external = ExternalJointPosition(1500)

    tcp = robot.forward_kinematics.calculate(joints, external).tcp_frame
    assert robot.forward_kinematics.in_limits

    solver = robot.inverse_kinematics
    solver.calculate(RobotTarget(tcp, external_joint_position=external))
    result = solver.calculate_closest_robot_joint_position(joints)

    assert result.robot_joint_position.to_list() == pytest.approx(joints.to_list(), abs=1e-6)
    assert result.external_joint_position["a"] == pytest.approx(1500.0)
    assert result.in_limits

    configuration = ConfigurationData.from_joint_position(joints, result.selected_solution)
    again = solver.calculate(RobotTarget(tcp, configuration, external))
    assert again.robot_joint_position.to_list() == pytest.approx(joints.to_list(), abs=1e-6)


def test_tool_declaration(config_manager):
    """Test the tooldata of the welding gun preset."""
    robot = RobotLoader.load_from_config(config_manager.get_robot("irb6700_245_300"))

    assert robot.tool.to_rapid_declaration() == (
        "PERS tooldata tWeldGun := "
        "[TRUE, [[0, 0, 400], [1, 0, 0, 0]], [8.5, [0, 0, 150], [1, 0, 0, 0], 0, 0, 0]];"
    )
