"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import pytest
from compas.geometry import Frame

from rapidkin.core.kinematic_parameters import RobotKinematicParameters
from rapidkin.core.robot import Robot
from rapidkin.motion.external_axes import ExternalLinearAxis, ExternalRotationalAxis

IRB1300_PARAMETERS = RobotKinematicParameters(
    a1=50.0, a2=-40.0, a3=0.0, b=0.0, c1=544.0, c2=425.0, c3=425.0, c4=90.0
)
IRB1300_LIMITS = [
    (-180.0, 180.0),
    (-100.0, 130.0),
    (-210.0, 65.0),
    (-230.0, 230.0),
    (-130.0, 130.0),
    (-400.0, 400.0),
]

IRB6700_PARAMETERS = RobotKinematicParameters(
    a1=320.0, a2=-200.0, a3=0.0, b=0.0, c1=780.0, c2=1145.0, c3=1462.5, c4=250.0
)
IRB6700_LIMITS = [
    (-170.0, 170.0),
    (-65.0, 85.0),
    (-180.0, 70.0),
    (-300.0, 300.0),
    (-130.0, 130.0),
    (-360.0, 360.0),
]


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_dir(temp_dir):
    """Create a sample configuration directory structure."""
    config_dir = temp_dir / "config"
    (config_dir / "robots").mkdir(parents=True)

    robot_config = """
robot:
  name: "Test Robot"
  manufacturer: "ABB"

kinematics:
  a1: 50.0
  a2: -40.0
  c1: 544.0
  c2: 425.0
  c3: 425.0
  c4: 90.0

limits:
  joints:
    - [-180, 180]
    - [-100, 130]
    - [-210, 65]
    - [-230, 230]
    - [-130, 130]
    - [-400, 400]
"""
    (config_dir / "robots" / "test_robot.yaml").write_text(robot_config)

    track_config = robot_config.replace("Test Robot", "Test Robot On Track") + """
tool:
  name: tTest
  tool_frame:
    point: [0.0, 0.0, 100.0]

external_axes:
  - name: track
    type: linear
    axis_direction: [0.0, 1.0, 0.0]
    limits: [0.0, 2000.0]
    axis_logic: a
    moves_robot: true
"""
    (config_dir / "robots" / "test_track.yaml").write_text(track_config)

    return config_dir


@pytest.fixture
def irb1300():
    """IRB 1300 with tool0 at the world origin."""
    return Robot.from_kinematic_parameters("IRB1300", IRB1300_PARAMETERS, IRB1300_LIMITS)


@pytest.fixture
def irb6700():
    """IRB 6700 with tool0 on a rotated and shifted base."""
    base = Frame([1000.0, -500.0, 200.0], [0.0, 1.0, 0.0], [-1.0, 0.0, 0.0])
    return Robot.from_kinematic_parameters(
        "IRB6700", IRB6700_PARAMETERS, IRB6700_LIMITS, base_frame=base
    )


@pytest.fixture
def linear_axis():
    """Linear axis along +Z with limits [0, 1000] on logic 'a'."""
    return ExternalLinearAxis(
        name="lift",
        attachment_frame=Frame.worldXY(),
        axis=[0.0, 0.0, 1.0],
        axis_limits=(0.0, 1000.0),
        axis_logic="a",
        moves_robot=False,
    )


@pytest.fixture
def rotational_axis():
    """Turntable about world Z with limits [-180, 180] on logic 'b'."""
    return ExternalRotationalAxis(
        name="table",
        attachment_frame=Frame([1000.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]),
        axis=Frame.worldXY(),
        axis_limits=(-180.0, 180.0),
        axis_logic="b",
        moves_robot=False,
    )
