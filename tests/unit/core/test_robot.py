"""
Unit tests for the robot aggregate.
"""

import pytest
from compas.datastructures import Mesh as CompasMesh
from compas.geometry import Frame, Translation

from rapidkin.core.config import RobotConfig
from rapidkin.core.exceptions import (
    DuplicateAxisLogicNumberError,
    InvalidAxisLogicError,
    KinematicsError,
    MultipleMovingAxesError,
    TooManyExternalAxesError,
)
from rapidkin.core.declarations import JointTarget
from rapidkin.core.joint_positions import RobotJointPosition
from rapidkin.core.kinematic_parameters import RobotKinematicParameters
from rapidkin.core.robot import Robot, RobotLoader, RobotState, validate_external_axes
from rapidkin.core.tool import RobotTool
from rapidkin.motion.external_axes import (
    ExternalLinearAxis,
    ExternalRotationalAxis,
    create_linear_track,
)

IRB1300_PARAMETERS = RobotKinematicParameters(a1=50, a2=-40, c1=544, c2=425, c3=425, c4=90)


def _box(size: float = 100.0) -> CompasMesh:
    half = size / 2.0
    vertices = [
        [-half, -half, -half], [half, -half, -half], [half, half, -half], [-half, half, -half],
        [-half, -half, half], [half, -half, half], [half, half, half], [-half, half, half],
    ]
    faces = [
        [0, 3, 2, 1], [4, 5, 6, 7], [0, 1, 5, 4], [1, 2, 6, 5], [2, 3, 7, 6], [3, 0, 4, 7],
    ]
    return CompasMesh.from_vertices_and_faces(vertices, faces)


def _axis(name: str, logic="-1", moves_robot: bool = False) -> ExternalLinearAxis:
    return ExternalLinearAxis(
        name, Frame.worldXY(), [1, 0, 0], (0, 1000), axis_logic=logic, moves_robot=moves_robot
    )


class TestRobotAssembly:
    """Tests for construction and validation state."""

    def test_valid_robot(self, irb1300):
        """Test that a robot built from parameters is valid."""
        assert irb1300.state is RobotState.VALID
        assert irb1300.is_valid
        assert len(irb1300.meshes) == 8
        assert irb1300.kinematic_parameters.c2 == pytest.approx(425.0)
        assert irb1300.arm_lengths.lower_arm == pytest.approx(425.0)

    def test_missing_planes_is_invalid(self):
        """Test that a robot without six axis planes is invalid."""
        robot = Robot("Empty", internal_axis_planes=[Frame.worldXY()] * 3)

        assert robot.state is RobotState.INVALID
        assert robot.kinematic_parameters is None
        with pytest.raises(KinematicsError):
            robot.opw_kinematics

    def test_wrong_mesh_count_is_invalid(self, irb1300):
        """Test that a robot needs a base mesh and six link meshes."""
        irb1300.robot_meshes = [_box()] * 3
        assert irb1300.state is RobotState.INVALID

    def test_setter_rederives_parameters(self, irb1300):
        """Test that moving the base keeps the parameters and moves the planes."""
        irb1300.base_frame = Frame([0, 0, 500], [1, 0, 0], [0, 1, 0])
        # Planes stay in place, so axis 2 is now only 44 mm above the base.
        assert irb1300.kinematic_parameters.c1 == pytest.approx(44.0)
        assert irb1300.state is RobotState.VALID

    def test_tool_is_attached_to_mounting_frame(self, irb1300):
        """Test that the tool is copied and moved onto the flange."""
        tool = RobotTool(
            "tPen", tool_frame=Frame([0.0, 0.0, 150.0], [1, 0, 0], [0, 1, 0])
        )
        irb1300.tool = tool

        assert list(irb1300.tool.attachment_frame.point) == pytest.approx([565.0, 0.0, 1009.0])
        assert list(irb1300.tool_frame.point) == pytest.approx([715.0, 0.0, 1009.0])
        assert list(tool.tool_frame.point) == pytest.approx([0.0, 0.0, 150.0])

    def test_input_geometry_is_copied(self):
        """Test that the robot does not alias caller geometry."""
        base = Frame.worldXY()
        robot = Robot.from_kinematic_parameters(
            "R", IRB1300_PARAMETERS, [(-180, 180)] * 6, base_frame=base
        )
        robot.transform(Translation.from_vector([100.0, 0.0, 0.0]))

        assert robot.base_frame is not base
        assert list(base.point) == pytest.approx([0.0, 0.0, 0.0])
        assert robot.base_frame.point.x == pytest.approx(100.0)


class TestExternalAxisAttachment:
    """Tests for external axis invariants."""

    def test_numbers_assigned_by_position(self, irb1300):
        """Test that unassigned axes get their list position."""
        robot = irb1300.attach_external_axes([_axis("x"), _axis("y"), _axis("z")])
        assert [axis.axis_logic for axis in robot.external_axes] == ["A", "B", "C"]

    def test_caller_axes_untouched(self, irb1300):
        """Test that attaching does not mutate the input axes."""
        axis = _axis("x")
        irb1300.attach_external_axes([axis])
        assert axis.axis_number == -1

    def test_attach_returns_new_robot(self, irb1300):
        """Test that the original robot keeps its axes."""
        robot = irb1300.attach_external_axes([_axis("x")])
        assert len(robot.external_axes) == 1
        assert irb1300.external_axes == []

    def test_too_many_axes(self, irb1300):
        """Test that at most six axes can be attached."""
        with pytest.raises(TooManyExternalAxesError):
            irb1300.attach_external_axes([_axis(str(i)) for i in range(7)])

    def test_multiple_movers(self, irb1300):
        """Test that only one axis may move the robot."""
        with pytest.raises(MultipleMovingAxesError):
            irb1300.attach_external_axes(
                [_axis("t1", moves_robot=True), _axis("t2", moves_robot=True)]
            )

    def test_duplicate_numbers(self, irb1300):
        """Test that explicit and assigned numbers must not collide."""
        with pytest.raises(DuplicateAxisLogicNumberError):
            irb1300.attach_external_axes([_axis("x"), _axis("y", logic="a")])

    def test_failed_attach_leaves_robot_unchanged(self, irb1300):
        """Test that a failing setter does not change the robot."""
        robot = irb1300.attach_external_axes([_axis("x")])
        with pytest.raises(DuplicateAxisLogicNumberError):
            robot.external_axes = [_axis("x", logic="b"), _axis("y", logic="b")]
        assert [axis.name for axis in robot.external_axes] == ["x"]

    def test_invalid_logic_token(self):
        """Test that a bad axis logic is rejected at axis construction."""
        with pytest.raises(InvalidAxisLogicError):
            _axis("x", logic="g")

    def test_axis_arrays(self, irb1300, rotational_axis):
        """Test frames and limits indexed by axis number."""
        robot = irb1300.attach_external_axes([rotational_axis])

        assert robot.external_axis_planes[0] is None
        assert list(robot.external_axis_planes[1].point) == pytest.approx([0.0, 0.0, 0.0])
        assert list(robot.external_axis_planes[1].zaxis) == pytest.approx([0.0, 0.0, 1.0])
        assert robot.external_axis_limits[1].to_tuple() == (-180.0, 180.0)
        assert robot.moving_external_axis is None

    def test_moving_axis(self, irb1300):
        """Test that the carrying axis is found."""
        robot = irb1300.attach_external_axes([create_linear_track(length=2000.0)])
        assert robot.moving_external_axis.name == "track"

    def test_validate_external_axes_copies(self):
        """Test that validation returns copies."""
        axis = ExternalRotationalAxis("r", Frame.worldXY(), Frame.worldXY(), (-90, 90))
        validated = validate_external_axes([axis])
        assert validated[0] is not axis
        assert validated[0].axis_number == 0


class TestRobotGeometry:
    """Tests for transform, bounding box, posing and copies."""

    def test_transform_keeps_parameters(self, irb1300):
        """Test that moving the whole robot keeps its kinematics."""
        irb1300.transform(Translation.from_vector([0.0, 2000.0, 0.0]))

        assert list(irb1300.base_frame.point) == pytest.approx([0.0, 2000.0, 0.0])
        assert list(irb1300.tool_frame.point) == pytest.approx([565.0, 2000.0, 1009.0])
        assert irb1300.kinematic_parameters.a1 == pytest.approx(50.0)

    def test_transform_leaves_external_axes(self, irb1300, rotational_axis):
        """Test that external axes are not moved with the robot."""
        robot = irb1300.attach_external_axes([rotational_axis])
        robot.transform(Translation.from_vector([0.0, 0.0, 100.0]))
        assert robot.external_axes[0].attachment_frame.point.z == pytest.approx(0.0)

    def test_bounding_box_without_meshes(self, irb1300):
        """Test that axis planes bound a robot without meshes."""
        box = irb1300.get_bounding_box()
        assert box.xsize == pytest.approx(565.0)
        assert box.zsize == pytest.approx(1009.0)

    def test_pose_meshes(self, irb1300):
        """Test posing the link meshes for a joint target."""
        irb1300.robot_meshes = [_box() for _ in range(7)]
        posed = irb1300.pose_meshes(JointTarget(RobotJointPosition(90, 0, 0, 0, 0, 0)))

        assert len(posed) == 8
        assert irb1300.posed_meshes is posed
        # The base mesh does not move, the links turn with axis 1.
        assert posed[0].vertex_coordinates(0) == pytest.approx([-50.0, -50.0, -50.0])
        assert posed[1].vertex_coordinates(0) == pytest.approx([50.0, -50.0, -50.0])

    def test_pose_meshes_rejects_other_targets(self, irb1300):
        """Test that only targets can be posed."""
        with pytest.raises(KinematicsError):
            irb1300.pose_meshes(RobotJointPosition())

    def test_copy(self, irb1300):
        """Test that copies are independent."""
        duplicate = irb1300.copy()
        duplicate.base_frame = Frame([0, 0, 100], [1, 0, 0], [0, 1, 0])

        assert irb1300.base_frame.point.z == pytest.approx(0.0)
        assert duplicate.state is RobotState.VALID


class TestRobotLoader:
    """Tests for building robots from configuration."""

    def test_load_from_config(self):
        """Test a robot with tool and track from a config model."""
        config = RobotConfig(
            name="IRB1300",
            kinematics={"a1": 50, "a2": -40, "c1": 544, "c2": 425, "c3": 425, "c4": 90},
            joint_limits=[(-180, 180)] * 6,
            tool={"name": "tPen", "tool_frame": {"point": [0, 0, 100]}, "mass": 1.0},
            external_axes=[
                {
                    "name": "track",
                    "type": "linear",
                    "axis_direction": [0, 1, 0],
                    "limits": (0, 3000),
                    "moves_robot": True,
                }
            ],
        )
        robot = RobotLoader.load_from_config(config)

        assert robot.state is RobotState.VALID
        assert robot.tool.name == "tPen"
        assert robot.tool.load_data.mass == 1.0
        assert list(robot.tool_frame.point) == pytest.approx([665.0, 0.0, 1009.0])
        assert robot.external_axes[0].axis_logic == "A"
        assert robot.moving_external_axis is robot.external_axes[0]
