"""
The robot aggregate.

A :class:`Robot` owns its axis planes, meshes, tool and external axes. Any
geometry change re-derives the kinematic parameters and re-attaches the tool;
the resulting state is polled through :attr:`Robot.state` and
:attr:`Robot.is_valid`.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import numpy as np
from compas.datastructures import Mesh as CompasMesh
from compas.geometry import Box, Frame, Transformation

from rapidkin.core.config import RobotConfig
from rapidkin.core.declarations import JointTarget, RobotTarget
from rapidkin.core.exceptions import (
    DuplicateAxisLogicNumberError,
    InvalidExternalAxisError,
    KinematicsError,
    MultipleMovingAxesError,
    TooManyExternalAxesError,
)
from rapidkin.core.geometry import (
    BoundingBox,
    GeometryLoader,
    Interval,
    TransformationUtilities,
    empty_mesh,
    is_empty_mesh,
    mesh_points,
)
from rapidkin.core.joint_positions import NUMBER_OF_AXES
from rapidkin.core.kinematic_parameters import ArmLengths, RobotKinematicParameters
from rapidkin.core.logging import get_logger, robot_context
from rapidkin.core.mechanical_unit import MechanicalUnit
from rapidkin.core.tool import LoadData, RobotTool
from rapidkin.motion.external_axes import ExternalAxis, create_external_axis
from rapidkin.motion.kinematics import (
    ForwardKinematics,
    InverseKinematics,
    OPWKinematics,
    frame_to_matrix,
)

_logger = get_logger(__name__)

#: Base mesh plus one mesh per link.
NUMBER_OF_ROBOT_MESHES = 7

MAX_EXTERNAL_AXES = 6


class RobotState(Enum):
    """Assembly state of a robot."""

    UNINITIALIZED = "uninitialized"
    ASSEMBLING = "assembling"
    VALID = "valid"
    INVALID = "invalid"


def validate_external_axes(axes: Sequence[ExternalAxis]) -> list[ExternalAxis]:
    """
    Check a list of external axes and assign missing axis logic numbers.

    Axes without a number (-1) get their list position. The input axes are
    not modified; copies are returned.

    Args:
        axes: The axes to attach

    Returns:
        Copies of the axes with their final axis numbers

    Raises:
        TooManyExternalAxesError: More than six axes
        MultipleMovingAxesError: More than one axis moves the robot
        InvalidExternalAxisError: An axis is not fully defined
        DuplicateAxisLogicNumberError: Two axes share an axis number
    """
    if len(axes) > MAX_EXTERNAL_AXES:
        raise TooManyExternalAxesError(
            f"A robot can have at most {MAX_EXTERNAL_AXES} external axes, got {len(axes)}"
        )

    movers = [axis.name for axis in axes if axis.moves_robot]
    if len(movers) > 1:
        raise MultipleMovingAxesError(
            "Only one external axis can move the robot",
            details={"axes": movers},
        )

    assigned: list[ExternalAxis] = []
    for index, axis in enumerate(axes):
        if not axis.is_valid:
            raise InvalidExternalAxisError(f"External axis {axis.name!r} is not valid")
        duplicate = axis.copy()
        if duplicate.axis_number == -1:
            duplicate.axis_number = index
        assigned.append(duplicate)

    numbers = [axis.axis_number for axis in assigned]
    duplicates = sorted({n for n in numbers if numbers.count(n) > 1})
    if duplicates:
        raise DuplicateAxisLogicNumberError(
            "External axes must have unique axis logic numbers",
            details={"axis_numbers": duplicates},
        )
    if assigned:
        _logger.debug(
            "external_axes_assigned",
            axes={axis.name: axis.axis_logic for axis in assigned},
        )
    return assigned


class Robot(MechanicalUnit):
    """
    A six-axis ABB robot with optional tool and external axes.

    Args:
        name: Robot name
        meshes: Base mesh and six link meshes at zero pose (empty meshes when omitted)
        internal_axis_planes: The six axis planes at zero pose, in world space
        internal_axis_limits: Six (min, max) limits in degrees
        base_frame: Robot base frame
        mounting_frame: Tool mounting frame (flange) at zero pose
        tool: Tool to attach; ``tool0`` when omitted
        external_axes: External axes; numbers of -1 are assigned by position

    Raises:
        TooManyExternalAxesError: More than six external axes
        MultipleMovingAxesError: More than one external axis moves the robot
        DuplicateAxisLogicNumberError: Two external axes share an axis number

    Example:
        >>> params = RobotKinematicParameters(a1=50, a2=-40, c1=544, c2=425, c3=425, c4=90)
        >>> robot = Robot.from_kinematic_parameters("IRB1300", params, [(-180, 180)] * 6)
        >>> robot.state
        <RobotState.VALID: 'valid'>
    """

    def __init__(
        self,
        name: str,
        meshes: Optional[Sequence[CompasMesh]] = None,
        internal_axis_planes: Sequence[Frame] = (),
        internal_axis_limits: Sequence[Union[Interval, Sequence[float]]] = (),
        base_frame: Optional[Frame] = None,
        mounting_frame: Optional[Frame] = None,
        tool: Optional[RobotTool] = None,
        external_axes: Optional[Sequence[ExternalAxis]] = None,
    ) -> None:
        self.state = RobotState.UNINITIALIZED
        self.name = name
        if meshes is None:
            meshes = [empty_mesh() for _ in range(NUMBER_OF_ROBOT_MESHES)]
        self._meshes = [mesh.copy() for mesh in meshes]
        self._internal_axis_planes = [plane.copy() for plane in internal_axis_planes]
        self._internal_axis_limits = [Interval.parse(limits) for limits in internal_axis_limits]
        self._base_frame = base_frame.copy() if base_frame is not None else Frame.worldXY()
        self._mounting_frame = (
            mounting_frame.copy() if mounting_frame is not None else Frame.worldXY()
        )
        self._external_axes = validate_external_axes(external_axes or [])
        self._tool = (tool or RobotTool.default()).copy()

        self.posed_meshes: list[CompasMesh] = []
        self.kinematic_parameters: Optional[RobotKinematicParameters] = None
        self.arm_lengths: Optional[ArmLengths] = None
        self._opw: Optional[OPWKinematics] = None
        self._flange_correction_inverse = np.eye(4)
        self._forward_kinematics: Optional[ForwardKinematics] = None
        self._inverse_kinematics: Optional[InverseKinematics] = None
        self._update()

    @classmethod
    def from_kinematic_parameters(
        cls,
        name: str,
        parameters: RobotKinematicParameters,
        internal_axis_limits: Sequence[Union[Interval, Sequence[float]]],
        base_frame: Optional[Frame] = None,
        meshes: Optional[Sequence[CompasMesh]] = None,
        tool: Optional[RobotTool] = None,
        external_axes: Optional[Sequence[ExternalAxis]] = None,
    ) -> "Robot":
        """Build a robot whose axis planes are reconstructed from OPW parameters."""
        base_frame = base_frame or Frame.worldXY()
        planes, mounting_frame = parameters.get_axis_planes(base_frame)
        return cls(
            name=name,
            meshes=meshes,
            internal_axis_planes=planes,
            internal_axis_limits=internal_axis_limits,
            base_frame=base_frame,
            mounting_frame=mounting_frame,
            tool=tool,
            external_axes=external_axes,
        )

    def __repr__(self) -> str:
        return (
            f"Robot(name={self.name!r}, state={self.state.value}, "
            f"external_axes={len(self._external_axes)})"
        )

    # -- update ------------------------------------------------------------

    def _update(self) -> None:
        with robot_context(self.name):
            self.state = RobotState.ASSEMBLING
            self._update_kinematics()
            self._tool = self._attach_tool(self._tool)
            self.state = RobotState.VALID if self.is_valid else RobotState.INVALID
            if self.state is RobotState.INVALID:
                _logger.warning("robot_invalid")

    def _update_kinematics(self) -> None:
        self.kinematic_parameters = None
        self.arm_lengths = None
        self._opw = None
        self._flange_correction_inverse = np.eye(4)
        if len(self._internal_axis_planes) != NUMBER_OF_AXES:
            return

        parameters = RobotKinematicParameters.from_axis_planes(
            self._base_frame, self._internal_axis_planes
        )
        self.kinematic_parameters = parameters
        self.arm_lengths = ArmLengths.from_axis_planes(self._internal_axis_planes)
        if not parameters.is_valid:
            return

        self._opw = OPWKinematics(parameters)
        canonical = self._opw.forward([0.0] * NUMBER_OF_AXES)
        mounting = frame_to_matrix(
            self._mounting_frame.transformed(TransformationUtilities.to_local(self._base_frame))
        )
        self._flange_correction_inverse = np.linalg.inv(mounting) @ canonical
        _logger.debug("robot_kinematics_updated", **parameters.to_dict())

    def _attach_tool(self, tool: RobotTool) -> RobotTool:
        attached = tool.copy()
        attached.transform(
            TransformationUtilities.plane_to_plane(attached.attachment_frame, self._mounting_frame)
        )
        return attached

    # -- geometry properties -----------------------------------------------

    @property
    def base_frame(self) -> Frame:
        return self._base_frame

    @base_frame.setter
    def base_frame(self, frame: Frame) -> None:
        self._base_frame = frame.copy()
        self._update()

    @property
    def mounting_frame(self) -> Frame:
        return self._mounting_frame

    @mounting_frame.setter
    def mounting_frame(self, frame: Frame) -> None:
        self._mounting_frame = frame.copy()
        self._update()

    @property
    def internal_axis_planes(self) -> list[Frame]:
        return self._internal_axis_planes

    @internal_axis_planes.setter
    def internal_axis_planes(self, planes: Sequence[Frame]) -> None:
        self._internal_axis_planes = [plane.copy() for plane in planes]
        self._update()

    @property
    def internal_axis_limits(self) -> list[Interval]:
        return self._internal_axis_limits

    @internal_axis_limits.setter
    def internal_axis_limits(self, limits: Sequence[Union[Interval, Sequence[float]]]) -> None:
        self._internal_axis_limits = [Interval.parse(value) for value in limits]
        self._update()

    @property
    def tool(self) -> RobotTool:
        """The attached tool, positioned on the mounting frame."""
        return self._tool

    @tool.setter
    def tool(self, tool: RobotTool) -> None:
        self._tool = tool.copy()
        self._update()

    @property
    def tool_frame(self) -> Frame:
        """Tool center point at zero pose, in world space."""
        return self._tool.tool_frame

    @property
    def meshes(self) -> list[CompasMesh]:
        """Base mesh, six link meshes and the attached tool mesh."""
        return [*self._meshes, self._tool.mesh]

    @property
    def robot_meshes(self) -> list[CompasMesh]:
        return self._meshes

    @robot_meshes.setter
    def robot_meshes(self, meshes: Sequence[CompasMesh]) -> None:
        self._meshes = [mesh.copy() for mesh in meshes]
        self._update()

    # -- external axes -----------------------------------------------------

    @property
    def external_axes(self) -> list[ExternalAxis]:
        return self._external_axes

    @external_axes.setter
    def external_axes(self, axes: Sequence[ExternalAxis]) -> None:
        self._external_axes = validate_external_axes(axes)
        self._update()

    def attach_external_axes(self, axes: Sequence[ExternalAxis]) -> "Robot":
        """
        Return a copy of this robot with ``axes`` as its external axes.

        The robot itself is left unchanged, also when validation fails.
        """
        robot = self.copy()
        robot.external_axes = axes
        return robot

    @property
    def moving_external_axis(self) -> Optional[ExternalAxis]:
        """The external axis that carries the robot, if any."""
        for axis in self._external_axes:
            if axis.moves_robot:
                return axis
        return None

    @property
    def external_axis_planes(self) -> list[Optional[Frame]]:
        """Axis frames indexed by axis logic number (None when unused)."""
        frames: list[Optional[Frame]] = [None] * MAX_EXTERNAL_AXES
        for axis in self._external_axes:
            frames[axis.axis_number] = axis.axis_frame
        return frames

    @property
    def external_axis_limits(self) -> list[Optional[Interval]]:
        """Axis limits indexed by axis logic number (None when unused)."""
        limits: list[Optional[Interval]] = [None] * MAX_EXTERNAL_AXES
        for axis in self._external_axes:
            limits[axis.axis_number] = axis.axis_limits
        return limits

    # -- kinematics --------------------------------------------------------

    @property
    def is_valid(self) -> bool:
        return (
            len(self._internal_axis_planes) == NUMBER_OF_AXES
            and len(self._internal_axis_limits) == NUMBER_OF_AXES
            and len(self.meshes) == NUMBER_OF_ROBOT_MESHES + 1
            and TransformationUtilities.is_valid_frame(self._base_frame)
            and TransformationUtilities.is_valid_frame(self._mounting_frame)
            and self._tool.is_valid
            and self.kinematic_parameters is not None
            and self.kinematic_parameters.is_valid
        )

    @property
    def opw_kinematics(self) -> OPWKinematics:
        if self._opw is None:
            raise KinematicsError(f"Robot {self.name!r} has no valid kinematic parameters")
        return self._opw

    @property
    def flange_correction_inverse(self) -> np.ndarray:
        """Maps the actual mounting frame onto the solver's flange frame."""
        return self._flange_correction_inverse

    @property
    def forward_kinematics(self) -> ForwardKinematics:
        if self._forward_kinematics is None:
            self._forward_kinematics = ForwardKinematics(self)
        return self._forward_kinematics

    @property
    def inverse_kinematics(self) -> InverseKinematics:
        if self._inverse_kinematics is None:
            self._inverse_kinematics = InverseKinematics(self)
        return self._inverse_kinematics

    # -- mechanical unit ---------------------------------------------------

    def pose_meshes(self, target: Any) -> list[CompasMesh]:
        """
        Pose the robot meshes for a target.

        Args:
            target: A joint target, or a robot target that is solved first

        Returns:
            Posed base, link and tool meshes
        """
        if isinstance(target, RobotTarget):
            target = self.inverse_kinematics.calculate(target).joint_target
        if not isinstance(target, JointTarget):
            raise KinematicsError(f"Cannot pose a robot for {type(target).__name__}")
        result = ForwardKinematics(self).calculate(target)
        self.posed_meshes = result.posed_robot_meshes
        return self.posed_meshes

    def get_bounding_box(self) -> Box:
        """
        Bounding box of the robot at zero pose, including its tool and external axes.

        Axis plane origins are included so a robot without meshes still has a box.
        """
        meshes = list(self.meshes)
        for axis in self._external_axes:
            meshes.extend([axis.base_mesh, axis.link_mesh])
        points = mesh_points(meshes)
        points.extend(list(plane.point) for plane in self._internal_axis_planes)
        points.append(list(self._base_frame.point))
        points.append(list(self._mounting_frame.point))
        return BoundingBox.from_points(points)

    def transform(self, transformation: Transformation) -> None:
        """
        Move the robot in place.

        External axes are left where they are.
        """
        self._base_frame = self._base_frame.transformed(transformation)
        self._mounting_frame = self._mounting_frame.transformed(transformation)
        self._internal_axis_planes = [
            plane.transformed(transformation) for plane in self._internal_axis_planes
        ]
        for mesh in [*self._meshes, *self.posed_meshes]:
            if not is_empty_mesh(mesh):
                mesh.transform(transformation)
        self._tool.transform(transformation)
        self._update()

    def copy(self, duplicate_mesh: bool = True) -> "Robot":
        """
        Return an independent copy.

        Args:
            duplicate_mesh: Copy meshes too; otherwise the copy gets empty meshes
        """
        meshes = None
        if duplicate_mesh:
            meshes = self._meshes
        return Robot(
            name=self.name,
            meshes=meshes,
            internal_axis_planes=self._internal_axis_planes,
            internal_axis_limits=self._internal_axis_limits,
            base_frame=self._base_frame,
            mounting_frame=self._mounting_frame,
            tool=self._tool.copy(duplicate_mesh),
            external_axes=[axis.copy(duplicate_mesh) for axis in self._external_axes],
        )


class RobotLoader:
    """Builds robots from configuration."""

    @staticmethod
    def load_from_config(config: RobotConfig, base_dir: Optional[Path] = None) -> Robot:
        """
        Create a robot from a validated configuration.

        Args:
            config: Robot configuration
            base_dir: Directory relative mesh paths are resolved against

        Returns:
            The robot, with its tool and external axes attached
        """
        kinematics = config.kinematics
        parameters = RobotKinematicParameters(
            a1=kinematics.a1,
            a2=kinematics.a2,
            a3=kinematics.a3,
            b=kinematics.b,
            c1=kinematics.c1,
            c2=kinematics.c2,
            c3=kinematics.c3,
            c4=kinematics.c4,
        )

        meshes = None
        if config.mesh_paths:
            meshes = [GeometryLoader.load_optional(path, base_dir) for path in config.mesh_paths]

        tool = None
        if config.tool is not None:
            tool = RobotTool(
                name=config.tool.name,
                mesh=GeometryLoader.load_optional(config.tool.mesh_path, base_dir),
                attachment_frame=config.tool.attachment_frame.to_frame(),
                tool_frame=config.tool.tool_frame.to_frame(),
                robot_hold=config.tool.robot_hold,
                load_data=LoadData(
                    mass=config.tool.mass,
                    center_of_gravity=list(config.tool.center_of_gravity),
                ),
            )

        external_axes = [create_external_axis(axis, base_dir) for axis in config.external_axes]

        _logger.info(
            "robot_loaded",
            robot=config.name,
            manufacturer=config.manufacturer,
            external_axes=len(external_axes),
        )
        robot = Robot.from_kinematic_parameters(
            name=config.name,
            parameters=parameters,
            internal_axis_limits=config.joint_limits,
            base_frame=config.base_frame.to_frame(),
            meshes=meshes,
            tool=tool,
        )
        if external_axes:
            robot = robot.attach_external_axes(external_axes)
        return robot
