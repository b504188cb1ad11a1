"""
External axes: linear tracks and rotational positioners.

An external axis turns one scalar axis value into a rigid transformation of
its attachment frame. The value is read from an external joint position at
the axis's logic number (a..f). Unconnected values are replaced by zero
clamped into the axis limits.

Two evaluation modes exist:

- ``calculate_transformation_matrix`` uses the value as is and reports
  whether it lies inside the limits.
- ``calculate_transformation_matrix_save`` silently clamps the value into
  the limits first.
"""

import math
from abc import abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Optional, Sequence, Union

from compas.datastructures import Mesh as CompasMesh
from compas.geometry import Box, Frame, Line, Point, Transformation, Vector

from rapidkin.core.config import ExternalAxisConfig
from rapidkin.core.exceptions import ExternalAxisError, InvalidAxisLogicError
from rapidkin.core.geometry import (
    BoundingBox,
    GeometryLoader,
    Interval,
    TransformationUtilities,
    empty_mesh,
    is_empty_mesh,
    mesh_points,
)
from rapidkin.core.joint_positions import ExternalJointPosition
from rapidkin.core.logging import get_logger
from rapidkin.core.mechanical_unit import MechanicalUnit

_logger = get_logger(__name__)

AXIS_LOGIC_LETTERS = "ABCDEF"

AxisDefinition = Union[Frame, Vector, Sequence[float]]


class ExternalAxisType(Enum):
    """Types of external axes."""

    LINEAR = "linear"  # Track, value in mm
    ROTATIONAL = "rotational"  # Turntable, value in degrees


def parse_axis_logic(token: Union[str, int]) -> int:
    """
    Resolve an axis logic token to an axis number.

    Accepts "-1" (unassigned), "0".."5" and the letters a..f / A..F.

    Args:
        token: The token; surrounding whitespace is ignored

    Returns:
        The axis number, -1 to 5

    Raises:
        InvalidAxisLogicError: If the token is anything else
    """
    text = str(token).strip()
    if text in ("-1", "0", "1", "2", "3", "4", "5"):
        return int(text)
    if len(text) == 1 and text.upper() in AXIS_LOGIC_LETTERS:
        return AXIS_LOGIC_LETTERS.index(text.upper())
    raise InvalidAxisLogicError(
        f"Invalid axis logic: {token!r}. Use -1, 0-5 or a-f.", token=str(token)
    )


def axis_logic_letter(axis_number: int) -> str:
    """Letter of an axis number: '-' when unassigned, otherwise A..F."""
    if axis_number == -1:
        return "-"
    return AXIS_LOGIC_LETTERS[axis_number]


def _target_external_position(target: Any) -> ExternalJointPosition:
    if isinstance(target, ExternalJointPosition):
        return target
    position = getattr(target, "external_joint_position", None)
    if isinstance(position, ExternalJointPosition):
        return position
    raise ExternalAxisError(
        f"Cannot pose an external axis for {type(target).__name__}; "
        "pass an external joint position or a target"
    )


class ExternalAxis(MechanicalUnit):
    """
    Base class of linear and rotational external axes.

    Args:
        name: Axis name
        attachment_frame: Where the robot or work object is mounted at value 0
        axis: Axis frame (its Z axis is the axis) or an axis direction through
            the attachment frame origin
        axis_limits: (min, max) in mm or degrees
        base_mesh: Stationary geometry
        link_mesh: Moving geometry at value 0
        axis_logic: Axis number or letter; -1 lets the robot assign it
        moves_robot: Whether the axis carries the robot base; defaults to
            ``default_moves_robot`` of the axis type

    Frames and meshes are copied, so the axis never moves caller geometry.
    """

    axis_type: ClassVar[ExternalAxisType]
    default_moves_robot: ClassVar[bool]

    def __init__(
        self,
        name: str,
        attachment_frame: Frame,
        axis: AxisDefinition,
        axis_limits: Union[Interval, Sequence[float]],
        base_mesh: Optional[CompasMesh] = None,
        link_mesh: Optional[CompasMesh] = None,
        axis_logic: Union[str, int] = -1,
        moves_robot: Optional[bool] = None,
    ) -> None:
        self.name = name
        self._attachment_frame = attachment_frame.copy()
        self._axis_frame = self._axis_frame_from(self._attachment_frame, axis)
        self._axis_limits = Interval.parse(axis_limits)
        self.base_mesh = base_mesh.copy() if base_mesh is not None else empty_mesh()
        self.link_mesh = link_mesh.copy() if link_mesh is not None else empty_mesh()
        self.axis_number = parse_axis_logic(axis_logic)
        self.moves_robot = self.default_moves_robot if moves_robot is None else moves_robot
        self.posed_meshes: list[CompasMesh] = []
        self._reinitialize()

    @staticmethod
    def _axis_frame_from(attachment_frame: Frame, axis: AxisDefinition) -> Frame:
        if isinstance(axis, Frame):
            return axis.copy()
        return TransformationUtilities.frame_from_normal(attachment_frame.point, axis)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, axis_logic={self.axis_logic!r}, "
            f"limits={self._axis_limits.to_tuple()})"
        )

    def _reinitialize(self) -> None:
        self.posed_meshes = []

    # -- properties --------------------------------------------------------

    @property
    def attachment_frame(self) -> Frame:
        return self._attachment_frame

    @attachment_frame.setter
    def attachment_frame(self, frame: Frame) -> None:
        self._attachment_frame = frame.copy()
        self._reinitialize()

    @property
    def axis_frame(self) -> Frame:
        return self._axis_frame

    @axis_frame.setter
    def axis_frame(self, frame: Frame) -> None:
        self._axis_frame = frame.copy()
        self._reinitialize()

    @property
    def axis_limits(self) -> Interval:
        return self._axis_limits

    @axis_limits.setter
    def axis_limits(self, limits: Union[Interval, Sequence[float]]) -> None:
        self._axis_limits = Interval.parse(limits)
        self._reinitialize()

    @property
    def axis_logic(self) -> str:
        return axis_logic_letter(self.axis_number)

    @property
    def is_valid(self) -> bool:
        return (
            TransformationUtilities.is_valid_frame(self._attachment_frame)
            and TransformationUtilities.is_valid_frame(self._axis_frame)
            and self._axis_limits.is_valid
            and -1 <= self.axis_number <= 5
        )

    # -- axis values -------------------------------------------------------

    def axis_value(self, external_joint_position: ExternalJointPosition) -> float:
        """
        Value of this axis in ``external_joint_position``.

        An unconnected value becomes 0 clamped into the axis limits.

        Raises:
            ExternalAxisError: If the axis has no logic number yet
        """
        if self.axis_number == -1:
            raise ExternalAxisError(
                f"External axis {self.name!r} has no axis logic number assigned"
            )
        value = external_joint_position[self.axis_number]
        if value is None:
            return self._axis_limits.clamp(0.0)
        return value

    def in_limits(self, value: float) -> bool:
        return self._axis_limits.includes(value)

    @abstractmethod
    def _transformation_for_value(self, value: float) -> Transformation:
        """Rigid transformation of the attachment frame at axis value ``value``."""

    def calculate_transformation_matrix(
        self, external_joint_position: ExternalJointPosition
    ) -> tuple[Transformation, bool]:
        """
        Transformation of the attachment frame for a joint position.

        Args:
            external_joint_position: External axis values

        Returns:
            The transformation and whether the value used is inside the limits
        """
        value = self.axis_value(external_joint_position)
        return self._transformation_for_value(value), self.in_limits(value)

    def calculate_transformation_matrix_save(
        self, external_joint_position: ExternalJointPosition
    ) -> Transformation:
        """Like :meth:`calculate_transformation_matrix`, with the value clamped into the limits."""
        value = self.axis_value(external_joint_position)
        clamped = self._axis_limits.clamp(value)
        if clamped != value:
            _logger.debug("external_axis_value_clamped", axis=self.name, value=value, clamped=clamped)
        return self._transformation_for_value(clamped)

    def calculate_position(
        self, external_joint_position: ExternalJointPosition
    ) -> tuple[Frame, bool]:
        """Posed attachment frame and whether the value used is inside the limits."""
        transformation, in_limits = self.calculate_transformation_matrix(external_joint_position)
        return self._attachment_frame.transformed(transformation), in_limits

    def calculate_position_save(self, external_joint_position: ExternalJointPosition) -> Frame:
        """Posed attachment frame with the value clamped into the limits."""
        transformation = self.calculate_transformation_matrix_save(external_joint_position)
        return self._attachment_frame.transformed(transformation)

    # -- geometry ----------------------------------------------------------

    def pose_meshes(self, target: Any) -> list[CompasMesh]:
        """
        Pose the axis meshes.

        Args:
            target: An external joint position, or a joint/robot target

        Returns:
            [base mesh, posed link mesh], both copies
        """
        position = _target_external_position(target)
        transformation, _ = self.calculate_transformation_matrix(position)
        self.posed_meshes = [
            self.base_mesh.copy(),
            TransformationUtilities.transform_mesh(self.link_mesh, transformation),
        ]
        return self.posed_meshes

    def _bounding_points(self) -> list[list[float]]:
        return mesh_points([self.base_mesh, self.link_mesh])

    def get_bounding_box(self) -> Box:
        return BoundingBox.from_points(self._bounding_points())

    def transform(self, transformation: Transformation) -> None:
        """Move frames, meshes and any posed meshes in place."""
        self._attachment_frame = self._attachment_frame.transformed(transformation)
        self._axis_frame = self._axis_frame.transformed(transformation)
        for mesh in [self.base_mesh, self.link_mesh, *self.posed_meshes]:
            if not is_empty_mesh(mesh):
                mesh.transform(transformation)
        self._after_transform()

    def _after_transform(self) -> None:
        pass

    def copy(self, duplicate_mesh: bool = True) -> "ExternalAxis":
        duplicate = type(self)(
            name=self.name,
            attachment_frame=self._attachment_frame,
            axis=self._axis_frame,
            axis_limits=self._axis_limits,
            base_mesh=self.base_mesh if duplicate_mesh else None,
            link_mesh=self.link_mesh if duplicate_mesh else None,
            axis_logic=self.axis_number,
            moves_robot=self.moves_robot,
        )
        if duplicate_mesh:
            duplicate.posed_meshes = [mesh.copy() for mesh in self.posed_meshes]
        return duplicate


class ExternalLinearAxis(ExternalAxis):
    """
    A linear track. The attachment frame moves along the axis frame's Z axis
    by the axis value, in mm.

    Example:
        >>> track = ExternalLinearAxis("track", Frame.worldXY(), [0, 0, 1], (0, 1000), axis_logic="a")
        >>> transformation, in_limits = track.calculate_transformation_matrix(ExternalJointPosition(500))
        >>> in_limits
        True
    """

    axis_type = ExternalAxisType.LINEAR
    default_moves_robot = True

    def _reinitialize(self) -> None:
        super()._reinitialize()
        self._update_axis_curve()

    def _after_transform(self) -> None:
        self._update_axis_curve()

    def _update_axis_curve(self) -> None:
        origin = Point(*self._attachment_frame.point)
        direction = self._axis_frame.zaxis
        self.axis_curve = Line(
            origin + direction.scaled(self._axis_limits.min),
            origin + direction.scaled(self._axis_limits.max),
        )

    def _transformation_for_value(self, value: float) -> Transformation:
        return TransformationUtilities.translation_along_z(self._axis_frame, value)

    def closest_axis_value(self, point: Sequence[float]) -> float:
        """
        Axis value that brings the attachment origin closest to ``point``.

        The result is restricted to the axis limits.
        """
        offset = Vector.from_start_end(self._attachment_frame.point, Point(*point))
        return self._axis_limits.clamp(offset.dot(self._axis_frame.zaxis))

    def _bounding_points(self) -> list[list[float]]:
        points = super()._bounding_points()
        points.extend([list(self.axis_curve.start), list(self.axis_curve.end)])
        return points


class ExternalRotationalAxis(ExternalAxis):
    """
    A rotational positioner. The attachment frame rotates about the axis
    frame's Z axis, through its origin, by the axis value in degrees.
    """

    axis_type = ExternalAxisType.ROTATIONAL
    default_moves_robot = False

    def _transformation_for_value(self, value: float) -> Transformation:
        return TransformationUtilities.rotation_about_z(self._axis_frame, math.radians(value))


def create_linear_track(
    name: str = "track",
    length: float = 3000.0,
    direction: Sequence[float] = (1.0, 0.0, 0.0),
    base_frame: Optional[Frame] = None,
    axis_logic: Union[str, int] = -1,
    moves_robot: bool = True,
) -> ExternalLinearAxis:
    """
    Create a linear track that carries the robot.

    Args:
        name: Axis name
        length: Travel in mm, starting at the attachment frame
        direction: Travel direction
        base_frame: Attachment frame at value 0 (world XY by default)
        axis_logic: Axis number or letter
        moves_robot: Whether the track carries the robot

    Returns:
        The linear axis
    """
    return ExternalLinearAxis(
        name=name,
        attachment_frame=base_frame or Frame.worldXY(),
        axis=list(direction),
        axis_limits=(0.0, length),
        axis_logic=axis_logic,
        moves_robot=moves_robot,
    )


def create_turntable(
    name: str = "turntable",
    max_angle: float = 360.0,
    table_frame: Optional[Frame] = None,
    axis_logic: Union[str, int] = -1,
) -> ExternalRotationalAxis:
    """
    Create a turntable that rotates a work object about its vertical axis.

    Args:
        name: Axis name
        max_angle: Limits are -max_angle..max_angle degrees
        table_frame: Table surface frame; its Z axis is the rotation axis
        axis_logic: Axis number or letter

    Returns:
        The rotational axis
    """
    frame = table_frame or Frame.worldXY()
    return ExternalRotationalAxis(
        name=name,
        attachment_frame=frame,
        axis=frame,
        axis_limits=(-max_angle, max_angle),
        axis_logic=axis_logic,
        moves_robot=False,
    )


def create_external_axis(
    config: ExternalAxisConfig, base_dir: Optional[Path] = None
) -> ExternalAxis:
    """
    Build an external axis from its configuration.

    Args:
        config: Axis configuration
        base_dir: Directory relative mesh paths are resolved against

    Returns:
        A linear or rotational axis
    """
    attachment_frame = config.attachment_frame.to_frame()
    axis: AxisDefinition
    if config.axis_frame is not None:
        axis = config.axis_frame.to_frame()
    else:
        axis = config.axis_direction

    cls = ExternalLinearAxis if config.type == "linear" else ExternalRotationalAxis
    return cls(
        name=config.name,
        attachment_frame=attachment_frame,
        axis=axis,
        axis_limits=config.limits,
        base_mesh=GeometryLoader.load_optional(config.base_mesh_path, base_dir),
        link_mesh=GeometryLoader.load_optional(config.link_mesh_path, base_dir),
        axis_logic=config.axis_logic,
        moves_robot=config.moves_robot,
    )
