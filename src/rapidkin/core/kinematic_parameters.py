"""
OPW kinematic parameters of a six-axis spherical-wrist robot.

The eight parameters (a1, a2, a3, b, c1, c2, c3, c4) describe the offsets
between the axes of an ortho-parallel arm with a spherical wrist:

* ``c1``: height of axis 2 above the base
* ``a1``: forward offset of axis 2 from axis 1
* ``c2``: length of the lower arm (axis 2 to axis 3)
* ``a2``: vertical offset of the upper arm (axis 3 to axis 4, positive downward)
* ``c3``: length of the upper arm (axis 3 to the wrist centre)
* ``b``: sideways offset of the wrist from the arm plane
* ``c4``: wrist centre to flange
* ``a3``: vertical offset of the flange from the wrist axis

Axis planes are frames whose Z axis is the rotation axis of a joint and whose
origin lies on that axis, given for the robot at its zero pose.
"""

import math
from dataclasses import asdict, dataclass
from typing import Sequence

from compas.geometry import Frame, Point, Vector

from rapidkin.core.exceptions import GeometryError
from rapidkin.core.geometry import TransformationUtilities


def _origins(base_frame: Frame, axis_planes: Sequence[Frame]) -> list[Point]:
    if len(axis_planes) != 6:
        raise GeometryError(
            f"Exactly 6 axis planes are required, got {len(axis_planes)}"
        )
    to_local = TransformationUtilities.to_local(base_frame)
    return [plane.transformed(to_local).point for plane in axis_planes]


@dataclass(frozen=True)
class ArmLengths:
    """Lower arm, upper arm and their sum."""

    lower_arm: float
    upper_arm: float

    @property
    def elbow(self) -> float:
        return self.lower_arm + self.upper_arm

    @classmethod
    def from_axis_planes(cls, axis_planes: Sequence[Frame]) -> "ArmLengths":
        if len(axis_planes) != 6:
            raise GeometryError(
                f"Exactly 6 axis planes are required, got {len(axis_planes)}"
            )
        p1, p2, p4 = (axis_planes[i].point for i in (1, 2, 4))
        return cls(lower_arm=p1.distance_to_point(p2), upper_arm=p2.distance_to_point(p4))


@dataclass(frozen=True)
class RobotKinematicParameters:
    """
    The OPW parameters of a robot, in mm.

    Example:
        >>> params = RobotKinematicParameters(a1=50, a2=-40, c1=544, c2=425, c3=425, c4=90)
        >>> planes, mounting_frame = params.get_axis_planes(Frame.worldXY())
        >>> RobotKinematicParameters.from_axis_planes(Frame.worldXY(), planes).c3
        425.0
    """

    a1: float = 0.0
    a2: float = 0.0
    a3: float = 0.0
    b: float = 0.0
    c1: float = 0.0
    c2: float = 0.0
    c3: float = 0.0
    c4: float = 0.0

    @classmethod
    def from_axis_planes(
        cls, base_frame: Frame, axis_planes: Sequence[Frame]
    ) -> "RobotKinematicParameters":
        """
        Reduce world-space axis planes to OPW parameters.

        The planes are first expressed in the base frame, so the result does
        not depend on where the robot stands.

        Args:
            base_frame: Robot base frame
            axis_planes: The six axis planes at zero pose, in world space

        Returns:
            The kinematic parameters

        Raises:
            GeometryError: If not exactly six planes are given
        """
        p = _origins(base_frame, axis_planes)
        return cls(
            a1=p[1].x,
            a2=-(p[4].z - p[2].z),
            a3=-(p[5].z - p[4].z),
            b=p[0].y - p[5].y,
            c1=p[1].z,
            c2=p[2].z - p[1].z,
            c3=p[4].x - p[2].x,
            c4=p[5].x - p[4].x,
        )

    @property
    def is_valid(self) -> bool:
        return not any(math.isnan(v) for v in self.to_list())

    def to_list(self) -> list[float]:
        return [self.a1, self.a2, self.a3, self.b, self.c1, self.c2, self.c3, self.c4]

    def to_dict(self) -> dict[str, float]:
        return asdict(self)

    def get_axis_planes(self, base_frame: Frame) -> tuple[list[Frame], Frame]:
        """
        Rebuild zero-pose axis planes and the tool mounting frame.

        Axis 1 is vertical through the base origin, axes 2 and 3 point along
        +Y, axes 4 and 6 along +X and axis 5 along +Y again. The mounting
        frame sits on axis 6 with its Z axis along +X and its X axis pointing
        down.

        Args:
            base_frame: Frame the planes are placed on

        Returns:
            The six axis planes and the mounting frame, in world space
        """
        a1, a2, a3, b = self.a1, self.a2, self.a3, self.b
        c1, c2, c3, c4 = self.c1, self.c2, self.c3, self.c4

        x = [1.0, 0.0, 0.0]
        y = [0.0, 1.0, 0.0]
        z = [0.0, 0.0, 1.0]
        local = [
            ([0.0, 0.0, 0.0], z),
            ([a1, 0.0, c1], y),
            ([a1, 0.0, c1 + c2], y),
            ([a1, -b, c1 + c2 - a2], x),
            ([a1 + c3, -b, c1 + c2 - a2], y),
            ([a1 + c3 + c4, -b, c1 + c2 - a2 - a3], x),
        ]
        planes = [TransformationUtilities.frame_from_normal(o, n) for o, n in local]
        mounting_frame = Frame(planes[5].point, Vector(0, 0, -1), Vector(0, 1, 0))

        to_world = TransformationUtilities.to_world(base_frame)
        return (
            [plane.transformed(to_world) for plane in planes],
            mounting_frame.transformed(to_world),
        )
