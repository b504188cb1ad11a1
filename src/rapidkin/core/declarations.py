"""
Target declarations: configuration data, robot targets and joint targets.

These are the values the kinematics solvers consume and produce, and the
RAPID generator turns into ``confdata``, ``robtarget`` and ``jointtarget``
literals.
"""

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from compas.geometry import Frame, Quaternion

from rapidkin.core.exceptions import KinematicsError
from rapidkin.core.geometry import frame_from_data, frame_to_data
from rapidkin.core.joint_positions import ExternalJointPosition, RobotJointPosition
from rapidkin.core.rapid import (
    Declaration,
    Scope,
    VariableType,
    format_values,
    read_declaration_metadata,
)

if TYPE_CHECKING:
    from rapidkin.core.robot import Robot


def quadrant(angle: float) -> int:
    """Quarter revolution an angle in degrees falls in, as used by cf1/cf4/cf6."""
    return int(math.floor(angle / 90.0))


def frame_quaternion(frame: Frame) -> Quaternion:
    """
    Orientation of a frame as a unit quaternion with a non-negative scalar part.
    """
    q = Quaternion.from_frame(frame)
    if q.w < 0:
        return Quaternion(-q.w, -q.x, -q.y, -q.z)
    return q


@dataclass
class ConfigurationData(Declaration):
    """
    Robot axis configuration (``confdata``).

    Attributes:
        cf1: Quadrant of axis 1
        cf4: Quadrant of axis 4
        cf6: Quadrant of axis 6
        cfx: Inverse kinematics branch, 0..7
    """

    datatype = "confdata"

    cf1: int = 0
    cf4: int = 0
    cf6: int = 0
    cfx: int = 0
    name: str = ""
    scope: Scope = Scope.GLOBAL
    variable_type: VariableType = VariableType.VAR

    @classmethod
    def from_joint_position(
        cls, position: RobotJointPosition, cfx: int = 0
    ) -> "ConfigurationData":
        """Derive cf1, cf4 and cf6 from the quadrants of a joint position."""
        return cls(
            cf1=quadrant(position[0]),
            cf4=quadrant(position[3]),
            cf6=quadrant(position[5]),
            cfx=cfx,
        )

    def to_rapid(self) -> str:
        return format_values([self.cf1, self.cf4, self.cf6, self.cfx], 0)

    def copy(self) -> "ConfigurationData":
        return ConfigurationData(
            self.cf1, self.cf4, self.cf6, self.cfx,
            self.name, self.scope, self.variable_type,
        )

    def to_dict(self) -> dict[str, Any]:
        data = self._declaration_dict()
        data.update(cf1=self.cf1, cf4=self.cf4, cf6=self.cf6, cfx=self.cfx)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConfigurationData":
        return cls(
            cf1=int(data.get("cf1", 0)),
            cf4=int(data.get("cf4", 0)),
            cf6=int(data.get("cf6", 0)),
            cfx=int(data.get("cfx", 0)),
            **read_declaration_metadata(data),
        )


@dataclass
class RobotTarget(Declaration):
    """
    A Cartesian target for the tool center point (``robtarget``).

    The frame is expressed in the work object (world by default); the
    configuration data selects the inverse kinematics branch.
    """

    datatype = "robtarget"

    frame: Frame
    configuration_data: ConfigurationData = field(default_factory=ConfigurationData)
    external_joint_position: ExternalJointPosition = field(
        default_factory=ExternalJointPosition
    )
    name: str = ""
    scope: Scope = Scope.GLOBAL
    variable_type: VariableType = VariableType.VAR

    def __post_init__(self) -> None:
        self._check_axis_configuration(self.configuration_data.cfx)

    @staticmethod
    def _check_axis_configuration(value: int) -> None:
        if not 0 <= value <= 7:
            raise KinematicsError(
                f"Axis configuration must be between 0 and 7, got {value}"
            )

    @property
    def axis_configuration(self) -> int:
        return self.configuration_data.cfx

    @axis_configuration.setter
    def axis_configuration(self, value: int) -> None:
        self._check_axis_configuration(value)
        self.configuration_data.cfx = value

    @classmethod
    def from_quaternion(
        cls,
        point: list[float],
        quaternion: list[float],
        configuration_data: ConfigurationData | None = None,
        external_joint_position: ExternalJointPosition | None = None,
        **metadata: Any,
    ) -> "RobotTarget":
        """
        Build a target from a position and a (w, x, y, z) quaternion.
        """
        frame = Frame.from_quaternion(Quaternion(*quaternion), point=point)
        return cls(
            frame,
            configuration_data or ConfigurationData(),
            external_joint_position or ExternalJointPosition(),
            **metadata,
        )

    @property
    def quaternion(self) -> Quaternion:
        return frame_quaternion(self.frame)

    def to_rapid(self) -> str:
        q = self.quaternion
        return (
            f"[{format_values(self.frame.point)}, "
            f"{format_values([q.w, q.x, q.y, q.z], 6)}, "
            f"{self.configuration_data.to_rapid()}, "
            f"{self.external_joint_position.to_rapid()}]"
        )

    def copy(self) -> "RobotTarget":
        return RobotTarget(
            self.frame.copy(),
            self.configuration_data.copy(),
            self.external_joint_position.copy(),
            self.name,
            self.scope,
            self.variable_type,
        )

    def to_dict(self) -> dict[str, Any]:
        data = self._declaration_dict()
        data["frame"] = frame_to_data(self.frame)
        data["configuration_data"] = self.configuration_data.to_dict()
        data["external_joint_position"] = self.external_joint_position.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RobotTarget":
        return cls(
            frame_from_data(data["frame"]),
            ConfigurationData.from_dict(data.get("configuration_data", {})),
            ExternalJointPosition.from_dict(data.get("external_joint_position", {})),
            **read_declaration_metadata(data),
        )


@dataclass
class JointTarget(Declaration):
    """
    A target given directly in axis values (``jointtarget``).
    """

    datatype = "jointtarget"

    robot_joint_position: RobotJointPosition = field(default_factory=RobotJointPosition)
    external_joint_position: ExternalJointPosition = field(
        default_factory=ExternalJointPosition
    )
    name: str = ""
    scope: Scope = Scope.GLOBAL
    variable_type: VariableType = VariableType.VAR

    def _label(self) -> str:
        return f"Joint Target {self.name}" if self.name else "Joint Target"

    def check_axis_limits(self, robot: "Robot") -> list[str]:
        """Limit violations of both the internal and the external axes."""
        return self.check_internal_axis_limits(robot) + self.check_external_axis_limits(robot)

    def check_internal_axis_limits(self, robot: "Robot") -> list[str]:
        """
        Report robot axes whose value lies outside the robot's axis limits.

        Args:
            robot: Robot providing the internal axis limits

        Returns:
            One message per violating axis (empty when all are in range)
        """
        errors = []
        for index, limits in enumerate(robot.internal_axis_limits):
            if not limits.includes(self.robot_joint_position[index]):
                errors.append(
                    f"{self._label()}: The position of robot axis {index + 1} is not in range."
                )
        return errors

    def check_external_axis_limits(self, robot: "Robot") -> list[str]:
        """
        Report attached external axes that are undefined or out of range.
        """
        errors = []
        for axis in robot.external_axes:
            value = self.external_joint_position[axis.axis_number]
            if value is None:
                errors.append(
                    f"{self._label()}: The position of external logical axis "
                    f"{axis.axis_logic} is not defined (9E9)."
                )
            elif not axis.axis_limits.includes(value):
                errors.append(
                    f"{self._label()}: The position of external logical axis "
                    f"{axis.axis_logic} is not in range."
                )
        return errors

    def to_rapid(self) -> str:
        return (
            f"[{self.robot_joint_position.to_rapid()}, "
            f"{self.external_joint_position.to_rapid()}]"
        )

    def copy(self) -> "JointTarget":
        return JointTarget(
            self.robot_joint_position.copy(),
            self.external_joint_position.copy(),
            self.name,
            self.scope,
            self.variable_type,
        )

    def to_dict(self) -> dict[str, Any]:
        data = self._declaration_dict()
        data["robot_joint_position"] = self.robot_joint_position.to_dict()
        data["external_joint_position"] = self.external_joint_position.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JointTarget":
        return cls(
            RobotJointPosition.from_dict(data.get("robot_joint_position", {})),
            ExternalJointPosition.from_dict(data.get("external_joint_position", {})),
            **read_declaration_metadata(data),
        )
