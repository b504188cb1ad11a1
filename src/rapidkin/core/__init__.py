"""
Core module - Configuration, geometry, declarations and the robot model.
"""

from rapidkin.core.config import ConfigManager
from rapidkin.core.declarations import ConfigurationData, JointTarget, RobotTarget
from rapidkin.core.exceptions import (
    AxisMismatchError,
    ConfigurationError,
    DuplicateAxisLogicNumberError,
    ExternalAxisError,
    GeometryError,
    InvalidAxisLogicError,
    InvalidExternalAxisError,
    JointDivisionByZeroError,
    JointPositionError,
    KinematicsError,
    MultipleMovingAxesError,
    RapidKinError,
    RobotError,
    TooManyExternalAxesError,
)
from rapidkin.core.geometry import (
    BoundingBox,
    GeometryConverter,
    GeometryLoader,
    Interval,
    TransformationUtilities,
)
from rapidkin.core.joint_positions import (
    UNDEFINED_AXIS,
    ExternalJointPosition,
    RobotJointPosition,
)
from rapidkin.core.kinematic_parameters import ArmLengths, RobotKinematicParameters
from rapidkin.core.rapid import Scope, VariableType
from rapidkin.core.tool import LoadData, RobotTool
from rapidkin.core.robot import Robot, RobotLoader, RobotState

__all__ = [
    # Config
    "ConfigManager",
    # Declarations
    "ConfigurationData",
    "JointTarget",
    "RobotTarget",
    "Scope",
    "VariableType",
    # Exceptions
    "RapidKinError",
    "ConfigurationError",
    "GeometryError",
    "KinematicsError",
    "JointPositionError",
    "AxisMismatchError",
    "JointDivisionByZeroError",
    "ExternalAxisError",
    "InvalidAxisLogicError",
    "RobotError",
    "TooManyExternalAxesError",
    "MultipleMovingAxesError",
    "DuplicateAxisLogicNumberError",
    "InvalidExternalAxisError",
    # Geometry
    "BoundingBox",
    "GeometryConverter",
    "GeometryLoader",
    "Interval",
    "TransformationUtilities",
    # Joint positions
    "UNDEFINED_AXIS",
    "ExternalJointPosition",
    "RobotJointPosition",
    # Kinematic parameters
    "ArmLengths",
    "RobotKinematicParameters",
    # Tool
    "LoadData",
    "RobotTool",
    # Robot
    "Robot",
    "RobotLoader",
    "RobotState",
]
