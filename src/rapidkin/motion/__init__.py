"""
Motion module - External axes and robot kinematics.
"""

from rapidkin.motion.external_axes import (
    ExternalAxis,
    ExternalAxisType,
    ExternalLinearAxis,
    ExternalRotationalAxis,
    create_external_axis,
    create_linear_track,
    create_turntable,
    parse_axis_logic,
)
from rapidkin.motion.kinematics import (
    ForwardKinematics,
    ForwardKinematicsResult,
    InverseKinematics,
    InverseKinematicsResult,
    OPWKinematics,
)

__all__ = [
    # External axes
    "ExternalAxis",
    "ExternalAxisType",
    "ExternalLinearAxis",
    "ExternalRotationalAxis",
    "create_external_axis",
    "create_linear_track",
    "create_turntable",
    "parse_axis_logic",
    # Kinematics
    "ForwardKinematics",
    "ForwardKinematicsResult",
    "InverseKinematics",
    "InverseKinematicsResult",
    "OPWKinematics",
]
