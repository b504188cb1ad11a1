"""
rapidkin - Kinematics and RAPID data for ABB robots with external axes.

Derives OPW kinematic parameters from axis planes, solves forward and inverse
kinematics for six-axis spherical-wrist robots on linear tracks and
positioners, and formats targets as RAPID data literals.
"""

__version__ = "0.1.0"
__author__ = "rapidkin Contributors"

from rapidkin.core.config import ConfigManager
from rapidkin.core.robot import Robot, RobotLoader

__all__ = [
    "__version__",
    "ConfigManager",
    "Robot",
    "RobotLoader",
]
