"""
Custom exceptions for rapidkin.

All rapidkin exceptions inherit from RapidKinError for easy catching.
Limit violations are not exceptions: they are reported as lists of messages.
"""

from typing import Any


class RapidKinError(Exception):
    """Base exception for all rapidkin errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(RapidKinError):
    """Raised when configuration is invalid or missing."""

    pass


class GeometryError(RapidKinError):
    """Raised when geometry cannot be loaded, converted or is degenerate."""

    pass


class KinematicsError(RapidKinError):
    """Raised when a kinematics solver receives unusable input."""

    pass


class JointPositionError(RapidKinError):
    """Base class for joint position arithmetic errors."""

    pass


class AxisMismatchError(JointPositionError):
    """Raised when a defined axis value is combined with an undefined one."""

    def __init__(
        self,
        message: str,
        axis: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.axis = axis


class JointDivisionByZeroError(JointPositionError, ZeroDivisionError):
    """Raised when a joint position is divided by zero."""

    def __init__(
        self,
        message: str,
        axis: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.axis = axis


class ExternalAxisError(RapidKinError):
    """Raised when an external axis is misconfigured."""

    pass


class InvalidAxisLogicError(ExternalAxisError):
    """Raised when an axis logic token is not -1..5 or a..f."""

    def __init__(
        self,
        message: str,
        token: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.token = token


class RobotError(RapidKinError):
    """Raised when the robot aggregate violates one of its invariants."""

    pass


class TooManyExternalAxesError(RobotError):
    """Raised when more than six external axes are attached."""

    pass


class MultipleMovingAxesError(RobotError):
    """Raised when more than one external axis moves the robot."""

    pass


class DuplicateAxisLogicNumberError(RobotError):
    """Raised when two external axes share an axis logic number."""

    pass


class InvalidExternalAxisError(RobotError):
    """Raised when an attached external axis is not valid."""

    pass
