"""
Capabilities shared by every mechanical unit: robots and external axes.
"""

from abc import ABC, abstractmethod
from typing import Any

from compas.datastructures import Mesh as CompasMesh
from compas.geometry import Box, Transformation


class MechanicalUnit(ABC):
    """
    A unit that can be posed, bounded and moved as a whole.

    Implemented by :class:`~rapidkin.core.robot.Robot` and by the external
    axes in :mod:`rapidkin.motion.external_axes`.
    """

    name: str

    @property
    @abstractmethod
    def is_valid(self) -> bool:
        """Whether the unit is fully defined."""

    @abstractmethod
    def pose_meshes(self, target: Any) -> list[CompasMesh]:
        """Return copies of the unit's meshes posed for ``target``."""

    @abstractmethod
    def get_bounding_box(self) -> Box:
        """World-aligned bounding box of the unit at its zero pose."""

    @abstractmethod
    def transform(self, transformation: Transformation) -> None:
        """Move the unit's frames and meshes in place."""

    @abstractmethod
    def copy(self, duplicate_mesh: bool = True) -> "MechanicalUnit":
        """Return an independent copy."""
