"""
Robot tools and their load data (``tooldata`` / ``loaddata``).
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from compas.datastructures import Mesh as CompasMesh
from compas.geometry import Box, Frame, Transformation

from rapidkin.core.declarations import frame_quaternion
from rapidkin.core.geometry import (
    BoundingBox,
    TransformationUtilities,
    empty_mesh,
    frame_from_data,
    frame_to_data,
    is_empty_mesh,
)
from rapidkin.core.rapid import (
    Declaration,
    Scope,
    VariableType,
    format_number,
    format_values,
    read_declaration_metadata,
)


@dataclass
class LoadData(Declaration):
    """
    Mass properties of a tool or payload (``loaddata``).

    Attributes:
        mass: Mass in kg
        center_of_gravity: Centre of gravity in the tool mounting frame (mm)
        axes_of_moment: Orientation of the inertial axes as (w, x, y, z)
        inertial_moments: Moments of inertia about those axes (kgm2)
    """

    datatype = "loaddata"

    mass: float = 0.001
    center_of_gravity: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.001])
    axes_of_moment: list[float] = field(default_factory=lambda: [1.0, 0.0, 0.0, 0.0])
    inertial_moments: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    name: str = "load0"
    scope: Scope = Scope.GLOBAL
    variable_type: VariableType = VariableType.PERS

    @property
    def is_valid(self) -> bool:
        return (
            self.mass >= 0
            and len(self.center_of_gravity) == 3
            and len(self.axes_of_moment) == 4
            and len(self.inertial_moments) == 3
        )

    def to_rapid(self) -> str:
        inertia = ", ".join(format_number(v, 6) for v in self.inertial_moments)
        return (
            f"[{format_number(self.mass, 6)}, "
            f"{format_values(self.center_of_gravity, 6)}, "
            f"{format_values(self.axes_of_moment, 6)}, "
            f"{inertia}]"
        )

    def copy(self) -> "LoadData":
        return LoadData(
            self.mass,
            list(self.center_of_gravity),
            list(self.axes_of_moment),
            list(self.inertial_moments),
            self.name,
            self.scope,
            self.variable_type,
        )

    def to_dict(self) -> dict[str, Any]:
        data = self._declaration_dict()
        data.update(
            mass=self.mass,
            center_of_gravity=list(self.center_of_gravity),
            axes_of_moment=list(self.axes_of_moment),
            inertial_moments=list(self.inertial_moments),
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LoadData":
        metadata = read_declaration_metadata(data, VariableType.PERS)
        return cls(
            mass=float(data.get("mass", 0.001)),
            center_of_gravity=list(data.get("center_of_gravity", [0.0, 0.0, 0.001])),
            axes_of_moment=list(data.get("axes_of_moment", [1.0, 0.0, 0.0, 0.0])),
            inertial_moments=list(data.get("inertial_moments", [0.0, 0.0, 0.0])),
            **{**metadata, "name": data.get("name", "load0")},
        )


class RobotTool(Declaration):
    """
    A tool mounted on the robot flange (``tooldata``).

    The attachment frame is where the tool meets the flange; the tool frame
    is the tool center point. Both are given in the same coordinate system
    as the tool mesh, and the robot re-attaches a copy of the tool onto its
    mounting frame.

    Example:
        >>> tool = RobotTool.default()
        >>> tool.to_rapid()
        '[TRUE, [[0, 0, 0], [1, 0, 0, 0]], [0.001, [0, 0, 0.001], [1, 0, 0, 0], 0, 0, 0]]'
    """

    datatype = "tooldata"

    def __init__(
        self,
        name: str = "tool0",
        mesh: Optional[CompasMesh] = None,
        attachment_frame: Optional[Frame] = None,
        tool_frame: Optional[Frame] = None,
        robot_hold: bool = True,
        load_data: Optional[LoadData] = None,
        scope: Scope = Scope.GLOBAL,
        variable_type: VariableType = VariableType.PERS,
    ) -> None:
        self.name = name
        self.mesh = mesh if mesh is not None else empty_mesh()
        self.attachment_frame = attachment_frame if attachment_frame is not None else Frame.worldXY()
        self.tool_frame = tool_frame if tool_frame is not None else Frame.worldXY()
        self.robot_hold = robot_hold
        self.load_data = load_data.copy() if load_data is not None else LoadData()
        self.scope = Scope(scope)
        self.variable_type = VariableType(variable_type)

    @classmethod
    def default(cls) -> "RobotTool":
        """The flange itself as a tool: ``tool0``."""
        return cls()

    def __repr__(self) -> str:
        return f"RobotTool(name={self.name!r})"

    @property
    def local_tool_frame(self) -> Frame:
        """Tool frame expressed in the attachment frame."""
        return self.tool_frame.transformed(
            TransformationUtilities.to_local(self.attachment_frame)
        )

    @property
    def position(self) -> list[float]:
        return list(self.local_tool_frame.point)

    @property
    def orientation(self) -> list[float]:
        q = frame_quaternion(self.local_tool_frame)
        return [q.w, q.x, q.y, q.z]

    @property
    def is_valid(self) -> bool:
        return (
            TransformationUtilities.is_valid_frame(self.attachment_frame)
            and TransformationUtilities.is_valid_frame(self.tool_frame)
            and self.load_data.is_valid
        )

    def transform(self, transformation: Transformation) -> None:
        """Move the tool frames and mesh in place."""
        self.attachment_frame = self.attachment_frame.transformed(transformation)
        self.tool_frame = self.tool_frame.transformed(transformation)
        if not is_empty_mesh(self.mesh):
            self.mesh.transform(transformation)

    def get_bounding_box(self) -> Box:
        return BoundingBox.from_mesh(self.mesh)

    def copy(self, duplicate_mesh: bool = True) -> "RobotTool":
        """
        Return an independent copy of the tool.

        Args:
            duplicate_mesh: Copy the mesh too; otherwise the copy gets an empty mesh
        """
        return RobotTool(
            name=self.name,
            mesh=self.mesh.copy() if duplicate_mesh else empty_mesh(),
            attachment_frame=self.attachment_frame.copy(),
            tool_frame=self.tool_frame.copy(),
            robot_hold=self.robot_hold,
            load_data=self.load_data,
            scope=self.scope,
            variable_type=self.variable_type,
        )

    def to_rapid(self) -> str:
        hold = "TRUE" if self.robot_hold else "FALSE"
        return (
            f"[{hold}, [{format_values(self.position, 3)}, "
            f"{format_values(self.orientation, 6)}], "
            f"{self.load_data.to_rapid()}]"
        )

    def to_dict(self) -> dict[str, Any]:
        data = self._declaration_dict()
        data.update(
            attachment_frame=frame_to_data(self.attachment_frame),
            tool_frame=frame_to_data(self.tool_frame),
            robot_hold=self.robot_hold,
            load_data=self.load_data.to_dict(),
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RobotTool":
        """Rebuild a tool from :meth:`to_dict` output (the mesh is not stored)."""
        metadata = read_declaration_metadata(data, VariableType.PERS)
        return cls(
            name=metadata["name"] or "tool0",
            attachment_frame=frame_from_data(data["attachment_frame"]),
            tool_frame=frame_from_data(data["tool_frame"]),
            robot_hold=bool(data.get("robot_hold", True)),
            load_data=LoadData.from_dict(data.get("load_data", {})),
            scope=metadata["scope"],
            variable_type=metadata["variable_type"],
        )
