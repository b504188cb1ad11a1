"""
Configuration management for rapidkin.

Robot definitions (kinematic parameters, joint limits, tool and external
axes) are read from YAML files in ``<config_dir>/robots`` and validated with
pydantic.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional

import yaml
from compas.geometry import Frame
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from rapidkin.core.exceptions import ConfigurationError


class FrameConfig(BaseModel):
    """A frame as origin and two axes."""

    point: list[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0])
    xaxis: list[float] = Field(default_factory=lambda: [1.0, 0.0, 0.0])
    yaxis: list[float] = Field(default_factory=lambda: [0.0, 1.0, 0.0])

    @field_validator("point", "xaxis", "yaxis")
    @classmethod
    def _three_components(cls, value: list[float]) -> list[float]:
        if len(value) != 3:
            raise ValueError("expected 3 components")
        return value

    def to_frame(self) -> Frame:
        return Frame(self.point, self.xaxis, self.yaxis)


class KinematicsConfig(BaseModel):
    """OPW kinematic parameters in mm."""

    a1: float
    a2: float
    a3: float = 0.0
    b: float = 0.0
    c1: float
    c2: float
    c3: float
    c4: float


class ToolConfig(BaseModel):
    """Tool definition; frames are given in the tool's own coordinates."""

    name: str = "tool0"
    mesh_path: Optional[str] = None
    attachment_frame: FrameConfig = Field(default_factory=FrameConfig)
    tool_frame: FrameConfig = Field(default_factory=FrameConfig)
    robot_hold: bool = True
    mass: float = 0.001
    center_of_gravity: list[float] = Field(default_factory=lambda: [0.0, 0.0, 0.001])


class ExternalAxisConfig(BaseModel):
    """
    External axis definition.

    The axis is either a full frame or a direction through the attachment
    frame origin. ``moves_robot`` left unset takes the axis type's default:
    linear tracks carry the robot, rotational axes do not.
    """

    name: str
    type: Literal["linear", "rotational"]
    attachment_frame: FrameConfig = Field(default_factory=FrameConfig)
    axis_frame: Optional[FrameConfig] = None
    axis_direction: Optional[list[float]] = None
    limits: tuple[float, float]
    axis_logic: str = "-1"
    moves_robot: Optional[bool] = None
    base_mesh_path: Optional[str] = None
    link_mesh_path: Optional[str] = None

    @field_validator("axis_logic", mode="before")
    @classmethod
    def _axis_logic_as_text(cls, value: object) -> str:
        return str(value)

    @model_validator(mode="after")
    def _axis_given(self) -> "ExternalAxisConfig":
        if self.axis_frame is None and self.axis_direction is None:
            raise ValueError("either axis_frame or axis_direction is required")
        return self


class RobotConfig(BaseModel):
    """Robot configuration model."""

    name: str
    manufacturer: str = "ABB"
    kinematics: KinematicsConfig
    joint_limits: list[tuple[float, float]]
    base_frame: FrameConfig = Field(default_factory=FrameConfig)
    mesh_paths: list[str] = Field(default_factory=list)
    tool: Optional[ToolConfig] = None
    external_axes: list[ExternalAxisConfig] = Field(default_factory=list)

    @field_validator("joint_limits")
    @classmethod
    def _six_limits(cls, value: list[tuple[float, float]]) -> list[tuple[float, float]]:
        if len(value) != 6:
            raise ValueError(f"expected 6 joint limits, got {len(value)}")
        return value

    @field_validator("mesh_paths")
    @classmethod
    def _seven_meshes(cls, value: list[str]) -> list[str]:
        if value and len(value) != 7:
            raise ValueError(f"expected 7 meshes (base and 6 links), got {len(value)}")
        return value


@dataclass
class ConfigManager:
    """
    Central configuration manager for rapidkin.

    Loads and validates robot configurations from YAML files.

    Example:
        >>> config = ConfigManager(config_dir=Path("config"))
        >>> robot = config.get_robot("irb6700_245_300")
        >>> robot.kinematics.c4
        250.0
    """

    config_dir: Path
    _robots: dict[str, RobotConfig] = field(default_factory=dict, init=False)
    _loaded: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.config_dir = Path(self.config_dir)
        if not self.config_dir.exists():
            raise ConfigurationError(
                f"Configuration directory not found: {self.config_dir}"
            )

    @property
    def robots_dir(self) -> Path:
        return self.config_dir / "robots"

    def load(self) -> None:
        """Load all configurations from disk."""
        self._load_robots()
        self._loaded = True

    def _load_robots(self) -> None:
        if not self.robots_dir.exists():
            return

        for config_file in sorted(self.robots_dir.glob("*.yaml")):
            try:
                with open(config_file) as f:
                    data = yaml.safe_load(f)

                if data and "robot" in data:
                    robot_data = dict(data["robot"])
                    # Merge with other sections
                    if "kinematics" in data:
                        robot_data["kinematics"] = data["kinematics"]
                    if "limits" in data:
                        robot_data["joint_limits"] = data["limits"].get("joints", [])
                    for section in ("tool", "external_axes", "base_frame", "mesh_paths"):
                        if section in data:
                            robot_data[section] = data[section]

                    self._robots[config_file.stem] = RobotConfig(**robot_data)
            except (yaml.YAMLError, ValidationError) as e:
                raise ConfigurationError(
                    f"Failed to load robot config: {config_file}",
                    details={"error": str(e)},
                )

    def get_robot(self, name: str) -> RobotConfig:
        """
        Get robot configuration by name.

        Args:
            name: Robot configuration name (without .yaml extension)

        Returns:
            RobotConfig instance

        Raises:
            ConfigurationError: If robot not found
        """
        if not self._loaded:
            self.load()

        if name not in self._robots:
            raise ConfigurationError(
                f"Robot configuration not found: {name}",
                details={"available": list(self._robots.keys())},
            )
        return self._robots[name]

    def list_robots(self) -> list[str]:
        """List available robot configurations."""
        if not self._loaded:
            self.load()
        return list(self._robots.keys())
