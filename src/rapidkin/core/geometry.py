"""
Geometry handling for rapidkin using COMPAS.

Frames stand in for CAD planes (origin plus two orthonormal axes), COMPAS
transformations for rigid transforms and COMPAS meshes for link geometry.
Mesh files are read through trimesh.
"""

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Sequence

import numpy as np
import trimesh
from compas.datastructures import Mesh as CompasMesh
from compas.geometry import Box, Frame, Point, Rotation, Transformation, Translation, Vector

from rapidkin.core.exceptions import GeometryError


@dataclass(frozen=True)
class Interval:
    """
    Closed numeric interval used for axis limits.

    ``lower`` and ``upper`` are stored as given; ``min`` and ``max`` give the
    ordered bounds, so a reversed interval behaves like its ordered twin.
    """

    lower: float
    upper: float

    @classmethod
    def parse(cls, value: "Interval | Sequence[float]") -> "Interval":
        """Build an interval from another interval or a (lower, upper) pair."""
        if isinstance(value, Interval):
            return value
        try:
            lower, upper = value
        except (TypeError, ValueError) as e:
            raise GeometryError(
                "An interval needs exactly two bounds", details={"value": repr(value)}
            ) from e
        return cls(float(lower), float(upper))

    @property
    def min(self) -> float:
        return min(self.lower, self.upper)

    @property
    def max(self) -> float:
        return max(self.lower, self.upper)

    @property
    def length(self) -> float:
        return self.max - self.min

    @property
    def is_valid(self) -> bool:
        return all(math.isfinite(v) for v in (self.lower, self.upper))

    def includes(self, value: float) -> bool:
        """Return True when ``value`` lies in the interval, bounds included."""
        return self.min <= value <= self.max

    def clamp(self, value: float) -> float:
        """Return ``value`` moved to the nearest bound when outside."""
        return max(self.min, min(value, self.max))

    def to_tuple(self) -> tuple[float, float]:
        return (self.lower, self.upper)


class GeometryConverter:
    """
    Converter between different geometry representations.

    Handles conversion between COMPAS and Trimesh meshes.
    """

    @staticmethod
    def trimesh_to_compas(mesh: trimesh.Trimesh) -> CompasMesh:
        """
        Convert Trimesh mesh to COMPAS Mesh.

        Args:
            mesh: Trimesh mesh object

        Returns:
            COMPAS Mesh object

        Raises:
            GeometryError: If conversion fails
        """
        try:
            return CompasMesh.from_vertices_and_faces(
                mesh.vertices.tolist(), mesh.faces.tolist()
            )
        except Exception as e:
            raise GeometryError(f"Failed to convert Trimesh to COMPAS: {e}") from e

    @staticmethod
    def compas_to_trimesh(mesh: CompasMesh) -> trimesh.Trimesh:
        """
        Convert COMPAS Mesh to Trimesh.

        Args:
            mesh: COMPAS Mesh object

        Returns:
            Trimesh mesh object

        Raises:
            GeometryError: If conversion fails
        """
        try:
            vertices, faces = mesh.to_vertices_and_faces()
            return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
        except Exception as e:
            raise GeometryError(f"Failed to convert COMPAS to Trimesh: {e}") from e


class GeometryLoader:
    """
    Loads link, tool and axis meshes from disk.

    Files are read with trimesh; scenes are flattened into one mesh.
    """

    SUPPORTED_FORMATS = {".stl", ".obj", ".ply", ".off"}

    @classmethod
    def load(cls, file_path: str | Path, **kwargs: Any) -> CompasMesh:
        """
        Load geometry from file.

        Args:
            file_path: Path to geometry file
            **kwargs: Additional arguments passed to trimesh.load

        Returns:
            COMPAS Mesh object

        Raises:
            GeometryError: If file format is unsupported or loading fails
        """
        path = Path(file_path)

        if not path.exists():
            raise GeometryError(f"File not found: {path}")

        if path.suffix.lower() not in cls.SUPPORTED_FORMATS:
            raise GeometryError(
                f"Unsupported format: {path.suffix}. "
                f"Supported formats: {sorted(cls.SUPPORTED_FORMATS)}"
            )

        try:
            loaded = trimesh.load(str(path), **kwargs)
        except Exception as e:
            raise GeometryError(f"Failed to load geometry from {path}: {e}") from e

        if isinstance(loaded, trimesh.Scene):
            parts = [
                geom for geom in loaded.geometry.values() if isinstance(geom, trimesh.Trimesh)
            ]
            if not parts:
                raise GeometryError(f"No triangle meshes in scene: {path}")
            mesh = trimesh.util.concatenate(parts)
        elif isinstance(loaded, trimesh.Trimesh):
            mesh = loaded
        else:
            raise GeometryError(f"Unexpected geometry type: {type(loaded)}")

        return GeometryConverter.trimesh_to_compas(mesh)

    @classmethod
    def load_optional(
        cls, file_path: str | Path | None, base_dir: Path | None = None
    ) -> CompasMesh:
        """
        Load a mesh, or return an empty mesh when no path is configured.

        Relative paths are resolved against ``base_dir`` when given.
        """
        if not file_path:
            return empty_mesh()
        path = Path(file_path)
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        return cls.load(path)

    @classmethod
    def save(cls, mesh: CompasMesh, file_path: str | Path, **kwargs: Any) -> None:
        """
        Save COMPAS mesh to file.

        Args:
            mesh: COMPAS Mesh to save
            file_path: Output file path
            **kwargs: Additional arguments passed to trimesh.export

        Raises:
            GeometryError: If the mesh is empty, the format unsupported or saving fails
        """
        path = Path(file_path)

        if is_empty_mesh(mesh):
            raise GeometryError(f"No geometry to save to {path}")

        if path.suffix.lower() not in cls.SUPPORTED_FORMATS:
            raise GeometryError(
                f"Unsupported format: {path.suffix}. "
                f"Supported formats: {sorted(cls.SUPPORTED_FORMATS)}"
            )

        tmesh = GeometryConverter.compas_to_trimesh(mesh)
        try:
            tmesh.export(str(path), **kwargs)
        except Exception as e:
            raise GeometryError(f"Failed to save geometry to {path}: {e}") from e


def empty_mesh() -> CompasMesh:
    """Return a mesh without vertices or faces."""
    return CompasMesh()


def is_empty_mesh(mesh: CompasMesh | None) -> bool:
    return mesh is None or mesh.number_of_vertices() == 0


def join_meshes(meshes: Iterable[CompasMesh]) -> CompasMesh:
    """
    Append several meshes into one new mesh.

    Vertex keys are renumbered; the inputs are left untouched.
    """
    vertices: list[list[float]] = []
    faces: list[list[int]] = []
    for mesh in meshes:
        if is_empty_mesh(mesh):
            continue
        index = {}
        for key in mesh.vertices():
            index[key] = len(vertices)
            vertices.append(mesh.vertex_coordinates(key))
        for face in mesh.faces():
            faces.append([index[key] for key in mesh.face_vertices(face)])
    if not vertices:
        return empty_mesh()
    return CompasMesh.from_vertices_and_faces(vertices, faces)


def mesh_points(meshes: Iterable[CompasMesh]) -> list[list[float]]:
    """Collect the vertex coordinates of all non-empty meshes."""
    points: list[list[float]] = []
    for mesh in meshes:
        if is_empty_mesh(mesh):
            continue
        points.extend(mesh.vertex_coordinates(key) for key in mesh.vertices())
    return points


class BoundingBox:
    """
    Axis-aligned bounding boxes for meshes and groups of meshes.
    """

    @staticmethod
    def from_points(points: Sequence[Sequence[float]]) -> Box:
        """
        Compute the world-aligned box around a point set.

        Args:
            points: Iterable of [x, y, z] coordinates

        Returns:
            COMPAS Box representing the bounding box

        Raises:
            GeometryError: If no points are given
        """
        if len(points) == 0:
            raise GeometryError("Cannot compute a bounding box without geometry")

        coords = np.asarray(points, dtype=float)
        min_pt = coords.min(axis=0)
        max_pt = coords.max(axis=0)
        xsize, ysize, zsize = (max_pt - min_pt).tolist()
        center = Point(*((min_pt + max_pt) / 2.0).tolist())
        frame = Frame(center, Vector(1, 0, 0), Vector(0, 1, 0))

        return Box(xsize=xsize, ysize=ysize, zsize=zsize, frame=frame)

    @staticmethod
    def from_mesh(mesh: CompasMesh) -> Box:
        """Compute the axis-aligned bounding box of one mesh."""
        return BoundingBox.from_points(mesh_points([mesh]))

    @staticmethod
    def from_meshes(meshes: Iterable[CompasMesh]) -> Box:
        """Compute the axis-aligned bounding box of the union of several meshes."""
        return BoundingBox.from_points(mesh_points(meshes))

    @staticmethod
    def get_dimensions(box: Box) -> tuple[float, float, float]:
        """Return the (x, y, z) sizes of a box."""
        return (box.xsize, box.ysize, box.zsize)

    @staticmethod
    def get_center(box: Box) -> Point:
        return box.frame.point


class TransformationUtilities:
    """
    Frame and transformation helpers shared by the axis and kinematics code.
    """

    @staticmethod
    def transform_mesh(mesh: CompasMesh, transformation: Transformation) -> CompasMesh:
        """
        Apply a transformation to a copy of a mesh.

        Args:
            mesh: COMPAS Mesh to transform
            transformation: COMPAS Transformation object

        Returns:
            Transformed COMPAS Mesh (new instance)
        """
        transformed = mesh.copy()
        if not is_empty_mesh(transformed):
            transformed.transform(transformation)
        return transformed

    @staticmethod
    def plane_to_plane(source: Frame, target: Frame) -> Transformation:
        """Rigid transformation mapping ``source`` onto ``target``."""
        return Transformation.from_frame_to_frame(source, target)

    @staticmethod
    def to_local(frame: Frame) -> Transformation:
        """Transformation taking world coordinates into ``frame``'s coordinates."""
        return Transformation.from_frame_to_frame(frame, Frame.worldXY())

    @staticmethod
    def to_world(frame: Frame) -> Transformation:
        """Transformation placing world-XY geometry onto ``frame``."""
        return Transformation.from_frame_to_frame(Frame.worldXY(), frame)

    @staticmethod
    def rotation_about_z(frame: Frame, angle: float) -> Rotation:
        """Rotation by ``angle`` radians about the Z axis of ``frame`` through its origin."""
        return Rotation.from_axis_and_angle(frame.zaxis, angle, point=frame.point)

    @staticmethod
    def translation_along_z(frame: Frame, distance: float) -> Translation:
        """Translation by ``distance`` along the Z axis of ``frame``."""
        return Translation.from_vector(frame.zaxis.scaled(distance))

    @staticmethod
    def frame_from_normal(
        point: Sequence[float], normal: Sequence[float]
    ) -> Frame:
        """
        Build a frame at ``point`` whose Z axis is ``normal``.

        The X axis is world X projected onto the frame, or world Y when the
        normal is parallel to world X.

        Raises:
            GeometryError: If the normal has zero length
        """
        z = np.asarray(normal, dtype=float)
        length = np.linalg.norm(z)
        if length < 1e-12:
            raise GeometryError("Frame normal has zero length", details={"normal": list(normal)})
        z = z / length

        reference = np.array([1.0, 0.0, 0.0])
        if abs(float(np.dot(reference, z))) > 0.99:
            reference = np.array([0.0, 1.0, 0.0])
        x = reference - np.dot(reference, z) * z
        x /= np.linalg.norm(x)
        y = np.cross(z, x)

        return Frame(Point(*point), Vector(*x.tolist()), Vector(*y.tolist()))

    @staticmethod
    def frames_close(a: Frame, b: Frame, tol: float = 1e-6) -> bool:
        """Compare origin and axes of two frames within ``tol``."""
        pairs = ((a.point, b.point), (a.xaxis, b.xaxis), (a.yaxis, b.yaxis))
        return all(
            np.allclose(np.asarray(u, dtype=float), np.asarray(v, dtype=float), atol=tol)
            for u, v in pairs
        )

    @staticmethod
    def is_valid_frame(frame: Frame | None) -> bool:
        """A frame is valid when set and all its components are finite."""
        if frame is None:
            return False
        values = list(frame.point) + list(frame.xaxis) + list(frame.yaxis)
        return all(math.isfinite(v) for v in values)


def frame_to_data(frame: Frame) -> dict[str, list[float]]:
    """Plain-list representation of a frame, for dict serialization."""
    return {
        "point": list(frame.point),
        "xaxis": list(frame.xaxis),
        "yaxis": list(frame.yaxis),
    }


def frame_from_data(data: dict[str, Sequence[float]]) -> Frame:
    """Inverse of :func:`frame_to_data`."""
    try:
        return Frame(data["point"], data["xaxis"], data["yaxis"])
    except KeyError as e:
        raise GeometryError(f"Frame data is missing {e}", details={"data": data}) from e
