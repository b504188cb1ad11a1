"""
Forward and inverse kinematics for six-axis ABB robots with external axes.

Inverse kinematics is solved in closed form with the OPW model
(Brandstötter, Angerer, Hofbaur: "An analytical solution of the inverse
kinematics problem of industrial serial manipulators with an ortho-parallel
basis and a spherical wrist", 2014), which yields up to eight solutions
per target. Forward kinematics poses the robot's axis planes directly, so it
also works for geometry that is not exactly OPW-shaped.

Joint values are in degrees at the interface and radians inside the solver.
"""

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Sequence, Union

import numpy as np
from compas.datastructures import Mesh as CompasMesh
from compas.geometry import Frame, Rotation, Transformation

from rapidkin.core.declarations import ConfigurationData, JointTarget, RobotTarget, quadrant
from rapidkin.core.exceptions import KinematicsError
from rapidkin.core.geometry import TransformationUtilities
from rapidkin.core.joint_positions import ExternalJointPosition, RobotJointPosition
from rapidkin.core.kinematic_parameters import RobotKinematicParameters
from rapidkin.core.logging import get_logger
from rapidkin.core.tool import RobotTool
from rapidkin.motion.external_axes import ExternalLinearAxis

if TYPE_CHECKING:
    from rapidkin.core.robot import Robot

_logger = get_logger(__name__)

#: Below this |axis 5| (radians) the wrist is singular.
WRIST_SINGULARITY_TOLERANCE = 1e-3

#: Below this distance (mm) of the wrist centre to axis 1 the shoulder is singular.
SHOULDER_SINGULARITY_TOLERANCE = 1e-3


def _wrap(angle: float) -> float:
    """Wrap an angle in radians into [-pi, pi)."""
    return (angle + math.pi) % (2.0 * math.pi) - math.pi


def _acos(value: float) -> tuple[float, bool]:
    """
    Arc cosine that tolerates values slightly outside [-1, 1].

    Returns the angle and whether the value was reachable at all.
    """
    if not math.isfinite(value):
        return 0.0, False
    reachable = abs(value) <= 1.0 + 1e-12
    return math.acos(max(-1.0, min(1.0, value))), reachable


def frame_to_matrix(frame: Frame) -> np.ndarray:
    """4x4 homogeneous matrix of a frame."""
    return np.array(Transformation.from_frame(frame).matrix, dtype=float)


def matrix_to_frame(matrix: np.ndarray) -> Frame:
    """Frame of a 4x4 homogeneous matrix."""
    return Frame(matrix[:3, 3].tolist(), matrix[:3, 0].tolist(), matrix[:3, 1].tolist())


@dataclass
class OPWSolutions:
    """
    The eight inverse kinematics candidates of one target.

    Attributes:
        joints: (8, 6) array of joint values in degrees, indexed by cfx
        elbow_singularities: Per solution, the target is out of reach or the
            arm is fully stretched
        wrist_singularities: Per solution, axes 4 and 6 are aligned
        shoulder_singularity: The wrist centre lies on axis 1
    """

    joints: np.ndarray
    elbow_singularities: list[bool]
    wrist_singularities: list[bool]
    shoulder_singularity: bool


class OPWKinematics:
    """
    Closed-form kinematics of an ortho-parallel arm with spherical wrist.

    The solver works in the robot base frame. The flange frame at zero pose
    has its Z axis along +X and its X axis pointing down (-Z).

    Args:
        parameters: OPW kinematic parameters of the robot
    """

    OFFSETS = np.array([0.0, 0.0, -math.pi / 2.0, 0.0, 0.0, 0.0])
    SIGN_CORRECTIONS = np.ones(6)

    #: OPW solution index for each ABB cfx value.
    SOLUTION_ORDER = (0, 4, 1, 5, 2, 6, 3, 7)

    def __init__(self, parameters: RobotKinematicParameters) -> None:
        if not parameters.is_valid:
            raise KinematicsError(
                "Kinematic parameters contain NaN", details=parameters.to_dict()
            )
        if abs(parameters.a3) > 1e-9:
            _logger.warning("wrist_offset_ignored", a3=parameters.a3)

        self.a1 = parameters.a1
        self.a2 = parameters.a2
        # The axis planes put the wrist at -b along Y.
        self.b = -parameters.b
        self.c1 = parameters.c1
        self.c2 = parameters.c2
        self.c3 = parameters.c3
        self.c4 = parameters.c4

    def _to_solver(self, joints_deg: Sequence[float]) -> np.ndarray:
        return np.radians(np.asarray(joints_deg, dtype=float)) * self.SIGN_CORRECTIONS - self.OFFSETS

    def _from_solver(self, angles: np.ndarray) -> np.ndarray:
        return np.degrees(self.SIGN_CORRECTIONS * (angles + self.OFFSETS))

    def forward(self, joints_deg: Sequence[float]) -> np.ndarray:
        """
        Flange pose for a joint position.

        Args:
            joints_deg: Six joint values in degrees

        Returns:
            4x4 flange pose in the base frame
        """
        q1, q2, q3, q4, q5, q6 = self._to_solver(joints_deg)
        psi3 = math.atan2(self.a2, self.c3)
        k = math.hypot(self.a2, self.c3)

        cx1 = self.c2 * math.sin(q2) + k * math.sin(q2 + q3 + psi3) + self.a1
        cy1 = self.b
        cz1 = self.c2 * math.cos(q2) + k * math.cos(q2 + q3 + psi3)

        s1, c1 = math.sin(q1), math.cos(q1)
        wrist = np.array([cx1 * c1 - cy1 * s1, cx1 * s1 + cy1 * c1, cz1 + self.c1])

        rotation = _rot_z(q1) @ _rot_y(q2 + q3) @ _rot_z(q4) @ _rot_y(q5) @ _rot_z(q6)

        pose = np.eye(4)
        pose[:3, :3] = rotation
        pose[:3, 3] = wrist + self.c4 * rotation[:, 2]
        return pose

    def inverse(self, pose: np.ndarray) -> OPWSolutions:
        """
        All eight joint solutions for a flange pose.

        Solutions are returned in cfx order. Unreachable branches are still
        returned (with the arm stretched towards the target) and flagged as
        elbow singularities.

        Args:
            pose: 4x4 flange pose in the base frame

        Returns:
            The candidate solutions and their singularity flags
        """
        a1, a2, b, c1, c2, c3, c4 = self.a1, self.a2, self.b, self.c1, self.c2, self.c3, self.c4
        rotation = pose[:3, :3]
        cx0, cy0, cz0 = pose[:3, 3] - c4 * rotation[:, 2]

        nx1 = math.sqrt(max(cx0 * cx0 + cy0 * cy0 - b * b, 0.0)) - a1

        tmp1 = math.atan2(cy0, cx0)
        tmp2 = math.atan2(b, nx1 + a1)
        theta1_i = tmp1 - tmp2
        theta1_ii = tmp1 + tmp2 - math.pi

        tmp3 = cz0 - c1
        s1_2 = nx1 * nx1 + tmp3 * tmp3
        tmp4 = nx1 + 2.0 * a1
        s2_2 = tmp4 * tmp4 + tmp3 * tmp3
        kappa_2 = a2 * a2 + c3 * c3
        c2_2 = c2 * c2

        s1 = math.sqrt(s1_2)
        s2 = math.sqrt(s2_2)
        denominator = 2.0 * c2 * math.sqrt(kappa_2)

        psi2_i, reach_a = _acos((s1_2 + c2_2 - kappa_2) / (2.0 * c2 * s1) if s1 > 0 else math.nan)
        psi2_ii, reach_b = _acos((s2_2 + c2_2 - kappa_2) / (2.0 * c2 * s2) if s2 > 0 else math.nan)
        psi3_i, reach3_a = _acos((s1_2 - c2_2 - kappa_2) / denominator)
        psi3_ii, reach3_b = _acos((s2_2 - c2_2 - kappa_2) / denominator)
        elbow_a = not (reach_a and reach3_a)
        elbow_b = not (reach_b and reach3_b)

        psi1_i = math.atan2(nx1, tmp3)
        psi1_ii = math.atan2(tmp4, tmp3)
        offset3 = math.atan2(a2, c3)

        arms = [
            (theta1_i, -psi2_i + psi1_i, psi3_i - offset3, elbow_a),
            (theta1_i, psi2_i + psi1_i, -psi3_i - offset3, elbow_a),
            (theta1_ii, -psi2_ii - psi1_ii, psi3_ii - offset3, elbow_b),
            (theta1_ii, psi2_ii - psi1_ii, -psi3_ii - offset3, elbow_b),
        ]

        e = rotation
        raw = np.zeros((8, 6))
        elbow = [False] * 8
        for index, (t1, t2, t3, stretched) in enumerate(arms):
            s1_, c1_ = math.sin(t1), math.cos(t1)
            s23, c23 = math.sin(t2 + t3), math.cos(t2 + t3)

            m = e[0, 2] * s23 * c1_ + e[1, 2] * s23 * s1_ + e[2, 2] * c23
            t4 = math.atan2(
                e[1, 2] * c1_ - e[0, 2] * s1_,
                e[0, 2] * c23 * c1_ + e[1, 2] * c23 * s1_ - e[2, 2] * s23,
            )
            t5 = math.atan2(math.sqrt(max(1.0 - m * m, 0.0)), m)
            t6 = math.atan2(
                e[0, 1] * s23 * c1_ + e[1, 1] * s23 * s1_ + e[2, 1] * c23,
                -e[0, 0] * s23 * c1_ - e[1, 0] * s23 * s1_ - e[2, 0] * c23,
            )

            raw[index] = [t1, t2, t3, t4, t5, t6]
            raw[index + 4] = [t1, t2, t3, t4 + math.pi, -t5, t6 - math.pi]
            elbow[index] = elbow[index + 4] = stretched

        wrist = [abs(raw[i, 4]) < WRIST_SINGULARITY_TOLERANCE for i in range(8)]
        shoulder = (
            abs(cx0) < SHOULDER_SINGULARITY_TOLERANCE
            and abs(cy0) < SHOULDER_SINGULARITY_TOLERANCE
        )

        wrapped = np.vectorize(_wrap)(raw)
        joints = np.array([self._from_solver(wrapped[i]) for i in range(8)])

        order = list(self.SOLUTION_ORDER)
        return OPWSolutions(
            joints=joints[order],
            elbow_singularities=[elbow[i] for i in order],
            wrist_singularities=[wrist[i] for i in order],
            shoulder_singularity=shoulder,
        )


def _rot_z(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def _rot_y(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def _label(name: str, prefix: str) -> str:
    return f"{prefix} {name}: " if name else ""


@dataclass
class ForwardKinematicsResult:
    """
    Pose of the robot and its external axes for one joint position.

    Attributes:
        tcp_frame: Tool center point in world coordinates
        posed_internal_axis_frames: The six axis planes after posing
        posed_external_axis_frames: Posed attachment frame per axis logic
            number (None for unused numbers)
        posed_robot_meshes: Posed base, link and tool meshes (empty when
            meshes are hidden)
        posed_external_axis_meshes: [base, link] per external axis
        error_text: Limit violations
        in_limits: Whether every axis value lies inside its limits
    """

    tcp_frame: Frame
    posed_internal_axis_frames: list[Frame]
    posed_external_axis_frames: list[Optional[Frame]]
    posed_robot_meshes: list[CompasMesh] = field(default_factory=list)
    posed_external_axis_meshes: list[list[CompasMesh]] = field(default_factory=list)
    error_text: list[str] = field(default_factory=list)
    in_limits: bool = True


class ForwardKinematics:
    """
    Poses a robot for given internal and external joint positions.

    Each internal axis rotates the rest of the chain about its zero-pose
    axis plane. External axes are posed with their clamped transformation.
    An axis that moves the robot carries the whole chain to its unclamped
    position.

    Args:
        robot: The robot to pose
        hide_mesh: Skip mesh posing (frames only)
    """

    def __init__(self, robot: "Robot", hide_mesh: bool = False) -> None:
        self.robot = robot
        self.hide_mesh = hide_mesh
        self.result: Optional[ForwardKinematicsResult] = None

    def calculate(
        self,
        robot_joint_position: Union[RobotJointPosition, JointTarget],
        external_joint_position: Optional[ExternalJointPosition] = None,
    ) -> ForwardKinematicsResult:
        """
        Pose the robot.

        Args:
            robot_joint_position: Internal axis values in degrees, or a joint
                target carrying both positions
            external_joint_position: External axis values (unconnected when omitted)

        Returns:
            The posed frames and meshes with any limit violations
        """
        if isinstance(robot_joint_position, JointTarget):
            external_joint_position = robot_joint_position.external_joint_position
            robot_joint_position = robot_joint_position.robot_joint_position
        if external_joint_position is None:
            external_joint_position = ExternalJointPosition()

        robot = self.robot
        errors: list[str] = []
        in_limits = True

        for index, limits in enumerate(robot.internal_axis_limits):
            if not limits.includes(robot_joint_position[index]):
                errors.append(f"The position of robot axis {index + 1} is not in range.")
                in_limits = False

        position_frame = robot.base_frame
        external_frames: list[Optional[Frame]] = [None] * 6
        external_meshes: list[list[CompasMesh]] = []

        for axis in robot.external_axes:
            value = external_joint_position[axis.axis_number]
            if value is None:
                errors.append(
                    f"The position of external logical axis {axis.axis_logic} is not defined."
                )
                in_limits = False
            elif not axis.in_limits(value):
                errors.append(
                    f"The position of external logical axis {axis.axis_logic} is not in range."
                )
                in_limits = False

            transformation = axis.calculate_transformation_matrix_save(external_joint_position)
            external_frames[axis.axis_number] = axis.attachment_frame.transformed(transformation)
            # the robot base follows the unclamped value, as in inverse kinematics
            if axis.moves_robot:
                position_frame, _ = axis.calculate_position(external_joint_position)
            if not self.hide_mesh:
                external_meshes.append([
                    axis.base_mesh.copy(),
                    TransformationUtilities.transform_mesh(axis.link_mesh, transformation),
                ])

        transforms = self.chain_transformations(robot_joint_position, position_frame)
        posed_frames = [
            plane.transformed(transforms[index + 1])
            for index, plane in enumerate(robot.internal_axis_planes)
        ]
        tcp_frame = robot.tool_frame.transformed(transforms[6])

        robot_meshes: list[CompasMesh] = []
        if not self.hide_mesh:
            meshes = robot.meshes
            for index, mesh in enumerate(meshes):
                transformation = transforms[min(index, 6)]
                robot_meshes.append(TransformationUtilities.transform_mesh(mesh, transformation))

        _logger.debug(
            "forward_kinematics",
            joints=list(robot_joint_position),
            in_limits=in_limits,
        )
        self.result = ForwardKinematicsResult(
            tcp_frame=tcp_frame,
            posed_internal_axis_frames=posed_frames,
            posed_external_axis_frames=external_frames,
            posed_robot_meshes=robot_meshes,
            posed_external_axis_meshes=external_meshes,
            error_text=errors,
            in_limits=in_limits,
        )
        return self.result

    def chain_transformations(
        self, robot_joint_position: RobotJointPosition, position_frame: Frame
    ) -> list[Transformation]:
        """
        Cumulative transformations of the kinematic chain.

        Element 0 moves the base onto ``position_frame``; element k (1..6)
        additionally applies the rotations of axes 1..k.
        """
        robot = self.robot
        current = TransformationUtilities.plane_to_plane(robot.base_frame, position_frame)
        transforms = [current]
        for index, plane in enumerate(robot.internal_axis_planes):
            rotation = Rotation.from_axis_and_angle(
                plane.zaxis, math.radians(robot_joint_position[index]), point=plane.point
            )
            current = current * rotation
            transforms.append(current)
        return transforms

    @property
    def tcp_frame(self) -> Frame:
        return self._require_result().tcp_frame

    @property
    def error_text(self) -> list[str]:
        return self._require_result().error_text

    @property
    def in_limits(self) -> bool:
        return self._require_result().in_limits

    def _require_result(self) -> ForwardKinematicsResult:
        if self.result is None:
            raise KinematicsError("Forward kinematics has not been calculated yet")
        return self.result


@dataclass
class InverseKinematicsResult:
    """
    Joint solution for one target.

    Attributes:
        robot_joint_position: Solution selected by the target's cfx
        external_joint_position: External axis values used
        configuration_data: Configuration of the selected solution
        robot_joint_positions: All eight candidates in cfx order
        selected_solution: Index of the selected candidate
        error_text: Limit violations and singularity warnings
        in_limits: False when an axis is out of range or the target out of reach
    """

    robot_joint_position: RobotJointPosition
    external_joint_position: ExternalJointPosition
    configuration_data: ConfigurationData
    robot_joint_positions: list[RobotJointPosition] = field(default_factory=list)
    selected_solution: int = 0
    error_text: list[str] = field(default_factory=list)
    in_limits: bool = True
    elbow_singularities: list[bool] = field(default_factory=lambda: [False] * 8)
    wrist_singularities: list[bool] = field(default_factory=lambda: [False] * 8)
    shoulder_singularity: bool = False
    target_name: str = ""

    @property
    def elbow_singularity(self) -> bool:
        return self.elbow_singularities[self.selected_solution]

    @property
    def wrist_singularity(self) -> bool:
        return self.wrist_singularities[self.selected_solution]

    @property
    def joint_target(self) -> JointTarget:
        return JointTarget(
            self.robot_joint_position.copy(),
            self.external_joint_position.copy(),
        )


def adjust_to_quadrant(angle: float, target_quadrant: int) -> float:
    """
    Shift an angle by whole turns so it lies in the requested quadrant.

    Only shifts that are a multiple of four quadrants are possible; other
    requests leave the angle unchanged.
    """
    current = quadrant(angle)
    diff = target_quadrant - current
    if target_quadrant != current and diff % 4 == 0:
        return angle + diff / 4 * 360.0
    if (angle / 90.0) % 1 == 0:
        if target_quadrant != current + 1 and (diff + 1) % 4 == 0:
            return angle + (diff + 1) / 4 * 360.0
    return angle


def full_rotations(previous: float, current: float) -> int:
    """Whole turns to add to ``current`` to come closest to ``previous``."""
    return int(round((previous - current) / 360.0))


class InverseKinematics:
    """
    Solves joint positions for Cartesian targets.

    The target frame is converted to a flange frame with the tool, then into
    the robot base frame (moved by any external axis that carries the robot),
    and solved with :class:`OPWKinematics`.

    Args:
        robot: The robot to solve for
    """

    def __init__(self, robot: "Robot") -> None:
        self.robot = robot
        self.result: Optional[InverseKinematicsResult] = None

    def calculate(
        self,
        target: Union[RobotTarget, JointTarget],
        tool: Optional[RobotTool] = None,
        work_object_frame: Optional[Frame] = None,
    ) -> InverseKinematicsResult:
        """
        Solve a target.

        Out-of-range joints and singularities are reported in the result's
        ``error_text``; they never raise.

        Args:
            target: Robot target (solved) or joint target (checked only)
            tool: Tool to use instead of the robot's tool
            work_object_frame: Frame the target is expressed in (world by default)

        Returns:
            The selected solution with all candidates and messages
        """
        if isinstance(target, JointTarget):
            result = self._joint_target_result(target)
        elif isinstance(target, RobotTarget):
            result = self._solve(target, tool or self.robot.tool, work_object_frame)
        else:
            raise KinematicsError(
                f"Cannot solve inverse kinematics for {type(target).__name__}"
            )

        self._check_limits(result)
        self.result = result
        return result

    def _joint_target_result(self, target: JointTarget) -> InverseKinematicsResult:
        position = target.robot_joint_position.copy()
        return InverseKinematicsResult(
            robot_joint_position=position,
            external_joint_position=target.external_joint_position.copy(),
            configuration_data=ConfigurationData.from_joint_position(position),
            robot_joint_positions=[position.copy() for _ in range(8)],
            target_name=target.name,
        )

    def _solve(
        self,
        target: RobotTarget,
        tool: RobotTool,
        work_object_frame: Optional[Frame],
    ) -> InverseKinematicsResult:
        robot = self.robot
        global_target = target.frame
        if work_object_frame is not None:
            global_target = global_target.transformed(
                TransformationUtilities.to_world(work_object_frame)
            )

        external = self.calculate_external_joint_position(target, global_target)
        position_frame = robot.base_frame
        mover = robot.moving_external_axis
        if mover is not None:
            position_frame, _ = mover.calculate_position(external)

        end_frame = tool.attachment_frame.transformed(
            TransformationUtilities.plane_to_plane(tool.tool_frame, global_target)
        )
        local_end = end_frame.transformed(TransformationUtilities.to_local(position_frame))
        pose = frame_to_matrix(local_end) @ robot.flange_correction_inverse

        solutions = robot.opw_kinematics.inverse(pose)
        candidates = [RobotJointPosition(row.tolist()) for row in solutions.joints]

        cfx = target.configuration_data.cfx
        selected = candidates[cfx].copy()
        selected[0] = adjust_to_quadrant(selected[0], target.configuration_data.cf1)
        selected[3] = adjust_to_quadrant(selected[3], target.configuration_data.cf4)
        selected[5] = adjust_to_quadrant(selected[5], target.configuration_data.cf6)

        configuration = ConfigurationData.from_joint_position(selected, cfx)
        configuration.name = target.configuration_data.name

        _logger.debug(
            "inverse_kinematics",
            target=target.name,
            cfx=cfx,
            joints=list(selected),
        )
        return InverseKinematicsResult(
            robot_joint_position=selected,
            external_joint_position=external,
            configuration_data=configuration,
            robot_joint_positions=candidates,
            selected_solution=cfx,
            elbow_singularities=solutions.elbow_singularities,
            wrist_singularities=solutions.wrist_singularities,
            shoulder_singularity=solutions.shoulder_singularity,
            target_name=target.name,
        )

    def calculate_external_joint_position(
        self, target: RobotTarget, global_target: Optional[Frame] = None
    ) -> ExternalJointPosition:
        """
        External axis values for a robot target.

        Unconnected values of attached axes are resolved: the linear axis that
        carries the robot moves as close to the target as its limits allow,
        any other axis takes 0 clamped into its limits.
        """
        external = target.external_joint_position.copy()
        point = (global_target or target.frame).point
        for axis in self.robot.external_axes:
            if external[axis.axis_number] is not None:
                continue
            if axis.moves_robot and isinstance(axis, ExternalLinearAxis):
                external[axis.axis_number] = axis.closest_axis_value(point)
            else:
                external[axis.axis_number] = axis.axis_limits.clamp(0.0)
        return external

    def calculate_closest_robot_joint_position(
        self,
        previous: RobotJointPosition,
        include_joint1: bool = True,
        include_joint4: bool = True,
        include_joint6: bool = True,
    ) -> InverseKinematicsResult:
        """
        Re-select the candidate closest to a previous joint position.

        Axes 1, 4 and 6 of each candidate may be shifted by whole turns to
        come closer to ``previous``.

        Raises:
            KinematicsError: If no target has been solved yet
        """
        if self.result is None:
            raise KinematicsError("Inverse kinematics has not been calculated yet")
        result = self.result

        best = result.robot_joint_position
        best_index = result.selected_solution
        best_norm = (previous - best).norm()
        shift_axes = [
            index
            for index, include in ((0, include_joint1), (3, include_joint4), (5, include_joint6))
            if include
        ]

        for index, candidate in enumerate(result.robot_joint_positions):
            shifted = candidate.copy()
            for axis in shift_axes:
                shifted[axis] = shifted[axis] + full_rotations(previous[axis], candidate[axis]) * 360.0
            norm = (previous - shifted).norm()
            if norm < best_norm:
                best, best_index, best_norm = shifted, index, norm

        result.robot_joint_position = best.copy()
        result.selected_solution = best_index
        name = result.configuration_data.name
        result.configuration_data = ConfigurationData.from_joint_position(best, best_index)
        result.configuration_data.name = name
        self._check_limits(result)
        return result

    def _check_limits(self, result: InverseKinematicsResult) -> None:
        label = _label(result.target_name, "Target")
        errors: list[str] = []
        in_limits = True

        for index, limits in enumerate(self.robot.internal_axis_limits):
            if not limits.includes(result.robot_joint_position[index]):
                errors.append(f"{label}The position of robot joint {index + 1} is not in range.")
                in_limits = False

        if result.wrist_singularity:
            errors.append(f"{label}The robot is near a wrist singularity.")
        if result.elbow_singularity:
            errors.append(f"{label}The target is out of reach (elbow singularity).")
            in_limits = False
        if result.shoulder_singularity:
            errors.append(f"{label}The robot is near a shoulder singularity.")

        for axis in self.robot.external_axes:
            value = result.external_joint_position[axis.axis_number]
            if value is None:
                errors.append(
                    f"{label}The position of external logical axis {axis.axis_logic} is not defined."
                )
                in_limits = False
            elif not axis.in_limits(value):
                errors.append(
                    f"{label}The position of external logical axis {axis.axis_logic} is not in range."
                )
                in_limits = False

        if result.wrist_singularity or result.elbow_singularity or result.shoulder_singularity:
            _logger.debug(
                "ik_singularity",
                target=result.target_name,
                wrist=result.wrist_singularity,
                elbow=result.elbow_singularity,
                shoulder=result.shoulder_singularity,
            )
        result.error_text = errors
        result.in_limits = in_limits

    @property
    def robot_joint_position(self) -> RobotJointPosition:
        if self.result is None:
            raise KinematicsError("Inverse kinematics has not been calculated yet")
        return self.result.robot_joint_position

    @property
    def error_text(self) -> list[str]:
        if self.result is None:
            raise KinematicsError("Inverse kinematics has not been calculated yet")
        return self.result.error_text
