"""
Command-line interface for rapidkin.

Provides commands to inspect robot presets and to evaluate forward and
inverse kinematics from the shell.
"""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from rapidkin import __version__
from rapidkin.core.config import ConfigManager
from rapidkin.core.declarations import ConfigurationData, RobotTarget
from rapidkin.core.geometry import BoundingBox, GeometryLoader, join_meshes
from rapidkin.core.joint_positions import ExternalJointPosition, RobotJointPosition
from rapidkin.core.logging import configure_logging
from rapidkin.core.robot import Robot, RobotLoader

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config-dir",
    type=click.Path(exists=True, path_type=Path),
    default="config",
    help="Configuration directory",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug log output")
@click.pass_context
def main(ctx: click.Context, config_dir: Path, verbose: bool) -> None:
    """rapidkin - Kinematics and RAPID data for ABB robots."""
    configure_logging(level="DEBUG" if verbose else "WARNING")
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir


def _load_robot(config_dir: Path, name: str) -> Robot:
    config_mgr = ConfigManager(config_dir)
    return RobotLoader.load_from_config(config_mgr.get_robot(name), base_dir=config_dir)


def _parse_external(values: tuple[str, ...]) -> ExternalJointPosition:
    position = ExternalJointPosition()
    for item in values:
        key, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(f"expected AXIS=VALUE, got {item!r}", param_hint="--external")
        try:
            position[key] = float(value)
        except (IndexError, ValueError) as e:
            raise click.BadParameter(str(e), param_hint="--external") from e
    return position


def _print_messages(messages: list[str], in_limits: bool) -> None:
    if in_limits and not messages:
        console.print("[green]✓[/green] All axes in range")
        return
    for message in messages:
        console.print(f"[yellow]⚠[/yellow] {message}")


# =============================================================================
# Robot Commands
# =============================================================================


@main.command("robots")
@click.pass_context
def robots(ctx: click.Context) -> None:
    """List available robot configurations."""
    try:
        config_mgr = ConfigManager(ctx.obj["config_dir"])
        names = config_mgr.list_robots()

        if not names:
            console.print("[yellow]No robot configurations found.[/yellow]")
            return

        table = Table(title="Available Robots")
        table.add_column("Name", style="cyan")
        table.add_column("Model")
        table.add_column("Manufacturer")
        table.add_column("External Axes")

        for name in names:
            robot = config_mgr.get_robot(name)
            table.add_row(name, robot.name, robot.manufacturer, str(len(robot.external_axes)))

        console.print(table)

    except Exception as e:
        console.print(f"[red]✗[/red] Failed to list robots: {e}")
        raise SystemExit(1)


@main.command("params")
@click.argument("robot_name")
@click.pass_context
def params(ctx: click.Context, robot_name: str) -> None:
    """Show the kinematic parameters and limits of a robot."""
    try:
        robot = _load_robot(ctx.obj["config_dir"], robot_name)

        table = Table(title=f"Kinematics: {robot.name}")
        table.add_column("Parameter", style="cyan")
        table.add_column("Value", justify="right")
        for key, value in robot.kinematic_parameters.to_dict().items():
            table.add_row(key, f"{value:.3f}")
        table.add_row("lower arm", f"{robot.arm_lengths.lower_arm:.3f}")
        table.add_row("upper arm", f"{robot.arm_lengths.upper_arm:.3f}")
        console.print(table)

        limits_table = Table(title="Axis Limits")
        limits_table.add_column("Axis", style="cyan")
        limits_table.add_column("Min", justify="right")
        limits_table.add_column("Max", justify="right")
        for index, limits in enumerate(robot.internal_axis_limits):
            limits_table.add_row(str(index + 1), f"{limits.min:g}", f"{limits.max:g}")
        for axis in robot.external_axes:
            limits_table.add_row(
                f"{axis.axis_logic} ({axis.name})",
                f"{axis.axis_limits.min:g}",
                f"{axis.axis_limits.max:g}",
            )
        console.print(limits_table)

        box = robot.get_bounding_box()
        size = " x ".join(f"{v:.1f}" for v in BoundingBox.get_dimensions(box))
        center = ", ".join(f"{v:.1f}" for v in BoundingBox.get_center(box))
        console.print(f"Bounding box: {size} mm at [{center}]")
        console.print(f"State: {robot.state.value}")

    except Exception as e:
        console.print(f"[red]✗[/red] Failed to load robot: {e}")
        raise SystemExit(1)


# =============================================================================
# Kinematics Commands
# =============================================================================


@main.command("fk")
@click.argument("robot_name")
@click.argument("joints", nargs=6, type=float)
@click.option("--external", "-e", multiple=True, help="External axis value, e.g. a=500")
@click.option(
    "--export",
    "export_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the posed robot, tool and axis meshes to a mesh file",
)
@click.pass_context
def fk(
    ctx: click.Context,
    robot_name: str,
    joints: tuple[float, ...],
    external: tuple[str, ...],
    export_path: Path | None,
) -> None:
    """Compute the TCP frame for six joint values in degrees."""
    external_position = _parse_external(external)
    try:
        robot = _load_robot(ctx.obj["config_dir"], robot_name)
        robot_position = RobotJointPosition(list(joints))
        result = robot.forward_kinematics.calculate(robot_position, external_position)

        # Solve back to find the branch (cfx) of this joint position.
        branch_target = RobotTarget(result.tcp_frame, ConfigurationData(), external_position)
        robot.inverse_kinematics.calculate(branch_target)
        solution = robot.inverse_kinematics.calculate_closest_robot_joint_position(
            robot_position
        )
        target = RobotTarget(
            result.tcp_frame, solution.configuration_data, solution.external_joint_position
        )

        frame = result.tcp_frame
        table = Table(title=f"TCP: {robot.name}")
        table.add_column("Component", style="cyan")
        table.add_column("X", justify="right")
        table.add_column("Y", justify="right")
        table.add_column("Z", justify="right")
        for label, vector in (("point", frame.point), ("xaxis", frame.xaxis), ("yaxis", frame.yaxis)):
            table.add_row(label, *(f"{v:.3f}" for v in vector))
        console.print(table)

        console.print(f"robtarget: {target.to_rapid()}")
        _print_messages(result.error_text, result.in_limits)

        if export_path is not None:
            meshes = list(result.posed_robot_meshes)
            for axis_meshes in result.posed_external_axis_meshes:
                meshes.extend(axis_meshes)
            GeometryLoader.save(join_meshes(meshes), export_path)
            console.print(f"[green]✓[/green] Posed geometry written to {export_path}")

    except Exception as e:
        console.print(f"[red]✗[/red] Forward kinematics failed: {e}")
        raise SystemExit(1)


@main.command("ik")
@click.argument("robot_name")
@click.argument("position", nargs=3, type=float)
@click.argument("quaternion", nargs=4, type=float)
@click.option("--cfx", type=click.IntRange(0, 7), default=0, help="Axis configuration (0-7)")
@click.option("--external", "-e", multiple=True, help="External axis value, e.g. a=500")
@click.pass_context
def ik(
    ctx: click.Context,
    robot_name: str,
    position: tuple[float, float, float],
    quaternion: tuple[float, float, float, float],
    cfx: int,
    external: tuple[str, ...],
) -> None:
    """Solve joint values for a TCP position and (w, x, y, z) quaternion."""
    external_position = _parse_external(external)
    try:
        robot = _load_robot(ctx.obj["config_dir"], robot_name)
        target = RobotTarget.from_quaternion(
            list(position),
            list(quaternion),
            ConfigurationData(cfx=cfx),
            external_position,
        )
        result = robot.inverse_kinematics.calculate(target)

        table = Table(title=f"Solutions: {robot.name}")
        table.add_column("cfx", style="cyan")
        for index in range(6):
            table.add_column(f"J{index + 1}", justify="right")
        for index, candidate in enumerate(result.robot_joint_positions):
            style = "bold" if index == result.selected_solution else None
            table.add_row(str(index), *(f"{v:.3f}" for v in candidate), style=style)
        console.print(table)

        console.print(f"jointtarget: {result.joint_target.to_rapid()}")
        console.print(f"confdata: {result.configuration_data.to_rapid()}")
        _print_messages(result.error_text, result.in_limits)

    except Exception as e:
        console.print(f"[red]✗[/red] Inverse kinematics failed: {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
