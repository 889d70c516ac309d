"""Drivetrain profile and solver.

Converts normalized stick input into PID-smoothed velocity and then into
a world-frame displacement and new heading. Bounds and basket keep-out
are applied afterwards by the collision resolver.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..core.entities import RobotState
from ..core.field import Alliance, DriveMode, normalize_radians
from ..core.vec2 import Vec2
from .pid import PIDController


def sanitize_axis(value: float) -> float:
    """Clamp an axis into [-1, 1]; NaN and infinities read as no input."""
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return 0.0
    return max(-1.0, min(1.0, float(value)))


@dataclass
class DriveProfile:
    """Defines how a robot CAN move.

    Attributes:
        max_speed: Top translational speed in inches/second
        max_rot_speed: Top turn rate in radians/second
        linear_gains: (kp, ki, kd) for the strafe and forward axes
        heading_gains: (kp, ki, kd) for the rotation axis
    """
    max_speed: float = 76.5
    max_rot_speed: float = 5.5
    linear_gains: tuple[float, float, float] = (10.0, 0.0, 0.5)
    heading_gains: tuple[float, float, float] = (12.0, 0.0, 0.6)

    def __repr__(self) -> str:
        return (
            f"DriveProfile(max_speed={self.max_speed:.1f}, "
            f"max_rot={self.max_rot_speed:.1f})"
        )


@dataclass
class DriveResult:
    """Result of one drivetrain step, before collision resolution."""
    new_pos: Vec2
    new_heading: float
    displacement: Vec2


def local_to_world(
    strafe_vel: float,
    forward_vel: float,
    heading: float,
    drive_mode: DriveMode,
    alliance: Alliance,
) -> Vec2:
    """World-frame velocity for a local (strafe, forward) velocity.

    Robot-centric rotates by heading. Field-centric is axis aligned and
    mirrored for red so "forward" always drives away from your own wall.
    """
    if drive_mode == DriveMode.ROBOT:
        # Local frame: +x forward, +y strafe, rotated onto the field by heading
        return Vec2(forward_vel, strafe_vel).rotate(heading)

    if alliance == Alliance.BLUE:
        return Vec2(forward_vel, strafe_vel)
    return Vec2(-forward_vel, -strafe_vel)


class DriveTrain:
    """Per-robot velocity smoothing.

    Each robot owns one PID per axis. PID state persists from tick to tick
    and is only cleared by ``stop()`` when the match stops.
    """

    def __init__(self, profile: DriveProfile | None = None) -> None:
        self.profile = profile or DriveProfile()
        self.strafe_pid = PIDController(*self.profile.linear_gains)
        self.forward_pid = PIDController(*self.profile.linear_gains)
        self.heading_pid = PIDController(*self.profile.heading_gains)

    @property
    def pids(self) -> tuple[PIDController, PIDController, PIDController]:
        return self.strafe_pid, self.forward_pid, self.heading_pid

    def stop(self, robot: RobotState) -> None:
        """Zero the robot's accumulators and reset every PID."""
        robot.stop()
        for pid in self.pids:
            pid.set_target(0.0)
            pid.reset()

    def solve(
        self,
        robot: RobotState,
        strafe: float,
        forward: float,
        rotate: float,
        dt: float,
        drive_mode: DriveMode = DriveMode.FIELD,
        alliance: Alliance = Alliance.BLUE,
    ) -> DriveResult:
        """Advance the robot's velocity accumulators and integrate one step.

        Args:
            robot: Robot to drive (velocity accumulators are updated in place)
            strafe: Normalized strafe input, -1..1 (+ = right)
            forward: Normalized forward input, -1..1
            rotate: Normalized rotation input, -1..1
            dt: Time step in seconds
            drive_mode: Field- or robot-centric interpretation
            alliance: Needed to orient field-centric driving

        Returns:
            DriveResult with the unconstrained new pose
        """
        if dt <= 0:
            return DriveResult(robot.pos, robot.heading, Vec2.zero())

        self.strafe_pid.set_target(sanitize_axis(strafe) * self.profile.max_speed)
        self.forward_pid.set_target(sanitize_axis(forward) * self.profile.max_speed)
        self.heading_pid.set_target(sanitize_axis(rotate) * self.profile.max_rot_speed)

        strafe_vel = robot.velocity.x + self.strafe_pid.update(robot.velocity.x, dt) * dt
        forward_vel = robot.velocity.y + self.forward_pid.update(robot.velocity.y, dt) * dt
        rot_vel = robot.rot_velocity + self.heading_pid.update(robot.rot_velocity, dt) * dt

        robot.velocity = Vec2(strafe_vel, forward_vel)
        robot.rot_velocity = rot_vel

        world_vel = local_to_world(strafe_vel, forward_vel, robot.heading, drive_mode, alliance)
        displacement = world_vel * dt

        return DriveResult(
            new_pos=robot.pos + displacement,
            new_heading=normalize_radians(robot.heading + rot_vel * dt),
            displacement=displacement,
        )
