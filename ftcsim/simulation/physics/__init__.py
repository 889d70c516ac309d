"""Physics layer - PID smoothing, drivetrain, shots, collisions and odometry."""

from .pid import PIDController
from .kinematics import DriveProfile, DriveResult, DriveTrain, local_to_world, sanitize_axis
from .trajectory import ShotSolution, plan_shot, success_probability
from .collision import (
    SeparationResult,
    clamp_to_field,
    constrain_position,
    push_out_of_baskets,
    resolve_pair,
    separate_robots,
)
from .odometry import DriftRates, OdometryModel, PoseEstimate

__all__ = [
    "PIDController",
    "DriveProfile",
    "DriveResult",
    "DriveTrain",
    "local_to_world",
    "sanitize_axis",
    "ShotSolution",
    "plan_shot",
    "success_probability",
    "SeparationResult",
    "clamp_to_field",
    "constrain_position",
    "push_out_of_baskets",
    "resolve_pair",
    "separate_robots",
    "DriftRates",
    "OdometryModel",
    "PoseEstimate",
]
