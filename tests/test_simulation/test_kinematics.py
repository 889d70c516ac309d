"""Tests for the drivetrain solver."""

import math

import pytest

from ftcsim.simulation.core.entities import RobotState
from ftcsim.simulation.core.field import TWO_PI, Alliance, DriveMode, normalize_radians
from ftcsim.simulation.core.vec2 import Vec2
from ftcsim.simulation.physics.kinematics import (
    DriveProfile,
    DriveTrain,
    local_to_world,
    sanitize_axis,
)


class TestSanitizeAxis:
    """Tests for sanitize_axis()."""

    def test_in_range_passthrough(self):
        assert sanitize_axis(0.4) == 0.4
        assert sanitize_axis(-1.0) == -1.0

    def test_clamps_out_of_range(self):
        """Values beyond ±1 are clamped."""
        assert sanitize_axis(3.0) == 1.0
        assert sanitize_axis(-7.5) == -1.0

    def test_non_finite_is_zero(self):
        """NaN and infinities read as no input."""
        assert sanitize_axis(float("nan")) == 0.0
        assert sanitize_axis(float("inf")) == 0.0
        assert sanitize_axis(float("-inf")) == 0.0


class TestNormalizeRadians:
    """Tests for heading normalization."""

    @pytest.mark.parametrize("raw", [
        0.0, 1.0, -1.0, TWO_PI, -TWO_PI, 7 * math.pi, -13.3, 1e6, -1e-18,
    ])
    def test_always_in_range(self, raw):
        """Any finite heading lands in [0, 2π)."""
        value = normalize_radians(raw)
        assert 0.0 <= value < TWO_PI

    def test_wraps_negative_quarter_turn(self):
        assert normalize_radians(-math.pi / 2) == pytest.approx(3 * math.pi / 2)

    def test_non_finite_is_zero(self):
        assert normalize_radians(float("nan")) == 0.0


class TestLocalToWorld:
    """Tests for local_to_world()."""

    def test_field_centric_blue(self):
        """Blue: forward drives +X, strafe drives +Y."""
        world = local_to_world(2.0, 5.0, 1.3, DriveMode.FIELD, Alliance.BLUE)
        assert world == Vec2(5.0, 2.0)

    def test_field_centric_red_is_mirrored(self):
        """Red: both axes flip so forward still means away from your wall."""
        world = local_to_world(2.0, 5.0, 1.3, DriveMode.FIELD, Alliance.RED)
        assert world == Vec2(-5.0, -2.0)

    def test_field_centric_ignores_heading(self):
        a = local_to_world(1.0, 1.0, 0.0, DriveMode.FIELD, Alliance.BLUE)
        b = local_to_world(1.0, 1.0, 2.5, DriveMode.FIELD, Alliance.BLUE)
        assert a == b

    def test_robot_centric_rotates_by_heading(self):
        """Forward at heading π/2 drives +Y."""
        world = local_to_world(0.0, 10.0, math.pi / 2, DriveMode.ROBOT, Alliance.BLUE)
        assert world.x == pytest.approx(0.0, abs=1e-9)
        assert world.y == pytest.approx(10.0)

    def test_robot_centric_strafe(self):
        """Strafe at heading 0 drives +Y."""
        world = local_to_world(4.0, 0.0, 0.0, DriveMode.ROBOT, Alliance.RED)
        assert world.x == pytest.approx(0.0)
        assert world.y == pytest.approx(4.0)


class TestDriveTrain:
    """Tests for DriveTrain.solve() and stop()."""

    def test_neutral_input_stays_put(self):
        """A robot at rest with no input does not move."""
        robot = RobotState(index=0, pos=Vec2(72, 72))
        drive = DriveTrain()
        result = drive.solve(robot, 0.0, 0.0, 0.0, 0.02)
        assert result.new_pos == Vec2(72, 72)
        assert result.displacement.length() == 0.0

    def test_zero_dt_is_noop(self):
        """dt <= 0 leaves the robot and PID state untouched."""
        robot = RobotState(index=0, pos=Vec2(72, 72))
        drive = DriveTrain()
        result = drive.solve(robot, 1.0, 1.0, 1.0, 0.0)
        assert result.new_pos == robot.pos
        assert robot.velocity == Vec2.zero()
        assert all(pid.is_at_rest for pid in drive.pids)

    def test_forward_input_accelerates(self):
        """Full forward builds velocity toward max speed (blue drives +X)."""
        robot = RobotState(index=0, pos=Vec2(72, 72))
        drive = DriveTrain()
        x_before = robot.pos.x
        for _ in range(60):
            result = drive.solve(robot, 0.0, 1.0, 0.0, 1 / 60)
            robot.pos = result.new_pos
        assert robot.pos.x > x_before
        assert robot.velocity.y > 0
        assert abs(robot.pos.y - 72) < 1e-9

    def test_velocity_converges_to_target(self):
        """Held input settles near the commanded speed."""
        profile = DriveProfile()
        robot = RobotState(index=0, pos=Vec2(72, 72))
        drive = DriveTrain(profile)
        for _ in range(300):
            drive.solve(robot, 0.5, 0.0, 0.0, 1 / 60)
        assert robot.velocity.x == pytest.approx(0.5 * profile.max_speed, rel=0.01)

    def test_heading_stays_normalized(self):
        """Spinning for a long time never leaves [0, 2π)."""
        robot = RobotState(index=0, pos=Vec2(72, 72))
        drive = DriveTrain()
        for i in range(500):
            rotate = 1.0 if i < 250 else -1.0
            result = drive.solve(robot, 0.0, 0.0, rotate, 0.05)
            robot.heading = result.new_heading
            assert 0.0 <= robot.heading < TWO_PI

    def test_nan_input_treated_as_zero(self):
        """Malformed axes never poison velocity."""
        robot = RobotState(index=0, pos=Vec2(72, 72))
        drive = DriveTrain()
        result = drive.solve(robot, float("nan"), float("inf"), float("nan"), 0.02)
        assert result.new_pos == Vec2(72, 72)
        assert robot.velocity.is_finite()

    def test_stop_zeroes_everything(self):
        """stop() clears accumulators and every PID."""
        robot = RobotState(index=0, pos=Vec2(72, 72))
        drive = DriveTrain()
        for _ in range(10):
            drive.solve(robot, 1.0, -1.0, 1.0, 0.02)

        drive.stop(robot)
        assert robot.velocity == Vec2.zero()
        assert robot.rot_velocity == 0.0
        for pid in drive.pids:
            assert pid.is_at_rest
            assert pid.target == 0.0
