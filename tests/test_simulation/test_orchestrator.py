"""Tests for the Orchestrator tick loop and match controls."""

import math
import random

import pytest

from ftcsim.simulation import (
    AgentMode,
    Alliance,
    Button,
    DriveMode,
    EventType,
    InputFrame,
    Orchestrator,
    SampleType,
    Vec2,
)
from ftcsim.simulation.core.entities import INITIAL_SAMPLE_LAYOUT, INVENTORY_CAPACITY
from ftcsim.simulation.core.field import TWO_PI, is_in_bounds


TOTAL_SAMPLES = len(INITIAL_SAMPLE_LAYOUT)


def random_frame(rng: random.Random) -> InputFrame:
    buttons = [b for b in Button if rng.random() < 0.3]
    return InputFrame(
        strafe=rng.uniform(-1.5, 1.5),
        forward=rng.uniform(-1.5, 1.5),
        rotate=rng.uniform(-1.5, 1.5),
        buttons=frozenset(buttons),
    )


class TestStartStop:
    """Tests for start_match(), stop_match() and reset_field()."""

    def test_blue_spawn(self, running):
        assert running.is_running
        assert running.alliance == Alliance.BLUE
        assert running.robot.pos == Vec2(24.0, 120.0)
        assert running.partner.pos == Vec2(48.0, 120.0)
        assert running.robot.heading == pytest.approx(3 * math.pi / 2)

    def test_red_spawn(self, orchestrator):
        """Red robots start in the red human player corner."""
        orchestrator.start_match("red")
        assert orchestrator.robot.pos == Vec2(120.0, 120.0)
        assert orchestrator.partner.pos == Vec2(96.0, 120.0)

    def test_invalid_alliance(self, orchestrator):
        with pytest.raises(ValueError):
            orchestrator.start_match("green")
        assert not orchestrator.is_running

    def test_start_resets_everything(self, running):
        """Starting a match restores layout, score, inventories and clock."""
        running.match.score = 12
        running.robot.held_samples = [SampleType.GREEN]
        running.run(0.5)

        running.start_match(Alliance.BLUE)

        assert running.match.score == 0
        assert running.robot.held_samples == []
        assert running.clock.current_time == 0.0
        assert len(running.match.samples) == TOTAL_SAMPLES

    def test_start_then_stop_is_at_rest(self, running):
        """A match stopped right after starting leaves everything zeroed."""
        running.stop_match()

        assert not running.is_running
        assert running.match.score == 0
        for robot in running.robots:
            assert robot.velocity == Vec2.zero()
            assert robot.rot_velocity == 0.0
            assert robot.held_samples == []
            assert robot.mode == AgentMode.INTAKE
        for drive in running.drivetrains:
            assert all(pid.is_at_rest for pid in drive.pids)

    def test_stop_zeroes_motion_but_keeps_score(self, running):
        """Stopping mid-drive brings robots to rest without clearing progress."""
        running.set_input(0, InputFrame(forward=1.0, rotate=0.5))
        running.run(0.5)
        running.match.score = 6
        assert running.robot.velocity.length() > 0

        running.stop_match()

        assert running.robot.velocity == Vec2.zero()
        assert running.robot.rot_velocity == 0.0
        assert all(pid.is_at_rest for pid in running.drivetrains[0].pids)
        assert running.match.score == 6

    def test_reset_field_clears_inventories(self, running):
        running.robot.held_samples = [SampleType.PURPLE, SampleType.GREEN]
        running.robot.mode = AgentMode.ARMED
        running.reset_field()
        assert running.robot.held_samples == []
        assert running.robot.mode == AgentMode.INTAKE
        assert running.item_counts().total == TOTAL_SAMPLES

    def test_lifecycle_events(self, running):
        running.stop_match()
        types = [e.type for e in running.event_bus.history]
        assert EventType.MATCH_START in types
        assert EventType.MATCH_STOP in types


class TestStep:
    """Tests for step() and run()."""

    def test_stopped_match_is_noop(self, orchestrator):
        """Ticks while stopped change nothing."""
        before = orchestrator.snapshot()
        orchestrator.set_input(0, InputFrame(forward=1.0))
        result = orchestrator.step(0.02)
        assert not result.advanced
        assert orchestrator.snapshot() == before

    @pytest.mark.parametrize("dt", [0.0, -0.5, float("nan")])
    def test_unusable_dt_is_noop(self, running, dt):
        """Zero, negative and NaN deltas advance nothing."""
        running.set_input(0, InputFrame(forward=1.0))
        pos = running.robot.pos
        result = running.step(dt)
        assert not result.advanced
        assert running.clock.tick_count == 0
        assert running.robot.pos == pos

    def test_large_dt_is_clamped(self, running):
        result = running.step(5.0)
        assert result.dt == pytest.approx(running.config.max_dt)

    def test_forward_moves_robot(self, running):
        """Blue forward drives toward +X."""
        running.set_input(0, InputFrame(forward=1.0))
        start = running.robot.pos
        running.run(0.5)
        assert running.robot.pos.x > start.x

    def test_partner_ignored_when_inactive(self, running):
        running.set_input(1, InputFrame(forward=1.0))
        start = running.partner.pos
        running.run(0.5)
        assert running.partner.pos == start

    def test_input_index_checked(self, running):
        with pytest.raises(IndexError):
            running.set_input(2, InputFrame())

    def test_input_is_sanitized(self, running):
        running.set_input(0, InputFrame(strafe=float("nan"), forward=4.0))
        frame = running.input_for(0)
        assert frame.strafe == 0.0
        assert frame.forward == 1.0

    def test_tick_reports_events(self, running):
        """Events emitted during a tick come back on its result."""
        running.set_agent_config(0, position=Vec2(72.0, 72.0))
        running.set_input(0, InputFrame(buttons=frozenset({Button.ACTION})))
        result = running.step(0.02)
        assert [e.type for e in result.events] == [EventType.PICKUP]


class TestInvariants:
    """Random input never breaks bounds, capacity or heading range."""

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_random_drive(self, config, seed):
        orch = Orchestrator(config, rng=random.Random(seed))
        orch.start_match(Alliance.BLUE if seed % 2 else Alliance.RED)
        orch.set_partner_active(True)
        inputs = random.Random(seed * 101)

        for i in range(900):
            if i % 15 == 0:
                orch.set_input(0, random_frame(inputs))
                orch.set_input(1, random_frame(inputs))
            orch.step(inputs.uniform(0.0, 0.08))

            for robot in orch.robots:
                assert is_in_bounds(robot.pos, robot.size)
                assert len(robot.held_samples) <= INVENTORY_CAPACITY
                assert 0.0 <= robot.heading < TWO_PI
            assert orch.item_counts().total == TOTAL_SAMPLES

    def test_corner_drive_respects_keep_out(self, running):
        """Driving hard into the blue basket corner stops at the keep-out line."""
        running.set_input(0, InputFrame(strafe=-1.0, forward=-1.0))
        running.run(5.0)
        pos = running.robot.pos
        assert pos.x + pos.y >= 34.5 - 1e-9

    def test_robots_stay_separated(self, running):
        """Two robots driven into each other end at least the minimum apart."""
        running.set_partner_active(True)
        running.set_agent_config(0, position=Vec2(60.0, 72.0))
        running.set_agent_config(1, position=Vec2(84.0, 72.0))
        running.set_input(0, InputFrame(forward=1.0))
        running.set_input(1, InputFrame(forward=-1.0))
        running.run(3.0)
        distance = running.robot.pos.distance_to(running.partner.pos)
        assert distance >= 36.0 / 1.8 - 1e-6

    def test_robots_separate_against_wall(self, running):
        """Robots driving into the same wall still end at least the minimum apart."""
        running.set_partner_active(True)
        running.set_agent_config(0, position=Vec2(9.0, 72.0))
        running.set_agent_config(1, position=Vec2(40.0, 72.0))
        running.set_input(0, InputFrame(forward=-1.0))
        running.set_input(1, InputFrame(forward=-1.0))
        running.run(3.0)
        assert running.robot.pos.x == pytest.approx(9.0)
        distance = running.robot.pos.distance_to(running.partner.pos)
        assert distance >= 36.0 / 1.8 - 1e-6


class TestAgentConfig:
    """Tests for set_agent_config()."""

    def test_position_and_heading(self, running):
        robot = running.set_agent_config(0, position=Vec2(70.0, 50.0), heading=-math.pi)
        assert robot.pos == Vec2(70.0, 50.0)
        assert robot.heading == pytest.approx(math.pi)

    def test_position_is_clamped(self, running):
        robot = running.set_agent_config(0, position=Vec2(-50.0, 500.0))
        assert is_in_bounds(robot.pos, robot.size)

    def test_resize(self, running):
        robot = running.set_agent_config(1, size=Vec2(14.0, 16.0))
        assert robot.size == Vec2(14.0, 16.0)

    def test_bad_index(self, running):
        with pytest.raises(IndexError):
            running.set_agent_config(5, size=Vec2(18, 18))

    @pytest.mark.parametrize("size", [
        Vec2(0.0, 18.0),
        Vec2(18.0, -1.0),
        Vec2(float("nan"), 18.0),
        Vec2(200.0, 18.0),
    ])
    def test_bad_size(self, running, size):
        with pytest.raises(ValueError):
            running.set_agent_config(0, size=size)

    def test_non_finite_position(self, running):
        with pytest.raises(ValueError):
            running.set_agent_config(0, position=Vec2(float("inf"), 10.0))


class TestControls:
    """Partner, drive mode and odometry controls."""

    def test_partner_toggle(self, running):
        running.set_partner_active(True)
        assert running.partner_active
        assert len(running.active_robots) == 2
        running.set_partner_active(False)
        assert running.active_robots == [running.robot]

    def test_enabling_partner_resolves_overlap(self, running):
        running.set_agent_config(1, position=running.robot.pos)
        running.set_partner_active(True)
        assert running.robot.pos.distance_to(running.partner.pos) > 0

    def test_drive_mode(self, running):
        running.set_drive_mode("robot")
        assert running.drive_mode == DriveMode.ROBOT
        with pytest.raises(ValueError):
            running.set_drive_mode("tank")

    def test_relocalize_at_spawn(self, running):
        """The spawn point is within reach of the human player corner."""
        running.run(1.0)
        assert running.estimated_pose(0).drift.length() > 0
        assert running.relocalize(0)
        assert running.estimated_pose(0).drift.length() == 0

    def test_relocalize_far_away(self, running):
        running.set_agent_config(0, position=Vec2(72.0, 40.0))
        assert not running.relocalize(0)


class TestSnapshot:
    """Tests for snapshot()."""

    def test_keys(self, running):
        snap = running.snapshot()
        for key in ("tick", "time", "is_running", "alliance", "drive_mode",
                    "partner_active", "robots", "score", "samples", "launched",
                    "last_shot_result"):
            assert key in snap
        assert len(snap["robots"]) == 2
        assert len(snap["samples"]) == TOTAL_SAMPLES

    def test_robot_entries(self, running):
        robot = running.snapshot()["robots"][0]
        assert robot["active"]
        assert robot["distance_to_goal"] == pytest.approx(running.distance_to_goal(0))
        assert 0.05 <= robot["success_probability"] <= 1.0
        assert "drift_warning" in robot["estimate"]

    def test_partner_marked_inactive(self, running):
        assert not running.snapshot()["robots"][1]["active"]
