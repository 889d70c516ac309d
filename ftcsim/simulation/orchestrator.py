"""Orchestrator - the single tick loop for a simulated match.

The orchestrator owns every piece of mutable match state (robots,
drivetrains, odometry, match manager, clock, random source) and advances
all of it through one ``step(dt)`` call. Hosts feed it per-robot input
frames and read back ``snapshot()``; they never mutate state directly.

Tick order:
    1. Clamp dt (0 → no-op tick)
    2. Drive each active robot (PID velocity → displacement → heading)
    3. Clamp to the field and push out of basket corners, per robot
    4. Separate the two robots when the partner is active
    5. Process buttons, primary robot before partner
    6. Advance launched samples and resolve landings

Usage:
    orch = Orchestrator(SimulationConfig(seed=7))
    orch.start_match("blue")
    orch.set_input(0, InputFrame(forward=1.0))
    orch.step(1 / 60)
    state = orch.snapshot()
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Optional, Union

from .config import SimulationConfig, get_config
from .core.clock import Clock
from .core.entities import AgentMode, LaunchedSample, RobotState
from .core.events import Event, EventBus, EventType
from .core.field import (
    FIELD_SIZE,
    SPAWN_HEADING,
    Alliance,
    DriveMode,
    basket_center,
    normalize_radians,
    spawn_position,
)
from .core.vec2 import Vec2
from .inputs import InputFrame
from .match import ItemCounts, MatchManager
from .physics.collision import constrain_position, resolve_pair
from .physics.kinematics import DriveProfile, DriveTrain
from .physics.odometry import DriftRates, OdometryModel, PoseEstimate
from .physics.trajectory import success_probability


logger = logging.getLogger(__name__)


PRIMARY = 0
PARTNER = 1
ROBOT_COUNT = 2


@dataclass
class TickResult:
    """What happened during one call to ``step``."""
    tick: int
    time: float
    dt: float
    resolved: list[LaunchedSample] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)

    @property
    def advanced(self) -> bool:
        return self.dt > 0


class Orchestrator:
    """Owns and advances one match.

    Args:
        config: Simulation tuning; defaults to the process-wide config
        rng: Random source for shots and respawns. Defaults to a
            ``random.Random`` seeded from ``config.seed``
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or get_config()
        self.rng = rng or random.Random(self.config.seed)
        self.clock = Clock(max_dt=self.config.max_dt)
        self.event_bus = EventBus()
        self.event_bus.subscribe_all(self._collect_event)
        self._tick_events: list[Event] = []

        self.alliance = Alliance.BLUE
        self.drive_mode = self.config.drive_mode
        self.partner_active = False
        self.is_running = False

        profile = DriveProfile(
            max_speed=self.config.max_speed,
            max_rot_speed=self.config.max_rot_speed,
            linear_gains=self.config.linear_gains,
            heading_gains=self.config.heading_gains,
        )
        rates = DriftRates(
            x=self.config.drift_rate_x,
            y=self.config.drift_rate_y,
            heading=self.config.drift_rate_heading,
        )

        self.robots: list[RobotState] = [RobotState(index=i) for i in range(ROBOT_COUNT)]
        self.drivetrains: list[DriveTrain] = [DriveTrain(profile) for _ in range(ROBOT_COUNT)]
        self.odometry: list[OdometryModel] = [
            OdometryModel(rates, enabled=self.config.drift_enabled) for _ in range(ROBOT_COUNT)
        ]
        self._inputs: list[InputFrame] = [InputFrame.neutral() for _ in range(ROBOT_COUNT)]

        self.match = MatchManager(self.config, self.clock, self.event_bus, self.rng)
        self._place_at_spawn()

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def robot(self) -> RobotState:
        return self.robots[PRIMARY]

    @property
    def partner(self) -> RobotState:
        return self.robots[PARTNER]

    def robot_at(self, index: int) -> RobotState:
        self._check_index(index)
        return self.robots[index]

    @property
    def active_robots(self) -> list[RobotState]:
        """Robots taking part in ticks, primary first."""
        if self.partner_active:
            return list(self.robots)
        return [self.robots[PRIMARY]]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < ROBOT_COUNT:
            raise IndexError(f"robot index {index} out of range (0..{ROBOT_COUNT - 1})")

    def _collect_event(self, event: Event) -> None:
        self._tick_events.append(event)

    def _emit(self, event_type: EventType, agent_index: Optional[int] = None,
              description: str = "", **data) -> Event:
        return self.event_bus.emit_simple(
            event_type,
            tick=self.clock.tick_count,
            time=self.clock.current_time,
            agent_index=agent_index,
            description=description,
            **data,
        )

    # =========================================================================
    # Input
    # =========================================================================

    def set_input(self, index: int, frame: InputFrame) -> None:
        """Set the held input for a robot. It applies to every tick until replaced."""
        self._check_index(index)
        sanitized = frame.sanitized()
        if sanitized != frame:
            logger.debug(f"Sanitized input for robot {index}: {frame.to_dict()}")
        self._inputs[index] = sanitized

    def input_for(self, index: int) -> InputFrame:
        self._check_index(index)
        return self._inputs[index]

    def clear_inputs(self) -> None:
        self._inputs = [InputFrame.neutral() for _ in range(ROBOT_COUNT)]

    # =========================================================================
    # Tick
    # =========================================================================

    def step(self, dt: float) -> TickResult:
        """Advance the match by one frame.

        A stopped match, or a dt that clamps to zero, is a no-op tick.
        """
        self._tick_events = []

        if not self.is_running:
            return TickResult(tick=self.clock.tick_count, time=self.clock.current_time, dt=0.0)

        step_dt = self.clock.advance(dt)
        if step_dt <= 0:
            logger.debug(f"Skipping tick with unusable dt={dt!r}")
            return TickResult(tick=self.clock.tick_count, time=self.clock.current_time, dt=0.0)
        if step_dt < dt:
            logger.debug(f"Clamped dt {dt:.3f}s to {step_dt:.3f}s")

        robots = self.active_robots

        for robot in robots:
            frame = self._inputs[robot.index]
            result = self.drivetrains[robot.index].solve(
                robot,
                frame.strafe,
                frame.forward,
                frame.rotate,
                step_dt,
                drive_mode=self.drive_mode,
                alliance=self.alliance,
            )
            robot.pos = constrain_position(result.new_pos, robot.size, self.config.basket_avoidance)
            robot.heading = result.new_heading

        if self.partner_active:
            resolve_pair(self.robot, self.partner, self.config.basket_avoidance)

        for robot in robots:
            self.match.process_actions(robot, self._inputs[robot.index], self.alliance)

        resolved = self.match.advance_projectiles(step_dt)

        return TickResult(
            tick=self.clock.tick_count,
            time=self.clock.current_time,
            dt=step_dt,
            resolved=resolved,
            events=list(self._tick_events),
        )

    def run(self, duration: float, dt: float = 1 / 60) -> list[TickResult]:
        """Step the match for ``duration`` seconds with the current inputs."""
        results = []
        elapsed = 0.0
        while elapsed < duration and self.is_running:
            result = self.step(dt)
            if not result.advanced:
                break
            elapsed += result.dt
            results.append(result)
        return results

    # =========================================================================
    # Match controls
    # =========================================================================

    def _place_at_spawn(self) -> None:
        for robot in self.robots:
            is_partner = robot.index == PARTNER
            robot.pos = constrain_position(
                spawn_position(self.alliance, partner=is_partner),
                robot.size,
                self.config.basket_avoidance,
            )
            robot.heading = normalize_radians(SPAWN_HEADING)

    def _reset_robot(self, robot: RobotState) -> None:
        self.drivetrains[robot.index].stop(robot)
        robot.held_samples.clear()
        robot.mode = AgentMode.INTAKE
        robot.intake_active = False
        robot.intake_ready_at = 0.0
        robot.shot_ready_at = 0.0

    def start_match(self, alliance: Union[Alliance, str]) -> None:
        """Reset the field and robots and start ticking for ``alliance``.

        Raises:
            ValueError: If ``alliance`` is not "red" or "blue"
        """
        self.alliance = Alliance(alliance)
        self.clock.reset()
        self.match.reset_field()
        for robot in self.robots:
            self._reset_robot(robot)
        for odometry in self.odometry:
            odometry.reset(self.clock.current_time)
        self._place_at_spawn()
        self.clear_inputs()
        self.is_running = True

        logger.info(f"Match started for {self.alliance.value} alliance")
        self._emit(EventType.MATCH_START, description=f"{self.alliance.value} alliance",
                   alliance=self.alliance.value)

    def stop_match(self) -> None:
        """Stop ticking and bring every robot to rest.

        Velocity accumulators and PID state are zeroed so a restarted
        match begins from rest. Score and inventories are left alone.
        """
        self.is_running = False
        for robot in self.robots:
            self.drivetrains[robot.index].stop(robot)
            robot.mode = AgentMode.INTAKE
            robot.intake_active = False
        self.match.forget_buttons()

        logger.info(f"Match stopped at {self.clock.format_time()} with score {self.match.score}")
        self._emit(EventType.MATCH_STOP, description=f"score {self.match.score}",
                   score=self.match.score)

    def reset_field(self) -> None:
        """Restore the starting sample layout and empty every inventory."""
        self.match.reset_field()
        for robot in self.robots:
            robot.held_samples.clear()
            robot.mode = AgentMode.INTAKE
            robot.intake_active = False

        logger.info("Field reset")
        self._emit(EventType.FIELD_RESET, description="starting layout restored")

    def set_agent_config(
        self,
        index: int,
        size: Optional[Vec2] = None,
        position: Optional[Vec2] = None,
        heading: Optional[float] = None,
    ) -> RobotState:
        """Override a robot's footprint, position and/or heading.

        The result is clamped onto the field like any other move.

        Raises:
            IndexError: Unknown robot index
            ValueError: Non-positive or oversized footprint
        """
        self._check_index(index)
        robot = self.robots[index]

        if size is not None:
            if not size.is_finite() or size.x <= 0 or size.y <= 0:
                raise ValueError(f"robot size must be positive, got {size}")
            if size.x > FIELD_SIZE or size.y > FIELD_SIZE:
                raise ValueError(f"robot size {size} does not fit on the field")
            robot.size = size

        if position is not None:
            if not position.is_finite():
                raise ValueError(f"robot position must be finite, got {position}")
            robot.pos = position

        if heading is not None:
            robot.heading = normalize_radians(heading)

        robot.pos = constrain_position(robot.pos, robot.size, self.config.basket_avoidance)

        self._emit(EventType.AGENT_CONFIG, agent_index=index, description=robot.format_brief(),
                   width=robot.size.x, height=robot.size.y, x=robot.pos.x, y=robot.pos.y,
                   heading=robot.heading)
        return robot

    def set_partner_active(self, active: bool) -> None:
        if active == self.partner_active:
            return
        self.partner_active = active
        self.drivetrains[PARTNER].stop(self.partner)
        self._inputs[PARTNER] = InputFrame.neutral()
        if active:
            resolve_pair(self.robot, self.partner, self.config.basket_avoidance)

        logger.info(f"Partner robot {'enabled' if active else 'disabled'}")
        self._emit(EventType.PARTNER_TOGGLED, agent_index=PARTNER, active=active)

    def set_drive_mode(self, mode: Union[DriveMode, str]) -> None:
        """Switch between field-centric and robot-centric driving.

        Raises:
            ValueError: If ``mode`` is not "field" or "robot"
        """
        self.drive_mode = DriveMode(mode)
        self._emit(EventType.DRIVE_MODE_CHANGED, description=self.drive_mode.value,
                   drive_mode=self.drive_mode.value)

    # =========================================================================
    # Odometry
    # =========================================================================

    def estimated_pose(self, index: int) -> PoseEstimate:
        self._check_index(index)
        robot = self.robots[index]
        return self.odometry[index].estimate(robot.pos, robot.heading, self.clock.current_time)

    def relocalize(self, index: int = PRIMARY) -> bool:
        """Zero a robot's odometry drift if it is in its human player corner."""
        self._check_index(index)
        robot = self.robots[index]
        ok = self.odometry[index].relocalize(robot.pos, self.alliance, self.clock.current_time)
        if ok:
            self._emit(EventType.RELOCALIZE, agent_index=index, description=f"{robot.name} relocalized")
        else:
            logger.debug(f"{robot.name} too far from the human player corner to relocalize")
        return ok

    # =========================================================================
    # Read-only views
    # =========================================================================

    def distance_to_goal(self, index: int = PRIMARY) -> float:
        self._check_index(index)
        return self.robots[index].pos.distance_to(basket_center(self.alliance))

    def item_counts(self) -> ItemCounts:
        return self.match.item_counts(self.robots)

    def snapshot(self) -> dict:
        """Full read-only state for renderers and API clients."""
        robots = []
        for robot in self.robots:
            distance = self.distance_to_goal(robot.index)
            data = robot.to_dict()
            data["active"] = robot.index == PRIMARY or self.partner_active
            data["distance_to_goal"] = distance
            data["success_probability"] = success_probability(distance)
            data["estimate"] = self.estimated_pose(robot.index).to_dict()
            robots.append(data)

        return {
            "tick": self.clock.tick_count,
            "time": self.clock.current_time,
            "is_running": self.is_running,
            "alliance": self.alliance.value,
            "drive_mode": self.drive_mode.value,
            "partner_active": self.partner_active,
            "robots": robots,
            **self.match.to_dict(),
        }

    def __repr__(self) -> str:
        state = "running" if self.is_running else "stopped"
        return f"Orchestrator({state}, {self.clock}, {self.match})"
