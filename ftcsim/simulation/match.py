"""Match state - samples, launched samples, score and per-robot actions.

The match manager owns every game piece. A sample is always in exactly
one place: on the field (``samples``), in a robot's ``held_samples``, or
in flight (``launched``). Moves between those places happen only in:

- ``try_intake``      field → held
- ``try_shoot``       held → in flight
- ``_resolve``        in flight → field (respawn or miss drop)

Both robots run through the same ``process_actions`` routine. Cooldowns
and the transient shot result are deadlines on the simulation clock.
"""

from __future__ import annotations

import logging
import random
from collections import defaultdict
from dataclasses import dataclass
from typing import Optional

from .config import SimulationConfig
from .core.clock import Clock
from .core.entities import (
    AgentMode,
    LaunchedSample,
    RobotState,
    Sample,
    ShotResult,
    initial_samples,
)
from .core.events import EventBus, EventType
from .core.field import FIELD_CENTER, Alliance, basket_center
from .core.vec2 import Vec2
from .inputs import Button, InputFrame
from .physics.trajectory import plan_shot


logger = logging.getLogger(__name__)


# Scored samples come back along the far side wall, in a fixed row band
RESPAWN_X_NEAR_RED = 135.0
RESPAWN_X_NEAR_BLUE = 9.0
RESPAWN_Y_RANGE = (80.0, 110.0)


@dataclass
class ItemCounts:
    """Where every sample currently is."""
    on_field: int
    held: int
    in_flight: int

    @property
    def total(self) -> int:
        return self.on_field + self.held + self.in_flight


class MatchManager:
    """Owns samples, launched samples and score for one match.

    Args:
        config: Cooldowns, capture radius, scoring
        clock: Simulation clock used for every deadline
        event_bus: Receives pickup/launch/score/miss events
        rng: Random source for shots and respawn rows
    """

    def __init__(
        self,
        config: SimulationConfig,
        clock: Clock,
        event_bus: EventBus,
        rng: random.Random,
    ) -> None:
        self.config = config
        self.clock = clock
        self.event_bus = event_bus
        self.rng = rng

        self.samples: list[Sample] = initial_samples()
        self.launched: list[LaunchedSample] = []
        self.score = 0

        self._last_shot: Optional[ShotResult] = None
        self._last_shot_expires_at = 0.0
        self._prev_buttons: dict[int, frozenset[Button]] = {}
        self._id_counters: dict[str, int] = defaultdict(int)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def reset_field(self) -> None:
        """Restore the starting layout and clear flights, score and feedback."""
        self.samples = initial_samples()
        self.launched = []
        self.score = 0
        self._last_shot = None
        self._last_shot_expires_at = 0.0
        self._prev_buttons.clear()
        self._id_counters.clear()

    def forget_buttons(self) -> None:
        """Drop remembered button state so the next press is a fresh edge."""
        self._prev_buttons.clear()

    def _next_id(self, prefix: str) -> str:
        self._id_counters[prefix] += 1
        return f"{prefix}-{self._id_counters[prefix]}"

    # =========================================================================
    # Per-robot actions
    # =========================================================================

    def process_actions(self, robot: RobotState, frame: InputFrame, alliance: Alliance) -> None:
        """Interpret one robot's buttons for this tick.

        ARM toggles on the press edge; DISARM forces intake and wins over a
        simultaneous ARM. ACTION is level-triggered and rate-limited by the
        robot's cooldown deadlines.
        """
        previous = self._prev_buttons.get(robot.index, frozenset())
        self._prev_buttons[robot.index] = frame.buttons

        if frame.pressed(Button.ARM) and Button.ARM not in previous:
            new_mode = AgentMode.INTAKE if robot.is_armed else AgentMode.ARMED
            self._set_mode(robot, new_mode)

        if frame.pressed(Button.DISARM) and robot.is_armed:
            self._set_mode(robot, AgentMode.INTAKE)

        action = frame.pressed(Button.ACTION)
        robot.intake_active = action and not robot.is_armed
        if not action:
            return

        if robot.is_armed:
            self.try_shoot(robot, alliance)
        else:
            self.try_intake(robot)

    def _set_mode(self, robot: RobotState, mode: AgentMode) -> None:
        if robot.mode == mode:
            return
        robot.mode = mode
        self.event_bus.emit_simple(
            EventType.MODE_CHANGE,
            tick=self.clock.tick_count,
            time=self.clock.current_time,
            agent_index=robot.index,
            description=f"{robot.name} → {mode.value}",
            mode=mode.value,
        )

    def nearest_sample(self, pos: Vec2, radius: Optional[float] = None) -> Optional[Sample]:
        """Closest on-field sample strictly inside ``radius`` of ``pos``."""
        radius = self.config.capture_radius if radius is None else radius
        best: Optional[Sample] = None
        best_dist = radius
        for sample in self.samples:
            if sample.is_picked_up:
                continue
            dist = sample.pos.distance_to(pos)
            if dist < best_dist:
                best = sample
                best_dist = dist
        return best

    def try_intake(self, robot: RobotState) -> Optional[Sample]:
        """Pick up the nearest sample in reach, if the robot can.

        Reads the live sample list, so a sample taken by the first robot
        this tick is already gone when the second robot looks.
        """
        if robot.is_full or not self.clock.has_passed(robot.intake_ready_at):
            return None

        sample = self.nearest_sample(robot.pos)
        if sample is None:
            return None

        self.samples.remove(sample)
        sample.is_picked_up = True
        robot.held_samples.append(sample.type)
        robot.intake_ready_at = self.clock.deadline(self.config.intake_cooldown)

        logger.debug(f"{robot.name} picked up {sample.id} ({sample.type.value})")
        self.event_bus.emit_simple(
            EventType.PICKUP,
            tick=self.clock.tick_count,
            time=self.clock.current_time,
            agent_index=robot.index,
            description=f"{robot.name} intakes {sample.type.value}",
            sample_id=sample.id,
            sample_type=sample.type.value,
        )
        return sample

    def try_shoot(self, robot: RobotState, alliance: Alliance) -> Optional[LaunchedSample]:
        """Launch the most recently held sample at the alliance basket."""
        if not robot.held_samples or not self.clock.has_passed(robot.shot_ready_at):
            return None

        sample_type = robot.held_samples.pop()
        solution = plan_shot(robot.pos, basket_center(alliance), self.rng)

        launched = LaunchedSample(
            id=self._next_id("shot"),
            origin=robot.pos,
            target=solution.target,
            type=sample_type,
            is_scored=solution.is_scored,
            velocity=solution.velocity,
            launch_angle=solution.launch_angle,
            flight_time=solution.flight_time,
            shooter_index=robot.index,
        )
        self.launched.append(launched)
        robot.shot_ready_at = self.clock.deadline(self.config.shot_cooldown)

        logger.debug(f"{robot.name} launched {launched.id}: {solution.format_debug()}")
        self.event_bus.emit_simple(
            EventType.LAUNCH,
            tick=self.clock.tick_count,
            time=self.clock.current_time,
            agent_index=robot.index,
            description=f"{robot.name} shoots from {solution.distance_to_basket:.0f}in",
            launch_id=launched.id,
            probability=solution.probability,
            is_scored=solution.is_scored,
        )
        return launched

    # =========================================================================
    # Flight
    # =========================================================================

    def advance_projectiles(self, dt: float) -> list[LaunchedSample]:
        """Advance every launched sample by ``dt`` and resolve the ones that land.

        Returns:
            The launched samples resolved this tick, each exactly once
        """
        in_flight: list[LaunchedSample] = []
        resolved: list[LaunchedSample] = []
        for launched in self.launched:
            if launched.advance(dt):
                resolved.append(launched)
            else:
                in_flight.append(launched)
        self.launched = in_flight

        for launched in resolved:
            self._resolve(launched)
        return resolved

    def _resolve(self, launched: LaunchedSample) -> None:
        if launched.is_scored:
            self.score += self.config.points_per_score
            self._set_last_shot(ShotResult.HIT)
            respawn_x = RESPAWN_X_NEAR_RED if launched.target.x > FIELD_CENTER.x else RESPAWN_X_NEAR_BLUE
            sample = Sample(
                id=self._next_id("respawn"),
                pos=Vec2(respawn_x, self.rng.uniform(*RESPAWN_Y_RANGE)),
                type=launched.type,
            )
            event_type = EventType.SCORE
            description = f"+{self.config.points_per_score} (score {self.score})"
        else:
            self._set_last_shot(ShotResult.MISS)
            sample = Sample(id=self._next_id("miss"), pos=launched.target, type=launched.type)
            event_type = EventType.MISS
            description = f"bounced to {launched.target}"

        self.samples.append(sample)
        logger.debug(f"{launched.id} resolved {event_type.value}: {description}")

        self.event_bus.emit_simple(
            event_type,
            tick=self.clock.tick_count,
            time=self.clock.current_time,
            agent_index=launched.shooter_index,
            description=description,
            launch_id=launched.id,
            score=self.score,
        )
        self.event_bus.emit_simple(
            EventType.SAMPLE_SPAWNED,
            tick=self.clock.tick_count,
            time=self.clock.current_time,
            sample_id=sample.id,
            sample_type=sample.type.value,
            x=sample.pos.x,
            y=sample.pos.y,
        )

    # =========================================================================
    # Shot feedback
    # =========================================================================

    def _set_last_shot(self, result: ShotResult) -> None:
        self._last_shot = result
        self._last_shot_expires_at = self.clock.deadline(self.config.shot_result_ttl)

    @property
    def last_shot_result(self) -> Optional[ShotResult]:
        """Most recent hit/miss, or None once its display window has passed."""
        if self._last_shot is None or self.clock.has_passed(self._last_shot_expires_at):
            return None
        return self._last_shot

    # =========================================================================
    # Queries
    # =========================================================================

    def item_counts(self, robots: list[RobotState]) -> ItemCounts:
        return ItemCounts(
            on_field=len(self.samples),
            held=sum(len(r.held_samples) for r in robots),
            in_flight=len(self.launched),
        )

    def to_dict(self) -> dict:
        last = self.last_shot_result
        return {
            "score": self.score,
            "samples": [s.to_dict() for s in self.samples],
            "launched": [ls.to_dict() for ls in self.launched],
            "last_shot_result": last.value if last else None,
        }

    def __repr__(self) -> str:
        return (
            f"MatchManager(score={self.score}, field={len(self.samples)}, "
            f"in_flight={len(self.launched)})"
        )
