"""Core entities - Robot, Sample, LaunchedSample and supporting types.

Entities are pure data containers. Behavior is implemented in systems.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .field import ROBOT_SIZE, normalize_radians
from .vec2 import Vec2


GRAVITY = 120.0             # inches/s², shared by flight model and renderer helpers
INVENTORY_CAPACITY = 3


# =============================================================================
# Enums
# =============================================================================

class SampleType(str, Enum):
    """Game piece color."""
    GREEN = "green"
    PURPLE = "purple"
    YELLOW = "yellow"


class AgentMode(str, Enum):
    """What the action button does for a robot."""
    INTAKE = "intake"   # Action picks up nearby samples
    ARMED = "armed"     # Action launches the most recent held sample


class ShotResult(str, Enum):
    HIT = "hit"
    MISS = "miss"


# =============================================================================
# Samples
# =============================================================================

@dataclass
class Sample:
    """A game piece resting on the field."""
    id: str
    pos: Vec2
    type: SampleType
    is_picked_up: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "x": self.pos.x,
            "y": self.pos.y,
            "type": self.type.value,
            "is_picked_up": self.is_picked_up,
        }


INITIAL_SAMPLE_LAYOUT: list[tuple[str, float, float, SampleType]] = [
    ("1a", 24.90, 60.00, SampleType.GREEN),
    ("1b", 28.90, 60.00, SampleType.PURPLE),
    ("1c", 32.90, 60.00, SampleType.PURPLE),
    ("2a", 68.00, 72.00, SampleType.PURPLE),
    ("2b", 72.00, 72.00, SampleType.GREEN),
    ("2c", 76.00, 72.00, SampleType.PURPLE),
    ("3a", 68.00, 89.00, SampleType.PURPLE),
    ("3b", 72.00, 89.00, SampleType.PURPLE),
    ("3c", 76.00, 89.00, SampleType.GREEN),
]


def initial_samples() -> list[Sample]:
    """Fresh copy of the match-start sample layout."""
    return [
        Sample(id=sample_id, pos=Vec2(x, y), type=sample_type)
        for sample_id, x, y, sample_type in INITIAL_SAMPLE_LAYOUT
    ]


@dataclass
class LaunchedSample:
    """A sample in flight from a robot toward its resolved target.

    The make/miss outcome is decided once at launch (is_scored) and the
    flight only determines when that outcome lands.
    """
    id: str
    origin: Vec2
    target: Vec2
    type: SampleType
    is_scored: bool
    velocity: Vec2              # Horizontal launch velocity, inches/s
    launch_angle: float         # Radians above horizontal
    flight_time: float          # Seconds from release to landing
    shooter_index: int = 0
    progress: float = 0.0
    time_elapsed: float = 0.0

    @property
    def launch_speed(self) -> float:
        """Total launch speed (horizontal speed / cos(angle))."""
        cos_a = math.cos(self.launch_angle)
        if abs(cos_a) < 1e-6:
            return self.velocity.length()
        return self.velocity.length() / cos_a

    @property
    def vertical_speed(self) -> float:
        return self.launch_speed * math.sin(self.launch_angle)

    def advance(self, dt: float) -> bool:
        """Advance flight by dt seconds. Returns True once it lands."""
        self.time_elapsed += dt
        if self.flight_time <= 0:
            self.progress = 1.0
        else:
            self.progress = min(self.time_elapsed / self.flight_time, 1.0)
        return self.progress >= 1.0

    def ground_position(self, progress: Optional[float] = None) -> Vec2:
        """Ground-track position at a flight progress (defaults to current)."""
        t = self.progress if progress is None else max(0.0, min(1.0, progress))
        return self.origin.lerp(self.target, t)

    def height(self, time_elapsed: Optional[float] = None) -> float:
        """Ballistic height above the launch point, in inches."""
        t = self.time_elapsed if time_elapsed is None else time_elapsed
        return max(0.0, self.vertical_speed * t - 0.5 * GRAVITY * t * t)

    def to_dict(self) -> dict:
        ground = self.ground_position()
        return {
            "id": self.id,
            "origin": self.origin.to_dict(),
            "target": self.target.to_dict(),
            "type": self.type.value,
            "is_scored": self.is_scored,
            "progress": self.progress,
            "velocity": self.velocity.to_dict(),
            "launch_angle": self.launch_angle,
            "time_elapsed": self.time_elapsed,
            "flight_time": self.flight_time,
            "shooter_index": self.shooter_index,
            "x": ground.x,
            "y": ground.y,
            "height": self.height(),
        }


# =============================================================================
# Robot
# =============================================================================

@dataclass
class RobotState:
    """A robot on the field.

    Robots are pure data. Driving, intake and shooting live in systems.

    Attributes:
        index: 0 for the primary robot, 1 for the alliance partner
        pos: Center position (inches)
        heading: Radians in [0, 2π)
        size: Footprint width (x) and length (y) in inches
        held_samples: Held game pieces, most recent last
        mode: Whether the action button intakes or shoots
        velocity: Local-frame velocity accumulator (x = strafe, y = forward)
        rot_velocity: Angular velocity accumulator, rad/s
    """
    index: int
    name: str = ""
    pos: Vec2 = field(default_factory=Vec2.zero)
    heading: float = 0.0
    size: Vec2 = field(default_factory=lambda: Vec2(ROBOT_SIZE, ROBOT_SIZE))
    held_samples: list[SampleType] = field(default_factory=list)
    intake_active: bool = False
    mode: AgentMode = AgentMode.INTAKE

    # Motion accumulators
    velocity: Vec2 = field(default_factory=Vec2.zero)
    rot_velocity: float = 0.0

    # Cooldown deadlines, in simulation seconds
    intake_ready_at: float = 0.0
    shot_ready_at: float = 0.0

    def __post_init__(self):
        if not self.name:
            self.name = "robot" if self.index == 0 else "partner"
        self.heading = normalize_radians(self.heading)

    @property
    def is_full(self) -> bool:
        return len(self.held_samples) >= INVENTORY_CAPACITY

    @property
    def is_armed(self) -> bool:
        return self.mode == AgentMode.ARMED

    def stop(self) -> None:
        """Zero every motion accumulator."""
        self.velocity = Vec2.zero()
        self.rot_velocity = 0.0

    def format_brief(self) -> str:
        held = ",".join(s.value for s in self.held_samples) or "-"
        return (
            f"{self.name} @ {self.pos} hdg={math.degrees(self.heading):.0f}° "
            f"[{self.mode.value}] held={held}"
        )

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "name": self.name,
            "x": self.pos.x,
            "y": self.pos.y,
            "heading": self.heading,
            "width": self.size.x,
            "height": self.size.y,
            "held_samples": [s.value for s in self.held_samples],
            "intake_active": self.intake_active,
            "mode": self.mode.value,
            "vx": self.velocity.x,
            "vy": self.velocity.y,
            "rot_velocity": self.rot_velocity,
        }

    def __repr__(self) -> str:
        return f"RobotState({self.index}, pos={self.pos}, mode={self.mode.value})"
