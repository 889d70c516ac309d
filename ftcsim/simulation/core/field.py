"""Field geometry and coordinate system.

Single, unified coordinate system used throughout the simulation.
All measurements in inches.
"""

from __future__ import annotations

import math
from enum import Enum

from .vec2 import Vec2


# =============================================================================
# Field Dimensions (inches)
# =============================================================================

FIELD_SIZE = 144.0          # 12 feet square
FIELD_CENTER = Vec2(FIELD_SIZE / 2, FIELD_SIZE / 2)

ROBOT_SIZE = 18.0           # Default 18x18 footprint

# Coordinate system:
#   Origin (0, 0) = Blue basket corner
#   +X = Toward the red basket corner
#   +Y = Toward the human player wall


# =============================================================================
# Baskets
# =============================================================================

BASKET_SIZE = 24.5
BASKET_BUFFER = 10.0        # Extra keep-out beyond the basket footprint
BASKET_KEEP_OUT = BASKET_SIZE + BASKET_BUFFER


class Alliance(str, Enum):
    """Which alliance the driven robots belong to."""
    RED = "red"
    BLUE = "blue"


class DriveMode(str, Enum):
    """How stick input maps onto world motion."""
    FIELD = "field"     # Axis-aligned, "forward" always away from own wall
    ROBOT = "robot"     # Rotated by the robot's heading


BASKET_CENTERS: dict[Alliance, Vec2] = {
    Alliance.RED: Vec2(FIELD_SIZE, 0.0),
    Alliance.BLUE: Vec2(0.0, 0.0),
}

# Human player corners, where odometry can be re-zeroed
HUMAN_PLAYER_CORNERS: dict[Alliance, Vec2] = {
    Alliance.RED: Vec2(120.0, 120.0),
    Alliance.BLUE: Vec2(24.0, 120.0),
}
RELOCALIZE_RADIUS = 20.0


def basket_center(alliance: Alliance) -> Vec2:
    """Center of the basket an alliance scores into."""
    return BASKET_CENTERS[alliance]


# =============================================================================
# Starting Positions
# =============================================================================

SPAWN_Y = 120.0
SPAWN_HEADING = -math.pi / 2
PARTNER_SPAWN_OFFSET = 24.0


def spawn_position(alliance: Alliance, partner: bool = False) -> Vec2:
    """Where a robot starts the match.

    The partner lines up one tile-width toward field center from the
    primary robot.
    """
    x = 120.0 if alliance == Alliance.RED else 24.0
    if partner:
        x += -PARTNER_SPAWN_OFFSET if alliance == Alliance.RED else PARTNER_SPAWN_OFFSET
    return Vec2(x, SPAWN_Y)


# =============================================================================
# Heading / Bounds helpers
# =============================================================================

TWO_PI = 2 * math.pi


def normalize_radians(rad: float) -> float:
    """Wrap an angle into [0, 2π)."""
    if not math.isfinite(rad):
        return 0.0
    wrapped = rad % TWO_PI
    # Float modulo can round up to exactly 2π for tiny negative inputs
    if wrapped >= TWO_PI:
        return 0.0
    return wrapped


def footprint_bounds(size: Vec2) -> tuple[float, float, float, float]:
    """(min_x, max_x, min_y, max_y) for a robot center with this footprint."""
    half_w = size.x / 2
    half_h = size.y / 2
    return half_w, FIELD_SIZE - half_w, half_h, FIELD_SIZE - half_h


def is_in_bounds(pos: Vec2, size: Vec2, tolerance: float = 1e-9) -> bool:
    """Whether a robot center keeps its whole footprint on the field."""
    min_x, max_x, min_y, max_y = footprint_bounds(size)
    return (
        min_x - tolerance <= pos.x <= max_x + tolerance and
        min_y - tolerance <= pos.y <= max_y + tolerance
    )
