"""Shot model - success probability, aim point and launch kinematics.

Given a robot position and the alliance basket, a shot is planned in three
steps:

1. Decide make/miss once, with a probability that falls off with distance
2. Resolve where the sample lands (jittered basket, or a ricochet point)
3. Solve a ballistic launch that carries the sample to that point

All randomness comes from an injected ``random.Random``-like source so
tests can seed or stub it.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

from ..core.entities import GRAVITY
from ..core.field import FIELD_CENTER
from ..core.vec2 import Vec2


# =============================================================================
# CONSTANTS
# =============================================================================

# Corner-to-corner diagonal of the field, where accuracy bottoms out
MAX_SHOT_DISTANCE = 203.6
ACCURACY_EXPONENT = 1.6
ACCURACY_DROP = 0.95
MIN_SUCCESS_PROBABILITY = 0.05

# Made shots land near the basket center
SCORE_JITTER = 4.0          # total width, i.e. ±2 in per axis

# Missed shots ricochet off the basket toward the field
BOUNCE_ANGLE_SPREAD = 1.2   # total width, i.e. ±0.6 rad
BOUNCE_MIN_DISTANCE = 35.0
BOUNCE_MAX_DISTANCE = 85.0
BOUNCE_CLAMP_MIN = 20.0
BOUNCE_CLAMP_MAX = 124.0

# Launch angle bands
CLOSE_SHOT_DISTANCE = 80.0
CLOSE_LAUNCH_ANGLE = math.pi / 3    # 60° lob for close shots
FAR_LAUNCH_ANGLE = math.pi / 4      # 45° for range
ANGLE_VARIATION: dict[bool, float] = {True: 0.08, False: 0.2}

# Speed multipliers (min, max) - misses are visibly errant
SPEED_VARIATION: dict[bool, tuple[float, float]] = {
    True: (0.98, 1.02),
    False: (0.8, 1.1),
}

MIN_SIN_TWO_ALPHA = 0.1
FALLBACK_FLIGHT_TIME: dict[bool, float] = {True: 0.8, False: 1.0}


# =============================================================================
# Probability
# =============================================================================

def success_probability(distance: float) -> float:
    """Chance that a shot from ``distance`` inches scores.

    p = max(0.05, 1 - 0.95 * (d / 203.6) ** 1.6)

    Monotonically non-increasing in distance, 1.0 at the basket and
    floored at 5% from the far corner onward.
    """
    if not math.isfinite(distance) or distance <= 0:
        return 1.0
    normalized = distance / MAX_SHOT_DISTANCE
    return max(MIN_SUCCESS_PROBABILITY, 1.0 - (normalized ** ACCURACY_EXPONENT) * ACCURACY_DROP)


def roll_outcome(probability: float, rng: random.Random) -> bool:
    """Single weighted coin flip."""
    return rng.random() < probability


# =============================================================================
# Aim Point
# =============================================================================

def scored_target(basket: Vec2, rng: random.Random) -> Vec2:
    """Basket center with a little uniform jitter so makes look natural."""
    half = SCORE_JITTER / 2
    return Vec2(
        basket.x + rng.uniform(-half, half),
        basket.y + rng.uniform(-half, half),
    )


def miss_target(basket: Vec2, rng: random.Random) -> Vec2:
    """Ricochet landing point for a missed shot.

    The sample bounces off the basket structure back toward field center,
    scattered in angle and distance, and always lands inside the field.
    """
    angle_to_center = basket.bearing_to(FIELD_CENTER)
    half_spread = BOUNCE_ANGLE_SPREAD / 2
    bounce_angle = angle_to_center + rng.uniform(-half_spread, half_spread)
    bounce_dist = rng.uniform(BOUNCE_MIN_DISTANCE, BOUNCE_MAX_DISTANCE)

    landing = basket + Vec2.from_angle(bounce_angle, bounce_dist)
    return landing.clamped_to_box(
        BOUNCE_CLAMP_MIN, BOUNCE_CLAMP_MAX, BOUNCE_CLAMP_MIN, BOUNCE_CLAMP_MAX,
    )


# =============================================================================
# Launch Kinematics
# =============================================================================

def base_launch_angle(distance: float) -> float:
    """Higher arc for close shots, flatter for long ones."""
    return CLOSE_LAUNCH_ANGLE if distance < CLOSE_SHOT_DISTANCE else FAR_LAUNCH_ANGLE


def choose_launch_angle(distance: float, is_scored: bool, rng: random.Random) -> float:
    half = ANGLE_VARIATION[is_scored] / 2
    return base_launch_angle(distance) + rng.uniform(-half, half)


def required_launch_speed(distance: float, launch_angle: float) -> float:
    """Speed needed to cover ``distance`` on flat ground.

    Range equation: d = v² sin(2α) / g  →  v = sqrt(d g / sin(2α)).
    Near-vertical or near-flat angles fall back to 2·d.
    """
    sin_two_alpha = math.sin(2 * launch_angle)
    if sin_two_alpha > MIN_SIN_TWO_ALPHA:
        return math.sqrt(max(0.0, distance) * GRAVITY / sin_two_alpha)
    return max(0.0, distance) * 2


def speed_multiplier(is_scored: bool, rng: random.Random) -> float:
    low, high = SPEED_VARIATION[is_scored]
    return rng.uniform(low, high)


def flight_time_for(launch_speed: float, launch_angle: float, is_scored: bool) -> float:
    """Time aloft: 2·vz / g, with a fixed fallback for degenerate launches."""
    vertical_speed = launch_speed * math.sin(launch_angle)
    flight_time = 2 * vertical_speed / GRAVITY
    if not math.isfinite(flight_time) or flight_time <= 0:
        return FALLBACK_FLIGHT_TIME[is_scored]
    return flight_time


@dataclass
class ShotSolution:
    """Everything decided at the moment of launch."""
    is_scored: bool
    probability: float
    distance_to_basket: float
    target: Vec2
    launch_angle: float
    launch_speed: float
    velocity: Vec2      # Horizontal components along the aim bearing
    flight_time: float

    def format_debug(self) -> str:
        outcome = "MAKE" if self.is_scored else "MISS"
        return (
            f"{outcome} p={self.probability:.0%} d={self.distance_to_basket:.1f}in "
            f"→ {self.target} @ {math.degrees(self.launch_angle):.0f}° "
            f"{self.launch_speed:.1f}in/s t={self.flight_time:.2f}s"
        )


def plan_shot(origin: Vec2, basket: Vec2, rng: random.Random) -> ShotSolution:
    """Plan a full shot from ``origin`` at ``basket``.

    Args:
        origin: Robot center at release
        basket: Center of the basket being shot at
        rng: Random source for outcome, aim and launch variation

    Returns:
        ShotSolution with the outcome already decided
    """
    distance_to_basket = origin.distance_to(basket)
    probability = success_probability(distance_to_basket)
    is_scored = roll_outcome(probability, rng)

    target = scored_target(basket, rng) if is_scored else miss_target(basket, rng)

    launch_distance = origin.distance_to(target)
    launch_angle = choose_launch_angle(launch_distance, is_scored, rng)
    launch_speed = required_launch_speed(launch_distance, launch_angle) * speed_multiplier(is_scored, rng)

    aim = origin.bearing_to(target)
    velocity = Vec2.from_angle(aim, launch_speed * math.cos(launch_angle))

    return ShotSolution(
        is_scored=is_scored,
        probability=probability,
        distance_to_basket=distance_to_basket,
        target=target,
        launch_angle=launch_angle,
        launch_speed=launch_speed,
        velocity=velocity,
        flight_time=flight_time_for(launch_speed, launch_angle, is_scored),
    )
