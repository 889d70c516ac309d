"""Odometry drift model.

Real localization drifts over a match. Each robot's estimated pose is its
true pose plus an error that grows linearly since the match started or
since the robot last relocalized at its human player corner. The true
pose is never touched; only the reported estimate drifts.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.field import (
    Alliance,
    HUMAN_PLAYER_CORNERS,
    RELOCALIZE_RADIUS,
    normalize_radians,
)
from ..core.vec2 import Vec2


DRIFT_WARNING_THRESHOLD = 3.0   # inches, either axis


@dataclass
class DriftRates:
    x: float = -0.07            # inches/s
    y: float = 0.09             # inches/s
    heading: float = 0.0015     # rad/s


@dataclass
class PoseEstimate:
    """What the robot believes its pose is."""
    pos: Vec2
    heading: float
    drift: Vec2
    heading_drift: float

    @property
    def drift_warning(self) -> bool:
        return (
            abs(self.drift.x) > DRIFT_WARNING_THRESHOLD or
            abs(self.drift.y) > DRIFT_WARNING_THRESHOLD
        )

    def to_dict(self) -> dict:
        return {
            "x": self.pos.x,
            "y": self.pos.y,
            "heading": self.heading,
            "drift_x": self.drift.x,
            "drift_y": self.drift.y,
            "heading_drift": self.heading_drift,
            "drift_warning": self.drift_warning,
        }


class OdometryModel:
    """Tracks drift for one robot against the simulation clock."""

    def __init__(self, rates: DriftRates | None = None, enabled: bool = True) -> None:
        self.rates = rates or DriftRates()
        self.enabled = enabled
        self._anchor_time = 0.0

    def reset(self, now: float) -> None:
        """Zero accumulated drift as of ``now``."""
        self._anchor_time = now

    def drift_at(self, now: float) -> tuple[Vec2, float]:
        if not self.enabled:
            return Vec2.zero(), 0.0
        elapsed = max(0.0, now - self._anchor_time)
        return (
            Vec2(elapsed * self.rates.x, elapsed * self.rates.y),
            elapsed * self.rates.heading,
        )

    def estimate(self, true_pos: Vec2, true_heading: float, now: float) -> PoseEstimate:
        drift, heading_drift = self.drift_at(now)
        return PoseEstimate(
            pos=true_pos + drift,
            heading=normalize_radians(true_heading + heading_drift),
            drift=drift,
            heading_drift=heading_drift,
        )

    def can_relocalize(self, true_pos: Vec2, alliance: Alliance) -> bool:
        corner = HUMAN_PLAYER_CORNERS[alliance]
        return true_pos.distance_to(corner) < RELOCALIZE_RADIUS

    def relocalize(self, true_pos: Vec2, alliance: Alliance, now: float) -> bool:
        """Re-zero drift if the robot sits in its human player corner.

        Returns:
            True if drift was cleared, False if the robot is too far away
        """
        if not self.can_relocalize(true_pos, alliance):
            return False
        self.reset(now)
        return True

    def __repr__(self) -> str:
        return f"OdometryModel(enabled={self.enabled}, anchor={self._anchor_time:.2f}s)"
