"""Field vector type.

Positions, velocities and footprints are all ``Vec2`` values in inches
(or inches/second). Instances are immutable; every operation returns a
new vector.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vec2:
    """A point or direction on the field.

    Axes match ``core.field``: origin at the blue basket corner, +X toward
    the red basket, +Y toward the human player wall.
    """
    x: float = 0.0
    y: float = 0.0

    @classmethod
    def zero(cls) -> Vec2:
        return cls(0.0, 0.0)

    @classmethod
    def from_angle(cls, radians: float, length: float = 1.0) -> Vec2:
        """Vector of ``length`` pointing along ``radians`` (0 = +X)."""
        return cls(length * math.cos(radians), length * math.sin(radians))

    # =========================================================================
    # Operators
    # =========================================================================

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def __mul__(self, k: float) -> Vec2:
        return Vec2(self.x * k, self.y * k)

    __rmul__ = __mul__

    def __truediv__(self, k: float) -> Vec2:
        # Division by zero yields the zero vector rather than inf/NaN
        if k == 0:
            return Vec2.zero()
        return Vec2(self.x / k, self.y / k)

    # =========================================================================
    # Geometry
    # =========================================================================

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def distance_to(self, other: Vec2) -> float:
        return (other - self).length()

    def bearing_to(self, other: Vec2) -> float:
        """Direction from here to ``other``, radians in (-π, π]."""
        return math.atan2(other.y - self.y, other.x - self.x)

    def normalized(self) -> Vec2:
        """Unit vector, or zero for vectors too short to have a direction."""
        n = self.length()
        if n < 1e-4:
            return Vec2.zero()
        return self / n

    def rotate(self, radians: float) -> Vec2:
        """Counterclockwise rotation about the origin."""
        c, s = math.cos(radians), math.sin(radians)
        return Vec2(c * self.x - s * self.y, s * self.x + c * self.y)

    def lerp(self, other: Vec2, t: float) -> Vec2:
        return self + (other - self) * t

    def clamped_to_box(self, min_x: float, max_x: float, min_y: float, max_y: float) -> Vec2:
        return Vec2(min(max(self.x, min_x), max_x), min(max(self.y, min_y), max_y))

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    # =========================================================================
    # Output
    # =========================================================================

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}

    def __str__(self) -> str:
        return f"({self.x:.1f}, {self.y:.1f})"

    def __repr__(self) -> str:
        return f"Vec2({self.x:.2f}, {self.y:.2f})"
