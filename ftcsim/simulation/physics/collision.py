"""Boundary, basket keep-out and robot-robot overlap correction.

Contacts are soft position nudges: no velocity is zeroed and nothing
bounces. Order matters - clamp to the field, push out of the basket
corners, then separate robots and clamp again.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.entities import RobotState
from ..core.field import BASKET_KEEP_OUT, FIELD_SIZE, footprint_bounds
from ..core.vec2 import Vec2


# Robots are treated as circles slightly larger than half their width
SEPARATION_DIVISOR = 1.8
MIN_SEPARATION_DISTANCE = 0.01


def clamp_to_field(pos: Vec2, size: Vec2) -> Vec2:
    """Keep the robot's full footprint inside [0, FIELD_SIZE] on each axis."""
    min_x, max_x, min_y, max_y = footprint_bounds(size)
    return pos.clamped_to_box(min_x, max_x, min_y, max_y)


def push_out_of_baskets(pos: Vec2, limit: float = BASKET_KEEP_OUT) -> Vec2:
    """Nudge a robot out of both basket corners.

    The keep-out region is the triangle x + y < limit at the blue corner
    and (FIELD_SIZE - x) + y < limit at the red corner. The deficit is
    split evenly between the two axes so the robot ends exactly on the
    keep-out line.
    """
    x, y = pos.x, pos.y

    deficit = limit - (x + y)
    if deficit > 0:
        x += deficit * 0.5
        y += deficit * 0.5

    deficit = limit - ((FIELD_SIZE - x) + y)
    if deficit > 0:
        x -= deficit * 0.5
        y += deficit * 0.5

    return Vec2(x, y)


def constrain_position(pos: Vec2, size: Vec2, basket_avoidance: bool = True) -> Vec2:
    """Full single-robot correction: field bounds, then basket keep-out."""
    pos = clamp_to_field(pos, size)
    if basket_avoidance:
        pos = clamp_to_field(push_out_of_baskets(pos), size)
    return pos


def min_separation(a: RobotState, b: RobotState) -> float:
    return (a.size.x + b.size.x) / SEPARATION_DIVISOR


@dataclass
class SeparationResult:
    """Outcome of a robot-robot overlap check."""
    overlapped: bool
    overlap: float = 0.0
    push: Optional[Vec2] = None


def separate_robots(a: RobotState, b: RobotState) -> SeparationResult:
    """Push two overlapping robots apart symmetrically, in place.

    Each robot moves half the overlap along the center-to-center axis.
    Coincident centers have no axis, so they split along X with ``a``
    moving toward +X.
    """
    delta = a.pos - b.pos
    dist = delta.length()
    required = min_separation(a, b)

    if dist >= required:
        return SeparationResult(overlapped=False)

    if dist > MIN_SEPARATION_DISTANCE:
        axis = delta / dist
    else:
        axis = Vec2(1.0, 0.0)

    overlap = required - dist
    push = axis * (overlap * 0.5)
    a.pos = a.pos + push
    b.pos = b.pos - push
    return SeparationResult(overlapped=True, overlap=overlap, push=push)


def resolve_pair(a: RobotState, b: RobotState, basket_avoidance: bool = True) -> SeparationResult:
    """Separate two robots, then re-apply each robot's field constraints.

    When the re-clamp takes back part of one robot's push (it is pinned
    against a wall or keep-out line), the other robot is pushed further
    away to make up the shortfall. Overlap can only remain when both
    robots are pinned.
    """
    result = separate_robots(a, b)
    if not result.overlapped:
        return result

    wanted_a, wanted_b = a.pos, b.pos
    a.pos = constrain_position(a.pos, a.size, basket_avoidance)
    b.pos = constrain_position(b.pos, b.size, basket_avoidance)

    delta = a.pos - b.pos
    shortfall = min_separation(a, b) - delta.length()
    if shortfall <= 0:
        return result

    axis = delta.normalized()
    if axis == Vec2.zero():
        axis = result.push.normalized()

    # The robot that lost more of its push stays put, the other moves
    if (wanted_a - a.pos).length() >= (wanted_b - b.pos).length():
        b.pos = constrain_position(b.pos - axis * shortfall, b.size, basket_avoidance)
    else:
        a.pos = constrain_position(a.pos + axis * shortfall, a.size, basket_avoidance)
    return result
