"""Tests for boundary, basket keep-out and robot separation."""

import pytest

from ftcsim.simulation.core.entities import RobotState
from ftcsim.simulation.core.field import BASKET_KEEP_OUT, FIELD_SIZE, is_in_bounds
from ftcsim.simulation.core.vec2 import Vec2
from ftcsim.simulation.physics.collision import (
    clamp_to_field,
    constrain_position,
    min_separation,
    push_out_of_baskets,
    resolve_pair,
    separate_robots,
)

SIZE = Vec2(18.0, 18.0)


class TestClampToField:
    """Tests for clamp_to_field()."""

    def test_inside_unchanged(self):
        assert clamp_to_field(Vec2(50, 60), SIZE) == Vec2(50, 60)

    def test_clamps_each_axis(self):
        """Footprint stays on the field on every side."""
        assert clamp_to_field(Vec2(-20, 200), SIZE) == Vec2(9, 135)
        assert clamp_to_field(Vec2(500, -1), SIZE) == Vec2(135, 9)

    def test_respects_rectangular_footprint(self):
        size = Vec2(12.0, 24.0)
        pos = clamp_to_field(Vec2(0, 0), size)
        assert pos == Vec2(6, 12)
        assert is_in_bounds(pos, size)


class TestBasketKeepOut:
    """Tests for push_out_of_baskets()."""

    def test_clear_of_both_corners(self):
        assert push_out_of_baskets(Vec2(72, 72)) == Vec2(72, 72)

    def test_blue_corner_pushes_up_and_right(self):
        """Deficit is split evenly so x + y lands on the limit."""
        pos = push_out_of_baskets(Vec2(10, 10))
        assert pos.x == pytest.approx(10 + (BASKET_KEEP_OUT - 20) / 2)
        assert pos.y == pytest.approx(10 + (BASKET_KEEP_OUT - 20) / 2)
        assert pos.x + pos.y == pytest.approx(BASKET_KEEP_OUT)

    def test_red_corner_pushes_up_and_left(self):
        pos = push_out_of_baskets(Vec2(134, 10))
        assert pos.x < 134
        assert pos.y > 10
        assert (FIELD_SIZE - pos.x) + pos.y == pytest.approx(BASKET_KEEP_OUT)

    def test_corner_scenario_respects_limit(self):
        """A robot jammed into the blue corner ends outside the keep-out line."""
        pos = constrain_position(Vec2(0, 0), SIZE, basket_avoidance=True)
        assert pos.x + pos.y >= BASKET_KEEP_OUT - 1e-9
        assert is_in_bounds(pos, SIZE)

    def test_red_corner_scenario_respects_limit(self):
        pos = constrain_position(Vec2(FIELD_SIZE, 0), SIZE, basket_avoidance=True)
        assert (FIELD_SIZE - pos.x) + pos.y >= BASKET_KEEP_OUT - 1e-9
        assert is_in_bounds(pos, SIZE)

    def test_avoidance_can_be_disabled(self):
        """Without avoidance only the field clamp applies."""
        assert constrain_position(Vec2(0, 0), SIZE, basket_avoidance=False) == Vec2(9, 9)


class TestSeparation:
    """Tests for separate_robots() and resolve_pair()."""

    def test_far_apart_untouched(self):
        a = RobotState(index=0, pos=Vec2(40, 72))
        b = RobotState(index=1, pos=Vec2(100, 72))
        result = separate_robots(a, b)
        assert not result.overlapped
        assert a.pos == Vec2(40, 72)
        assert b.pos == Vec2(100, 72)

    def test_overlap_split_symmetrically(self):
        """Each robot moves half the overlap along the center line."""
        a = RobotState(index=0, pos=Vec2(75, 72))
        b = RobotState(index=1, pos=Vec2(69, 72))
        required = min_separation(a, b)

        result = separate_robots(a, b)

        assert result.overlapped
        assert result.overlap == pytest.approx(required - 6)
        assert a.pos.x - 75 == pytest.approx(69 - b.pos.x)
        assert a.pos.distance_to(b.pos) == pytest.approx(required)
        assert a.pos.y == pytest.approx(72)

    def test_same_point_scenario(self):
        """Two robots commanded to the same point end at least the minimum apart."""
        a = RobotState(index=0, pos=Vec2(72, 72))
        b = RobotState(index=1, pos=Vec2(72, 72))
        resolve_pair(a, b)
        assert a.pos.distance_to(b.pos) >= (a.size.x + b.size.x) / 1.8 - 1e-9
        assert a.pos.x > b.pos.x

    def test_resolve_pair_keeps_bounds(self):
        """Separation near a wall is re-clamped onto the field."""
        a = RobotState(index=0, pos=Vec2(9, 72))
        b = RobotState(index=1, pos=Vec2(12, 72))
        resolve_pair(a, b)
        assert is_in_bounds(a.pos, a.size)
        assert is_in_bounds(b.pos, b.size)

    def test_pinned_robot_passes_push_to_partner(self):
        """A robot against a wall stays put and the free robot takes the whole push."""
        a = RobotState(index=0, pos=Vec2(9, 72))
        b = RobotState(index=1, pos=Vec2(12, 72))
        resolve_pair(a, b)
        assert a.pos == Vec2(9, 72)
        assert b.pos.x == pytest.approx(9 + min_separation(a, b))
        assert a.pos.distance_to(b.pos) >= min_separation(a, b) - 1e-9

    def test_both_pinned_in_corner_keeps_bounds(self):
        """Two robots wedged into the same corner never leave the field."""
        a = RobotState(index=0, pos=Vec2(FIELD_SIZE - 9, FIELD_SIZE - 9))
        b = RobotState(index=1, pos=Vec2(FIELD_SIZE - 10, FIELD_SIZE - 10))
        resolve_pair(a, b, basket_avoidance=False)
        assert is_in_bounds(a.pos, a.size)
        assert is_in_bounds(b.pos, b.size)
