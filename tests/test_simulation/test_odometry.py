"""Tests for the odometry drift model."""

import pytest

from ftcsim.simulation.core.field import Alliance
from ftcsim.simulation.core.vec2 import Vec2
from ftcsim.simulation.physics.odometry import DriftRates, OdometryModel


class TestDrift:
    """Tests for drift accumulation."""

    def test_grows_linearly(self):
        model = OdometryModel(DriftRates(x=-0.1, y=0.2, heading=0.01))
        drift, heading = model.drift_at(10.0)
        assert drift.x == pytest.approx(-1.0)
        assert drift.y == pytest.approx(2.0)
        assert heading == pytest.approx(0.1)

    def test_true_pose_untouched(self):
        """The estimate drifts while the true pose stays put."""
        model = OdometryModel()
        true_pos = Vec2(50.0, 50.0)
        estimate = model.estimate(true_pos, 1.0, 20.0)
        assert estimate.pos != true_pos
        assert true_pos == Vec2(50.0, 50.0)
        assert estimate.pos.x == pytest.approx(50.0 - 0.07 * 20)
        assert estimate.pos.y == pytest.approx(50.0 + 0.09 * 20)

    def test_warning_threshold(self):
        """The warning trips once either axis exceeds 3 in."""
        model = OdometryModel()
        assert not model.estimate(Vec2(50, 50), 0.0, 30.0).drift_warning   # y = 2.7
        assert model.estimate(Vec2(50, 50), 0.0, 34.0).drift_warning       # y = 3.06

    def test_disabled(self):
        model = OdometryModel(enabled=False)
        estimate = model.estimate(Vec2(10, 20), 0.5, 100.0)
        assert estimate.pos == Vec2(10, 20)
        assert estimate.heading == pytest.approx(0.5)
        assert not estimate.drift_warning

    def test_reset_moves_anchor(self):
        model = OdometryModel()
        model.reset(5.0)
        drift, _ = model.drift_at(5.0)
        assert drift == Vec2.zero()


class TestRelocalize:
    """Tests for relocalize()."""

    def test_in_corner(self):
        model = OdometryModel()
        assert model.relocalize(Vec2(30.0, 115.0), Alliance.BLUE, 40.0)
        drift, _ = model.drift_at(40.0)
        assert drift == Vec2.zero()

    def test_too_far(self):
        """Outside the corner radius drift is kept."""
        model = OdometryModel()
        assert not model.relocalize(Vec2(72.0, 72.0), Alliance.BLUE, 40.0)
        drift, _ = model.drift_at(40.0)
        assert drift.length() > 0

    def test_wrong_corner(self):
        """Each alliance relocalizes only at its own corner."""
        model = OdometryModel()
        assert not model.can_relocalize(Vec2(24.0, 120.0), Alliance.RED)
        assert model.can_relocalize(Vec2(120.0, 120.0), Alliance.RED)
