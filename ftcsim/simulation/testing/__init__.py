"""Testing infrastructure for the match simulation.

Calibration helpers that run the shot model many times and compare the
observed make rate against the closed-form success curve. Used by the
calibration tests and by ``python -m ftcsim --sweep``.
"""

from .stats import ShotSweepRow, format_sweep, shot_sweep

__all__ = [
    "ShotSweepRow",
    "format_sweep",
    "shot_sweep",
]
