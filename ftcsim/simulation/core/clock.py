"""Simulation time.

Every timed rule in a match (intake and shot cooldowns, the hit/miss
display window, odometry drift) is a deadline compared against
``Clock.current_time``. Nothing is scheduled, so a match steps the same
under a real-time host loop as under a test calling ``step`` by hand.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable, Optional


MAX_DT = 0.05   # 50ms - larger frame gaps are clamped


@dataclass
class Clock:
    """Simulation clock driven by host-supplied frame deltas.

    Attributes:
        max_dt: Largest step accepted, in seconds
        current_time: Elapsed simulation time in seconds
        tick_count: Number of ticks that actually advanced time
    """
    max_dt: float = MAX_DT
    current_time: float = 0.0
    tick_count: int = 0

    def clamp_dt(self, dt: float) -> float:
        """Usable step for a raw delta: 0 for NaN/non-positive, else min(dt, max_dt)."""
        if not math.isfinite(dt):
            return self.max_dt if dt == math.inf else 0.0
        if dt <= 0:
            return 0.0
        return min(dt, self.max_dt)

    def advance(self, dt: float) -> float:
        """Advance by one frame and return the step actually applied."""
        step = self.clamp_dt(dt)
        if step > 0:
            self.current_time += step
            self.tick_count += 1
        return step

    def reset(self) -> None:
        self.current_time = 0.0
        self.tick_count = 0

    def deadline(self, seconds: float) -> float:
        """Absolute simulation time ``seconds`` from now."""
        return self.current_time + seconds

    def has_passed(self, deadline: float) -> bool:
        return self.current_time >= deadline

    def format_time(self) -> str:
        return f"{self.current_time:.2f}s (tick {self.tick_count})"

    def __repr__(self) -> str:
        return f"Clock(time={self.current_time:.3f}s, tick={self.tick_count})"


class FrameTimer:
    """Wall-clock frame deltas for a real-time host loop.

    The time source is injectable so the tick loop can be driven by a fake
    clock in tests.
    """

    def __init__(self, time_source: Callable[[], float] = time.perf_counter) -> None:
        self._time_source = time_source
        self._last: Optional[float] = None

    def reset(self) -> None:
        self._last = None

    def tick(self) -> float:
        """Seconds since the previous call (0 on the first call)."""
        now = self._time_source()
        last, self._last = self._last, now
        return 0.0 if last is None else now - last
