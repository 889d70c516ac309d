"""Shared pytest fixtures for ftcsim tests."""

import random

import pytest

from ftcsim.simulation import (
    Alliance,
    Clock,
    DriveMode,
    EventBus,
    MatchManager,
    Orchestrator,
    RobotState,
    SimulationConfig,
    Vec2,
)


class ScriptedRandom:
    """Random source that replays fixed fractions.

    ``random()`` returns the next fraction; ``uniform(a, b)`` maps the next
    fraction onto [a, b]. Once the script runs out the last value repeats.
    """

    def __init__(self, fractions):
        self._fractions = list(fractions)
        self.draws = 0

    def _next(self) -> float:
        index = min(self.draws, len(self._fractions) - 1)
        self.draws += 1
        return self._fractions[index]

    def random(self) -> float:
        return self._next()

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self._next()


# =============================================================================
# Config / Core Fixtures
# =============================================================================


@pytest.fixture
def config() -> SimulationConfig:
    """Deterministic config independent of environment overrides."""
    return SimulationConfig(
        drive_mode=DriveMode.FIELD,
        max_dt=0.05,
        tick_rate_ms=16,
        seed=1234,
    )


@pytest.fixture
def clock(config) -> Clock:
    return Clock(max_dt=config.max_dt)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def scripted_random():
    """Factory for ScriptedRandom sources."""
    return ScriptedRandom


# =============================================================================
# Match Fixtures
# =============================================================================


@pytest.fixture
def match(config, clock, event_bus, rng) -> MatchManager:
    """Match manager on a fresh clock with the starting layout."""
    return MatchManager(config, clock, event_bus, rng)


@pytest.fixture
def robot() -> RobotState:
    """Primary robot parked in open field."""
    return RobotState(index=0, pos=Vec2(72.0, 100.0))


@pytest.fixture
def partner() -> RobotState:
    """Partner robot parked in open field."""
    return RobotState(index=1, pos=Vec2(100.0, 100.0))


@pytest.fixture
def orchestrator(config) -> Orchestrator:
    """Stopped orchestrator with a seeded random source."""
    return Orchestrator(config)


@pytest.fixture
def running(orchestrator) -> Orchestrator:
    """Orchestrator with a blue-alliance match in progress."""
    orchestrator.start_match(Alliance.BLUE)
    return orchestrator
