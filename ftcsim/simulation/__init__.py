"""Match simulation engine.

A physics and game-state core for a two-robot alliance match:
- Single coordinate system (inches, origin at the blue basket corner)
- PID-smoothed drivetrain with field- and robot-centric driving
- Probabilistic shot model with ballistic flight
- Deadline-based cooldowns so matches can be stepped without a real clock
"""

from .config import SimulationConfig, get_config, set_config
from .core import (
    Alliance,
    AgentMode,
    Clock,
    DriveMode,
    Event,
    EventBus,
    EventType,
    FrameTimer,
    LaunchedSample,
    RobotState,
    Sample,
    SampleType,
    ShotResult,
    Vec2,
)
from .inputs import Button, InputFrame
from .match import ItemCounts, MatchManager
from .orchestrator import Orchestrator, TickResult

__version__ = "0.1.0"

__all__ = [
    "SimulationConfig",
    "get_config",
    "set_config",
    "Alliance",
    "AgentMode",
    "Clock",
    "DriveMode",
    "Event",
    "EventBus",
    "EventType",
    "FrameTimer",
    "LaunchedSample",
    "RobotState",
    "Sample",
    "SampleType",
    "ShotResult",
    "Vec2",
    "Button",
    "InputFrame",
    "ItemCounts",
    "MatchManager",
    "Orchestrator",
    "TickResult",
]
