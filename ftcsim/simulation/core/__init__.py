"""Core layer - foundational types and utilities."""

from .vec2 import Vec2
from .field import (
    FIELD_SIZE,
    FIELD_CENTER,
    ROBOT_SIZE,
    BASKET_SIZE,
    BASKET_KEEP_OUT,
    Alliance,
    DriveMode,
    basket_center,
    normalize_radians,
)
from .entities import (
    AgentMode,
    LaunchedSample,
    RobotState,
    Sample,
    SampleType,
    ShotResult,
)
from .clock import Clock, FrameTimer
from .events import Event, EventType, EventBus

__all__ = [
    "Vec2",
    "FIELD_SIZE",
    "FIELD_CENTER",
    "ROBOT_SIZE",
    "BASKET_SIZE",
    "BASKET_KEEP_OUT",
    "Alliance",
    "DriveMode",
    "basket_center",
    "normalize_radians",
    "AgentMode",
    "LaunchedSample",
    "RobotState",
    "Sample",
    "SampleType",
    "ShotResult",
    "Clock",
    "FrameTimer",
    "Event",
    "EventType",
    "EventBus",
]
