"""Event system for simulation state changes.

Events are emitted by the match manager and orchestrator and can be
subscribed to by logging or streaming infrastructure.
"""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


class EventType(str, Enum):
    """Types of events that can occur during simulation."""

    # =========================================================================
    # Match Lifecycle
    # =========================================================================
    MATCH_START = "match_start"
    MATCH_STOP = "match_stop"
    FIELD_RESET = "field_reset"
    AGENT_CONFIG = "agent_config"
    PARTNER_TOGGLED = "partner_toggled"
    DRIVE_MODE_CHANGED = "drive_mode_changed"

    # =========================================================================
    # Robot Actions
    # =========================================================================
    MODE_CHANGE = "mode_change"
    PICKUP = "pickup"
    LAUNCH = "launch"
    RELOCALIZE = "relocalize"

    # =========================================================================
    # Resolution
    # =========================================================================
    SCORE = "score"
    MISS = "miss"
    SAMPLE_SPAWNED = "sample_spawned"


@dataclass
class Event:
    """An event that occurred during simulation.

    Attributes:
        type: The type of event
        tick: When the event occurred
        time: Simulation time in seconds when event occurred
        agent_index: Robot involved (if any)
        data: Additional event-specific data
        description: Human-readable description
    """
    type: EventType
    tick: int
    time: float
    agent_index: Optional[int] = None
    data: dict[str, Any] = field(default_factory=dict)
    description: str = ""

    def __str__(self) -> str:
        parts = [f"[{self.time:.2f}s]", f"{self.type.value}"]

        if self.agent_index is not None:
            parts.append(f"by robot {self.agent_index}")

        if self.description:
            parts.append(f"- {self.description}")

        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "tick": self.tick,
            "time": self.time,
            "agent_index": self.agent_index,
            "data": self.data,
            "description": self.description,
        }


EventHandler = Callable[[Event], None]


class EventBus:
    """Typed pub/sub for match events with a bounded history.

    Handlers run synchronously inside ``emit``, in subscription order:
    per-type handlers first, then catch-all handlers. The orchestrator
    uses a catch-all to collect each tick's events; the API session uses
    another to queue events for WebSocket clients.
    """

    def __init__(self, max_history: int = 1000) -> None:
        self._handlers: dict[EventType, list[EventHandler]] = defaultdict(list)
        self._catch_all: list[EventHandler] = []
        self._history: deque[Event] = deque(maxlen=max_history)

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def subscribe_all(self, handler: EventHandler) -> None:
        self._catch_all.append(handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def unsubscribe_all(self, handler: EventHandler) -> None:
        if handler in self._catch_all:
            self._catch_all.remove(handler)

    def emit(self, event: Event) -> None:
        self._history.append(event)
        for handler in [*self._handlers[event.type], *self._catch_all]:
            handler(event)

    def emit_simple(
        self,
        event_type: EventType,
        tick: int,
        time: float,
        agent_index: Optional[int] = None,
        description: str = "",
        **data: Any,
    ) -> Event:
        """Build, emit and return an ``Event``; extra kwargs become ``data``."""
        event = Event(event_type, tick, time, agent_index, data, description)
        self.emit(event)
        return event

    @property
    def history(self) -> list[Event]:
        """Most recent events, oldest first."""
        return list(self._history)

    def get_events_by_type(self, event_type: EventType) -> list[Event]:
        return [e for e in self._history if e.type == event_type]

    def __len__(self) -> int:
        return len(self._history)
