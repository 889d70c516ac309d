"""Session manager for live match simulations.

Each session wraps one ``Orchestrator``. While a match is running, an
asyncio task steps it at the session's tick rate using wall-clock frame
deltas and pushes tick updates and simulation events to listeners
(WebSocket connections).
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Optional
from uuid import UUID, uuid4

from ftcsim.simulation import (
    Event,
    FrameTimer,
    InputFrame,
    Orchestrator,
    SimulationConfig,
    get_config,
)
from ftcsim.simulation.core.vec2 import Vec2

logger = logging.getLogger(__name__)

Listener = Callable[[dict], Awaitable[None]]

LOOP_STOP_TIMEOUT = 1.0   # seconds to wait for a tick loop before cancelling it


@dataclass
class MatchSession:
    """A live match session."""

    session_id: UUID
    orchestrator: Orchestrator
    tick_rate_ms: int
    listeners: list[Listener] = field(default_factory=list, repr=False)

    # Tick loop control
    _task: Optional[asyncio.Task] = field(default=None, repr=False)
    _running: asyncio.Event = field(default_factory=asyncio.Event, repr=False)
    _halt: bool = field(default=False, repr=False)
    _pending_events: list[Event] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        self._running.set()
        self.orchestrator.event_bus.subscribe_all(self._pending_events.append)

    @property
    def loop_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def paused(self) -> bool:
        return not self._running.is_set()

    def drain_events(self) -> list[Event]:
        events = self._pending_events[:]
        self._pending_events.clear()
        return events


class MatchSessionManager:
    """
    Owns every live match session.

    Commands reach a session through ``_locked``, which holds the manager
    lock for the duration of the command. Orchestrator calls are
    synchronous, so a command never interleaves with a tick.
    """

    def __init__(self) -> None:
        self._sessions: dict[UUID, MatchSession] = {}
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def _locked(self, session_id: UUID) -> AsyncIterator[Optional[MatchSession]]:
        """Hold the manager lock and yield the session (None if unknown)."""
        async with self._lock:
            yield self._sessions.get(session_id)

    async def create_session(
        self,
        tick_rate_ms: Optional[int] = None,
        seed: Optional[int] = None,
        drive_mode: Optional[str] = None,
        partner_active: bool = False,
    ) -> MatchSession:
        """
        Create a new match session.

        Args:
            tick_rate_ms: Milliseconds between ticks (defaults to config)
            seed: Random seed for shots and respawns (defaults to config)
            drive_mode: "field" or "robot" (defaults to config)
            partner_active: Whether the partner robot starts enabled
        """
        base = get_config()
        config = SimulationConfig(
            drive_mode=base.drive_mode,
            max_dt=base.max_dt,
            tick_rate_ms=tick_rate_ms or base.tick_rate_ms,
            seed=base.seed if seed is None else seed,
        )

        orchestrator = Orchestrator(config)
        if drive_mode:
            orchestrator.set_drive_mode(drive_mode)
        orchestrator.set_partner_active(partner_active)

        session = MatchSession(uuid4(), orchestrator, config.tick_rate_ms)
        async with self._lock:
            self._sessions[session.session_id] = session

        logger.info(f"Created match session {session.session_id} (seed={config.seed})")
        return session

    async def get_session(self, session_id: UUID) -> Optional[MatchSession]:
        async with self._locked(session_id) as session:
            return session

    async def delete_session(self, session_id: UUID) -> bool:
        """Stop the session's tick loop and forget it. False if it did not exist."""
        async with self._locked(session_id) as session:
            if session is None:
                return False
            await self._halt_loop(session)
            self._sessions.pop(session_id)

        logger.info(f"Deleted match session {session_id}")
        return True

    async def list_sessions(self) -> list[UUID]:
        async with self._lock:
            return list(self._sessions)

    async def cleanup_all(self) -> None:
        """Stop and drop every session (application shutdown)."""
        async with self._lock:
            for session in self._sessions.values():
                await self._halt_loop(session)
            self._sessions.clear()

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_listener(self, session: MatchSession, listener: Listener) -> None:
        session.listeners.append(listener)

    def remove_listener(self, session: MatchSession, listener: Listener) -> None:
        if listener in session.listeners:
            session.listeners.remove(listener)

    async def _broadcast(self, session: MatchSession, message: dict) -> None:
        for listener in list(session.listeners):
            try:
                await listener(message)
            except Exception as e:
                logger.warning(f"Dropping listener for session {session.session_id}: {e}")
                self.remove_listener(session, listener)

    async def flush_events(self, session: MatchSession) -> None:
        """Send queued simulation events to every listener."""
        for event in session.drain_events():
            await self._broadcast(session, {"type": "event", "payload": event.to_dict()})

    # =========================================================================
    # Match controls
    # =========================================================================

    async def start_match(
        self, session_id: UUID, alliance: str, run_loop: bool = True
    ) -> Optional[MatchSession]:
        """
        Start (or restart) a match and, optionally, its tick loop.

        Raises:
            ValueError: If alliance is not "red" or "blue"
        """
        async with self._locked(session_id) as session:
            if session is None:
                return None
            await self._halt_loop(session)
            session.orchestrator.start_match(alliance)
            if run_loop:
                self._launch_loop(session)

        await self.flush_events(session)
        return session

    async def stop_match(self, session_id: UUID) -> Optional[MatchSession]:
        async with self._locked(session_id) as session:
            if session is None:
                return None
            await self._halt_loop(session)
            session.orchestrator.stop_match()

        await self.flush_events(session)
        return session

    async def pause(self, session_id: UUID) -> bool:
        return await self._set_paused(session_id, True)

    async def resume(self, session_id: UUID) -> bool:
        return await self._set_paused(session_id, False)

    async def _set_paused(self, session_id: UUID, paused: bool) -> bool:
        async with self._locked(session_id) as session:
            if session is None:
                return False
            if paused:
                session._running.clear()
            else:
                session._running.set()
        logger.debug(f"Session {session_id} {'paused' if paused else 'resumed'}")
        return True

    async def apply(
        self, session_id: UUID, command: Callable[[Orchestrator], object]
    ) -> Optional[tuple[MatchSession, object]]:
        """
        Run a synchronous command against a session's orchestrator.

        Returns:
            (session, command result), or None if the session is unknown
        """
        async with self._locked(session_id) as session:
            if session is None:
                return None
            result = command(session.orchestrator)

        await self.flush_events(session)
        return session, result

    async def _apply_for_session(
        self, session_id: UUID, command: Callable[[Orchestrator], object]
    ) -> Optional[MatchSession]:
        applied = await self.apply(session_id, command)
        return applied[0] if applied else None

    async def reset_field(self, session_id: UUID) -> Optional[MatchSession]:
        return await self._apply_for_session(session_id, lambda orch: orch.reset_field())

    async def set_agent_config(
        self,
        session_id: UUID,
        index: int,
        width: Optional[float] = None,
        height: Optional[float] = None,
        x: Optional[float] = None,
        y: Optional[float] = None,
        heading: Optional[float] = None,
    ) -> Optional[MatchSession]:
        """Override part of a robot's footprint and pose.

        Omitted fields keep the robot's current value, read under the lock
        in the same command that writes the override.

        Raises:
            IndexError: For an unknown robot index
            ValueError: For a footprint or position the field cannot hold
        """
        def configure(orch: Orchestrator) -> None:
            robot = orch.robot_at(index)
            size = position = None
            if width is not None or height is not None:
                size = Vec2(
                    robot.size.x if width is None else width,
                    robot.size.y if height is None else height,
                )
            if x is not None or y is not None:
                position = Vec2(robot.pos.x if x is None else x, robot.pos.y if y is None else y)
            orch.set_agent_config(index, size=size, position=position, heading=heading)

        return await self._apply_for_session(session_id, configure)

    async def set_partner_active(self, session_id: UUID, active: bool) -> Optional[MatchSession]:
        return await self._apply_for_session(session_id, lambda orch: orch.set_partner_active(active))

    async def set_drive_mode(self, session_id: UUID, drive_mode: str) -> Optional[MatchSession]:
        return await self._apply_for_session(session_id, lambda orch: orch.set_drive_mode(drive_mode))

    async def set_input(self, session_id: UUID, index: int, frame: InputFrame) -> Optional[MatchSession]:
        return await self._apply_for_session(session_id, lambda orch: orch.set_input(index, frame))

    async def relocalize(self, session_id: UUID, index: int) -> Optional[bool]:
        applied = await self.apply(session_id, lambda orch: orch.relocalize(index))
        return applied[1] if applied else None

    async def step(self, session_id: UUID, dt: float, ticks: int = 1) -> Optional[MatchSession]:
        """
        Advance a session by hand.

        Raises:
            RuntimeError: If the session's tick loop is running
        """
        async with self._locked(session_id) as session:
            if session is None:
                return None
            if session.loop_running:
                raise RuntimeError("tick loop is running")
            for _ in range(ticks):
                session.orchestrator.step(dt)

        await self.flush_events(session)
        return session

    # =========================================================================
    # Tick loop
    # =========================================================================

    def _launch_loop(self, session: MatchSession) -> None:
        session._halt = False
        session._running.set()
        session._task = asyncio.create_task(self._tick_loop(session))

    async def _halt_loop(self, session: MatchSession) -> None:
        """Stop the session's tick loop. Caller holds the manager lock."""
        task, session._task = session._task, None
        if task is None or task.done():
            return

        session._halt = True
        session._running.set()
        try:
            await asyncio.wait_for(task, timeout=LOOP_STOP_TIMEOUT)
        except asyncio.TimeoutError:
            # wait_for has already cancelled the task
            logger.warning(f"Tick loop for {session.session_id} did not stop in time")

    async def _tick_loop(self, session: MatchSession) -> None:
        """Step the match in real time until it stops."""
        orchestrator = session.orchestrator
        period = session.tick_rate_ms / 1000.0
        timer = FrameTimer()
        timer.tick()

        while orchestrator.is_running and not session._halt:
            await session._running.wait()
            if session._halt:
                break

            await asyncio.sleep(period)
            # Gaps after a pause are clamped to max_dt by the clock
            orchestrator.step(timer.tick())

            await self._broadcast(session, {"type": "tick_update", "payload": orchestrator.snapshot()})
            await self.flush_events(session)

        logger.debug(f"Tick loop for {session.session_id} exited")


_session_manager: Optional[MatchSessionManager] = None


def get_session_manager() -> MatchSessionManager:
    """Process-wide session manager."""
    global _session_manager
    if _session_manager is None:
        _session_manager = MatchSessionManager()
    return _session_manager
