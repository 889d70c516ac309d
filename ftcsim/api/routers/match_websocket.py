"""WebSocket router for live match updates.

Client messages are ``{"type": ..., ...fields}``. Recognized types are
start_match (``alliance``), stop_match, reset_field, pause, resume, input
(``index``, ``strafe``, ``forward``, ``rotate``, ``buttons``), relocalize
(``index``) and request_sync.

The server pushes state_sync (on connect, on request and after field
commands), tick_update every tick while the loop runs, event for each
simulation event, and ``{"type": "error", "message", "code"}`` for
anything it rejects.
"""

import json
import logging
from typing import Any, Awaitable, Callable
from uuid import UUID

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ftcsim.api.routers.match import session_to_payload
from ftcsim.api.services.session_manager import (
    MatchSession,
    MatchSessionManager,
    get_session_manager,
)
from ftcsim.simulation import InputFrame

logger = logging.getLogger(__name__)

router = APIRouter(tags=["match-websocket"])


class MatchConnection:
    """One client attached to one match session."""

    def __init__(self, websocket: WebSocket, manager: MatchSessionManager, session: MatchSession) -> None:
        self.websocket = websocket
        self.manager = manager
        self.session = session
        self.handlers: dict[str, Callable[[dict[str, Any]], Awaitable[None]]] = {
            "start_match": self.on_start_match,
            "stop_match": self.on_stop_match,
            "reset_field": self.on_reset_field,
            "pause": self.on_pause,
            "resume": self.on_resume,
            "input": self.on_input,
            "relocalize": self.on_relocalize,
            "request_sync": self.on_request_sync,
        }

    @property
    def session_id(self) -> UUID:
        return self.session.session_id

    async def error(self, message: str, code: str) -> None:
        await self.websocket.send_json({"type": "error", "message": message, "code": code})

    async def sync(self) -> None:
        await self.websocket.send_json({"type": "state_sync", "payload": session_to_payload(self.session)})

    async def handle(self, raw: str) -> None:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            await self.error("Invalid JSON", "INVALID_JSON")
            return
        if not isinstance(message, dict):
            await self.error("Messages must be JSON objects", "INVALID_JSON")
            return

        msg_type = message.get("type")
        handler = self.handlers.get(msg_type)
        if handler is None:
            await self.error(f"Unknown message type: {msg_type}", "UNKNOWN_MESSAGE")
            return
        await handler(message)

    # =========================================================================
    # Handlers
    # =========================================================================

    async def on_start_match(self, message: dict[str, Any]) -> None:
        try:
            await self.manager.start_match(self.session_id, message.get("alliance", "blue"))
        except ValueError as e:
            await self.error(str(e), "START_FAILED")
            return
        await self.sync()

    async def on_stop_match(self, message: dict[str, Any]) -> None:
        await self.manager.stop_match(self.session_id)
        await self.sync()

    async def on_reset_field(self, message: dict[str, Any]) -> None:
        await self.manager.reset_field(self.session_id)
        await self.sync()

    async def on_pause(self, message: dict[str, Any]) -> None:
        await self.manager.pause(self.session_id)

    async def on_resume(self, message: dict[str, Any]) -> None:
        await self.manager.resume(self.session_id)

    async def on_input(self, message: dict[str, Any]) -> None:
        try:
            frame = InputFrame.from_buttons(
                strafe=float(message.get("strafe", 0.0)),
                forward=float(message.get("forward", 0.0)),
                rotate=float(message.get("rotate", 0.0)),
                buttons=message.get("buttons", []),
            )
            await self.manager.set_input(self.session_id, int(message.get("index", 0)), frame)
        except (TypeError, ValueError, IndexError) as e:
            await self.error(f"Invalid input: {e}", "INVALID_INPUT")

    async def on_relocalize(self, message: dict[str, Any]) -> None:
        try:
            relocalized = await self.manager.relocalize(self.session_id, int(message.get("index", 0)))
        except (TypeError, ValueError, IndexError) as e:
            await self.error(f"Invalid robot index: {e}", "INVALID_INPUT")
            return
        if not relocalized:
            await self.error("Robot is not in the human player corner", "RELOCALIZE_FAILED")

    async def on_request_sync(self, message: dict[str, Any]) -> None:
        await self.sync()


async def _reject(websocket: WebSocket, message: str, code: str) -> None:
    await websocket.send_json({"type": "error", "message": message, "code": code})
    await websocket.close()


@router.websocket("/ws/match/{session_id}")
async def match_websocket(websocket: WebSocket, session_id: str) -> None:
    """Stream a match session and accept driver commands for it."""
    await websocket.accept()
    manager = get_session_manager()

    try:
        uuid = UUID(session_id)
    except ValueError:
        await _reject(websocket, "Invalid session ID format", "INVALID_SESSION_ID")
        return

    session = await manager.get_session(uuid)
    if session is None:
        await _reject(websocket, "Session not found", "SESSION_NOT_FOUND")
        return

    connection = MatchConnection(websocket, manager, session)
    listener = websocket.send_json
    await connection.sync()
    manager.add_listener(session, listener)

    try:
        while True:
            await connection.handle(await websocket.receive_text())
    except WebSocketDisconnect:
        logger.debug(f"Client disconnected from match {uuid}")
    finally:
        manager.remove_listener(session, listener)
