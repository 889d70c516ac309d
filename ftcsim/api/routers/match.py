"""REST API router for match simulation sessions.

Every session route takes the session id as a path string. A malformed
id is a 400 and an unknown one is a 404. Commands the simulation rejects
(bad robot index, size or alliance) come back as 400 with the
simulation's message.
"""

import logging
import math
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from ftcsim.api.schemas.match import (
    AgentConfigRequest,
    CreateSessionRequest,
    DriveModeRequest,
    InputRequest,
    PartnerRequest,
    RelocalizeResponse,
    SessionResponse,
    StartMatchRequest,
    StepRequest,
)
from ftcsim.api.services.session_manager import (
    MatchSession,
    MatchSessionManager,
    get_session_manager,
)
from ftcsim.simulation import InputFrame

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/match", tags=["match"])


# =============================================================================
# Dependencies and helpers
# =============================================================================

def session_uuid(session_id: str) -> UUID:
    try:
        return UUID(session_id)
    except ValueError:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=f"Malformed session id: {session_id!r}")


async def existing_session(
    uuid: UUID = Depends(session_uuid),
    manager: MatchSessionManager = Depends(get_session_manager),
) -> MatchSession:
    return _found(await manager.get_session(uuid))


def _found(session: Optional[MatchSession]) -> MatchSession:
    if session is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


def _rejected(error: Exception) -> HTTPException:
    logger.debug(f"Rejected match command: {error}")
    return HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(error))


def session_to_payload(session: MatchSession) -> dict:
    """Full session state as a plain dict (shared with the WebSocket router)."""
    return {
        "session_id": str(session.session_id),
        "tick_rate_ms": session.tick_rate_ms,
        "loop_running": session.loop_running,
        "paused": session.paused,
        **session.orchestrator.snapshot(),
    }


def _respond(session: Optional[MatchSession]) -> SessionResponse:
    return SessionResponse(**session_to_payload(_found(session)))


# =============================================================================
# Sessions
# =============================================================================

@router.post("/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    request: Optional[CreateSessionRequest] = None,
    manager: MatchSessionManager = Depends(get_session_manager),
) -> SessionResponse:
    request = request or CreateSessionRequest()
    try:
        session = await manager.create_session(
            tick_rate_ms=request.tick_rate_ms,
            seed=request.seed,
            drive_mode=request.drive_mode,
            partner_active=request.partner_active,
        )
    except ValueError as e:
        raise _rejected(e)
    return _respond(session)


@router.get("/sessions", response_model=list[str])
async def list_sessions(manager: MatchSessionManager = Depends(get_session_manager)) -> list[str]:
    return [str(uuid) for uuid in await manager.list_sessions()]


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session: MatchSession = Depends(existing_session)) -> SessionResponse:
    return _respond(session)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    uuid: UUID = Depends(session_uuid),
    manager: MatchSessionManager = Depends(get_session_manager),
) -> None:
    if not await manager.delete_session(uuid):
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Session not found")


# =============================================================================
# Match controls
# =============================================================================

@router.post("/sessions/{session_id}/start", response_model=SessionResponse)
async def start_match(
    request: StartMatchRequest,
    uuid: UUID = Depends(session_uuid),
    manager: MatchSessionManager = Depends(get_session_manager),
) -> SessionResponse:
    """Reset the field and start a match for the chosen alliance."""
    return _respond(await manager.start_match(uuid, request.alliance, run_loop=request.run_loop))


@router.post("/sessions/{session_id}/stop", response_model=SessionResponse)
async def stop_match(
    uuid: UUID = Depends(session_uuid),
    manager: MatchSessionManager = Depends(get_session_manager),
) -> SessionResponse:
    """Stop the match and bring both robots to rest. Score is kept."""
    return _respond(await manager.stop_match(uuid))


@router.post("/sessions/{session_id}/reset", response_model=SessionResponse)
async def reset_field(
    uuid: UUID = Depends(session_uuid),
    manager: MatchSessionManager = Depends(get_session_manager),
) -> SessionResponse:
    """Restore the starting sample layout and clear score and inventories."""
    return _respond(await manager.reset_field(uuid))


@router.post("/sessions/{session_id}/step", response_model=SessionResponse)
async def step(
    request: StepRequest,
    uuid: UUID = Depends(session_uuid),
    manager: MatchSessionManager = Depends(get_session_manager),
) -> SessionResponse:
    """Advance a session by hand. Refused with 409 while its tick loop runs."""
    try:
        session = await manager.step(uuid, request.dt, request.ticks)
    except RuntimeError as e:
        raise HTTPException(status.HTTP_409_CONFLICT, detail=str(e))
    return _respond(session)


# =============================================================================
# Robot configuration and input
# =============================================================================

@router.put("/sessions/{session_id}/agent", response_model=SessionResponse)
async def set_agent_config(
    request: AgentConfigRequest,
    uuid: UUID = Depends(session_uuid),
    manager: MatchSessionManager = Depends(get_session_manager),
) -> SessionResponse:
    """Override a robot's footprint, position and/or heading.

    Omitted width/height or x/y keep the robot's current value, so a
    single axis can be changed on its own.
    """
    heading = None if request.heading_deg is None else math.radians(request.heading_deg)
    try:
        session = await manager.set_agent_config(
            uuid,
            request.index,
            width=request.width,
            height=request.height,
            x=request.x,
            y=request.y,
            heading=heading,
        )
    except (ValueError, IndexError) as e:
        raise _rejected(e)
    return _respond(session)


@router.put("/sessions/{session_id}/partner", response_model=SessionResponse)
async def set_partner(
    request: PartnerRequest,
    uuid: UUID = Depends(session_uuid),
    manager: MatchSessionManager = Depends(get_session_manager),
) -> SessionResponse:
    return _respond(await manager.set_partner_active(uuid, request.active))


@router.put("/sessions/{session_id}/drive-mode", response_model=SessionResponse)
async def set_drive_mode(
    request: DriveModeRequest,
    uuid: UUID = Depends(session_uuid),
    manager: MatchSessionManager = Depends(get_session_manager),
) -> SessionResponse:
    try:
        session = await manager.set_drive_mode(uuid, request.drive_mode)
    except ValueError as e:
        raise _rejected(e)
    return _respond(session)


@router.put("/sessions/{session_id}/input", response_model=SessionResponse)
async def set_input(
    request: InputRequest,
    uuid: UUID = Depends(session_uuid),
    manager: MatchSessionManager = Depends(get_session_manager),
) -> SessionResponse:
    """Set the held input for one robot until the next input arrives."""
    try:
        frame = InputFrame.from_buttons(
            strafe=request.strafe,
            forward=request.forward,
            rotate=request.rotate,
            buttons=request.buttons,
        )
        session = await manager.set_input(uuid, request.index, frame)
    except (ValueError, IndexError) as e:
        raise _rejected(e)
    return _respond(session)


@router.post("/sessions/{session_id}/relocalize/{index}", response_model=RelocalizeResponse)
async def relocalize(
    index: int,
    uuid: UUID = Depends(session_uuid),
    manager: MatchSessionManager = Depends(get_session_manager),
) -> RelocalizeResponse:
    """Zero a robot's odometry drift when it is in the human player corner."""
    try:
        relocalized = await manager.relocalize(uuid, index)
    except IndexError as e:
        raise _rejected(e)
    if relocalized is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Session not found")
    return RelocalizeResponse(success=relocalized, index=index)
