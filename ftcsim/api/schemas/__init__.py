"""Request and response schemas for the ftcsim API."""

from ftcsim.api.schemas.match import (
    AgentConfigRequest,
    CreateSessionRequest,
    DriveModeRequest,
    InputRequest,
    PartnerRequest,
    RelocalizeResponse,
    RobotSchema,
    SessionResponse,
    StartMatchRequest,
    StepRequest,
)

__all__ = [
    "AgentConfigRequest",
    "CreateSessionRequest",
    "DriveModeRequest",
    "InputRequest",
    "PartnerRequest",
    "RelocalizeResponse",
    "RobotSchema",
    "SessionResponse",
    "StartMatchRequest",
    "StepRequest",
]
