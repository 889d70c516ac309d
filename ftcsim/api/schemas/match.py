"""Pydantic schemas for the match simulation API."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    """Request to create a new match session."""

    tick_rate_ms: Optional[int] = Field(default=None, ge=5, le=200)
    seed: Optional[int] = None
    drive_mode: Optional[Literal["field", "robot"]] = None
    partner_active: bool = False


class StartMatchRequest(BaseModel):
    """Request to start a match for one alliance."""

    alliance: Literal["red", "blue"] = "blue"
    run_loop: bool = True


class AgentConfigRequest(BaseModel):
    """Override a robot's footprint and pose."""

    index: int = Field(default=0, ge=0, le=1)
    width: Optional[float] = Field(default=None, ge=10, le=24)
    height: Optional[float] = Field(default=None, ge=10, le=24)
    x: Optional[float] = Field(default=None, ge=0, le=144)
    y: Optional[float] = Field(default=None, ge=0, le=144)
    heading_deg: Optional[float] = Field(default=None, ge=-360, le=360)


class PartnerRequest(BaseModel):
    """Enable or disable the alliance partner robot."""

    active: bool


class DriveModeRequest(BaseModel):
    """Switch between field-centric and robot-centric driving."""

    drive_mode: Literal["field", "robot"]


class InputRequest(BaseModel):
    """Held input for one robot."""

    index: int = Field(default=0, ge=0, le=1)
    strafe: float = Field(default=0.0, ge=-1, le=1)
    forward: float = Field(default=0.0, ge=-1, le=1)
    rotate: float = Field(default=0.0, ge=-1, le=1)
    buttons: list[Literal["arm", "disarm", "action"]] = Field(default_factory=list)


class StepRequest(BaseModel):
    """Advance a session manually (when its tick loop is not running)."""

    dt: float = Field(default=1 / 60, gt=0, le=1)
    ticks: int = Field(default=1, ge=1, le=600)


class RelocalizeResponse(BaseModel):
    """Result of a relocalize attempt."""

    success: bool
    index: int


class RobotSchema(BaseModel):
    """Robot state as seen by a client."""

    index: int
    name: str
    active: bool
    x: float
    y: float
    heading: float
    width: float
    height: float
    held_samples: list[str]
    intake_active: bool
    mode: str
    vx: float
    vy: float
    rot_velocity: float
    distance_to_goal: float
    success_probability: float
    estimate: dict


class SessionResponse(BaseModel):
    """Response containing session information."""

    session_id: str
    tick_rate_ms: int
    loop_running: bool
    paused: bool
    tick: int
    time: float
    is_running: bool
    alliance: str
    drive_mode: str
    partner_active: bool
    score: int
    last_shot_result: Optional[str] = None
    robots: list[RobotSchema]
    samples: list[dict]
    launched: list[dict]
