"""
API request/response schemas.

Pydantic models for API validation and serialization.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from video_studio.domain.models.generation import ArtifactResult, Directive
from video_studio.domain.models.message import Message, Role, Stage


# ============ MESSAGE SCHEMAS ============


class MessageSchema(BaseModel):
    """One conversation log entry."""

    id: str
    role: Role
    text: str
    stage: Stage
    artifact_ref: Optional[str] = None
    artifact: Optional[ArtifactResult] = None
    directive: Optional[Directive] = None
    backend_profile: Optional[str] = None
    turn_id: Optional[str] = None
    failed: bool = False
    created_at: datetime

    @classmethod
    def from_message(cls, message: Message) -> "MessageSchema":
        return cls(**message.model_dump())


class MessageListResponse(BaseModel):
    """Full conversation log."""

    messages: List[MessageSchema]
    total: int
    in_flight: int = Field(description="Turns still running in the background")


# ============ TURN SCHEMAS ============


class TurnRequest(BaseModel):
    """Request to submit a user turn."""

    text: str = Field(..., min_length=1, max_length=500, description="User's message")


class TurnAcceptedResponse(BaseModel):
    """Ids of a turn whose pipeline runs in the background."""

    turn_id: str
    user_message_id: str
    message_id: str
    backend_profile: Optional[str] = None


class TurnResponse(BaseModel):
    """Settled turn (wait=true)."""

    turn_id: str
    user_message_id: str
    message_id: str
    intent: Optional[str] = None
    succeeded: bool
    failed_stage: Optional[str] = None
    message: MessageSchema
    latency_ms: int = 0
    stage_timings: Dict[str, float] = Field(default_factory=dict)


# ============ BACKEND SCHEMAS ============


class BackendProfileSchema(BaseModel):
    """Generation backend profile."""

    id: str
    display_name: str
    description: str = ""
    selected: bool = False


class BackendListResponse(BaseModel):
    """Available backend profiles."""

    profiles: List[BackendProfileSchema]
    selected: Optional[str] = None


class BackendSelectRequest(BaseModel):
    """Request to change the backend profile for future turns."""

    profile: str = Field(..., min_length=1)
