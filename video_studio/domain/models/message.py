"""Message domain models for the conversation log.

This module defines the Message model that represents one entry in the
conversation log shown to the user.

Core Concepts:
    - Role: USER utterances, ASSISTANT replies, SYSTEM session notices
    - Stage: which asynchronous pipeline stage is in flight for a message
    - Identity: a message id is assigned once and survives every in-place update

Pipeline Integration:
    - ConversationOrchestrator appends a USER message and an ASSISTANT
      placeholder (stage ENHANCING) per turn
    - EnhancementStage moves the placeholder to GENERATING
    - GenerationStage / ReplyStage / failure handling settle it (stage NONE)
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from video_studio.domain.models.generation import ArtifactResult, Directive


class Role(str, Enum):
    """Author of a message.

    Values:
        - USER: text typed by the user
        - ASSISTANT: conversational reply or generated-artifact message
        - SYSTEM: session status notice (welcome message), not a reply
    """

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Stage(str, Enum):
    """Pipeline stage in flight for a message.

    Allowed transitions: ENHANCING -> GENERATING -> NONE, ENHANCING -> NONE.
    NONE is terminal.
    """

    NONE = "none"
    ENHANCING = "enhancing"
    GENERATING = "generating"


_STAGE_ORDER = {Stage.ENHANCING: 0, Stage.GENERATING: 1, Stage.NONE: 2}


def is_forward_transition(current: Stage, new: Stage) -> bool:
    """True if moving from current to new never revisits an earlier stage.

    Staying on the same in-flight stage is allowed (text-only updates);
    NONE is terminal.
    """
    if current == Stage.NONE:
        return new == Stage.NONE
    return _STAGE_ORDER[new] >= _STAGE_ORDER[current]


class Message(BaseModel):
    """Single entry of the conversation log.

    Messages are immutable values. The MessageLog applies an update by
    replacing the entry at the same position with a copy carrying the same
    id, so snapshots handed to observers never change underneath them.

    Invariants (enforced by MessageLog):
        - artifact_ref is set only when stage is NONE
        - stage never moves backwards
        - id and created_at never change
    """

    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    text: str
    stage: Stage = Stage.NONE
    artifact_ref: Optional[str] = None
    artifact: Optional[ArtifactResult] = None
    directive: Optional[Directive] = None
    backend_profile: Optional[str] = None
    turn_id: Optional[str] = None
    failed: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_settled(self) -> bool:
        return self.stage == Stage.NONE
