"""Pipeline stage contracts.

Pydantic models for stage outputs, giving type safety and runtime
validation for the turn processing pipeline. Each stage writes exactly one
of these onto the PipelineContext.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from video_studio.domain.models.generation import ArtifactResult, Directive
from video_studio.domain.models.intent import IntentResult


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ClassificationOutput(BaseModel):
    """Contract: IntentClassificationStage output (Stage 1)."""

    intent: IntentResult
    timestamp: datetime = Field(default_factory=_now)


class ReplyOutput(BaseModel):
    """Contract: ConversationalReplyStage output (Stage 2).

    Only produced for conversational turns; settles the turn.
    """

    reply_text: str = Field(description="Template reply shown to the user")
    rule_name: str = Field(description="Reply rule that matched, or 'fallback'")
    timestamp: datetime = Field(default_factory=_now)


class EnhancementOutput(BaseModel):
    """Contract: EnhancementStage output (Stage 3)."""

    directive: Directive
    refined: bool = Field(
        default=False, description="True if built by refining a prior directive"
    )
    timestamp: datetime = Field(default_factory=_now)


class GenerationOutput(BaseModel):
    """Contract: GenerationStage output (Stage 4)."""

    artifact: ArtifactResult
    backend_display_name: str
    timestamp: datetime = Field(default_factory=_now)
