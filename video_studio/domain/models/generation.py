"""Generation domain models.

Directive is the structured output of the enhancement stage; ArtifactResult
is the output of the generation stage. Both are immutable once produced.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MotionIntensity(str, Enum):
    """How much movement the generated clip should contain."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Directive(BaseModel):
    """Machine-usable generation directive produced by EnhancementService.

    Content is a pure function of (text, history); two directives for the
    same input compare equal.
    """

    model_config = ConfigDict(frozen=True)

    original_text: str = Field(description="User text the directive was built from")
    enhanced_text: str = Field(description="Rewritten, richer prompt")
    style: str = Field(description="Visual style (realistic, abstract, landscape, cinematic)")
    duration_seconds: int = Field(gt=0, description="Requested clip length")
    motion_intensity: MotionIntensity
    resolution: str = Field(default="1920x1080")

    def summary(self) -> str:
        """One-line description used for the in-flight status message."""
        return (
            f"{self.style.capitalize()} style, {self.duration_seconds}s, "
            f"{self.motion_intensity.value} motion: {self.enhanced_text}"
        )


class ArtifactResult(BaseModel):
    """Reference to a generated media artifact plus its metadata."""

    model_config = ConfigDict(frozen=True)

    artifact_id: str
    artifact_url: str
    thumbnail_url: str
    duration_seconds: int
    resolution: str
    style: str
    backend_profile: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
