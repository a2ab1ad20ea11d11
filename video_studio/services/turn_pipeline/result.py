"""
Result object for the turn pipeline.

Returned by the orchestrator once a turn has settled, whether it produced an
artifact, a conversational reply, or a failure notice.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from video_studio.domain.models.generation import ArtifactResult, Directive
from video_studio.domain.models.intent import IntentKind


@dataclass
class TurnResult:
    """Outcome of a single turn."""

    turn_id: str
    user_message_id: str
    message_id: str
    intent: Optional[IntentKind] = None  # None if classification failed
    directive: Optional[Directive] = None
    artifact: Optional[ArtifactResult] = None
    reply_text: Optional[str] = None
    backend_profile: Optional[str] = None
    # Failure details (populated when a stage failed)
    failed_stage: Optional[str] = None
    failure_reason: Optional[str] = None
    timed_out: bool = False
    latency_ms: int = 0
    stage_timings: Dict[str, float] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.failed_stage is None
