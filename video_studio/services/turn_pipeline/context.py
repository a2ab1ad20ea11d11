"""
Turn pipeline context for contract-based state accumulation.

Carries the turn's inputs (captured at submission time) and accumulates the
contract output of each stage. Convenience properties raise RuntimeError if
read before their producing stage has run, so stages cannot silently act on
missing state.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from video_studio.domain.models.generation import ArtifactResult, Directive
from video_studio.domain.models.intent import IntentResult
from video_studio.domain.models.message import Message
from video_studio.domain.models.pipeline_contracts import (
    ClassificationOutput,
    EnhancementOutput,
    GenerationOutput,
    ReplyOutput,
)

MessageWriter = Callable[..., Optional[Message]]


@dataclass
class PipelineContext:
    """Per-turn pipeline state.

    Stage outputs (contracts):
    - Stage 1: ClassificationOutput - intent of the utterance
    - Stage 2: ReplyOutput - conversational reply (conversation turns only)
    - Stage 3: EnhancementOutput - generation directive
    - Stage 4: GenerationOutput - generated artifact

    A stage that produces the turn's final message sets settled=True and the
    pipeline stops.
    """

    # =========================================================================
    # Inputs (fixed at submission)
    # =========================================================================
    turn_id: str
    user_input: str
    user_message_id: str
    message_id: str  # assistant message updated in place by the stages
    history: Tuple[str, ...] = ()  # prior utterances, excluding this one
    backend_profile: Optional[str] = None
    backend_display_name: str = ""
    prior_directive: Optional[Directive] = None  # last artifact's directive

    # Writes to this turn's assistant message; returns None once the
    # session has restarted
    message_writer: Optional[MessageWriter] = None

    # =========================================================================
    # Stage Outputs (Contracts)
    # =========================================================================
    classification_output: Optional[ClassificationOutput] = None
    reply_output: Optional[ReplyOutput] = None
    enhancement_output: Optional[EnhancementOutput] = None
    generation_output: Optional[GenerationOutput] = None

    # =========================================================================
    # Bookkeeping
    # =========================================================================
    settled: bool = False
    stage_timings: Dict[str, float] = field(default_factory=dict)
    started_at: float = field(default_factory=time.perf_counter)

    def update_message(self, **changes) -> Optional[Message]:
        """Apply changes to this turn's assistant message."""
        if self.message_writer is None:
            raise RuntimeError("PipelineContext has no message_writer")
        return self.message_writer(self.message_id, **changes)

    # =========================================================================
    # Convenience properties
    # =========================================================================

    @property
    def intent(self) -> IntentResult:
        if self.classification_output is None:
            raise RuntimeError(
                "intent accessed before IntentClassificationStage completed"
            )
        return self.classification_output.intent

    @property
    def directive(self) -> Directive:
        if self.enhancement_output is None:
            raise RuntimeError("directive accessed before EnhancementStage completed")
        return self.enhancement_output.directive

    @property
    def artifact(self) -> ArtifactResult:
        if self.generation_output is None:
            raise RuntimeError("artifact accessed before GenerationStage completed")
        return self.generation_output.artifact
