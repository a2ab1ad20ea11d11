"""
Stage 1: Classify intent.

Decides whether the turn asks for a video, refines the last one, or is
conversation. Outputs ClassificationOutput contract.
"""

from typing import TYPE_CHECKING

import structlog

from ..base import TurnStage
from video_studio.core.exceptions import ClassificationFailure
from video_studio.domain.models.pipeline_contracts import ClassificationOutput
from video_studio.services.protocols import IIntentClassifier

if TYPE_CHECKING:
    from ..context import PipelineContext
log = structlog.get_logger(__name__)


class IntentClassificationStage(TurnStage):
    """Classify the user's utterance against the prior conversation."""

    def __init__(self, classifier: IIntentClassifier):
        self.classifier = classifier

    async def process(self, context: "PipelineContext") -> "PipelineContext":
        try:
            intent = self.classifier.classify(context.user_input, context.history)
        except Exception as e:
            raise ClassificationFailure(
                f"Intent classification failed: {type(e).__name__}: {e}", cause=e
            ) from e

        context.classification_output = ClassificationOutput(intent=intent)

        log.info(
            "intent_determined",
            turn_id=context.turn_id,
            kind=intent.kind.value,
            matched_terms=list(intent.matched_terms),
        )
        return context
