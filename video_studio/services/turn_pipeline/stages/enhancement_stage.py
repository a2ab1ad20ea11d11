"""
Stage 3: Enhance the prompt.

Builds the generation directive and moves the turn's message to the
generating stage. Refinement turns fold the request into the directive of
the most recent artifact. Outputs EnhancementOutput contract.
"""

from typing import TYPE_CHECKING, Optional

import structlog

from ..base import TurnStage
from video_studio.core.exceptions import EnhancementFailure
from video_studio.domain.models.intent import IntentKind
from video_studio.domain.models.message import Stage
from video_studio.domain.models.pipeline_contracts import EnhancementOutput
from video_studio.services.protocols import IEnhancementService

if TYPE_CHECKING:
    from ..context import PipelineContext
log = structlog.get_logger(__name__)


class EnhancementStage(TurnStage):
    """Turn the utterance into a Directive."""

    def __init__(
        self, enhancement_service: IEnhancementService, timeout: Optional[float] = None
    ):
        """
        Args:
            enhancement_service: Service that builds directives
            timeout: Seconds before the call counts as failed (None = no limit)
        """
        self.enhancement = enhancement_service
        self.timeout = timeout

    async def process(self, context: "PipelineContext") -> "PipelineContext":
        refine = (
            context.intent.kind == IntentKind.REFINEMENT
            and context.prior_directive is not None
        )

        if refine:
            call = self.enhancement.refine(
                context.prior_directive.original_text,
                context.user_input,
                context.history,
            )
        else:
            call = self.enhancement.enhance(context.user_input, context.history)

        directive = await self.call_service(call, EnhancementFailure)
        context.enhancement_output = EnhancementOutput(directive=directive, refined=refine)

        context.update_message(
            text=(
                f"Enhanced prompt: {directive.summary()}\n\n"
                f"Generating your video with {context.backend_display_name}..."
            ),
            directive=directive,
            stage=Stage.GENERATING,
        )

        log.info(
            "directive_ready",
            turn_id=context.turn_id,
            refined=refine,
            style=directive.style,
            duration_seconds=directive.duration_seconds,
        )
        return context
