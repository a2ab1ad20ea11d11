"""
Stage 4: Generate the artifact.

Calls the generation backend chosen at submission time and binds the
artifact to the turn's message. Outputs GenerationOutput contract.
"""

from typing import TYPE_CHECKING, Optional

import structlog

from ..base import TurnStage
from video_studio.core.exceptions import GenerationFailure
from video_studio.domain.models.message import Stage
from video_studio.domain.models.pipeline_contracts import GenerationOutput
from video_studio.services.protocols import IGenerationService

if TYPE_CHECKING:
    from ..context import PipelineContext
log = structlog.get_logger(__name__)


class GenerationStage(TurnStage):
    """Produce the artifact and settle the turn."""

    def __init__(
        self, generation_service: IGenerationService, timeout: Optional[float] = None
    ):
        """
        Args:
            generation_service: Backend client (simulated or HTTP)
            timeout: Seconds before the call counts as failed (None = no limit)
        """
        self.generation = generation_service
        self.timeout = timeout

    async def process(self, context: "PipelineContext") -> "PipelineContext":
        artifact = await self.call_service(
            self.generation.generate(context.directive, context.backend_profile),
            GenerationFailure,
        )

        context.generation_output = GenerationOutput(
            artifact=artifact,
            backend_display_name=context.backend_display_name,
        )
        context.update_message(
            text=f'I\'ve created your video: "{context.user_input}"',
            artifact_ref=artifact.artifact_url,
            artifact=artifact,
            backend_profile=artifact.backend_profile,
            stage=Stage.NONE,
        )
        context.settled = True

        log.info(
            "artifact_bound",
            turn_id=context.turn_id,
            message_id=context.message_id,
            artifact_id=artifact.artifact_id,
            backend_profile=artifact.backend_profile,
        )
        return context
