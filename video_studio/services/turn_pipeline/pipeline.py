"""
Pipeline orchestrator for turn processing.

TurnPipeline executes stages sequentially with timing and error logging,
stopping early once a stage settles the turn.
"""

import time
from typing import List, Optional

import structlog

from video_studio.core.exceptions import StageFailure

from .base import TurnStage
from .context import PipelineContext
from .result import TurnResult

log = structlog.get_logger(__name__)


class TurnPipeline:
    """
    Orchestrates execution of pipeline stages.

    Executes stages sequentially, tracking timing and logging failures.
    Failures are re-raised; recovering from them is the caller's job.
    """

    def __init__(self, stages: List[TurnStage]):
        """
        Initialize pipeline with a list of stages.

        Args:
            stages: Ordered list of TurnStage instances
        """
        self.stages = stages
        self.logger = log

    async def execute(self, context: PipelineContext) -> TurnResult:
        """
        Execute stages sequentially until one settles the turn.

        Args:
            context: Turn context created at submission

        Returns:
            TurnResult for the settled turn

        Raises:
            StageFailure: If any stage fails
        """
        self.logger.info(
            "pipeline_started",
            turn_id=context.turn_id,
            num_stages=len(self.stages),
        )

        for stage in self.stages:
            if context.settled:
                break

            stage_start = time.perf_counter()

            try:
                self.logger.debug(
                    "stage_started",
                    stage_name=stage.stage_name,
                    turn_id=context.turn_id,
                )

                context = await stage.process(context)

                stage_elapsed = (time.perf_counter() - stage_start) * 1000
                context.stage_timings[stage.stage_name] = stage_elapsed

                self.logger.debug(
                    "stage_completed",
                    stage_name=stage.stage_name,
                    duration_ms=stage_elapsed,
                )

            except StageFailure as e:
                context.stage_timings[stage.stage_name] = (
                    time.perf_counter() - stage_start
                ) * 1000
                self.logger.warning(
                    "stage_failed",
                    stage_name=stage.stage_name,
                    turn_id=context.turn_id,
                    failed_stage=e.stage,
                    error=e.message,
                    timed_out=e.timed_out,
                )
                raise

        result = self.build_result(context)

        self.logger.info(
            "pipeline_completed",
            turn_id=context.turn_id,
            intent=result.intent.value if result.intent else None,
            latency_ms=result.latency_ms,
            stage_timings=context.stage_timings,
        )

        return result

    def build_result(
        self, context: PipelineContext, failure: Optional[StageFailure] = None
    ) -> TurnResult:
        """
        Build TurnResult from context.

        Args:
            context: Final turn context
            failure: The stage failure that ended the turn, if any

        Returns:
            TurnResult
        """
        latency_ms = int((time.perf_counter() - context.started_at) * 1000)

        intent = (
            context.classification_output.intent.kind
            if context.classification_output
            else None
        )
        directive = (
            context.enhancement_output.directive if context.enhancement_output else None
        )
        artifact = (
            context.generation_output.artifact if context.generation_output else None
        )
        reply_text = context.reply_output.reply_text if context.reply_output else None

        return TurnResult(
            turn_id=context.turn_id,
            user_message_id=context.user_message_id,
            message_id=context.message_id,
            intent=intent,
            directive=directive,
            artifact=artifact,
            reply_text=reply_text,
            backend_profile=artifact.backend_profile if artifact else None,
            failed_stage=failure.stage if failure else None,
            failure_reason=failure.message if failure else None,
            timed_out=failure.timed_out if failure else False,
            latency_ms=latency_ms,
            stage_timings=dict(context.stage_timings),
        )
