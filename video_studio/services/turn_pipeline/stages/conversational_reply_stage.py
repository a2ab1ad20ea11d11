"""
Stage 2: Reply to conversational turns.

Settles non-generation turns with a template reply; generation and
refinement turns pass through untouched. Outputs ReplyOutput contract.
"""

from typing import TYPE_CHECKING

import structlog

from ..base import TurnStage
from video_studio.domain.models.message import Stage
from video_studio.domain.models.pipeline_contracts import ReplyOutput
from video_studio.services.protocols import IReplyService

if TYPE_CHECKING:
    from ..context import PipelineContext
log = structlog.get_logger(__name__)


class ConversationalReplyStage(TurnStage):
    """Answer small talk without calling the enhancement or generation services."""

    def __init__(self, reply_service: IReplyService):
        self.replies = reply_service

    async def process(self, context: "PipelineContext") -> "PipelineContext":
        if context.intent.is_generation_intent:
            return context

        rule_name, reply_text = self.replies.compose(context.user_input)
        context.reply_output = ReplyOutput(reply_text=reply_text, rule_name=rule_name)
        context.update_message(text=reply_text, stage=Stage.NONE)
        context.settled = True

        log.info("conversational_reply_sent", turn_id=context.turn_id, rule=rule_name)
        return context
