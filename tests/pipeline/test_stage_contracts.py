"""Tests for the turn pipeline stages and their contract outputs."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from video_studio.core.exceptions import (
    ClassificationFailure,
    EnhancementFailure,
    GenerationFailure,
)
from video_studio.domain.models.intent import IntentKind, IntentResult
from video_studio.domain.models.message import Role, Stage
from video_studio.domain.models.pipeline_contracts import ClassificationOutput
from video_studio.services.message_log import MessageLog
from video_studio.services.turn_pipeline import PipelineContext
from video_studio.services.turn_pipeline.stages import (
    ConversationalReplyStage,
    EnhancementStage,
    GenerationStage,
    IntentClassificationStage,
)


@pytest.fixture
def message_log():
    return MessageLog()


def make_context(message_log, text, history=(), intent=None, **kwargs):
    """Context for a turn whose messages are already in message_log."""
    user = message_log.append(Role.USER, text, turn_id="turn-1")
    placeholder = message_log.append(
        Role.ASSISTANT, "Thinking...", stage=Stage.ENHANCING, turn_id="turn-1"
    )
    context = PipelineContext(
        turn_id="turn-1",
        user_input=text,
        user_message_id=user.id,
        message_id=placeholder.id,
        history=tuple(history),
        backend_profile=kwargs.pop("backend_profile", "veo3"),
        backend_display_name=kwargs.pop("backend_display_name", "Veo3"),
        message_writer=message_log.update,
        **kwargs,
    )
    if intent is not None:
        context.classification_output = ClassificationOutput(
            intent=IntentResult(kind=intent)
        )
    return context


class TestPipelineContext:
    def test_properties_guard_missing_outputs(self, message_log):
        context = make_context(message_log, "hello")

        with pytest.raises(RuntimeError):
            context.intent
        with pytest.raises(RuntimeError):
            context.directive
        with pytest.raises(RuntimeError):
            context.artifact

    def test_update_message_requires_writer(self):
        context = PipelineContext(
            turn_id="t", user_input="x", user_message_id="u", message_id="m"
        )

        with pytest.raises(RuntimeError):
            context.update_message(text="y")


class TestIntentClassificationStage:
    async def test_sets_classification_output(self, classifier, message_log):
        context = make_context(message_log, "add a cow", history=["a dancing frog"])

        context = await IntentClassificationStage(classifier).process(context)

        assert context.intent.kind == IntentKind.REFINEMENT
        assert context.classification_output.timestamp is not None

    async def test_classifier_error_becomes_classification_failure(
        self, message_log
    ):
        classifier = MagicMock()
        classifier.classify.side_effect = KeyError("lexicon")
        context = make_context(message_log, "hello")

        with pytest.raises(ClassificationFailure) as exc_info:
            await IntentClassificationStage(classifier).process(context)

        assert isinstance(exc_info.value.cause, KeyError)


class TestConversationalReplyStage:
    async def test_settles_conversation_turn(self, reply_service, message_log):
        context = make_context(message_log, "hello there", intent=IntentKind.CONVERSATION)

        context = await ConversationalReplyStage(reply_service).process(context)

        message = message_log.get(context.message_id)
        assert context.settled
        assert context.reply_output.rule_name == "greeting"
        assert message.text == context.reply_output.reply_text
        assert message.stage == Stage.NONE
        assert message.artifact_ref is None

    async def test_passes_generation_turn_through(self, message_log):
        replies = MagicMock()
        context = make_context(message_log, "make a video", intent=IntentKind.GENERATION)

        context = await ConversationalReplyStage(replies).process(context)

        replies.compose.assert_not_called()
        assert not context.settled
        assert context.reply_output is None


class TestEnhancementStage:
    async def test_moves_message_to_generating(self, enhancement_service, message_log):
        context = make_context(
            message_log, "a frog dancing in a forest", intent=IntentKind.GENERATION
        )

        context = await EnhancementStage(enhancement_service).process(context)

        message = message_log.get(context.message_id)
        assert message.stage == Stage.GENERATING
        assert message.directive == context.directive
        assert message.text.startswith("Enhanced prompt: Realistic style, 8s")
        assert message.text.endswith("Generating your video with Veo3...")
        assert message.artifact_ref is None
        assert not context.enhancement_output.refined

    async def test_refinement_uses_prior_directive(self, directive, message_log):
        enhancement = MagicMock()
        enhancement.refine = AsyncMock(return_value=directive)
        enhancement.enhance = AsyncMock()
        context = make_context(
            message_log,
            "add a cow",
            history=["a frog dancing in a forest"],
            intent=IntentKind.REFINEMENT,
            prior_directive=directive,
        )

        context = await EnhancementStage(enhancement).process(context)

        enhancement.refine.assert_awaited_once_with(
            "a frog dancing in a forest", "add a cow", ("a frog dancing in a forest",)
        )
        enhancement.enhance.assert_not_called()
        assert context.enhancement_output.refined

    async def test_refinement_without_prior_artifact_enhances(
        self, directive, message_log
    ):
        enhancement = MagicMock()
        enhancement.refine = AsyncMock()
        enhancement.enhance = AsyncMock(return_value=directive)
        context = make_context(
            message_log,
            "add a cow",
            history=["hello"],
            intent=IntentKind.REFINEMENT,
        )

        await EnhancementStage(enhancement).process(context)

        enhancement.enhance.assert_awaited_once_with("add a cow", ("hello",))
        enhancement.refine.assert_not_called()

    async def test_service_error_becomes_enhancement_failure(self, message_log):
        enhancement = MagicMock()
        enhancement.enhance = AsyncMock(side_effect=ConnectionError("down"))
        context = make_context(message_log, "a sunset", intent=IntentKind.GENERATION)

        with pytest.raises(EnhancementFailure) as exc_info:
            await EnhancementStage(enhancement).process(context)

        assert not exc_info.value.timed_out
        assert message_log.get(context.message_id).stage == Stage.ENHANCING

    async def test_timeout_becomes_timed_out_failure(self, directive, message_log):
        async def slow_enhance(text, history=()):
            await asyncio.sleep(5)
            return directive

        enhancement = MagicMock()
        enhancement.enhance = slow_enhance
        context = make_context(message_log, "a sunset", intent=IntentKind.GENERATION)

        with pytest.raises(EnhancementFailure) as exc_info:
            await EnhancementStage(enhancement, timeout=0.01).process(context)

        assert exc_info.value.timed_out


class TestGenerationStage:
    async def test_binds_artifact_and_settles(
        self, generation_service, directive, message_log
    ):
        context = make_context(
            message_log, "a frog dancing in a forest", intent=IntentKind.GENERATION
        )
        message_log.update(context.message_id, stage=Stage.GENERATING)
        context.enhancement_output = MagicMock(directive=directive)

        context = await GenerationStage(generation_service).process(context)

        message = message_log.get(context.message_id)
        assert context.settled
        assert message.stage == Stage.NONE
        assert message.artifact_ref == context.artifact.artifact_url
        assert message.artifact == context.artifact
        assert message.backend_profile == "veo3"
        assert message.text == 'I\'ve created your video: "a frog dancing in a forest"'
        assert context.generation_output.backend_display_name == "Veo3"

    async def test_passes_submission_time_profile(self, directive, message_log):
        generation = MagicMock()
        generation.generate = AsyncMock(side_effect=GenerationFailure("boom"))
        context = make_context(
            message_log, "x", intent=IntentKind.GENERATION, backend_profile="banana"
        )
        context.enhancement_output = MagicMock(directive=directive)

        with pytest.raises(GenerationFailure):
            await GenerationStage(generation).process(context)

        generation.generate.assert_awaited_once_with(directive, "banana")

    async def test_generic_error_becomes_generation_failure(
        self, directive, message_log
    ):
        generation = MagicMock()
        generation.generate = AsyncMock(side_effect=RuntimeError("disk full"))
        context = make_context(message_log, "x", intent=IntentKind.GENERATION)
        context.enhancement_output = MagicMock(directive=directive)

        with pytest.raises(GenerationFailure) as exc_info:
            await GenerationStage(generation).process(context)

        assert "disk full" in exc_info.value.message
