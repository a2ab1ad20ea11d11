"""Tests for TurnPipeline execution."""

from unittest.mock import MagicMock

import pytest

from video_studio.core.exceptions import EnhancementFailure, StageTimeoutError
from video_studio.domain.models.intent import IntentKind, IntentResult
from video_studio.domain.models.pipeline_contracts import ClassificationOutput
from video_studio.services.turn_pipeline import PipelineContext, TurnPipeline, TurnStage


class RecordingStage(TurnStage):
    def __init__(self, name, calls, settle=False, error=None):
        self.name = name
        self.calls = calls
        self.settle = settle
        self.error = error

    @property
    def stage_name(self):
        return self.name

    async def process(self, context):
        self.calls.append(self.name)
        if self.error is not None:
            raise self.error
        if self.settle:
            context.settled = True
        return context


@pytest.fixture
def context():
    return PipelineContext(
        turn_id="turn-1",
        user_input="hello",
        user_message_id="u1",
        message_id="m1",
        message_writer=MagicMock(),
    )


async def test_runs_stages_in_order(context):
    calls = []
    pipeline = TurnPipeline(
        [RecordingStage("a", calls), RecordingStage("b", calls), RecordingStage("c", calls)]
    )

    result = await pipeline.execute(context)

    assert calls == ["a", "b", "c"]
    assert set(result.stage_timings) == {"a", "b", "c"}
    assert result.succeeded


async def test_stops_once_settled(context):
    calls = []
    pipeline = TurnPipeline(
        [RecordingStage("a", calls, settle=True), RecordingStage("b", calls)]
    )

    await pipeline.execute(context)

    assert calls == ["a"]


async def test_stage_failure_is_reraised(context):
    calls = []
    failure = EnhancementFailure("slow", cause=StageTimeoutError("exceeded"))
    pipeline = TurnPipeline(
        [RecordingStage("a", calls, error=failure), RecordingStage("b", calls)]
    )

    with pytest.raises(EnhancementFailure):
        await pipeline.execute(context)

    assert calls == ["a"]
    assert "a" in context.stage_timings


def test_build_result_with_failure(context):
    context.classification_output = ClassificationOutput(
        intent=IntentResult(kind=IntentKind.GENERATION)
    )
    failure = EnhancementFailure("slow", cause=StageTimeoutError("exceeded"))

    result = TurnPipeline([]).build_result(context, failure=failure)

    assert result.intent == IntentKind.GENERATION
    assert result.failed_stage == "enhancing"
    assert result.failure_reason == "slow"
    assert result.timed_out
    assert not result.succeeded
    assert result.artifact is None
