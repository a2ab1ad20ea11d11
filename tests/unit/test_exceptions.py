"""Tests for exception hierarchy."""

import pytest


def test_exception_hierarchy():
    """All exceptions inherit from VideoStudioError."""
    from video_studio.core.exceptions import (
        ClassificationFailure,
        ConfigurationError,
        EmptyInputError,
        EnhancementFailure,
        GenerationFailure,
        InvalidStageTransitionError,
        MessageLogError,
        MessageNotFoundError,
        ServiceUnavailableError,
        StageFailure,
        StageTimeoutError,
        UnknownBackendProfileError,
        ValidationError,
        VideoStudioError,
    )

    assert issubclass(ConfigurationError, VideoStudioError)
    assert issubclass(ValidationError, VideoStudioError)
    assert issubclass(EmptyInputError, ValidationError)
    assert issubclass(UnknownBackendProfileError, ValidationError)
    assert issubclass(MessageLogError, VideoStudioError)
    assert issubclass(MessageNotFoundError, MessageLogError)
    assert issubclass(InvalidStageTransitionError, MessageLogError)
    assert issubclass(ServiceUnavailableError, VideoStudioError)
    assert issubclass(StageTimeoutError, VideoStudioError)
    assert issubclass(ClassificationFailure, StageFailure)
    assert issubclass(EnhancementFailure, StageFailure)
    assert issubclass(GenerationFailure, StageFailure)


def test_exceptions_can_be_raised():
    """Exceptions can be raised and caught."""
    from video_studio.core.exceptions import MessageNotFoundError

    with pytest.raises(MessageNotFoundError):
        raise MessageNotFoundError("Message abc not found")


def test_exception_message_attribute():
    """Exceptions expose their message."""
    from video_studio.core.exceptions import EmptyInputError

    exc = EmptyInputError("Message text must not be empty")
    assert exc.message == "Message text must not be empty"
    assert str(exc) == "Message text must not be empty"


class TestStageFailure:
    """Stage failures carry the failing stage and cause."""

    def test_stage_names(self):
        from video_studio.core.exceptions import (
            ClassificationFailure,
            EnhancementFailure,
            GenerationFailure,
        )

        assert ClassificationFailure("x").stage == "classifying"
        assert EnhancementFailure("x").stage == "enhancing"
        assert GenerationFailure("x").stage == "generating"

    def test_cause_is_kept(self):
        from video_studio.core.exceptions import GenerationFailure

        cause = RuntimeError("backend down")
        failure = GenerationFailure("generation failed", cause=cause)

        assert failure.cause is cause
        assert not failure.timed_out

    def test_timed_out_when_cause_is_timeout(self):
        from video_studio.core.exceptions import EnhancementFailure, StageTimeoutError

        failure = EnhancementFailure("slow", cause=StageTimeoutError("exceeded 1s"))

        assert failure.timed_out
