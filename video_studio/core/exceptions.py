"""
Custom exception hierarchy for the video studio.

All application exceptions inherit from VideoStudioError.
"""

from typing import Optional


class VideoStudioError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(VideoStudioError):
    """Invalid or missing configuration."""

    pass


# =============================================================================
# Client Usage Errors
# =============================================================================


class ValidationError(VideoStudioError):
    """Input validation failed."""

    pass


class EmptyInputError(ValidationError):
    """User turn text is empty after trimming.

    Raised before anything is appended to the message log.
    """

    pass


class UnknownBackendProfileError(ValidationError):
    """Requested backend profile is not registered."""

    pass


# =============================================================================
# Message Log Errors
# =============================================================================


class MessageLogError(VideoStudioError):
    """Message log operation error."""

    pass


class MessageNotFoundError(MessageLogError):
    """Message id does not exist in the log."""

    pass


class InvalidStageTransitionError(MessageLogError):
    """Attempted to move a message backwards through the stage machine."""

    pass


# =============================================================================
# Service Errors
# =============================================================================


class ServiceUnavailableError(VideoStudioError):
    """Backing service (enhancement or generation backend) is unreachable."""

    pass


class StageTimeoutError(VideoStudioError):
    """A pipeline stage did not finish within the configured timeout."""

    pass


# =============================================================================
# Stage Failures
# =============================================================================


class StageFailure(VideoStudioError):
    """A pipeline stage failed.

    Carries the stage that failed and the underlying cause. Stage failures are
    always recovered by the orchestrator into a user-visible notice and never
    escape submit_user_turn().
    """

    stage: str = "unknown"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    @property
    def timed_out(self) -> bool:
        """True when the underlying cause is a stage timeout."""
        return isinstance(self.cause, StageTimeoutError)


class ClassificationFailure(StageFailure):
    """Intent classification failed."""

    stage = "classifying"


class EnhancementFailure(StageFailure):
    """Prompt enhancement failed."""

    stage = "enhancing"


class GenerationFailure(StageFailure):
    """Artifact generation failed.

    The mock backend never raises this, but a real backend integration does.
    """

    stage = "generating"
