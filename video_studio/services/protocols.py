"""
Service protocol definitions (interfaces).

Defines the contracts the orchestrator depends on using typing.Protocol, so
simulated services, real backend clients and test fakes are interchangeable.
"""

from typing import Optional, Protocol, Sequence, Tuple

from video_studio.domain.models.generation import ArtifactResult, Directive
from video_studio.domain.models.intent import IntentResult


class IIntentClassifier(Protocol):
    """Decides whether an utterance asks for a video."""

    def classify(self, text: str, history: Sequence[str] = ()) -> IntentResult:
        """
        Classify an utterance.

        Args:
            text: User utterance
            history: Earlier user utterances, oldest first

        Returns:
            IntentResult (generation, refinement or conversation)
        """
        ...


class IEnhancementService(Protocol):
    """Rewrites utterances into generation directives.

    Implementations may raise ServiceUnavailableError.
    """

    async def enhance(self, text: str, history: Sequence[str] = ()) -> Directive:
        """
        Build a directive for text in the context of history.

        Args:
            text: User utterance
            history: Earlier user utterances, oldest first

        Returns:
            Directive for the generation stage
        """
        ...

    async def refine(
        self,
        original_text: str,
        refinement_text: str,
        history: Sequence[str] = (),
    ) -> Directive:
        """
        Build a directive that modifies a previously generated prompt.

        Args:
            original_text: Text of the directive being refined
            refinement_text: The user's modification request
            history: Earlier user utterances, oldest first

        Returns:
            Directive for the generation stage
        """
        ...


class IGenerationService(Protocol):
    """Turns directives into artifacts.

    Implementations may raise GenerationFailure.
    """

    async def generate(
        self, directive: Directive, backend_profile: Optional[str] = None
    ) -> ArtifactResult:
        """
        Generate an artifact.

        Args:
            directive: Output of the enhancement stage
            backend_profile: Backend profile id (default profile if unknown)

        Returns:
            ArtifactResult referencing the generated media
        """
        ...

    def display_name(self, backend_profile: Optional[str]) -> str:
        """Human-readable backend name with a safe fallback."""
        ...


class IReplyService(Protocol):
    """Composes replies for conversational turns."""

    def compose(self, text: str) -> Tuple[str, str]:
        """Return (rule_name, reply_text) for text."""
        ...
