"""Prompt enhancement service.

Rewrites a raw user utterance (plus the running conversation) into a
structured generation Directive: an enriched prompt, a visual style, a clip
duration and a motion intensity.

Template selection (first match wins):
    1. subject AND action present      -> realistic / high motion
    2. abstract keyword in the text    -> abstract / medium motion
    3. setting present                 -> landscape / low motion
    4. otherwise                       -> cinematic / medium motion

Subject, action and setting are detected over the text and the whole
history; the abstract keyword only over the text itself. Directive content
is deterministic for a given (text, history); only the simulated latency is
random.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import structlog

from video_studio.core.config import LexiconConfig
from video_studio.domain.models.generation import Directive, MotionIntensity
from video_studio.services.latency import LatencyStrategy, UniformLatency
from video_studio.services.lexicon import TermMatcher

log = structlog.get_logger(__name__)

INTEGRATION_CLAUSE = ", seamlessly integrated with existing elements"
ACTION_DURATION_SECONDS = 8
DEFAULT_DURATION_SECONDS = 5


@dataclass(frozen=True)
class _Template:
    style: str
    motion_intensity: MotionIntensity
    text: str


REALISTIC = _Template(
    "realistic",
    MotionIntensity.HIGH,
    "Cinematic shot of {prompt}, professional lighting, smooth motion, "
    "vibrant colors, high detail, 4K quality",
)
ABSTRACT = _Template(
    "abstract",
    MotionIntensity.MEDIUM,
    "Abstract artistic {prompt}, fluid motion, gradient colors, "
    "mesmerizing patterns, smooth transitions",
)
LANDSCAPE = _Template(
    "landscape",
    MotionIntensity.LOW,
    "Beautiful {prompt}, golden hour lighting, atmospheric depth, "
    "cinematic composition, ultra-detailed",
)
GENERIC = _Template(
    "cinematic",
    MotionIntensity.MEDIUM,
    "Professional {prompt}, cinematic quality, dynamic composition, "
    "vibrant colors, smooth motion",
)


class EnhancementService:
    """Turns user utterances into generation directives.

    Stateless and reentrant: one instance may serve any number of
    concurrent turns.

    The contract allows ServiceUnavailableError for backends that can be
    unreachable; this implementation never raises it.
    """

    def __init__(
        self,
        lexicon: Optional[LexiconConfig] = None,
        latency: Optional[LatencyStrategy] = None,
        resolution: str = "1920x1080",
    ):
        """
        Args:
            lexicon: Keyword sets for category detection (defaults built in)
            latency: Simulated backend latency (default uniform 500-1500 ms)
            resolution: Resolution stamped on every directive
        """
        lexicon = lexicon or LexiconConfig()
        self.subjects = TermMatcher(lexicon.subject_terms)
        self.actions = TermMatcher(lexicon.action_terms)
        self.settings = TermMatcher(lexicon.setting_terms)
        self.abstract = TermMatcher(lexicon.abstract_terms)
        self.modification = TermMatcher(lexicon.modification_verbs)
        self.latency = latency or UniformLatency()
        self.resolution = resolution

    async def enhance(self, text: str, history: Sequence[str] = ()) -> Directive:
        """Build a directive for text in the context of history.

        Args:
            text: The user's utterance
            history: Earlier user utterances, oldest first

        Returns:
            Directive for the generation stage
        """
        await self.latency.wait()
        directive = self.build_directive(text, history)

        log.info(
            "prompt_enhanced",
            style=directive.style,
            motion_intensity=directive.motion_intensity.value,
            duration_seconds=directive.duration_seconds,
            history_length=len(history),
        )
        return directive

    async def refine(
        self,
        original_text: str,
        refinement_text: str,
        history: Sequence[str] = (),
    ) -> Directive:
        """Build a directive that modifies a previously generated prompt.

        The refinement is folded into the original prompt, and the original
        prompt becomes the latest history entry. The integration clause is
        therefore added only when the original prompt carries a modification
        verb.
        """
        combined = f"{original_text}, {refinement_text}"
        return await self.enhance(combined, [*history, original_text])

    def build_directive(self, text: str, history: Sequence[str] = ()) -> Directive:
        """Deterministic part of enhance(), without the simulated latency."""
        corpus = " ".join([text, *history])
        has_subject = self.subjects.matches(corpus)
        has_action = self.actions.matches(corpus)
        has_setting = self.settings.matches(corpus)

        if has_subject and has_action:
            template = REALISTIC
        elif self.abstract.matches(text):
            template = ABSTRACT
        elif has_setting:
            template = LANDSCAPE
        else:
            template = GENERIC

        enhanced = template.text.format(prompt=text)
        if history and self.modification.matches(history[-1]):
            enhanced += INTEGRATION_CLAUSE

        return Directive(
            original_text=text,
            enhanced_text=enhanced,
            style=template.style,
            duration_seconds=(
                ACTION_DURATION_SECONDS if has_action else DEFAULT_DURATION_SECONDS
            ),
            motion_intensity=template.motion_intensity,
            resolution=self.resolution,
        )
