"""Intent classification for user turns.

Decides, from the utterance and the prior conversation, whether a turn asks
for a new video, refines the previous one, or is plain conversation.

Policy:
    - Generation: the utterance or any earlier turn contains a creation term
      (creation verb, or a setting noun describing a scene)
    - Refinement: the utterance contains a modification verb and there are
      earlier turns (a modification implies a prior artifact)
    - Conversation: neither

The classifier is pure and synchronous; all vocabulary comes from
LexiconConfig so it can be swapped in tests.
"""

from typing import Optional, Sequence

import structlog

from video_studio.core.config import LexiconConfig
from video_studio.domain.models.intent import IntentKind, IntentResult
from video_studio.services.lexicon import TermMatcher

log = structlog.get_logger(__name__)


class IntentClassifier:
    """Lexicon-driven intent classifier."""

    def __init__(self, lexicon: Optional[LexiconConfig] = None):
        lexicon = lexicon or LexiconConfig()
        self.creation = TermMatcher([*lexicon.creation_verbs, *lexicon.setting_terms])
        self.modification = TermMatcher(lexicon.modification_verbs)

    def classify(self, text: str, history: Sequence[str] = ()) -> IntentResult:
        """Classify one utterance against the prior conversation.

        Args:
            text: The user's utterance
            history: Earlier user utterances, oldest first

        Returns:
            IntentResult with kind and the lexicon terms that decided it
        """
        modification_terms = self.modification.find(text)
        if modification_terms and history:
            result = IntentResult(
                kind=IntentKind.REFINEMENT, matched_terms=modification_terms
            )
        else:
            creation_terms = self.creation.find(" ".join([text, *history]))
            if creation_terms:
                result = IntentResult(
                    kind=IntentKind.GENERATION, matched_terms=creation_terms
                )
            else:
                result = IntentResult(kind=IntentKind.CONVERSATION)

        log.debug(
            "intent_classified",
            kind=result.kind.value,
            matched_terms=list(result.matched_terms),
            history_length=len(history),
        )
        return result
