"""Template replies for conversational turns.

Turns that are not generation requests get a canned reply chosen by the
first reply rule whose keywords appear in the utterance.
"""

from typing import List, Optional, Tuple

import structlog

from video_studio.core.config import RepliesConfig
from video_studio.services.lexicon import TermMatcher

log = structlog.get_logger(__name__)

FALLBACK_RULE = "fallback"


class ReplyService:
    """Chooses a template reply for a conversational utterance."""

    def __init__(self, replies: Optional[RepliesConfig] = None):
        replies = replies or RepliesConfig()
        self._rules: List[Tuple[str, TermMatcher, str]] = [
            (rule.name, TermMatcher(rule.keywords), rule.reply)
            for rule in replies.rules
        ]
        self.fallback = replies.fallback

    def compose(self, text: str) -> Tuple[str, str]:
        """Pick a reply for text.

        Returns:
            Tuple of (rule_name, reply_text)
        """
        for name, matcher, reply in self._rules:
            if matcher.matches(text):
                log.debug("reply_rule_matched", rule=name)
                return name, reply
        return FALLBACK_RULE, self.fallback
