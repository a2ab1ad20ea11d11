"""Whole-word keyword matching over configurable term lists."""

import re
from typing import Iterable, Tuple


class TermMatcher:
    """Case-insensitive whole-word matcher for a fixed set of terms.

    Terms are matched on word boundaries, so "cat" does not fire on
    "category". Matches are reported in lexicon order, without duplicates.
    """

    def __init__(self, terms: Iterable[str]):
        self.terms: Tuple[str, ...] = tuple(
            dict.fromkeys(t.strip().lower() for t in terms if t and t.strip())
        )
        self._pattern = None
        if self.terms:
            alternatives = "|".join(
                re.escape(t) for t in sorted(self.terms, key=len, reverse=True)
            )
            self._pattern = re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)

    def find(self, text: str) -> Tuple[str, ...]:
        """Return the terms present in text."""
        if self._pattern is None or not text:
            return ()
        found = {m.group(0).lower() for m in self._pattern.finditer(text)}
        return tuple(t for t in self.terms if t in found)

    def matches(self, text: str) -> bool:
        """True if any term is present in text."""
        if self._pattern is None or not text:
            return False
        return self._pattern.search(text) is not None

    def __repr__(self) -> str:
        return f"TermMatcher({len(self.terms)} terms)"
