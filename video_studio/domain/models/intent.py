"""Intent classification result model."""

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field


class IntentKind(str, Enum):
    """What the user wants from a turn."""

    GENERATION = "generation"
    REFINEMENT = "refinement"
    CONVERSATION = "conversation"


class IntentResult(BaseModel):
    """Output of IntentClassifier.classify()."""

    model_config = ConfigDict(frozen=True)

    kind: IntentKind
    matched_terms: Tuple[str, ...] = Field(
        default=(), description="Lexicon terms that triggered the decision"
    )

    @property
    def is_generation_intent(self) -> bool:
        return self.kind != IntentKind.CONVERSATION
