"""
Pipeline stages for turn processing.

Each stage encapsulates one step of a turn, from intent classification to
artifact generation. Stages execute sequentially in the TurnPipeline.
"""

from .intent_classification_stage import IntentClassificationStage
from .conversational_reply_stage import ConversationalReplyStage
from .enhancement_stage import EnhancementStage
from .generation_stage import GenerationStage

__all__ = [
    "IntentClassificationStage",
    "ConversationalReplyStage",
    "EnhancementStage",
    "GenerationStage",
]
