# noqa
from video_studio.services.conversation_orchestrator import (
    ConversationOrchestrator,
    TurnHandle,
)
from video_studio.services.enhancement_service import EnhancementService
from video_studio.services.generation_service import (
    BackendRegistry,
    HttpGenerationService,
    MockGenerationService,
)
from video_studio.services.intent_classifier import IntentClassifier
from video_studio.services.reply_service import ReplyService

__all__ = [
    "ConversationOrchestrator",
    "TurnHandle",
    "EnhancementService",
    "BackendRegistry",
    "HttpGenerationService",
    "MockGenerationService",
    "IntentClassifier",
    "ReplyService",
]
