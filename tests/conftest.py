"""
Shared test fixtures.

Every service gets NoLatency so pipelines run without sleeping.
"""

import pytest

from video_studio.core.config import BackendsConfig, LexiconConfig, RepliesConfig
from video_studio.domain.models.generation import Directive, MotionIntensity
from video_studio.services.conversation_orchestrator import ConversationOrchestrator
from video_studio.services.enhancement_service import EnhancementService
from video_studio.services.generation_service import (
    BackendRegistry,
    MockGenerationService,
)
from video_studio.services.intent_classifier import IntentClassifier
from video_studio.services.latency import NoLatency
from video_studio.services.reply_service import ReplyService

WELCOME = "Welcome! Describe a video."


@pytest.fixture
def lexicon():
    return LexiconConfig()


@pytest.fixture
def registry():
    """Registry with the default backend catalogue."""
    backends = BackendsConfig()
    return BackendRegistry(backends.profiles, default=backends.default)


@pytest.fixture
def classifier(lexicon):
    return IntentClassifier(lexicon)


@pytest.fixture
def enhancement_service(lexicon):
    return EnhancementService(lexicon=lexicon, latency=NoLatency())


@pytest.fixture
def generation_service(registry):
    return MockGenerationService(
        registry=registry, latency_factory=lambda profile: NoLatency()
    )


@pytest.fixture
def reply_service():
    return ReplyService(RepliesConfig())


@pytest.fixture
def orchestrator(
    classifier, enhancement_service, generation_service, reply_service, registry
):
    """Orchestrator wired with zero-latency simulated services."""
    return ConversationOrchestrator(
        classifier=classifier,
        enhancement_service=enhancement_service,
        generation_service=generation_service,
        reply_service=reply_service,
        registry=registry,
        welcome_message=WELCOME,
    )


@pytest.fixture
def directive():
    """A realistic-branch directive."""
    return Directive(
        original_text="a frog dancing in a forest",
        enhanced_text="Cinematic shot of a frog dancing in a forest",
        style="realistic",
        duration_seconds=8,
        motion_intensity=MotionIntensity.HIGH,
    )
