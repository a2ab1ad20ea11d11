"""Dependency injection for API routes."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from video_studio.services.conversation_orchestrator import (
    ConversationOrchestrator,
    create_orchestrator,
)


@lru_cache(maxsize=1)
def get_shared_orchestrator() -> ConversationOrchestrator:
    """Process-wide orchestrator holding the session's conversation.

    Created once per process from settings and studio_config.yaml. Tests
    override it through app.dependency_overrides.
    """
    return create_orchestrator()


# Type aliases for dependency injection
OrchestratorDep = Annotated[ConversationOrchestrator, Depends(get_shared_orchestrator)]
