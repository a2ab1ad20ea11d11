"""
Health check endpoints.

Provides system health information for monitoring.
"""

from fastapi import APIRouter
import structlog

from video_studio import __version__
from video_studio.api.dependencies import OrchestratorDep
from video_studio.core.config import settings

log = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(orchestrator: OrchestratorDep):
    """
    Health check endpoint.

    Returns:
        Service status with the current session's size and in-flight turns.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "debug": settings.debug,
        "components": {
            "orchestrator": {
                "status": "healthy",
                "messages": len(orchestrator.messages),
                "in_flight": orchestrator.in_flight,
                "backend_profile": orchestrator.backend_profile,
            }
        },
    }


@router.get("/health/live")
async def liveness():
    """
    Kubernetes-style liveness probe.

    Returns 200 if the application is running.
    """
    return {"status": "alive"}
