"""
Backend profile API routes.

List the generation backends and choose the one used for future turns.
"""

from fastapi import APIRouter
import structlog

from video_studio.api.dependencies import OrchestratorDep
from video_studio.api.schemas import (
    BackendListResponse,
    BackendProfileSchema,
    BackendSelectRequest,
)

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/backends", tags=["backends"])


def _backend_list(orchestrator) -> BackendListResponse:
    selected = orchestrator.backend_profile
    return BackendListResponse(
        profiles=[
            BackendProfileSchema(
                id=p.id,
                display_name=p.display_name,
                description=p.description,
                selected=p.id == selected,
            )
            for p in orchestrator.backend_profiles()
        ],
        selected=selected,
    )


@router.get("", response_model=BackendListResponse)
async def list_backends(orchestrator: OrchestratorDep):
    """List backend profiles, marking the selected one."""
    return _backend_list(orchestrator)


@router.put("/selected", response_model=BackendListResponse)
async def select_backend(request: BackendSelectRequest, orchestrator: OrchestratorDep):
    """Select the backend profile for turns submitted from now on.

    Turns already in flight keep the profile they were submitted with.
    Unknown profiles are rejected with 400.
    """
    orchestrator.select_backend_profile(request.profile)
    return _backend_list(orchestrator)
