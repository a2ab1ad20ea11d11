"""
Conversation API routes.

Endpoints the presentation layer uses to submit turns and re-render the
conversation log.
"""

from fastapi import APIRouter, Query, Response, status
import structlog

from video_studio.api.dependencies import OrchestratorDep
from video_studio.api.schemas import (
    MessageListResponse,
    MessageSchema,
    TurnAcceptedResponse,
    TurnRequest,
    TurnResponse,
)

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/conversation", tags=["conversation"])


# ============ LOG ============


@router.get("/messages", response_model=MessageListResponse)
async def list_messages(orchestrator: OrchestratorDep):
    """Return the whole conversation log in submission order.

    Clients re-render from this after every poll; settled and in-flight
    messages are both included.
    """
    messages = [MessageSchema.from_message(m) for m in orchestrator.messages]
    return MessageListResponse(
        messages=messages, total=len(messages), in_flight=orchestrator.in_flight
    )


@router.get("/messages/{message_id}", response_model=MessageSchema)
async def get_message(message_id: str, orchestrator: OrchestratorDep):
    """Return a single message by id (404 if unknown)."""
    return MessageSchema.from_message(orchestrator.get_message(message_id))


@router.get("/history")
async def get_history(orchestrator: OrchestratorDep):
    """Return the user utterances submitted so far."""
    return {"history": list(orchestrator.history)}


# ============ TURNS ============


@router.post(
    "/turns",
    response_model=None,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        200: {"model": TurnResponse, "description": "Settled turn (wait=true)"},
        202: {"model": TurnAcceptedResponse, "description": "Turn running"},
    },
)
async def submit_turn(
    request: TurnRequest,
    orchestrator: OrchestratorDep,
    response: Response,
    wait: bool = Query(
        default=False, description="Block until the turn has settled"
    ),
):
    """Submit a user turn.

    By default the pipeline runs in the background and the response carries
    the ids to poll. With wait=true the request returns the settled turn.
    """
    if wait:
        result = await orchestrator.submit_user_turn(request.text)
        response.status_code = status.HTTP_200_OK
        return TurnResponse(
            turn_id=result.turn_id,
            user_message_id=result.user_message_id,
            message_id=result.message_id,
            intent=result.intent.value if result.intent else None,
            succeeded=result.succeeded,
            failed_stage=result.failed_stage,
            message=MessageSchema.from_message(
                orchestrator.get_message(result.message_id)
            ),
            latency_ms=result.latency_ms,
            stage_timings=result.stage_timings,
        )

    handle = orchestrator.start_turn(request.text)
    return TurnAcceptedResponse(
        turn_id=handle.turn_id,
        user_message_id=handle.user_message_id,
        message_id=handle.message_id,
        backend_profile=orchestrator.backend_profile,
    )


# ============ SESSION ============


@router.post("/restart", response_model=MessageListResponse)
async def restart_session(orchestrator: OrchestratorDep):
    """Start a fresh session: clears the log and the history."""
    orchestrator.restart_session()
    messages = [MessageSchema.from_message(m) for m in orchestrator.messages]
    return MessageListResponse(
        messages=messages, total=len(messages), in_flight=orchestrator.in_flight
    )
