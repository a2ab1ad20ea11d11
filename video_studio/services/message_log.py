"""
Append-only conversation log with stage-machine enforcement.

The log is the single source of truth the presentation layer renders from.
Only the orchestrator writes to it; every append or in-place update is
pushed to subscribed listeners as a full snapshot.

Invariants:
- Entries are never reordered or removed during a session (clear() is only
  used for an explicit session restart)
- A message keeps its id and created_at across updates
- Stages only move forward (see Stage)
- artifact_ref is only ever present on a settled message
- created_at is strictly increasing in append order
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterator, List, Optional, Tuple
from uuid import uuid4

import structlog

from video_studio.core.exceptions import (
    InvalidStageTransitionError,
    MessageNotFoundError,
)
from video_studio.domain.models.message import (
    Message,
    Role,
    Stage,
    is_forward_transition,
)

log = structlog.get_logger(__name__)

Listener = Callable[[Tuple[Message, ...]], None]

UPDATABLE_FIELDS = frozenset(
    {"text", "stage", "artifact_ref", "artifact", "directive", "backend_profile", "failed"}
)


class MessageLog:
    """Ordered message log keyed by stable ids."""

    def __init__(self, id_factory: Optional[Callable[[], str]] = None):
        """
        Args:
            id_factory: Produces message ids (default: UUID4 strings)
        """
        self._id_factory = id_factory or (lambda: str(uuid4()))
        self._messages: List[Message] = []
        self._index: Dict[str, int] = {}
        self._listeners: List[Listener] = []
        self._last_created_at: Optional[datetime] = None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.snapshot())

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._index

    def snapshot(self) -> Tuple[Message, ...]:
        """Immutable view of the whole log, in append order."""
        return tuple(self._messages)

    def get(self, message_id: str) -> Message:
        try:
            return self._messages[self._index[message_id]]
        except KeyError:
            raise MessageNotFoundError(f"Message {message_id} not found") from None

    # =========================================================================
    # Mutation
    # =========================================================================

    def append(
        self,
        role: Role,
        text: str,
        stage: Stage = Stage.NONE,
        turn_id: Optional[str] = None,
    ) -> Message:
        """Append a new message and notify listeners."""
        message_id = self._id_factory()
        if message_id in self._index:
            raise ValueError(f"id_factory produced a duplicate id: {message_id}")

        message = Message(
            id=message_id,
            role=role,
            text=text,
            stage=stage,
            turn_id=turn_id,
            created_at=self._next_timestamp(),
        )
        self._index[message_id] = len(self._messages)
        self._messages.append(message)

        log.debug(
            "message_appended",
            message_id=message_id,
            role=role.value,
            stage=stage.value,
            turn_id=turn_id,
        )
        self._notify()
        return message

    def update(self, message_id: str, **changes) -> Message:
        """Update mutable fields of a message in place.

        Args:
            message_id: Id of the message to update
            **changes: New values for fields in UPDATABLE_FIELDS

        Returns:
            The updated message

        Raises:
            MessageNotFoundError: Unknown id
            InvalidStageTransitionError: Stage would move backwards, or an
                artifact would be attached to an unsettled message
            ValueError: A field outside UPDATABLE_FIELDS was given
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")

        current = self.get(message_id)
        new_stage = Stage(changes.get("stage", current.stage))
        if not is_forward_transition(current.stage, new_stage):
            raise InvalidStageTransitionError(
                f"Message {message_id} cannot move from stage "
                f"'{current.stage.value}' to '{new_stage.value}'"
            )

        artifact_ref = changes.get("artifact_ref", current.artifact_ref)
        if artifact_ref is not None and new_stage != Stage.NONE:
            raise InvalidStageTransitionError(
                f"Message {message_id} cannot carry an artifact while in "
                f"stage '{new_stage.value}'"
            )

        updated = current.model_copy(update={**changes, "stage": new_stage})
        self._messages[self._index[message_id]] = updated

        log.debug(
            "message_updated",
            message_id=message_id,
            stage_from=current.stage.value,
            stage_to=new_stage.value,
            fields=sorted(changes),
        )
        self._notify()
        return updated

    def clear(self) -> None:
        """Drop every message. Only used when the session restarts."""
        self._messages.clear()
        self._index.clear()
        self._notify()

    # =========================================================================
    # Observers
    # =========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with the full snapshot after every mutation.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                # Listener errors never reach the writer
                log.error("message_listener_failed", exc_info=True)

    def _next_timestamp(self) -> datetime:
        now = datetime.now(timezone.utc)
        if self._last_created_at is not None and now <= self._last_created_at:
            now = self._last_created_at + timedelta(microseconds=1)
        self._last_created_at = now
        return now
