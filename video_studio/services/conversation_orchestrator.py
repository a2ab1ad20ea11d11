"""
Conversation orchestration service.

Main entry point for user turns. Owns the message log and the conversation
history for the session, and runs one TurnPipeline per turn:

    classify -> (reply | enhance -> generate) -> settle

Each turn appends a user message and an assistant placeholder, then updates
the placeholder in place as stages complete. Turns may overlap; every turn
only touches its own message ids, and the history snapshot it sees is taken
at submission time. Stage failures are converted into a plain-language
notice on the turn's message and never escape submit_user_turn().
"""

import asyncio
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional, Set, Tuple
from uuid import uuid4

import structlog

from video_studio.core import config
from video_studio.core.config import Settings, StudioConfig
from video_studio.core.exceptions import (
    EmptyInputError,
    StageFailure,
    UnknownBackendProfileError,
)
from video_studio.domain.models.backend import BackendProfile
from video_studio.domain.models.generation import Directive
from video_studio.domain.models.message import Message, Role, Stage
from video_studio.services.enhancement_service import EnhancementService
from video_studio.services.generation_service import (
    BackendRegistry,
    create_generation_service,
)
from video_studio.services.intent_classifier import IntentClassifier
from video_studio.services.latency import UniformLatency
from video_studio.services.message_log import Listener, MessageLog
from video_studio.services.protocols import (
    IEnhancementService,
    IGenerationService,
    IIntentClassifier,
    IReplyService,
)
from video_studio.services.reply_service import ReplyService
from video_studio.services.turn_pipeline import (
    PipelineContext,
    TurnPipeline,
    TurnResult,
)
from video_studio.services.turn_pipeline.stages import (
    ConversationalReplyStage,
    EnhancementStage,
    GenerationStage,
    IntentClassificationStage,
)

log = structlog.get_logger(__name__)

THINKING_TEXT = "Thinking..."

PREPARATION_FAILED_TEXT = (
    "Sorry, I couldn't prepare your request. Please try sending it again."
)
PREPARATION_TIMEOUT_TEXT = (
    "Sorry, preparing your request took too long. Please try sending it again."
)
GENERATION_FAILED_TEXT = (
    "Sorry, video generation with {backend} failed. Please try sending your "
    "request again."
)
GENERATION_TIMEOUT_TEXT = (
    "Sorry, {backend} took too long to respond. Please try sending your "
    "request again."
)


@dataclass(frozen=True)
class TurnHandle:
    """Ids of a turn started with start_turn()."""

    turn_id: str
    user_message_id: str
    message_id: str
    task: "asyncio.Task[TurnResult]"


class ConversationOrchestrator:
    """Drives the conversation-to-artifact pipeline for one session.

    Services are injected so simulated backends, real clients and test fakes
    can be swapped freely. The orchestrator is the only writer of its
    MessageLog.
    """

    def __init__(
        self,
        classifier: IIntentClassifier,
        enhancement_service: IEnhancementService,
        generation_service: IGenerationService,
        reply_service: IReplyService,
        registry: Optional[BackendRegistry] = None,
        default_backend_profile: Optional[str] = None,
        welcome_message: Optional[str] = None,
        stage_timeout: Optional[float] = None,
        message_log: Optional[MessageLog] = None,
    ):
        """
        Initialize orchestrator with its services.

        Args:
            classifier: Intent classifier
            enhancement_service: Builds directives
            generation_service: Produces artifacts
            reply_service: Template replies for conversational turns
            registry: Backend catalogue; when given, select_backend_profile()
                only accepts registered ids
            default_backend_profile: Profile for new turns (defaults to the
                registry default)
            welcome_message: System message seeded at session start
            stage_timeout: Per-stage timeout in seconds (None = no limit)
            message_log: Log to write to (a fresh one if None)
        """
        self.classifier = classifier
        self.enhancement = enhancement_service
        self.generation = generation_service
        self.replies = reply_service
        self.registry = registry
        self.welcome_message = welcome_message
        self.stage_timeout = stage_timeout

        if default_backend_profile is None and registry is not None:
            default_backend_profile = registry.default
        if default_backend_profile is not None:
            self._check_profile(default_backend_profile)
        self._backend_profile = default_backend_profile

        self._log = message_log or MessageLog()
        self._history: List[str] = []
        self._epoch = 0
        self._tasks: Set["asyncio.Task[TurnResult]"] = set()

        self.pipeline = self._build_pipeline()
        self._seed_session()

        log.info(
            "orchestrator_initialized",
            backend_profile=self._backend_profile,
            stage_timeout=stage_timeout,
        )

    def _build_pipeline(self) -> TurnPipeline:
        return TurnPipeline(
            stages=[
                IntentClassificationStage(self.classifier),
                ConversationalReplyStage(self.replies),
                EnhancementStage(self.enhancement, timeout=self.stage_timeout),
                GenerationStage(self.generation, timeout=self.stage_timeout),
            ]
        )

    # =========================================================================
    # Read access for presentation
    # =========================================================================

    @property
    def messages(self) -> Tuple[Message, ...]:
        """The whole log, in submission order."""
        return self._log.snapshot()

    @property
    def history(self) -> Tuple[str, ...]:
        """User utterances, in submission order."""
        return tuple(self._history)

    @property
    def backend_profile(self) -> Optional[str]:
        return self._backend_profile

    @property
    def in_flight(self) -> int:
        """Number of turns started with start_turn() still running."""
        return len(self._tasks)

    def get_message(self, message_id: str) -> Message:
        return self._log.get(message_id)

    def backend_profiles(self) -> List[BackendProfile]:
        return self.registry.profiles() if self.registry else []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with the full log after every mutation."""
        return self._log.subscribe(listener)

    # =========================================================================
    # Commands
    # =========================================================================

    def select_backend_profile(self, profile: str) -> None:
        """Use profile for turns submitted from now on.

        Raises:
            UnknownBackendProfileError: profile is not registered
        """
        self._check_profile(profile)
        previous, self._backend_profile = self._backend_profile, profile
        log.info("backend_profile_selected", previous=previous, profile=profile)

    def restart_session(self) -> None:
        """Clear the log and the history and start a new session.

        Turns still in flight keep running, but their updates are dropped.
        """
        self._epoch += 1
        self._history.clear()
        self._log.clear()
        self._seed_session()
        log.info("session_restarted", epoch=self._epoch, in_flight=self.in_flight)

    async def submit_user_turn(self, text: str) -> TurnResult:
        """Run one user turn to completion.

        Args:
            text: The user's message

        Returns:
            TurnResult describing how the turn settled

        Raises:
            EmptyInputError: text is empty after trimming (nothing is logged)
        """
        context = self._open_turn(text)
        return await self._run_turn(context)

    def start_turn(self, text: str) -> TurnHandle:
        """Submit a turn and run its pipeline in the background.

        The user message and the placeholder are appended before this
        returns. Requires a running event loop.

        Raises:
            EmptyInputError: text is empty after trimming (nothing is logged)
        """
        loop = asyncio.get_running_loop()
        context = self._open_turn(text)
        task = loop.create_task(self._run_turn(context))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return TurnHandle(
            turn_id=context.turn_id,
            user_message_id=context.user_message_id,
            message_id=context.message_id,
            task=task,
        )

    async def wait_idle(self) -> None:
        """Wait until every turn started with start_turn() has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # =========================================================================
    # Turn lifecycle
    # =========================================================================

    def _open_turn(self, text: str) -> PipelineContext:
        """Validate input, append the turn's messages, snapshot its inputs."""
        utterance = text.strip() if isinstance(text, str) else ""
        if not utterance:
            raise EmptyInputError("Message text must not be empty")

        turn_id = str(uuid4())
        history = tuple(self._history)
        prior_directive = self._latest_directive()
        profile = self._backend_profile
        display_name = self._display_name(turn_id, profile)

        user_message = self._log.append(Role.USER, utterance, turn_id=turn_id)
        self._history.append(utterance)
        placeholder = self._log.append(
            Role.ASSISTANT, THINKING_TEXT, stage=Stage.ENHANCING, turn_id=turn_id
        )

        log.info(
            "turn_submitted",
            turn_id=turn_id,
            backend_profile=profile,
            history_length=len(history),
        )

        return PipelineContext(
            turn_id=turn_id,
            user_input=utterance,
            user_message_id=user_message.id,
            message_id=placeholder.id,
            history=history,
            backend_profile=profile,
            backend_display_name=display_name,
            prior_directive=prior_directive,
            message_writer=partial(self._write, self._epoch),
        )

    def _display_name(self, turn_id: str, profile: Optional[str]) -> str:
        """Backend name for the placeholder text, falling back to the profile id."""
        try:
            return self.generation.display_name(profile)
        except Exception as e:
            log.warning(
                "backend_display_name_failed",
                turn_id=turn_id,
                backend_profile=profile,
                error=str(e),
            )
            return profile or "the selected backend"

    async def _run_turn(self, context: PipelineContext) -> TurnResult:
        try:
            result = await self.pipeline.execute(context)
        except StageFailure as failure:
            result = self._settle_failure(context, failure)
        except Exception as e:
            log.error(
                "turn_crashed",
                turn_id=context.turn_id,
                error=str(e),
                exc_info=True,
            )
            failure = StageFailure(f"{type(e).__name__}: {e}", cause=e)
            failure.stage = self._current_stage(context)
            result = self._settle_failure(context, failure)

        log.info(
            "turn_settled",
            turn_id=context.turn_id,
            intent=result.intent.value if result.intent else None,
            succeeded=result.succeeded,
            failed_stage=result.failed_stage,
            latency_ms=result.latency_ms,
        )
        return result

    def _settle_failure(
        self, context: PipelineContext, failure: StageFailure
    ) -> TurnResult:
        """Replace the turn's in-flight message with a failure notice."""
        if failure.stage == "generating":
            template = (
                GENERATION_TIMEOUT_TEXT if failure.timed_out else GENERATION_FAILED_TEXT
            )
            notice = template.format(backend=context.backend_display_name)
        else:
            notice = (
                PREPARATION_TIMEOUT_TEXT if failure.timed_out else PREPARATION_FAILED_TEXT
            )

        context.update_message(
            text=notice,
            stage=Stage.NONE,
            artifact_ref=None,
            artifact=None,
            failed=True,
        )
        return self.pipeline.build_result(context, failure=failure)

    def _write(self, epoch: int, message_id: str, **changes) -> Optional[Message]:
        """Message writer handed to the pipeline; drops stale-session updates."""
        if epoch != self._epoch:
            log.info(
                "stale_turn_update_dropped",
                message_id=message_id,
                fields=sorted(changes),
            )
            return None
        return self._log.update(message_id, **changes)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _seed_session(self) -> None:
        if self.welcome_message:
            self._log.append(Role.SYSTEM, self.welcome_message)

    def _latest_directive(self) -> Optional[Directive]:
        """Directive of the most recent successfully generated artifact."""
        for message in reversed(self._log.snapshot()):
            if message.artifact_ref and message.directive is not None:
                return message.directive
        return None

    def _check_profile(self, profile: str) -> None:
        if self.registry is not None and profile not in self.registry:
            known = ", ".join(p.id for p in self.registry.profiles())
            raise UnknownBackendProfileError(
                f"Unknown backend profile '{profile}'. Known profiles: {known}"
            )

    @staticmethod
    def _current_stage(context: PipelineContext) -> str:
        if context.classification_output is None:
            return "classifying"
        if context.enhancement_output is None:
            return "enhancing"
        return "generating"


def create_orchestrator(
    settings: Optional[Settings] = None,
    studio_config: Optional[StudioConfig] = None,
) -> ConversationOrchestrator:
    """Wire an orchestrator from application settings and studio config.

    Args:
        settings: Settings instance (defaults to the global settings)
        studio_config: StudioConfig instance (defaults to the global config)
    """
    settings = settings or config.settings
    studio_config = studio_config or config.studio_config

    profiles = studio_config.backends.profiles
    if settings.custom_backend_endpoint:
        # Surface the configured backend name on the custom profile
        profiles = [
            p.model_copy(update={"display_name": settings.custom_backend_name})
            if p.id == "custom"
            else p
            for p in profiles
        ]
    registry = BackendRegistry(profiles, default=studio_config.backends.default)

    return ConversationOrchestrator(
        classifier=IntentClassifier(studio_config.lexicon),
        enhancement_service=EnhancementService(
            lexicon=studio_config.lexicon,
            latency=UniformLatency(
                settings.enhancement_latency_min_ms,
                settings.enhancement_latency_max_ms,
            ),
            resolution=settings.output_resolution,
        ),
        generation_service=create_generation_service(
            registry,
            endpoint=settings.custom_backend_endpoint,
            api_key=settings.custom_backend_api_key,
            timeout=settings.custom_backend_timeout,
            base_url=settings.artifact_base_url,
        ),
        reply_service=ReplyService(studio_config.replies),
        registry=registry,
        default_backend_profile=settings.default_backend_profile,
        welcome_message=studio_config.welcome_message,
        stage_timeout=settings.stage_timeout_seconds,
    )
