"""
Base stage class for the turn pipeline.

All pipeline stages inherit from TurnStage.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Awaitable, Optional, Type, TypeVar

from video_studio.core.exceptions import StageFailure, StageTimeoutError

if TYPE_CHECKING:
    from .context import PipelineContext

T = TypeVar("T")


class TurnStage(ABC):
    """
    Abstract base class for pipeline stages.

    Each stage implements process(), which reads the PipelineContext,
    performs its operation, records its contract output on the context, and
    returns the context.
    """

    timeout: Optional[float] = None

    @abstractmethod
    async def process(self, context: "PipelineContext") -> "PipelineContext":
        """
        Process this stage, update context, return modified context.

        Args:
            context: Current turn context with all accumulated state

        Returns:
            Modified context with stage results added

        Raises:
            StageFailure: The stage could not complete
        """
        pass

    @property
    def stage_name(self) -> str:
        """Return the stage name for logging."""
        return self.__class__.__name__

    async def call_service(
        self, awaitable: Awaitable[T], failure: Type[StageFailure]
    ) -> T:
        """Await a service call, converting every error into a StageFailure.

        Applies self.timeout when set. StageFailures raised by the service
        itself pass through unchanged.
        """
        try:
            if self.timeout is None:
                return await awaitable
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except StageFailure:
            raise
        except asyncio.TimeoutError as e:
            raise failure(
                f"{self.stage_name} timed out after {self.timeout}s",
                cause=StageTimeoutError(f"{self.stage_name} exceeded {self.timeout}s"),
            ) from e
        except Exception as e:
            raise failure(
                f"{self.stage_name} failed: {type(e).__name__}: {e}", cause=e
            ) from e
