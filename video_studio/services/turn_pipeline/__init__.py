"""
Turn processing pipeline.

Composable stages for one user turn: intent classification, conversational
reply, prompt enhancement and artifact generation.
"""

from .base import TurnStage
from .context import PipelineContext
from .pipeline import TurnPipeline
from .result import TurnResult

__all__ = [
    "TurnStage",
    "PipelineContext",
    "TurnPipeline",
    "TurnResult",
]
