"""Domain models package."""

from .backend import BackendProfile
from .generation import ArtifactResult, Directive, MotionIntensity
from .intent import IntentKind, IntentResult
from .message import Message, Role, Stage

__all__ = [
    "BackendProfile",
    "ArtifactResult",
    "Directive",
    "MotionIntensity",
    "IntentKind",
    "IntentResult",
    "Message",
    "Role",
    "Stage",
]
