"""Conversation-to-video orchestration studio."""

__version__ = "0.1.0"
