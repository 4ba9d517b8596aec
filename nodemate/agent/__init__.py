"""Conversation types, validation, session loop and slash commands."""

from .structs import (
    ChatHistory,
    ChatResponse,
    CommandOutcome,
    Message,
    SessionState,
    TokenUsage,
)
from .validation import validate_messages

__all__ = [
    "ChatHistory",
    "ChatResponse",
    "CommandOutcome",
    "Message",
    "SessionState",
    "TokenUsage",
    "validate_messages",
]
