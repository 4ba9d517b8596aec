from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# --- 0. Conversation Units ---

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class Message:
    """Atomic conversation unit."""

    role: str  # "system", "user", or "assistant"
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class TokenUsage:
    """Token counts reported by a backend."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass(frozen=True)
class ChatResponse:
    """
    Provider-agnostic reply.

    ``usage`` is None when the backend does not report token counts.
    """

    content: str
    usage: Optional[TokenUsage] = None


# --- 1. History ---

MAX_HISTORY_MESSAGES = 20


@dataclass
class ChatHistory:
    """Chat history capped at the most recent ``max_messages`` entries."""

    max_messages: int = MAX_HISTORY_MESSAGES
    _messages: List[Message] = field(default_factory=list)

    def add(self, message: Message) -> None:
        """Append a message and drop the oldest entries past the cap."""
        self._messages.append(message)
        self._trim()

    def add_pair(self, user_content: str, assistant_content: str) -> None:
        self.add(Message(role="user", content=user_content))
        self.add(Message(role="assistant", content=assistant_content))

    def clear(self) -> None:
        self._messages.clear()

    def _trim(self) -> None:
        overflow = len(self._messages) - self.max_messages
        if overflow > 0:
            del self._messages[:overflow]

    @property
    def messages(self) -> Tuple[Message, ...]:
        """Read-only snapshot, oldest first."""
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)


# --- 2. Session State ---


class SessionState(Enum):
    INITIALIZING = "initializing"
    AWAITING_INPUT = "awaiting_input"
    PROCESSING_COMMAND = "processing_command"
    PROCESSING_CHAT_TURN = "processing_chat_turn"
    TERMINATED = "terminated"


class CommandOutcome(Enum):
    """What the session should do after a slash command ran."""

    CONTINUE = "continue"
    EXIT = "exit"
    CLEAR_HISTORY = "clear_history"


@dataclass
class CommandSpec:
    name: str
    description: str
    usage: Optional[str] = None


def coerce_message(raw: Any) -> Message:
    """Accept a Message or a {"role", "content"} mapping."""
    if isinstance(raw, Message):
        return raw
    if isinstance(raw, dict):
        return Message(role=raw.get("role") or "", content=raw.get("content") or "")
    return Message(role=getattr(raw, "role", "") or "", content=getattr(raw, "content", "") or "")
