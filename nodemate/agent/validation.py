"""
Message Validator

Checks the structural well-formedness of a conversation before it is
sent to any backend. Adapters call this at the start of every request,
since the session mutates history one turn at a time.
"""

from typing import Any, Sequence

from nodemate.agent.structs import ROLES
from nodemate.exceptions import ValidationError


def validate_messages(messages: Sequence[Any]) -> None:
    """
    Raise ValidationError unless ``messages`` is a non-empty sequence of
    messages that each carry a known role and non-empty content.
    """
    if not messages:
        raise ValidationError("Messages array cannot be empty")

    for index, message in enumerate(messages):
        if isinstance(message, dict):
            role = message.get("role")
            content = message.get("content")
        else:
            role = getattr(message, "role", None)
            content = getattr(message, "content", None)

        if not role:
            raise ValidationError(
                f"Message {index} is missing a role", index=index, field_name="role"
            )
        if not isinstance(content, str) or not content.strip():
            raise ValidationError(
                f"Message {index} is missing content", index=index, field_name="content"
            )
        if role not in ROLES:
            raise ValidationError(
                f"Invalid message role '{role}'. Must be system, user, or assistant",
                index=index,
                field_name="role",
            )
