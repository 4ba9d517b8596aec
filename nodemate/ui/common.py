"""
ui/common.py
Error message improvement shared by every place that shows errors.
"""

from typing import Optional

from nodemate.exceptions import NodeMateError

# --- ERROR TRANSLATION LAYER ---
ERROR_HINTS = {
    "rate_limit": "The API provider is rate-limiting us. Please wait a moment.",
    "rate limit": "The API provider is rate-limiting us. Please wait a moment.",
    "401": "The API key was rejected. Run `nodemate config` to update it.",
    "invalid api key": "The API key was rejected. Run `nodemate config` to update it.",
    "ConnectionRefused": "Could not connect to the server. Check your network.",
    "Cannot connect": "Could not connect to the server. Check your network.",
    "timed out": "The request took too long. Try again in a moment.",
    "context_length": "The conversation is too long for this model. Try /clear.",
}


def improve_error_message(raw_msg: str) -> Optional[str]:
    """
    Return a hint for generic error strings, or None.
    """
    msg_lower = str(raw_msg).lower()
    for key, hint in ERROR_HINTS.items():
        if key.lower() in msg_lower:
            return hint
    return None


def error_hint(error: BaseException) -> Optional[str]:
    """The exception's own hint first, then a keyword match on its text."""
    if isinstance(error, NodeMateError) and error.user_hint:
        return error.user_hint
    return improve_error_message(str(error))
