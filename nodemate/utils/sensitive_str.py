#!/usr/bin/env python3
"""
SensitiveStr - Wrapper for API keys that masks itself in logs, exceptions, and repr.
"""

from typing import Any, Mapping, Optional

SECRET_FIELD_NAMES = frozenset(
    {"api_key", "apikey", "authorization", "x-api-key", "x-goog-api-key", "key"}
)


class SensitiveStr:
    """
    A string wrapper that masks its value in all string representations.
    """

    def __init__(self, value: Optional[str]):
        self._value = value or ""

    def __str__(self) -> str:
        return self.mask_for_display()

    def __repr__(self) -> str:
        if not self._value:
            return "SensitiveStr('')"
        return f"SensitiveStr('{self._value[:4]}...***REDACTED***')"

    def __bool__(self) -> bool:
        return bool(self._value)

    def __eq__(self, other) -> bool:
        if isinstance(other, SensitiveStr):
            return self._value == other._value
        return self._value == other

    def __hash__(self) -> int:
        return hash(self._value)

    def __len__(self) -> int:
        return len(self._value)

    def get_secret(self) -> str:
        """Explicit method to get the actual secret value."""
        return self._value

    def startswith(self, prefix: str) -> bool:
        return self._value.startswith(prefix)

    def mask_for_display(self, show_chars: int = 8) -> str:
        """Return a masked version suitable for UI display."""
        if not self._value:
            return "***NOT SET***"
        if len(self._value) <= show_chars:
            return "*" * len(self._value)
        return f"{self._value[:show_chars]}..."


def redact_mapping(data: Mapping[str, Any]) -> dict:
    """Copy a (possibly nested) mapping with secret-looking fields masked."""
    cleaned = {}
    for key, value in data.items():
        if str(key).lower() in SECRET_FIELD_NAMES:
            cleaned[key] = "***REDACTED***"
        elif isinstance(value, Mapping):
            cleaned[key] = redact_mapping(value)
        elif isinstance(value, SensitiveStr):
            cleaned[key] = repr(value)
        else:
            cleaned[key] = value
    return cleaned
