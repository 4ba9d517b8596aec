"""
Conversation Exception Definitions for NodeMate
"""

from typing import Optional

from .base import NodeMateError


class ValidationError(NodeMateError):
    """Raised when a conversation is malformed before it is sent."""

    def __init__(self, message, index: Optional[int] = None, field_name=None):
        super().__init__(message)
        self.index = index
        self.field_name = field_name
        if index is not None:
            self.details["index"] = index
        if field_name:
            self.details["field_name"] = field_name
