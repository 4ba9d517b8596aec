"""
Collaborator Exception Definitions for NodeMate

Errors raised by the services the chat session relies on: project
context detection, subprocess probes and the npm registry client.
"""

from .base import NodeMateError


class ContextDetectionError(NodeMateError):
    """Raised when the project context cannot be detected."""

    def __init__(self, message, project_path=None, original_error=None):
        super().__init__(message, original_error=original_error)
        self.project_path = project_path


class CommandError(NodeMateError):
    """Raised when an auxiliary process cannot be run."""

    def __init__(self, message, command=None, original_error=None):
        super().__init__(message, original_error=original_error)
        self.command = command


class CommandTimeoutError(CommandError):
    """Raised when an auxiliary process exceeds its deadline."""

    def __init__(self, message, command=None, timeout_seconds=None):
        super().__init__(message, command=command)
        self.timeout_seconds = timeout_seconds


class SearchError(NodeMateError):
    """Raised when the npm registry search fails."""

    def __init__(self, message, query=None, original_error=None):
        super().__init__(message, original_error=original_error)
        self.query = query
        self.user_hint = "The npm registry could not be reached. Check your connection."
