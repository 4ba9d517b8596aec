#!/usr/bin/env python3
"""
Configuration Exception Definitions for NodeMate

All configuration-related exceptions inherit from NodeMateError.
"""

from .base import NodeMateError


class ConfigError(NodeMateError):
    """Raised when settings are invalid."""

    pass


class ConfigFileError(ConfigError):
    """Raised when configuration files cannot be loaded or saved."""

    def __init__(self, message, file_path=None, operation=None, original_error=None):
        super().__init__(message, original_error=original_error)
        self.file_path = file_path
        self.operation = operation
        self.user_hint = "Fix or delete the configuration file, then run `nodemate config`."


class MissingConfigError(ConfigError):
    """Raised when a command needs a saved configuration and there is none."""

    def __init__(self, message="No configuration found. Please run: nodemate config"):
        super().__init__(message)
        self.user_hint = "Run `nodemate config` to choose a provider and API key."


class ConfigAbortedError(ConfigError):
    """Raised when the user cancels the configuration wizard."""

    def __init__(self, message="Configuration cancelled"):
        super().__init__(message)
