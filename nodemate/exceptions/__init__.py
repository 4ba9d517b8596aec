#!/usr/bin/env python3
"""
NodeMate Exceptions Package

Unified exception hierarchy for NodeMate.
"""

# Base exceptions
from .base import NodeMateError

# Provider exceptions
from .provider import (
    EmptyResponseError,
    MissingCredentialError,
    ProviderError,
    ProviderResponseError,
    ProviderTimeoutError,
    ProviderTransportError,
    UnsupportedContentError,
    UnsupportedModelError,
    UnsupportedProviderError,
)

# Conversation exceptions
from .session import ValidationError

# Config exceptions
from .config import (
    ConfigAbortedError,
    ConfigError,
    ConfigFileError,
    MissingConfigError,
)

# Collaborator exceptions
from .services import (
    CommandError,
    CommandTimeoutError,
    ContextDetectionError,
    SearchError,
)


__all__ = [
    # Base
    "NodeMateError",
    # Provider
    "ProviderError",
    "MissingCredentialError",
    "UnsupportedProviderError",
    "UnsupportedModelError",
    "ProviderTransportError",
    "ProviderTimeoutError",
    "ProviderResponseError",
    "EmptyResponseError",
    "UnsupportedContentError",
    # Conversation
    "ValidationError",
    # Config
    "ConfigError",
    "ConfigFileError",
    "MissingConfigError",
    "ConfigAbortedError",
    # Services
    "ContextDetectionError",
    "CommandError",
    "CommandTimeoutError",
    "SearchError",
]
