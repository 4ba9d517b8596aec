#!/usr/bin/env python3
"""
Provider Exception Classes
==========================

Provider-specific exception classes for the multi-provider architecture.

Construction-time errors (missing key, unknown provider, unsupported model)
abort the setup step that raised them. Transport and response errors are
raised per call and are recoverable by the chat session.
"""

from typing import Optional, Sequence

from .base import NodeMateError


class ProviderError(NodeMateError):
    """
    Base exception for all provider-related errors.

    Carries the provider id and model name in ``details`` when known.
    """

    def __init__(
        self,
        message: str,
        provider_name: Optional[str] = None,
        model_name: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.provider_name = provider_name
        self.model_name = model_name

        if "provider_name" not in self.details and provider_name:
            self.details["provider_name"] = provider_name
        if "model_name" not in self.details and model_name:
            self.details["model_name"] = model_name


class MissingCredentialError(ProviderError):
    """Raised when a provider is constructed without an API key."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.user_hint = "Run `nodemate config` to store an API key for this provider."


class UnsupportedProviderError(ProviderError):
    """Raised for a provider identifier outside the known set."""

    def __init__(self, message: str, supported: Optional[Sequence[str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        if supported:
            self.details["supported_providers"] = list(supported)
        self.user_hint = "Supported providers: openai, claude, gemini, groq."


class UnsupportedModelError(ProviderError):
    """
    Raised when a model is not in the provider's supported-model list.
    """

    def __init__(self, message: str, supported_models: Optional[Sequence[str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        if supported_models:
            self.details["supported_models"] = list(supported_models)
        self.user_hint = "Use /model to list the models this provider supports."


class ProviderTransportError(ProviderError):
    """
    Wraps any HTTP or SDK failure during chat, stream or key validation.

    The message is always tagged with the backend label, e.g.
    ``"Claude API error: <detail>"``.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        if status_code is not None:
            self.details["status_code"] = status_code
        if self.user_hint is None:
            self.user_hint = (
                "The provider request failed. "
                "Please check your internet connection and API key, or try again later."
            )


class ProviderTimeoutError(ProviderTransportError):
    """Raised when a provider call exceeds its deadline."""

    def __init__(self, message: str, timeout_seconds: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timeout_seconds = timeout_seconds
        self.user_hint = (
            "The provider is responding slowly. "
            "Try again, or raise NODEMATE_REQUEST_TIMEOUT."
        )


class ProviderResponseError(ProviderError):
    """
    Raised when the provider answered but the reply cannot be used.
    """

    def __init__(self, message: str, response_data: Optional[dict] = None, **kwargs):
        super().__init__(message, **kwargs)
        if response_data:
            self.details["response_data"] = response_data
        self.user_hint = (
            "The provider returned an unusable response. "
            "This may be a temporary issue; please try again."
        )


class EmptyResponseError(ProviderResponseError):
    """Raised when the reply carries no text content at all."""

    pass


class UnsupportedContentError(ProviderResponseError):
    """Raised when the reply content is of a type the adapter cannot read."""

    def __init__(self, message: str, content_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.content_type = content_type
