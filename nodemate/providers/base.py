#!/usr/bin/env python3
"""
Base Provider Interface
=======================

The contract every LLM backend adapter implements:
``chat``, ``stream``, ``validate_key`` and ``get_supported_models``.

Adapters translate the provider-agnostic conversation into the backend's
wire format and the backend's reply back into a ChatResponse. Each adapter
owns its key, its current model and its client; nothing is shared.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

from nodemate.agent.structs import ChatResponse, Message, coerce_message
from nodemate.config.providers import PROVIDER_CONFIGS, ProviderDescriptor
from nodemate.exceptions import (
    NodeMateError,
    ProviderTimeoutError,
    ProviderTransportError,
    UnsupportedModelError,
)
from nodemate.utils.sensitive_str import SensitiveStr

DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_RETRIES = 2
DEFAULT_TEMPERATURE = 0.7

_STATUS_REASONS = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    429: "rate_limited",
}


class BaseProvider(ABC):
    """
    The Abstract Base Class (Contract) for all LLM Providers.
    """

    provider_id: str = ""

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        self._descriptor: ProviderDescriptor = PROVIDER_CONFIGS[self.provider_id]
        self._api_key = SensitiveStr(api_key)
        self._model = model or self._descriptor.default_model
        self.timeout = timeout
        self.max_retries = max_retries
        self.logger = logging.getLogger(f"{self._descriptor.label}Provider")

    # --- Capabilities ---

    @abstractmethod
    async def chat(
        self,
        messages: Sequence[Message],
        system_prompt: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> ChatResponse:
        """
        Run one request/response round trip.

        Raises:
            ValidationError: The conversation is malformed.
            ProviderTransportError: Transport or protocol failure.
            ProviderTimeoutError: The call exceeded ``timeout``.
            EmptyResponseError / UnsupportedContentError: Unusable reply.
        """

    @abstractmethod
    def stream(
        self,
        messages: Sequence[Message],
        system_prompt: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> AsyncIterator[str]:
        """
        Yield text fragments in the order the backend emits them.

        The underlying connection is released when the iterator is
        exhausted, closed early with ``aclose()``, or fails.
        """

    @abstractmethod
    async def validate_key(self) -> bool:
        """
        Ping the provider with a minimal request. Never raises.
        """

    async def close(self) -> None:
        """Release SDK / HTTP clients."""
        return None

    # --- Metadata ---

    @property
    def descriptor(self) -> ProviderDescriptor:
        return self._descriptor

    def get_supported_models(self) -> Tuple[str, ...]:
        return tuple(self._descriptor.models)

    def get_provider(self) -> str:
        return self.provider_id

    def get_model(self) -> str:
        return self._model

    def set_model(self, model: str) -> None:
        if model not in self._descriptor.models:
            raise UnsupportedModelError(
                f"Model {model} is not supported by {self.provider_id}",
                provider_name=self.provider_id,
                model_name=model,
                supported_models=self._descriptor.models,
            )
        self.logger.info("Switching model %s -> %s", self._model, model)
        self._model = model

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(model={self._model!r}, "
            f"api_key={self._api_key!r})"
        )

    # --- Shared helpers ---

    @staticmethod
    def _to_dict(value: Any) -> Dict[str, Any]:
        if isinstance(value, dict):
            return value
        model_dump = getattr(value, "model_dump", None)
        if callable(model_dump):
            dumped = model_dump()
            if isinstance(dumped, dict):
                return dumped
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            dumped = to_dict()
            if isinstance(dumped, dict):
                return dumped
        return {}

    def _is_timeout(self, exc: BaseException) -> bool:
        return isinstance(exc, (asyncio.TimeoutError, TimeoutError))

    def _wrap_error(self, exc: Exception, streaming: bool = False) -> NodeMateError:
        """
        Turn any SDK/HTTP exception into a backend-tagged NodeMate error.
        NodeMate errors pass through untouched.
        """
        if isinstance(exc, NodeMateError):
            return exc

        label = self._descriptor.label
        if self._is_timeout(exc):
            return ProviderTimeoutError(
                f"{label} request timed out after {self.timeout:g}s",
                timeout_seconds=self.timeout,
                provider_name=self.provider_id,
                model_name=self._model,
                original_error=exc,
            )

        status_code = getattr(exc, "status_code", None)
        if status_code is None:
            response = getattr(exc, "response", None)
            status_code = getattr(response, "status_code", None)
        detail = str(exc) or exc.__class__.__name__
        if isinstance(status_code, int):
            reason = _STATUS_REASONS.get(status_code, "api_error")
            detail = f"({status_code} {reason}) {detail}"

        kind = "streaming error" if streaming else "API error"
        return ProviderTransportError(
            f"{label} {kind}: {detail}",
            status_code=status_code if isinstance(status_code, int) else None,
            provider_name=self.provider_id,
            model_name=self._model,
            original_error=exc,
        )

    @staticmethod
    def _message_dicts(messages: Sequence[Any]) -> List[Dict[str, str]]:
        return [coerce_message(m).to_dict() for m in messages]
