"""Provider factory helpers."""

import logging
from typing import Optional, Tuple

from nodemate.config.providers import (
    PROVIDER_CONFIGS,
    SUPPORTED_PROVIDERS,
    ProviderDescriptor,
)
from nodemate.exceptions import MissingCredentialError, UnsupportedProviderError
from nodemate.providers.base import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT, BaseProvider

logger = logging.getLogger("ProviderFactory")


class ProviderFactory:
    """Builds provider adapters from a provider id, key and optional model."""

    @staticmethod
    def create(
        provider: str,
        api_key: str,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ) -> BaseProvider:
        """Instantiate the adapter for ``provider``."""
        if not api_key:
            raise MissingCredentialError(
                f"API key is required for {provider}", provider_name=provider
            )

        if provider not in PROVIDER_CONFIGS:
            raise UnsupportedProviderError(
                f"Unsupported LLM provider: {provider}",
                provider_name=provider,
                supported=SUPPORTED_PROVIDERS,
            )

        resolved_model = model or PROVIDER_CONFIGS[provider].default_model
        options = {
            "timeout": DEFAULT_TIMEOUT if timeout is None else timeout,
            "max_retries": DEFAULT_MAX_RETRIES if max_retries is None else max_retries,
        }

        if provider == "openai":
            from nodemate.providers.openai_compat import OpenAIProvider

            return OpenAIProvider(api_key, resolved_model, **options)

        if provider == "claude":
            from nodemate.providers.claude import ClaudeProvider

            return ClaudeProvider(api_key, resolved_model, **options)

        if provider == "gemini":
            from nodemate.providers.gemini import GeminiProvider

            return GeminiProvider(api_key, resolved_model, **options)

        from nodemate.providers.openai_compat import GroqProvider

        return GroqProvider(api_key, resolved_model, **options)

    @staticmethod
    def get_supported_providers() -> Tuple[str, ...]:
        return SUPPORTED_PROVIDERS

    @staticmethod
    def get_provider_config(provider: str) -> ProviderDescriptor:
        try:
            return PROVIDER_CONFIGS[provider]
        except KeyError as exc:
            raise UnsupportedProviderError(
                f"Unsupported LLM provider: {provider}",
                provider_name=provider,
                supported=SUPPORTED_PROVIDERS,
            ) from exc

    @staticmethod
    def validate_api_key_format(provider: str, api_key: str) -> bool:
        """Prefix check only; says nothing about whether the key works."""
        descriptor = PROVIDER_CONFIGS.get(provider)
        if descriptor is None or not api_key:
            return False
        return api_key.startswith(descriptor.key_prefix)

    @staticmethod
    async def validate_provider(
        provider: str,
        api_key: str,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> bool:
        """Build a throwaway adapter and ping the backend. Never raises."""
        try:
            adapter = ProviderFactory.create(provider, api_key, model, timeout=timeout)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning("Cannot build %s provider for validation: %s", provider, exc)
            return False

        try:
            return await adapter.validate_key()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning("%s validation failed: %s", provider, exc)
            return False
        finally:
            await adapter.close()
