#!/usr/bin/env python3
"""
Provider Descriptors
====================

Static, immutable metadata for every supported LLM provider.
One descriptor per provider id; nothing here is mutated at runtime.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class ProviderDescriptor:
    """Per-provider metadata."""

    name: str
    label: str  # short tag used in error messages
    api_url: str
    models: Tuple[str, ...]
    default_model: str
    key_prefix: str
    max_tokens: int


PROVIDER_CONFIGS: Mapping[str, ProviderDescriptor] = MappingProxyType(
    {
        "openai": ProviderDescriptor(
            name="OpenAI",
            label="OpenAI",
            api_url="https://api.openai.com/v1",
            models=(
                "gpt-4-turbo-preview",
                "gpt-4",
                "gpt-3.5-turbo",
                "gpt-4o",
                "gpt-4o-mini",
            ),
            default_model="gpt-4-turbo-preview",
            key_prefix="sk-",
            max_tokens=4096,
        ),
        "claude": ProviderDescriptor(
            name="Anthropic Claude",
            label="Claude",
            api_url="https://api.anthropic.com",
            models=(
                "claude-3-5-sonnet-20241022",
                "claude-3-5-haiku-20241022",
                "claude-3-opus-20240229",
                "claude-3-sonnet-20240229",
                "claude-3-haiku-20240307",
            ),
            default_model="claude-3-5-sonnet-20241022",
            key_prefix="sk-ant-",
            max_tokens=4096,
        ),
        "gemini": ProviderDescriptor(
            name="Google Gemini",
            label="Gemini",
            api_url="https://generativelanguage.googleapis.com/v1beta",
            models=(
                "gemini-2.5-flash",
                "gemini-2.5-flash-lite",
                "gemini-2.5-pro",
                "gemini-2.0-flash-exp",
                "gemini-1.5-pro",
                "gemini-1.5-flash",
            ),
            default_model="gemini-2.5-flash",
            key_prefix="AI",
            max_tokens=8192,
        ),
        "groq": ProviderDescriptor(
            name="Groq",
            label="Groq",
            api_url="https://api.groq.com/openai/v1",
            models=(
                "llama-3.3-70b-versatile",
                "llama-3.1-70b-versatile",
                "llama-3.1-8b-instant",
                "mixtral-8x7b-32768",
                "gemma2-9b-it",
            ),
            default_model="llama-3.3-70b-versatile",
            key_prefix="gsk_",
            max_tokens=8192,
        ),
    }
)

SUPPORTED_PROVIDERS: Tuple[str, ...] = ("openai", "claude", "gemini", "groq")

DEFAULT_PROVIDER = "openai"

# Model recommendations by use case, shown by the configuration wizard.
MODEL_RECOMMENDATIONS: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "fastest": MappingProxyType(
            {
                "openai": "gpt-3.5-turbo",
                "claude": "claude-3-5-haiku-20241022",
                "gemini": "gemini-2.5-flash-lite",
                "groq": "llama-3.1-8b-instant",
            }
        ),
        "balanced": MappingProxyType(
            {
                "openai": "gpt-4-turbo-preview",
                "claude": "claude-3-5-sonnet-20241022",
                "gemini": "gemini-2.5-flash",
                "groq": "llama-3.3-70b-versatile",
            }
        ),
        "powerful": MappingProxyType(
            {
                "openai": "gpt-4",
                "claude": "claude-3-opus-20240229",
                "gemini": "gemini-2.5-pro",
                "groq": "llama-3.3-70b-versatile",
            }
        ),
    }
)


def recommendations_for(provider: str) -> Mapping[str, str]:
    """Return {use_case: model} for one provider."""
    return {
        use_case: models[provider]
        for use_case, models in MODEL_RECOMMENDATIONS.items()
        if provider in models
    }
