"""Settings, provider descriptors and the persisted user configuration."""

from .providers import (
    DEFAULT_PROVIDER,
    MODEL_RECOMMENDATIONS,
    PROVIDER_CONFIGS,
    SUPPORTED_PROVIDERS,
    ProviderDescriptor,
    recommendations_for,
)
from .settings import Settings, get_settings
from .store import ConfigStore, NodeMateConfig, Preferences, ProviderSettings

__all__ = [
    "DEFAULT_PROVIDER",
    "MODEL_RECOMMENDATIONS",
    "PROVIDER_CONFIGS",
    "SUPPORTED_PROVIDERS",
    "ProviderDescriptor",
    "recommendations_for",
    "Settings",
    "get_settings",
    "ConfigStore",
    "NodeMateConfig",
    "Preferences",
    "ProviderSettings",
]
