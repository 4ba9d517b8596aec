#!/usr/bin/env python3
"""
Persisted User Configuration
============================

The chosen provider, per-provider API keys and models, and user
preferences, stored as JSON under the config directory.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from nodemate.config.providers import DEFAULT_PROVIDER, PROVIDER_CONFIGS
from nodemate.exceptions import ConfigError, ConfigFileError, UnsupportedProviderError
from nodemate.utils.sensitive_str import redact_mapping

logger = logging.getLogger(__name__)


class ProviderSettings(BaseModel):
    api_key: str = ""
    model: Optional[str] = None


class Preferences(BaseModel):
    package_manager: Literal["auto", "npm", "pnpm", "yarn"] = "auto"
    auto_install: bool = False
    show_thinking: bool = True
    color_output: bool = True
    stream_responses: bool = False


def _default_providers() -> Dict[str, ProviderSettings]:
    return {
        name: ProviderSettings(model=descriptor.default_model)
        for name, descriptor in PROVIDER_CONFIGS.items()
    }


class NodeMateConfig(BaseModel):
    provider: Literal["openai", "claude", "gemini", "groq"] = DEFAULT_PROVIDER
    preferences: Preferences = Field(default_factory=Preferences)
    providers: Dict[str, ProviderSettings] = Field(default_factory=_default_providers)


class ConfigStore:
    """
    Read/write access to the saved configuration file.

    The file is read lazily on first access and rewritten atomically
    after every change.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._config: Optional[NodeMateConfig] = None

    # --- Persistence ---

    def _load(self) -> NodeMateConfig:
        if not self.path.exists():
            return NodeMateConfig()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigFileError(
                f"Invalid JSON format in config file {self.path}: {e}",
                file_path=self.path,
                operation="load",
                original_error=e,
            ) from e
        except OSError as e:
            raise ConfigFileError(
                f"Failed to read config file {self.path}: {e}",
                file_path=self.path,
                operation="load",
                original_error=e,
            ) from e

        try:
            config = NodeMateConfig.model_validate(raw)
        except PydanticValidationError as e:
            raise ConfigFileError(
                f"Invalid configuration in {self.path}: {e.error_count()} error(s)",
                file_path=self.path,
                operation="load",
                original_error=e,
            ) from e

        for name, settings in _default_providers().items():
            config.providers.setdefault(name, settings)
        return config

    def _save(self) -> None:
        config = self.get_config()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=".config-", suffix=".json"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(config.model_dump(), f, indent=2)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise ConfigFileError(
                f"Failed to save config file {self.path}: {e}",
                file_path=self.path,
                operation="save",
                original_error=e,
            ) from e
        logger.debug(
            "Saved configuration to %s: %s", self.path, redact_mapping(config.model_dump())
        )

    # --- Reads ---

    def get_config(self) -> NodeMateConfig:
        if self._config is None:
            self._config = self._load()
        return self._config

    def has_config(self) -> bool:
        """True once the current provider has an API key."""
        return bool(self.get_api_key())

    def get_current_provider(self) -> str:
        return self.get_config().provider

    def get_api_key(self, provider: Optional[str] = None) -> str:
        config = self.get_config()
        entry = config.providers.get(provider or config.provider)
        return entry.api_key if entry else ""

    def get_model(self, provider: Optional[str] = None) -> str:
        config = self.get_config()
        target = provider or config.provider
        entry = config.providers.get(target)
        if entry and entry.model:
            return entry.model
        descriptor = PROVIDER_CONFIGS.get(target)
        return descriptor.default_model if descriptor else ""

    def get_preference(self, key: str) -> Any:
        return getattr(self.get_config().preferences, key)

    # --- Writes ---

    def _check_provider(self, provider: str) -> None:
        if provider not in PROVIDER_CONFIGS:
            raise UnsupportedProviderError(
                f"Unsupported LLM provider: {provider}",
                provider_name=provider,
                supported=tuple(PROVIDER_CONFIGS),
            )

    def set_provider(self, provider: str) -> None:
        self._check_provider(provider)
        self.get_config().provider = provider
        self._save()

    def set_api_key(self, provider: str, api_key: str) -> None:
        self._check_provider(provider)
        self.get_config().providers.setdefault(provider, ProviderSettings()).api_key = api_key
        self._save()

    def set_model(self, provider: str, model: str) -> None:
        self._check_provider(provider)
        self.get_config().providers.setdefault(provider, ProviderSettings()).model = model
        self._save()

    def set_preference(self, key: str, value: Any) -> None:
        preferences = self.get_config().preferences
        if key not in Preferences.model_fields:
            raise ConfigError(f"Unknown preference: {key}")
        try:
            updated = Preferences.model_validate({**preferences.model_dump(), key: value})
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid value for {key}: {value!r}", original_error=e) from e
        self.get_config().preferences = updated
        self._save()

    def reset(self) -> None:
        self._config = NodeMateConfig()
        if self.path.exists():
            self.path.unlink()
