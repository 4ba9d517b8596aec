#!/usr/bin/env python3
"""
Configuration wizard (`nodemate config`) and `nodemate config --show`.
"""

import logging
from typing import Optional

from nodemate.config.providers import PROVIDER_CONFIGS, SUPPORTED_PROVIDERS, recommendations_for
from nodemate.config.store import ConfigStore
from nodemate.exceptions import ConfigAbortedError, NodeMateError
from nodemate.providers.factory import ProviderFactory
from nodemate.ui.common import error_hint
from nodemate.ui.input import InputManager
from nodemate.ui.messages import CONFIG_SUCCESS
from nodemate.ui.presenter import Presenter
from nodemate.utils.sensitive_str import SensitiveStr

logger = logging.getLogger(__name__)

PACKAGE_MANAGER_CHOICES = (
    ("auto", "Auto-detect (recommended)"),
    ("npm", "npm"),
    ("pnpm", "pnpm"),
    ("yarn", "yarn"),
)


class ConfigWizard:
    def __init__(
        self,
        store: ConfigStore,
        presenter: Presenter,
        input_manager: InputManager,
        factory=ProviderFactory,
        validation_timeout: Optional[float] = None,
    ):
        self.store = store
        self.presenter = presenter
        self.input = input_manager
        self.factory = factory
        self.validation_timeout = validation_timeout

    def _plain(self, text: str) -> None:
        self.presenter.print(text, markup=False, highlight=False)

    async def run(self) -> bool:
        """Walk through provider, key, model and preferences. True if saved."""
        try:
            return await self._run()
        except ConfigAbortedError as exc:
            self.presenter.warning(exc.message)
            return False
        except NodeMateError as exc:
            logger.error("Configuration failed: %s", exc.message)
            self.presenter.error(f"Configuration failed: {exc.message}", hint=error_hint(exc))
            return False

    async def _run(self) -> bool:
        self.presenter.info("Setting up NodeMate configuration...")

        if self.store.has_config():
            self.presenter.info(f"Current provider: {self.store.get_current_provider()}")
            reconfigure = await self.input.confirm(
                "Configuration already exists. Do you want to reconfigure?", default=False
            )
            if not reconfigure:
                return False

        provider = await self.input.select(
            "Select your AI provider:",
            [(p, f"{PROVIDER_CONFIGS[p].name} ({p})") for p in SUPPORTED_PROVIDERS],
            print_fn=self._plain,
        )
        descriptor = PROVIDER_CONFIGS[provider]

        def check_key(text: str) -> Optional[str]:
            if not text.strip():
                return "API key is required"
            if not self.factory.validate_api_key_format(provider, text.strip()):
                return f"Invalid API key format. Expected format: {descriptor.key_prefix}..."
            return None

        api_key = await self.input.ask(
            f"Enter your {descriptor.name} API key:", is_password=True, check=check_key
        )

        recommended = {model: use for use, model in recommendations_for(provider).items()}
        model_choices = []
        for model in descriptor.models:
            tags = []
            if model == descriptor.default_model:
                tags.append("recommended")
            elif model in recommended:
                tags.append(recommended[model])
            label = f"{model} ({', '.join(tags)})" if tags else model
            model_choices.append((model, label))
        model = await self.input.select(
            f"Select {descriptor.name} model:",
            model_choices,
            default=descriptor.default_model,
            print_fn=self._plain,
        )

        with self.presenter.status(f"Validating {descriptor.name} API key..."):
            is_valid = await self.factory.validate_provider(
                provider, api_key, model, timeout=self.validation_timeout
            )
        if not is_valid:
            self.presenter.error(
                "API key validation failed",
                hint="Invalid API key or insufficient permissions",
            )
            return False
        self.presenter.success("API key validated successfully")

        package_manager = await self.input.select(
            "Preferred package manager:",
            PACKAGE_MANAGER_CHOICES,
            default="auto",
            print_fn=self._plain,
        )
        show_thinking = await self.input.confirm("Show AI thinking process?", default=True)
        stream_responses = await self.input.confirm(
            "Stream responses as they arrive?", default=False
        )
        color_output = await self.input.confirm("Enable colored output?", default=True)

        self.store.set_provider(provider)
        self.store.set_api_key(provider, api_key)
        self.store.set_model(provider, model)
        self.store.set_preference("package_manager", package_manager)
        self.store.set_preference("show_thinking", show_thinking)
        self.store.set_preference("stream_responses", stream_responses)
        self.store.set_preference("color_output", color_output)

        self.presenter.print(CONFIG_SUCCESS)
        self.presenter.info(f"Configuration saved to: {self.store.path}")
        return True


def show_config(store: ConfigStore, presenter: Presenter) -> bool:
    """Print the saved configuration. False when there is none."""
    if not store.has_config():
        presenter.warning("No configuration found. Run: nodemate config")
        return False

    config = store.get_config()
    provider = config.provider
    prefs = config.preferences

    def yes_no(value: bool) -> str:
        return "Yes" if value else "No"

    presenter.print(
        "\n".join(
            [
                "📋 NodeMate Configuration:",
                "",
                f"Provider: {PROVIDER_CONFIGS[provider].name} ({provider})",
                f"Model: {store.get_model(provider)}",
                f"API Key: {SensitiveStr(store.get_api_key(provider)).mask_for_display()}",
                "",
                "Preferences:",
                f"• Package Manager: {prefs.package_manager}",
                f"• Show Thinking: {yes_no(prefs.show_thinking)}",
                f"• Stream Responses: {yes_no(prefs.stream_responses)}",
                f"• Color Output: {yes_no(prefs.color_output)}",
                "",
                f"Config Path: {store.path}",
            ]
        ),
        markup=False,
        highlight=False,
    )
    return True
