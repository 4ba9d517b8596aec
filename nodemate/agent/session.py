#!/usr/bin/env python3
"""
Chat Session
============

The interactive loop: read a line, route slash commands to the
dispatcher, send everything else to the provider together with the
conversation so far, render the reply.

States: INITIALIZING -> AWAITING_INPUT <-> PROCESSING_COMMAND /
PROCESSING_CHAT_TURN -> TERMINATED. Per-turn errors are reported and the
loop carries on; only /exit (or EOF on the prompt) ends it.
"""

import logging
from contextlib import aclosing
from pathlib import Path
from typing import List, Optional, Sequence, Type, Union

from nodemate.agent.command_dispatcher import CommandDispatcher
from nodemate.agent.structs import (
    ChatHistory,
    CommandOutcome,
    Message,
    SessionState,
)
from nodemate.config.settings import Settings, get_settings
from nodemate.config.store import ConfigStore, Preferences
from nodemate.exceptions import (
    EmptyResponseError,
    MissingConfigError,
    NodeMateError,
    ProviderTimeoutError,
)
from nodemate.prompts.system_prompt import build_main_prompt
from nodemate.providers.base import BaseProvider
from nodemate.providers.factory import ProviderFactory
from nodemate.services.npm_service import NpmService
from nodemate.services.project_context import ContextDetection, ProjectContextService
from nodemate.ui.common import error_hint
from nodemate.ui.input import InputManager
from nodemate.ui.messages import CHAT_WELCOME, GOODBYE_MESSAGE, THINKING_MESSAGE
from nodemate.ui.presenter import Presenter

logger = logging.getLogger(__name__)


class ChatSession:
    def __init__(
        self,
        presenter: Presenter,
        input_manager: InputManager,
        config_store: ConfigStore,
        settings: Optional[Settings] = None,
        provider: Optional[BaseProvider] = None,
        npm_service: Optional[NpmService] = None,
        context_service: Optional[ProjectContextService] = None,
        provider_factory: Type[ProviderFactory] = ProviderFactory,
        project_path: Union[str, Path, None] = None,
    ):
        self.presenter = presenter
        self.input_manager = input_manager
        self.config_store = config_store
        self.settings = settings or get_settings()
        self.provider = provider
        self.npm_service = npm_service or NpmService(
            registry_timeout=self.settings.registry_timeout,
            probe_timeout=self.settings.probe_timeout,
        )
        self.context_service = context_service or ProjectContextService(
            probe_timeout=self.settings.probe_timeout
        )
        self.provider_factory = provider_factory
        self.project_path = project_path

        self.history = ChatHistory()
        self.system_prompt: Optional[str] = None
        self.context_detection: Optional[ContextDetection] = None
        self.dispatcher: Optional[CommandDispatcher] = None
        self._state = SessionState.INITIALIZING

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def preferences(self) -> Preferences:
        return self.config_store.get_config().preferences

    # --- Lifecycle ---

    async def initialize(self) -> None:
        """
        Build the provider, detect the project and print the welcome text.

        Raises:
            MissingConfigError: No provider key has been saved yet.
            ProviderError: The saved provider cannot be constructed.
        """
        self._state = SessionState.INITIALIZING

        if self.provider is None:
            if not self.config_store.has_config():
                raise MissingConfigError()
            provider_id = self.config_store.get_current_provider()
            self.provider = self.provider_factory.create(
                provider_id,
                self.config_store.get_api_key(provider_id),
                self.config_store.get_model(provider_id),
                timeout=self.settings.request_timeout,
                max_retries=self.settings.max_retries,
            )
        logger.info(
            "Chat session using %s / %s",
            self.provider.get_provider(),
            self.provider.get_model(),
        )

        with self.presenter.status("Analyzing project context..."):
            detection = await self.context_service.detect_or_default(
                self.project_path, self.preferences.package_manager
            )
        self.context_detection = detection

        if detection.defaulted:
            self.presenter.warning("Could not detect project context - using defaults")
        else:
            self.presenter.success("Project context detected")
            if self.preferences.show_thinking:
                self.presenter.print(
                    self.context_service.generate_summary(detection.context),
                    markup=False,
                    highlight=False,
                )

        self.system_prompt = build_main_prompt(detection.context)
        self.dispatcher = self._build_dispatcher()

        self.presenter.print(CHAT_WELCOME)
        self._state = SessionState.AWAITING_INPUT

    def _build_dispatcher(self) -> CommandDispatcher:
        return CommandDispatcher(
            presenter=self.presenter,
            config_store=self.config_store,
            npm_service=self.npm_service,
            provider=self.provider,
            history_view=lambda: self.history.messages,
            search_limit=self.settings.search_limit,
        )

    async def run(self) -> None:
        """Initialize, then loop until /exit or EOF."""
        await self.initialize()
        try:
            while self._state is not SessionState.TERMINATED:
                line = await self.input_manager.read_input()
                if line is None:
                    line = "/exit"

                text = line.strip()
                if not text:
                    continue

                if text.startswith("/"):
                    await self.handle_command(text)
                else:
                    await self.handle_chat_turn(text)
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        self._state = SessionState.TERMINATED
        if self.provider is not None:
            await self.provider.close()
        await self.npm_service.close()
        self.presenter.info(GOODBYE_MESSAGE)

    # --- Turns ---

    async def handle_command(self, text: str) -> CommandOutcome:
        if self.dispatcher is None:
            self.dispatcher = self._build_dispatcher()

        self._state = SessionState.PROCESSING_COMMAND
        try:
            outcome = await self.dispatcher.dispatch(text)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.exception("Command %r failed", text)
            self.presenter.error(f"Command failed: {exc}")
            self._state = SessionState.AWAITING_INPUT
            return CommandOutcome.CONTINUE

        if outcome is CommandOutcome.EXIT:
            self._state = SessionState.TERMINATED
            return outcome
        if outcome is CommandOutcome.CLEAR_HISTORY:
            self.history.clear()
        self._state = SessionState.AWAITING_INPUT
        return outcome

    async def handle_chat_turn(self, text: str) -> Optional[str]:
        """
        Send one user message. Returns the reply, or None if the turn failed.

        The user message only enters the history together with its reply,
        so a failed turn leaves the history as it was.
        """
        self._state = SessionState.PROCESSING_CHAT_TURN
        pending = Message(role="user", content=text)
        conversation = (*self.history.messages, pending)

        try:
            if self.preferences.stream_responses:
                reply = await self._stream_reply(conversation)
            else:
                reply = await self._chat_reply(conversation)
        except ProviderTimeoutError as exc:
            logger.warning("Chat turn timed out: %s", exc.message)
            self.presenter.error(f"AI Timeout: {exc.message}", hint=error_hint(exc))
            return None
        except NodeMateError as exc:
            logger.error("Chat turn failed: %s", exc.message)
            self.presenter.error(f"AI Error: {exc.message}", hint=error_hint(exc))
            return None
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.exception("Chat turn failed unexpectedly")
            self.presenter.error(f"AI Error: Unexpected error: {exc}")
            return None
        finally:
            if self._state is SessionState.PROCESSING_CHAT_TURN:
                self._state = SessionState.AWAITING_INPUT

        self.history.add_pair(text, reply)
        return reply

    async def _chat_reply(self, conversation: Sequence[Message]) -> str:
        if self.preferences.show_thinking:
            with self.presenter.status(THINKING_MESSAGE):
                response = await self.provider.chat(conversation, self.system_prompt)
        else:
            response = await self.provider.chat(conversation, self.system_prompt)

        if response.usage is not None:
            logger.debug(
                "Token usage: prompt=%d completion=%d total=%d",
                response.usage.prompt_tokens,
                response.usage.completion_tokens,
                response.usage.total_tokens,
            )
        self.presenter.ai(response.content)
        return response.content

    async def _stream_reply(self, conversation: Sequence[Message]) -> str:
        fragments: List[str] = []
        self.presenter.stream_start()
        try:
            async with aclosing(
                self.provider.stream(conversation, self.system_prompt)
            ) as stream:
                async for fragment in stream:
                    fragments.append(fragment)
                    self.presenter.stream_fragment(fragment)
        finally:
            self.presenter.stream_end()

        reply = "".join(fragments)
        if not reply:
            raise EmptyResponseError(
                f"No response content received from {self.provider.descriptor.label}",
                provider_name=self.provider.get_provider(),
                model_name=self.provider.get_model(),
            )
        return reply
