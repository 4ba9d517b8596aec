#!/usr/bin/env python3
"""
Command Dispatcher Module

Handles the slash commands typed into the chat loop. Commands never
touch the conversation history directly: they return a CommandOutcome
and the session acts on it.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from nodemate.agent.structs import CommandOutcome, CommandSpec, Message
from nodemate.config.store import ConfigStore
from nodemate.exceptions import NodeMateError, UnsupportedModelError
from nodemate.providers.base import BaseProvider
from nodemate.services.npm_service import NpmService, PackageInfo
from nodemate.ui.common import error_hint
from nodemate.ui.messages import CHAT_WELCOME
from nodemate.ui.presenter import Presenter
from nodemate.utils.sensitive_str import SensitiveStr

DEFAULT_SEARCH_LIMIT = 5

COMMANDS: Tuple[CommandSpec, ...] = (
    CommandSpec("/help", "Show available commands"),
    CommandSpec("/clear", "Clear chat history"),
    CommandSpec("/exit", "Exit Dr. Node"),
    CommandSpec("/config", "Show current configuration"),
    CommandSpec("/history", "Show chat history"),
    CommandSpec("/model", "List models or switch model", "/model [name]"),
    CommandSpec("/search", "Search for packages", "/search <package-name>"),
    CommandSpec("/resolve", "Resolve dependency conflicts"),
)

_PREVIEW_CHARS = 120


def _format_downloads(count: int) -> str:
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


class CommandDispatcher:
    """Dispatcher for slash commands."""

    def __init__(
        self,
        presenter: Presenter,
        config_store: ConfigStore,
        npm_service: NpmService,
        provider: BaseProvider,
        history_view: Optional[Callable[[], Sequence[Message]]] = None,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
    ):
        self.presenter = presenter
        self.config_store = config_store
        self.npm_service = npm_service
        self.provider = provider
        self.history_view = history_view or (lambda: ())
        self.search_limit = search_limit
        self.logger = logging.getLogger(__name__)

        self._handlers: Dict[str, Callable] = {
            "/help": self._handle_help,
            "/clear": self._handle_clear,
            "/exit": self._handle_exit,
            "/config": self._handle_config,
            "/history": self._handle_history,
            "/model": self._handle_model,
            "/search": self._handle_search,
            "/resolve": self._handle_resolve,
        }

    async def dispatch(self, user_input: str) -> CommandOutcome:
        """
        Run one slash command.

        Args:
            user_input: The raw line, starting with "/"

        Returns:
            CommandOutcome telling the session what to do next.
        """
        parts = user_input.strip().split()
        if not parts:
            return CommandOutcome.CONTINUE

        cmd, args = parts[0].lower(), parts[1:]
        handler = self._handlers.get(cmd)
        if handler is None:
            self.presenter.warning(f"Unknown command: {parts[0]}")
            self.presenter.info("Type /help for available commands")
            return CommandOutcome.CONTINUE

        self.logger.debug("Dispatching %s %s", cmd, args)
        return await handler(args)

    # --- Handlers ---

    async def _handle_help(self, args: List[str]) -> CommandOutcome:
        self.presenter.print("\n📋 Available Commands:")
        self.presenter.table(
            ["Command", "Description"],
            [(spec.usage or spec.name, spec.description) for spec in COMMANDS],
        )
        return CommandOutcome.CONTINUE

    async def _handle_clear(self, args: List[str]) -> CommandOutcome:
        self.presenter.clear()
        self.presenter.print(CHAT_WELCOME)
        return CommandOutcome.CLEAR_HISTORY

    async def _handle_exit(self, args: List[str]) -> CommandOutcome:
        return CommandOutcome.EXIT

    async def _handle_config(self, args: List[str]) -> CommandOutcome:
        config = self.config_store.get_config()
        provider_id = self.provider.get_provider()
        masked_key = SensitiveStr(self.config_store.get_api_key(provider_id)).mask_for_display()
        prefs = config.preferences

        self.presenter.print(
            "\n".join(
                [
                    "🔧 Current Configuration:",
                    f"• Provider: {provider_id}",
                    f"• Model: {self.provider.get_model()}",
                    f"• API Key: {masked_key}",
                    f"• Package Manager: {prefs.package_manager}",
                    f"• Show Thinking: {prefs.show_thinking}",
                    f"• Stream Responses: {prefs.stream_responses}",
                    f"• Color Output: {prefs.color_output}",
                    f"• Config File: {self.config_store.path}",
                ]
            ),
            markup=False,
            highlight=False,
        )
        return CommandOutcome.CONTINUE

    async def _handle_history(self, args: List[str]) -> CommandOutcome:
        messages = tuple(self.history_view())
        if not messages:
            self.presenter.info("No messages yet")
            return CommandOutcome.CONTINUE

        rows = []
        for index, message in enumerate(messages, 1):
            content = " ".join(message.content.split())
            if len(content) > _PREVIEW_CHARS:
                content = content[: _PREVIEW_CHARS - 1] + "…"
            speaker = "You" if message.role == "user" else "NodeMate"
            rows.append((str(index), speaker, content))
        self.presenter.table(["#", "Role", "Message"], rows, title="Chat History")
        return CommandOutcome.CONTINUE

    async def _handle_model(self, args: List[str]) -> CommandOutcome:
        current = self.provider.get_model()
        if not args:
            rows = [
                ("→" if model == current else "", model)
                for model in self.provider.get_supported_models()
            ]
            self.presenter.table(
                ["", "Model"], rows, title=f"{self.provider.descriptor.name} models"
            )
            self.presenter.info("Switch with /model <name>")
            return CommandOutcome.CONTINUE

        try:
            self.provider.set_model(args[0])
        except UnsupportedModelError as exc:
            self.presenter.error(exc.message, hint=exc.user_hint)
            return CommandOutcome.CONTINUE

        self.presenter.success(f"Model switched: {current} → {args[0]}")
        return CommandOutcome.CONTINUE

    async def _handle_search(self, args: List[str]) -> CommandOutcome:
        if not args:
            self.presenter.warning("Usage: /search <package-name>")
            return CommandOutcome.CONTINUE

        query = " ".join(args)
        try:
            with self.presenter.status(f'Searching for "{query}"...'):
                results = await self.npm_service.search_packages(query, self.search_limit)
        except NodeMateError as exc:
            self.logger.warning("Search for %r failed: %s", query, exc)
            self.presenter.error(f"Search error: {exc.message}", hint=error_hint(exc))
            return CommandOutcome.CONTINUE

        if not results.packages:
            self.presenter.warning("No packages found")
            return CommandOutcome.CONTINUE

        self.presenter.success(f"Found {len(results.packages)} packages")
        self._render_packages(results.packages)
        return CommandOutcome.CONTINUE

    async def _handle_resolve(self, args: List[str]) -> CommandOutcome:
        self.presenter.info("Dependency conflict resolution coming soon...")
        return CommandOutcome.CONTINUE

    def _render_packages(self, packages: Sequence[PackageInfo]) -> None:
        rows = [
            (
                pkg.name,
                pkg.version,
                _format_downloads(pkg.weekly_downloads),
                "-" if pkg.github_stars is None else f"{pkg.github_stars:,}",
                pkg.license,
                "✓" if pkg.has_types else "✗",
                pkg.description,
            )
            for pkg in packages
        ]
        self.presenter.table(
            ["Package", "Version", "Downloads/wk", "Stars", "License", "Types", "Description"],
            rows,
        )
