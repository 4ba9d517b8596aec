"""Tests for slash command handling."""

import pytest

from nodemate.agent.command_dispatcher import COMMANDS, CommandDispatcher, _format_downloads
from nodemate.agent.structs import CommandOutcome, Message
from nodemate.exceptions import SearchError
from nodemate.services.npm_service import PackageInfo, SearchResult

from .conftest import StubNpmService, StubProvider


@pytest.fixture
def provider():
    return StubProvider()


@pytest.fixture
def npm():
    return StubNpmService(result=SearchResult(packages=[], query="", total=0))


@pytest.fixture
def dispatcher(presenter, config_store, npm, provider):
    return CommandDispatcher(
        presenter=presenter,
        config_store=config_store,
        npm_service=npm,
        provider=provider,
        history_view=lambda: (
            Message("user", "what is a lockfile?"),
            Message("assistant", "It pins the resolved dependency tree."),
        ),
    )


class TestBasicCommands:
    @pytest.mark.asyncio
    async def test_help_lists_every_command(self, dispatcher, console_output):
        assert await dispatcher.dispatch("/help") is CommandOutcome.CONTINUE

        output = console_output.getvalue()
        for spec in COMMANDS:
            assert spec.name in output

    @pytest.mark.asyncio
    async def test_exit(self, dispatcher):
        assert await dispatcher.dispatch("/exit") is CommandOutcome.EXIT

    @pytest.mark.asyncio
    async def test_commands_are_case_insensitive(self, dispatcher):
        assert await dispatcher.dispatch("  /EXIT  ") is CommandOutcome.EXIT

    @pytest.mark.asyncio
    async def test_clear_asks_session_to_clear_history(self, dispatcher, console_output):
        assert await dispatcher.dispatch("/clear") is CommandOutcome.CLEAR_HISTORY
        assert "NodeMate Chat Mode" in console_output.getvalue()

    @pytest.mark.asyncio
    async def test_unknown_command(self, dispatcher, console_output):
        assert await dispatcher.dispatch("/frobnicate now") is CommandOutcome.CONTINUE

        output = console_output.getvalue()
        assert "Unknown command: /frobnicate" in output
        assert "Type /help for available commands" in output

    @pytest.mark.asyncio
    async def test_resolve_placeholder(self, dispatcher, console_output):
        await dispatcher.dispatch("/resolve")
        assert "Dependency conflict resolution coming soon..." in console_output.getvalue()

    @pytest.mark.asyncio
    async def test_config_masks_api_key(self, dispatcher, console_output):
        await dispatcher.dispatch("/config")

        output = console_output.getvalue()
        assert "sk-test-..." in output
        assert "sk-test-1234567890" not in output
        assert "gpt-4-turbo-preview" in output

    @pytest.mark.asyncio
    async def test_history_preview(self, dispatcher, console_output):
        await dispatcher.dispatch("/history")

        output = console_output.getvalue()
        assert "what is a lockfile?" in output
        assert "NodeMate" in output

    @pytest.mark.asyncio
    async def test_empty_history(self, presenter, config_store, npm, provider, console_output):
        dispatcher = CommandDispatcher(presenter, config_store, npm, provider)
        await dispatcher.dispatch("/history")
        assert "No messages yet" in console_output.getvalue()


class TestModelCommand:
    @pytest.mark.asyncio
    async def test_lists_models(self, dispatcher, console_output):
        await dispatcher.dispatch("/model")

        output = console_output.getvalue()
        assert "gpt-4o-mini" in output
        assert "Switch with /model <name>" in output

    @pytest.mark.asyncio
    async def test_switches_model_for_the_session_only(self, dispatcher, provider, config_store):
        await dispatcher.dispatch("/model gpt-4o")

        assert provider.get_model() == "gpt-4o"
        assert config_store.get_model("openai") == "gpt-4-turbo-preview"

    @pytest.mark.asyncio
    async def test_rejects_foreign_model(self, dispatcher, provider, console_output):
        await dispatcher.dispatch("/model llama-3.3-70b-versatile")

        assert provider.get_model() == "gpt-4-turbo-preview"
        assert "not supported by openai" in console_output.getvalue()


class TestSearchCommand:
    @pytest.mark.asyncio
    async def test_no_results(self, dispatcher, npm, console_output):
        outcome = await dispatcher.dispatch("/search express")

        assert outcome is CommandOutcome.CONTINUE
        assert npm.calls == [("express", 5)]
        assert "No packages found" in console_output.getvalue()

    @pytest.mark.asyncio
    async def test_usage_without_query(self, dispatcher, npm, console_output):
        await dispatcher.dispatch("/search")

        assert npm.calls == []
        assert "Usage: /search <package-name>" in console_output.getvalue()

    @pytest.mark.asyncio
    async def test_renders_results(self, dispatcher, npm, console_output):
        npm.result = SearchResult(
            packages=[
                PackageInfo(
                    name="fastify",
                    version="4.26.0",
                    description="Fast web framework",
                    weekly_downloads=1_500_000,
                    github_stars=31000,
                    license="MIT",
                    has_types=True,
                ),
                PackageInfo(name="koa", version="2.15.0", weekly_downloads=950),
            ],
            query="web framework",
            total=2,
        )

        await dispatcher.dispatch("/search web framework")

        assert npm.calls == [("web framework", 5)]
        output = console_output.getvalue()
        assert "Found 2 packages" in output
        assert "fastify" in output
        assert "1.5M" in output
        assert "31,000" in output

    @pytest.mark.asyncio
    async def test_search_failure_is_reported(self, dispatcher, npm, console_output):
        npm.error = SearchError("NPM search failed: Cannot connect to host")

        assert await dispatcher.dispatch("/search express") is CommandOutcome.CONTINUE
        assert "Search error: NPM search failed: Cannot connect to host" in console_output.getvalue()

    @pytest.mark.asyncio
    async def test_custom_search_limit(self, presenter, config_store, npm, provider):
        dispatcher = CommandDispatcher(presenter, config_store, npm, provider, search_limit=3)
        await dispatcher.dispatch("/search zod")
        assert npm.calls == [("zod", 3)]


@pytest.mark.parametrize(
    "count, expected", [(0, "0"), (999, "999"), (1_500, "1.5K"), (2_340_000, "2.3M")]
)
def test_format_downloads(count, expected):
    assert _format_downloads(count) == expected
