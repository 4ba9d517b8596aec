"""Tests for the configuration wizard."""

import pytest

from nodemate.commands.config_wizard import ConfigWizard, show_config
from nodemate.config.store import ConfigStore
from nodemate.exceptions import ConfigAbortedError


class ScriptedPrompts:
    """Answers wizard prompts in order; an exception entry is raised."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.asked = []

    def _next(self, message):
        self.asked.append(message)
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer

    async def ask(self, message, default="", is_password=False, check=None):
        answer = self._next(message)
        if check is not None:
            assert check(answer) is None, f"{message!r} rejected {answer!r}"
        return answer

    async def confirm(self, message, default=False):
        return self._next(message)

    async def select(self, message, choices, default=None, print_fn=print):
        answer = self._next(message)
        assert answer in [value for value, _ in choices]
        return answer


class FakeFactory:
    def __init__(self, valid=True):
        self.valid = valid
        self.validated = []

    @staticmethod
    def validate_api_key_format(provider, api_key):
        return api_key.startswith("gsk_")

    async def validate_provider(self, provider, api_key, model=None, timeout=None):
        self.validated.append((provider, api_key, model, timeout))
        return self.valid


@pytest.fixture
def empty_store(tmp_path):
    return ConfigStore(tmp_path / "config.json")


class TestWizard:
    @pytest.mark.asyncio
    async def test_saves_choices(self, empty_store, presenter, console_output):
        prompts = ScriptedPrompts(
            "groq", "gsk_live_key", "llama-3.1-8b-instant", "pnpm", False, True, True
        )
        factory = FakeFactory()
        wizard = ConfigWizard(empty_store, presenter, prompts, factory, validation_timeout=9)

        assert await wizard.run() is True

        assert factory.validated == [("groq", "gsk_live_key", "llama-3.1-8b-instant", 9)]
        reloaded = ConfigStore(empty_store.path)
        assert reloaded.get_current_provider() == "groq"
        assert reloaded.get_api_key() == "gsk_live_key"
        assert reloaded.get_model() == "llama-3.1-8b-instant"
        prefs = reloaded.get_config().preferences
        assert prefs.package_manager == "pnpm"
        assert prefs.show_thinking is False
        assert prefs.stream_responses is True
        assert "Configuration saved to" in console_output.getvalue()

    @pytest.mark.asyncio
    async def test_rejected_key_saves_nothing(self, empty_store, presenter, console_output):
        prompts = ScriptedPrompts("groq", "gsk_bad", "gemma2-9b-it")
        wizard = ConfigWizard(empty_store, presenter, prompts, FakeFactory(valid=False))

        assert await wizard.run() is False
        assert not empty_store.path.exists()
        assert "API key validation failed" in console_output.getvalue()

    @pytest.mark.asyncio
    async def test_cancel(self, empty_store, presenter, console_output):
        prompts = ScriptedPrompts("openai", ConfigAbortedError())
        wizard = ConfigWizard(empty_store, presenter, prompts, FakeFactory())

        assert await wizard.run() is False
        assert "Configuration cancelled" in console_output.getvalue()

    @pytest.mark.asyncio
    async def test_keeps_existing_config_unless_confirmed(self, config_store, presenter):
        prompts = ScriptedPrompts(False)
        wizard = ConfigWizard(config_store, presenter, prompts, FakeFactory())

        assert await wizard.run() is False
        assert prompts.asked == ["Configuration already exists. Do you want to reconfigure?"]
        assert config_store.get_api_key() == "sk-test-1234567890"


def test_show_config(config_store, presenter, console_output):
    assert show_config(config_store, presenter) is True

    output = console_output.getvalue()
    assert "Provider: OpenAI (openai)" in output
    assert "API Key: sk-test-..." in output
    assert "sk-test-1234567890" not in output


def test_show_config_without_config(empty_store, presenter, console_output):
    assert show_config(empty_store, presenter) is False
    assert "No configuration found" in console_output.getvalue()
