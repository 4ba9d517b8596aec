"""Tests for the Anthropic Claude adapter."""

import asyncio

import pytest

from nodemate.agent.structs import Message, TokenUsage
from nodemate.exceptions import (
    EmptyResponseError,
    ProviderTimeoutError,
    ProviderTransportError,
    UnsupportedContentError,
)
from nodemate.providers.claude import ClaudeProvider

from .conftest import FakeSDKStream, make_anthropic_client

CONVERSATION = [Message("user", "How do I pin a dependency?")]


def _reply(text, usage=None):
    data = {"content": [{"type": "text", "text": text}]}
    if usage is not None:
        data["usage"] = usage
    return data


@pytest.fixture
def provider():
    return ClaudeProvider("sk-ant-test-key", timeout=30.0)


class TestWireFormat:
    def test_system_prompt_is_a_top_level_field(self, provider):
        payload = provider.build_request(
            [
                Message("system", "stale instructions"),
                Message("user", "hi"),
                Message("assistant", "hello"),
            ],
            "You are NodeMate.",
        )

        assert payload["system"] == "You are NodeMate."
        assert payload["model"] == "claude-3-5-sonnet-20241022"
        assert payload["max_tokens"] == 4096
        assert payload["messages"] == [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]

    def test_no_system_field_without_prompt(self, provider):
        assert "system" not in provider.build_request(CONVERSATION)

    def test_usage_sums_input_and_output(self, provider):
        response = provider.parse_response(
            _reply("Use an exact version.", {"input_tokens": 20, "output_tokens": 7})
        )
        assert response.content == "Use an exact version."
        assert response.usage == TokenUsage(20, 7, 27)

    def test_empty_content(self, provider):
        with pytest.raises(EmptyResponseError, match="No response content received from Claude"):
            provider.parse_response({"content": []})

    def test_non_text_first_block(self, provider):
        with pytest.raises(UnsupportedContentError, match="Unexpected response type from Claude: tool_use"):
            provider.parse_response({"content": [{"type": "tool_use", "id": "t1"}]})


class TestCalls:
    @pytest.mark.asyncio
    async def test_chat(self, provider):
        provider.client = make_anthropic_client(_reply("Pin with save-exact."))

        response = await provider.chat(CONVERSATION, "sys")

        assert response.content == "Pin with save-exact."
        assert response.usage is None
        assert provider.client.create.calls[0]["system"] == "sys"

    @pytest.mark.asyncio
    async def test_chat_error_is_tagged(self, provider):
        provider.client = make_anthropic_client(RuntimeError("overloaded"))

        with pytest.raises(ProviderTransportError, match="^Claude API error: overloaded$"):
            await provider.chat(CONVERSATION)

    @pytest.mark.asyncio
    async def test_chat_timeout(self, provider):
        provider.client = make_anthropic_client(asyncio.TimeoutError())

        with pytest.raises(ProviderTimeoutError, match="Claude request timed out after 30s"):
            await provider.chat(CONVERSATION)

    @pytest.mark.asyncio
    async def test_stream_yields_text_deltas_only(self, provider):
        events = [
            {"type": "message_start"},
            {"type": "content_block_start"},
            {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "npm "}},
            {"type": "content_block_delta", "delta": {"type": "input_json_delta", "partial_json": "{"}},
            {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "ci"}},
            {"type": "message_stop"},
        ]
        sdk_stream = FakeSDKStream(events)
        provider.client = make_anthropic_client(sdk_stream)

        fragments = [f async for f in provider.stream(CONVERSATION)]

        assert fragments == ["npm ", "ci"]
        assert sdk_stream.closed

    @pytest.mark.asyncio
    async def test_stream_error_is_tagged(self, provider):
        sdk_stream = FakeSDKStream(
            [{"type": "content_block_delta", "delta": {"type": "text_delta", "text": "x"}}],
            error=ConnectionError("dropped"),
        )
        provider.client = make_anthropic_client(sdk_stream)

        with pytest.raises(ProviderTransportError, match="^Claude streaming error: dropped$"):
            async for _ in provider.stream(CONVERSATION):
                pass
        assert sdk_stream.closed

    @pytest.mark.asyncio
    async def test_abandoned_stream_closes_sdk_stream(self, provider):
        events = [
            {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "a"}},
            {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "b"}},
        ]
        sdk_stream = FakeSDKStream(events)
        provider.client = make_anthropic_client(sdk_stream)

        stream = provider.stream(CONVERSATION)
        assert await stream.__anext__() == "a"
        await stream.aclose()

        assert sdk_stream.closed

    @pytest.mark.asyncio
    async def test_validate_key(self, provider):
        provider.client = make_anthropic_client(_reply("H"))
        assert await provider.validate_key() is True
        assert provider.client.create.calls[0]["max_tokens"] == 1

    @pytest.mark.asyncio
    async def test_validate_key_failure(self, provider):
        provider.client = make_anthropic_client(RuntimeError("invalid x-api-key"))
        assert await provider.validate_key() is False
