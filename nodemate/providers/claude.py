import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from anthropic import APITimeoutError, AsyncAnthropic

from nodemate.agent.structs import ChatResponse, Message, TokenUsage
from nodemate.agent.validation import validate_messages
from nodemate.exceptions import (
    EmptyResponseError,
    NodeMateError,
    UnsupportedContentError,
)
from nodemate.providers.base import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT,
    BaseProvider,
)


class ClaudeProvider(BaseProvider):
    """
    Adapter for the Anthropic Messages API.

    The system prompt travels as the top-level ``system`` field; system
    messages inside the history are not sent.
    """

    provider_id = "claude"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        super().__init__(api_key, model, timeout=timeout, max_retries=max_retries)
        self.client = AsyncAnthropic(
            api_key=self._api_key.get_secret(),
            base_url=self._descriptor.api_url,
            timeout=timeout,
            max_retries=max_retries,
        )

    def build_request(
        self,
        messages: Sequence[Message],
        system_prompt: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
        stream: bool = False,
    ) -> Dict[str, Any]:
        conversation: List[Dict[str, str]] = [
            m for m in self._message_dicts(messages) if m["role"] != "system"
        ]
        payload: Dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._descriptor.max_tokens,
            "temperature": temperature,
            "messages": conversation,
        }
        if system_prompt:
            payload["system"] = system_prompt
        if stream:
            payload["stream"] = True
        return payload

    def parse_response(self, data: Dict[str, Any]) -> ChatResponse:
        blocks = data.get("content") or []
        if not blocks:
            raise EmptyResponseError(
                "No response content received from Claude",
                provider_name=self.provider_id,
                model_name=self._model,
            )

        first = blocks[0] if isinstance(blocks[0], dict) else {}
        block_type = first.get("type")
        if block_type != "text":
            raise UnsupportedContentError(
                f"Unexpected response type from Claude: {block_type}",
                content_type=block_type,
                provider_name=self.provider_id,
                model_name=self._model,
            )

        text = first.get("text")
        if not text:
            raise EmptyResponseError(
                "No response content received from Claude",
                provider_name=self.provider_id,
                model_name=self._model,
            )

        usage = None
        raw_usage = data.get("usage")
        if isinstance(raw_usage, dict) and raw_usage:
            prompt = int(raw_usage.get("input_tokens") or 0)
            completion = int(raw_usage.get("output_tokens") or 0)
            usage = TokenUsage(
                prompt_tokens=prompt,
                completion_tokens=completion,
                total_tokens=prompt + completion,
            )
        return ChatResponse(content=text, usage=usage)

    async def chat(
        self,
        messages: Sequence[Message],
        system_prompt: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> ChatResponse:
        validate_messages(messages)
        payload = self.build_request(messages, system_prompt, temperature)

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                "Claude request payload: %s",
                json.dumps(payload, ensure_ascii=False, default=str),
            )

        try:
            response = await self.client.messages.create(**payload)
        except Exception as exc:
            error = self._wrap_error(exc)
            self.logger.error("%s", error.message)
            raise error from exc

        return self.parse_response(self._to_dict(response))

    async def stream(
        self,
        messages: Sequence[Message],
        system_prompt: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> AsyncIterator[str]:
        validate_messages(messages)
        payload = self.build_request(messages, system_prompt, temperature, stream=True)

        try:
            event_stream = await self.client.messages.create(**payload)
            async with event_stream:
                async for event in event_stream:
                    event_data = self._to_dict(event)
                    if event_data.get("type") != "content_block_delta":
                        continue
                    delta = event_data.get("delta") or {}
                    if delta.get("type") == "text_delta" and delta.get("text"):
                        yield delta["text"]
        except NodeMateError:
            raise
        except Exception as exc:
            error = self._wrap_error(exc, streaming=True)
            self.logger.error("%s", error.message)
            raise error from exc

    async def validate_key(self) -> bool:
        try:
            response = await self.client.messages.create(
                model=self._model,
                max_tokens=1,
                messages=[{"role": "user", "content": "Hi"}],
            )
        except Exception as exc:
            self.logger.debug("Claude key validation failed: %s", exc)
            return False
        return isinstance(self._to_dict(response).get("content"), list)

    async def close(self) -> None:
        await self.client.close()

    def _is_timeout(self, exc: BaseException) -> bool:
        return isinstance(exc, APITimeoutError) or super()._is_timeout(exc)
