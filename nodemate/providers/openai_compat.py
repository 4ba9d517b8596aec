import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from openai import APITimeoutError, AsyncOpenAI

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


class OpenAICompatibleProvider(BaseProvider):
    """
    Adapter for backends speaking the OpenAI chat-completions protocol.

    OpenAI and Groq share the wire format; only the base URL, the model
    list and the error label differ, and those come from the descriptor.
    """

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        super().__init__(api_key, model, timeout=timeout, max_retries=max_retries)
        self.client = AsyncOpenAI(
            api_key=self._api_key.get_secret(),
            base_url=self._descriptor.api_url,
            timeout=timeout,
            max_retries=max_retries,
        )

    # --- Wire format ---

    def build_request(
        self,
        messages: Sequence[Message],
        system_prompt: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
        stream: bool = False,
    ) -> Dict[str, Any]:
        payload_messages: List[Dict[str, str]] = []
        if system_prompt:
            payload_messages.append({"role": "system", "content": system_prompt})
        payload_messages.extend(self._message_dicts(messages))

        payload: Dict[str, Any] = {
            "model": self._model,
            "messages": payload_messages,
            "temperature": temperature,
            "max_tokens": self._descriptor.max_tokens,
        }
        if stream:
            payload["stream"] = True
        return payload

    def parse_response(self, data: Dict[str, Any]) -> ChatResponse:
        label = self._descriptor.label
        choices = data.get("choices") or []
        if not choices:
            raise EmptyResponseError(
                f"No response content received from {label}",
                provider_name=self.provider_id,
                model_name=self._model,
            )

        message = choices[0].get("message") or {}
        content = message.get("content")
        if isinstance(content, list):
            content = self._extract_content_parts(content)
        elif content is not None and not isinstance(content, str):
            raise UnsupportedContentError(
                f"Unexpected response content from {label}: {type(content).__name__}",
                content_type=type(content).__name__,
                provider_name=self.provider_id,
                model_name=self._model,
            )
        if not content:
            raise EmptyResponseError(
                f"No response content received from {label}",
                provider_name=self.provider_id,
                model_name=self._model,
            )

        return ChatResponse(content=content, usage=self._parse_usage(data.get("usage")))

    @staticmethod
    def _parse_usage(usage: Any) -> Optional[TokenUsage]:
        if not isinstance(usage, dict) or not usage:
            return None
        prompt = int(usage.get("prompt_tokens") or 0)
        completion = int(usage.get("completion_tokens") or 0)
        total = int(usage.get("total_tokens") or prompt + completion)
        return TokenUsage(
            prompt_tokens=prompt, completion_tokens=completion, total_tokens=total
        )

    @staticmethod
    def _extract_content_parts(parts: List[Any]) -> str:
        content_chunks: List[str] = []
        for part in parts:
            if not isinstance(part, dict):
                continue
            if part.get("type") == "text" and part.get("text"):
                content_chunks.append(str(part["text"]))
        return "".join(content_chunks)

    # --- Capabilities ---

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
                "%s request payload: %s",
                self._descriptor.label,
                json.dumps(payload, ensure_ascii=False, default=str),
            )

        try:
            response = await self.client.chat.completions.create(**payload)
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
            response_stream = await self.client.chat.completions.create(**payload)
            async with response_stream:
                async for chunk in response_stream:
                    chunk_data = self._to_dict(chunk)
                    for choice in chunk_data.get("choices") or []:
                        if not isinstance(choice, dict):
                            continue
                        delta = choice.get("delta") or {}
                        content = delta.get("content")
                        if isinstance(content, list):
                            content = self._extract_content_parts(content)
                        if isinstance(content, str) and content:
                            yield content
        except NodeMateError:
            raise
        except Exception as exc:
            error = self._wrap_error(exc, streaming=True)
            self.logger.error("%s", error.message)
            raise error from exc

    async def validate_key(self) -> bool:
        try:
            page = await self.client.models.list()
        except Exception as exc:
            self.logger.debug(
                "%s key validation failed: %s", self._descriptor.label, exc
            )
            return False
        return isinstance(getattr(page, "data", None), list)

    async def close(self) -> None:
        await self.client.close()

    def _is_timeout(self, exc: BaseException) -> bool:
        return isinstance(exc, APITimeoutError) or super()._is_timeout(exc)


class OpenAIProvider(OpenAICompatibleProvider):
    provider_id = "openai"


class GroqProvider(OpenAICompatibleProvider):
    provider_id = "groq"
