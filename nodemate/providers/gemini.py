#!/usr/bin/env python3
"""
Gemini Provider
===============

Google Gemini adapter speaking the Generative Language REST API over
aiohttp. Streaming uses ``streamGenerateContent?alt=sse`` (Server-Sent
Events, one JSON payload per ``data:`` line).

Gemini has no system role: the system prompt is sent as a leading user
turn followed by a fixed model acknowledgement.
"""

import json
import logging
from contextlib import aclosing
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import aiohttp

from nodemate.agent.structs import ChatResponse, Message
from nodemate.agent.validation import validate_messages
from nodemate.exceptions import (
    EmptyResponseError,
    NodeMateError,
    ProviderTransportError,
    UnsupportedContentError,
)
from nodemate.providers.base import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT,
    BaseProvider,
)

SYSTEM_ACKNOWLEDGEMENT = "Understood. I will follow these instructions."


class GeminiProvider(BaseProvider):
    """
    Gemini implementation with streaming support and error handling.

    Gemini does not report token usage in a comparable form, so
    ``ChatResponse.usage`` is always None.
    """

    provider_id = "gemini"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        super().__init__(api_key, model, timeout=timeout, max_retries=max_retries)
        self.base_url = self._descriptor.api_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """
        Get or create the aiohttp session carrying the API key header.
        """
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            headers = {
                "x-goog-api-key": self._api_key.get_secret(),
                "Content-Type": "application/json",
            }
            self._session = aiohttp.ClientSession(timeout=timeout, headers=headers)
        return self._session

    def _url(self, stream: bool = False) -> str:
        if stream:
            return f"{self.base_url}/models/{self._model}:streamGenerateContent?alt=sse"
        return f"{self.base_url}/models/{self._model}:generateContent"

    # --- Wire format ---

    def build_contents(
        self, messages: Sequence[Message], system_prompt: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        contents: List[Dict[str, Any]] = []
        if system_prompt:
            contents.append(
                {"role": "user", "parts": [{"text": f"System: {system_prompt}"}]}
            )
            contents.append(
                {"role": "model", "parts": [{"text": SYSTEM_ACKNOWLEDGEMENT}]}
            )

        for message in self._message_dicts(messages):
            if message["role"] == "system":
                continue
            role = "model" if message["role"] == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": message["content"]}]})
        return contents

    def build_request(
        self,
        messages: Sequence[Message],
        system_prompt: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> Dict[str, Any]:
        return {
            "contents": self.build_contents(messages, system_prompt),
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": self._descriptor.max_tokens,
            },
        }

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> Optional[str]:
        """
        Join the text parts of the first candidate.

        Returns None when the candidate has parts but none of them is text.
        """
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        content = candidates[0].get("content") or {}
        parts = content.get("parts") or []
        texts = [str(p["text"]) for p in parts if isinstance(p, dict) and "text" in p]
        if parts and not texts:
            return None
        return "".join(texts)

    def parse_response(self, data: Dict[str, Any]) -> ChatResponse:
        text = self._extract_text(data)
        if text is None:
            part_keys = sorted(
                {
                    key
                    for part in data["candidates"][0]["content"]["parts"]
                    for key in part
                }
            )
            raise UnsupportedContentError(
                f"Unexpected response content from Gemini: {', '.join(part_keys)}",
                content_type=",".join(part_keys),
                provider_name=self.provider_id,
                model_name=self._model,
            )
        if not text:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason")
            message = "No response content received from Gemini"
            if block_reason:
                message = f"{message} (blocked: {block_reason})"
            raise EmptyResponseError(
                message,
                response_data=data,
                provider_name=self.provider_id,
                model_name=self._model,
            )
        return ChatResponse(content=text, usage=None)

    async def _check_error_status(self, response: aiohttp.ClientResponse) -> None:
        if response.status < 400:
            return
        error_text = await response.text()
        detail = error_text
        try:
            detail = json.loads(error_text)["error"]["message"]
        except (ValueError, KeyError, TypeError):
            pass
        raise ProviderTransportError(
            f"{response.status} {detail}".strip(),
            status_code=response.status,
            provider_name=self.provider_id,
            model_name=self._model,
        )

    def _tag(self, error: ProviderTransportError, streaming: bool) -> ProviderTransportError:
        kind = "streaming error" if streaming else "API error"
        return ProviderTransportError(
            f"Gemini {kind}: {error.message}",
            status_code=error.status_code,
            provider_name=self.provider_id,
            model_name=self._model,
        )

    # --- Capabilities ---

    async def _generate(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        session = await self._get_session()
        async with session.post(self._url(), json=payload) as response:
            await self._check_error_status(response)
            return await response.json()

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
                "Gemini request payload: %s",
                json.dumps(payload, ensure_ascii=False, default=str),
            )

        try:
            data = await self._generate(payload)
        except ProviderTransportError as exc:
            error = self._tag(exc, streaming=False)
            self.logger.error("%s", error.message)
            raise error from exc
        except Exception as exc:
            error = self._wrap_error(exc)
            self.logger.error("%s", error.message)
            raise error from exc

        return self.parse_response(data)

    async def stream(
        self,
        messages: Sequence[Message],
        system_prompt: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> AsyncIterator[str]:
        validate_messages(messages)
        payload = self.build_request(messages, system_prompt, temperature)

        try:
            session = await self._get_session()
            async with session.post(self._url(stream=True), json=payload) as response:
                await self._check_error_status(response)
                async with aclosing(self._process_stream_response(response)) as chunks:
                    async for chunk in chunks:
                        yield chunk
        except ProviderTransportError as exc:
            error = self._tag(exc, streaming=True)
            self.logger.error("%s", error.message)
            raise error from exc
        except NodeMateError:
            raise
        except Exception as exc:
            error = self._wrap_error(exc, streaming=True)
            self.logger.error("%s", error.message)
            raise error from exc

    async def _process_stream_response(
        self, response: aiohttp.ClientResponse
    ) -> AsyncIterator[str]:
        async for line in response.content:
            if not line:
                continue

            line_str = line.decode("utf-8").strip()
            if not line_str.startswith("data:"):
                continue

            json_str = line_str[5:].strip()
            try:
                chunk_data = json.loads(json_str)
            except json.JSONDecodeError as e:
                self.logger.warning("Invalid JSON chunk: %s - %s", json_str, e)
                continue

            chunk_text = self._extract_text(chunk_data)
            if chunk_text:
                yield chunk_text

    async def validate_key(self) -> bool:
        payload = {"contents": [{"role": "user", "parts": [{"text": "Test"}]}]}
        try:
            data = await self._generate(payload)
        except Exception as exc:
            self.logger.debug("Gemini key validation failed: %s", exc)
            return False
        return bool(self._extract_text(data))

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
