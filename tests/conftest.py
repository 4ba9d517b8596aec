"""Shared stubs for SDK clients, aiohttp sessions and the terminal."""

import io
import json
from types import SimpleNamespace
from typing import Any, Iterable, List, Optional

import pytest
from rich.console import Console

from nodemate.agent.structs import ChatResponse
from nodemate.config.providers import PROVIDER_CONFIGS
from nodemate.config.store import ConfigStore
from nodemate.ui.presenter import NODEMATE_THEME, Presenter


# --- SDK stream stubs ---


class FakeSDKStream:
    """Async iterable + async context manager, like openai/anthropic AsyncStream."""

    def __init__(self, items: Iterable[Any], error: Optional[BaseException] = None):
        self._items = list(items)
        self._error = error
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True
        return False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for item in self._items:
            yield item
        if self._error is not None:
            raise self._error


class _Recorder:
    """Async callable returning queued results and recording kwargs."""

    def __init__(self, *results: Any):
        self.results = list(results)
        self.calls: List[dict] = []

    async def __call__(self, **kwargs):
        self.calls.append(kwargs)
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        return result


def make_openai_client(*results: Any, models: Any = None) -> SimpleNamespace:
    async def _close():
        return None

    create = _Recorder(*results)
    list_models = _Recorder(models if models is not None else SimpleNamespace(data=[]))
    return SimpleNamespace(
        chat=SimpleNamespace(completions=SimpleNamespace(create=create)),
        models=SimpleNamespace(list=lambda: list_models()),
        close=_close,
        create=create,
    )


def make_anthropic_client(*results: Any) -> SimpleNamespace:
    async def _close():
        return None

    create = _Recorder(*results)
    return SimpleNamespace(
        messages=SimpleNamespace(create=create),
        close=_close,
        create=create,
    )


# --- aiohttp stubs ---


class FakeContent:
    def __init__(self, lines: Iterable[bytes], error: Optional[BaseException] = None):
        self._lines = list(lines)
        self._error = error

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for line in self._lines:
            yield line
        if self._error is not None:
            raise self._error


class FakeResponse:
    def __init__(
        self,
        status: int = 200,
        payload: Any = None,
        lines: Iterable[bytes] = (),
        stream_error: Optional[BaseException] = None,
    ):
        self.status = status
        self._payload = payload
        self.content = FakeContent(lines, stream_error)
        self.released = False

    async def json(self):
        return self._payload

    async def text(self):
        return self._payload if isinstance(self._payload, str) else json.dumps(self._payload)

    def raise_for_status(self):
        if self.status >= 400:
            import aiohttp

            raise aiohttp.ClientResponseError(
                request_info=None, history=(), status=self.status, message="error"
            )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.released = True
        return False


class FakeHTTPSession:
    """Routes requests to FakeResponse objects by URL substring."""

    def __init__(self, routes: Optional[dict] = None, default: Optional[FakeResponse] = None):
        self.routes = routes or {}
        self.default = default
        self.calls: List[dict] = []
        self.closed = False

    def _match(self, url: str) -> FakeResponse:
        for fragment, response in self.routes.items():
            if fragment in url:
                if isinstance(response, BaseException):
                    raise response
                return response
        if self.default is None:
            raise AssertionError(f"Unexpected request to {url}")
        return self.default

    def post(self, url, json=None, **kwargs):
        self.calls.append({"method": "POST", "url": url, "json": json, **kwargs})
        return self._match(url)

    def get(self, url, params=None, **kwargs):
        self.calls.append({"method": "GET", "url": url, "params": params, **kwargs})
        return self._match(url)

    async def close(self):
        self.closed = True


# --- Provider stub for session / dispatcher tests ---


class StubProvider:
    """Minimal provider double that records the conversations it received."""

    provider_id = "openai"

    def __init__(self, replies: Iterable[Any] = (), fragments: Iterable[str] = ()):
        self.replies = list(replies)
        self.fragments = list(fragments)
        self.stream_error: Optional[BaseException] = None
        self.received: List[tuple] = []
        self.closed = False
        self._model = PROVIDER_CONFIGS["openai"].default_model
        self.descriptor = PROVIDER_CONFIGS["openai"]

    async def chat(self, messages, system_prompt=None, temperature=0.7):
        self.received.append(tuple(messages))
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return ChatResponse(content=reply)

    async def stream(self, messages, system_prompt=None, temperature=0.7):
        self.received.append(tuple(messages))
        for fragment in self.fragments:
            yield fragment
        if self.stream_error is not None:
            raise self.stream_error

    async def validate_key(self):
        return True

    async def close(self):
        self.closed = True

    def get_provider(self):
        return self.provider_id

    def get_model(self):
        return self._model

    def set_model(self, model):
        from nodemate.exceptions import UnsupportedModelError

        if model not in self.descriptor.models:
            raise UnsupportedModelError(f"Model {model} is not supported by openai")
        self._model = model

    def get_supported_models(self):
        return tuple(self.descriptor.models)


class StubNpmService:
    def __init__(self, result=None, error: Optional[BaseException] = None):
        self.result = result
        self.error = error
        self.calls: List[tuple] = []

    async def search_packages(self, query, limit=10):
        self.calls.append((query, limit))
        if self.error is not None:
            raise self.error
        return self.result

    async def close(self):
        return None


# --- Fixtures ---


@pytest.fixture
def console_output():
    return io.StringIO()


@pytest.fixture
def presenter(console_output):
    console = Console(
        file=console_output,
        theme=NODEMATE_THEME,
        force_terminal=False,
        width=120,
        color_system=None,
    )
    return Presenter(console=console)


@pytest.fixture
def config_store(tmp_path):
    store = ConfigStore(tmp_path / "config.json")
    store.set_provider("openai")
    store.set_api_key("openai", "sk-test-1234567890")
    return store
