"""Pytest fixtures and shared test configuration.

Fixtures:
    - assistant_config: Config pointing at a fake assistant API
    - fake_api: Programmable stand-in for the assistant API
    - assistant_client: AssistantClient wired to fake_api
    - api_client: HTTPX client for the FastAPI app, using assistant_client
    - sse_body: Builds text/event-stream bodies from payloads

The assistant API is replaced with httpx.MockTransport, so nothing here
needs a credential or network access.
"""

import json
from collections.abc import AsyncGenerator, AsyncIterator, Callable, Generator
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from assistant_chat.api import dependencies
from assistant_chat.api.app import app
from assistant_chat.assistant.client import AssistantClient
from assistant_chat.assistant.config import AssistantConfig

BASE_URL = "https://assistant.test"
ASSISTANT_NAME = "test-assistant"
ASSISTANTS_PATH = "/assistant/assistants"
CHAT_PATH = f"{ASSISTANTS_PATH}/{ASSISTANT_NAME}/chat"
FILES_PATH = f"{ASSISTANTS_PATH}/{ASSISTANT_NAME}/files"

Responder = Callable[[httpx.Request], httpx.Response]


class FakeAssistantAPI:
    """Routes requests by (method, path) and records everything it receives."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Responder] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, responder: Responder) -> None:
        self.routes[(method, path)] = responder

    def reply(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        json_body: Any = None,
        text: str | None = None,
    ) -> None:
        """Answer with a fresh JSON (or text) response on every call."""

        def responder(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status_code, text=text)
            return httpx.Response(status_code, json=json_body)

        self.on(method, path, responder)

    def stream(self, body: bytes | Callable[[], AsyncIterator[bytes]]) -> None:
        """Answer the chat endpoint with an event-stream body."""

        def responder(request: httpx.Request) -> httpx.Response:
            content = body if isinstance(body, bytes) else body()
            return httpx.Response(
                200, content=content, headers={"content-type": "text/event-stream"}
            )

        self.on("POST", CHAT_PATH, responder)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self.routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(404, json={"message": f"No route for {request.url.path}"})
        return responder(request)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


def encode_events(*payloads: dict[str, Any] | str) -> bytes:
    """Encode payloads as ``data:`` frames; strings are sent as-is."""
    frames = []
    for payload in payloads:
        data = payload if isinstance(payload, str) else json.dumps(payload)
        frames.append(f"data: {data}\n\n")
    return "".join(frames).encode()


@pytest.fixture
def sse_body() -> Callable[..., bytes]:
    """Return the event-stream body builder."""
    return encode_events


@pytest.fixture
def assistant_config() -> AssistantConfig:
    """Config for the fake assistant API, independent of the environment."""
    return AssistantConfig(
        api_key="test-key",
        assistant_name=ASSISTANT_NAME,
        base_url=BASE_URL,
        chat_endpoint=None,
        timeout=5.0,
        show_assistant_files=True,
        show_citations=True,
    )


@pytest.fixture
def fake_api() -> FakeAssistantAPI:
    """Fresh fake assistant API per test."""
    return FakeAssistantAPI()


@pytest.fixture
async def assistant_client(
    assistant_config: AssistantConfig, fake_api: FakeAssistantAPI
) -> AsyncGenerator[AssistantClient]:
    """AssistantClient whose requests are answered by fake_api."""
    client = AssistantClient(assistant_config, transport=httpx.MockTransport(fake_api))
    yield client
    await client.aclose()


@pytest.fixture
async def api_client(assistant_client: AssistantClient) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        AsyncClient bound to the app, with the assistant client overridden.
    """
    app.dependency_overrides[dependencies.get_assistant_client] = lambda: assistant_client
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def reset_assistant_client() -> Generator[None]:
    """Drop the cached global client before and after a test."""
    dependencies._assistant_client = None
    yield
    dependencies._assistant_client = None
